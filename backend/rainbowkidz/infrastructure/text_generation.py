"""Text Generation Client — wraps AsyncAnthropic for character post/comment drafts.

Invariants:
    - One request per call: SDK retries disabled, explicit timeout
    - Missing API key → ConfigurationError("generation_key_missing"), raised before any IO
    - API status errors (4xx/5xx, 429, overload) → GenerationServiceError(generation_error, 502)
    - Connection/timeout errors → GenerationServiceError(generation_fetch_error, 500)
    - Returns the concatenated text blocks of the first response; parsing is the caller's job

Design Decisions:
    - Wrapper over raw client: isolates SDK exception types from route handlers
    - Underlying messages are kept on the error: the admin tools show them to operators
"""

import logging

import anthropic
from anthropic import APIConnectionError, APIStatusError, APITimeoutError

from rainbowkidz.core.errors import ConfigurationError, GenerationServiceError

logger = logging.getLogger(__name__)


class TextGenerationClient:
    """Single-shot text generation with error mapping."""

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_seconds: float = 60,
    ):
        self.model = model
        self.configured = bool(api_key)
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key or "unset",
            timeout=timeout_seconds,
            max_retries=0,
        )

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("generation_key_missing")

    async def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        self.ensure_configured()
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except APITimeoutError as e:
            logger.error(f"Text generation timed out: {e}", extra={"model": self.model})
            raise GenerationServiceError(
                f"timeout: {e}", "generation_fetch_error", 500,
            )
        except APIConnectionError as e:
            logger.error(f"Text generation unreachable: {e}", extra={"model": self.model})
            raise GenerationServiceError(
                f"connection: {e}", "generation_fetch_error", 500,
            )
        except APIStatusError as e:
            logger.error(
                f"Text generation returned {e.status_code}: {e.message}",
                extra={"model": self.model, "status_code": e.status_code},
            )
            raise GenerationServiceError(e.message)

        logger.info(
            "Text generation success",
            extra={
                "model": self.model,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
        return "".join(
            block.text for block in response.content if block.type == "text"
        )

    async def aclose(self) -> None:
        await self.client.close()
