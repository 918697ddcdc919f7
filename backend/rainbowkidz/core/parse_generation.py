"""Generated Text Parsing — extracts the JSON object a character prompt asks for.

Invariants:
    - Code-fence markers (```json and ```) are removed anywhere in the text
    - The remainder must parse as a JSON object; anything else is GenerationParseError
    - Never returns an empty result silently for malformed output
"""

import json
import re

from rainbowkidz.core.errors import GenerationParseError

_FENCE_RE = re.compile(r"```json|```")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_generated_json(text: str) -> dict:
    """Parse fenced or bare JSON emitted by the text service."""
    clean = strip_code_fences(text or "")
    try:
        parsed = json.loads(clean)
    except json.JSONDecodeError:
        raise GenerationParseError(clean)
    if not isinstance(parsed, dict):
        raise GenerationParseError(clean)
    return parsed


def text_field(parsed: dict, key: str) -> str:
    """A string field of the parsed object, '' when absent or null."""
    value = parsed.get(key)
    return value if isinstance(value, str) else ""
