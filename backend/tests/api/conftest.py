"""Route test fixtures — app built with fake collaborators + async test client.

Invariants:
    - Every test gets a fresh app: empty rate limiter, cold board cache, fresh fake store
    - The free board ("classroom", id 1) exists in every fake store
    - Base URL is https so the Secure session cookie round-trips in the client jar

Design Decisions:
    - create_app() injection over dependency_overrides: collaborators live on app.state
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from rainbowkidz.config import Settings
from rainbowkidz.core.domain_types import Table
from rainbowkidz.main import create_app
from tests.api.fake_data_store import FREE_BOARD_ID, FakeDataStore
from tests.api.fake_text_generator import FakeTextGenerator

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        data_store_url="https://store.test",
        data_store_service_key="service-key",
        admin_key=ADMIN_KEY,
        anthropic_api_key="sk-ant-test-fake-key",
        log_format="text",
    )


@pytest.fixture
def store():
    store = FakeDataStore()
    store.seed(Table.BOARDS, id=FREE_BOARD_ID, slug="classroom")
    return store


@pytest.fixture
def generator():
    return FakeTextGenerator()


@pytest.fixture
def app(settings, store, generator):
    return create_app(settings, data_store=store, text_generator=generator)


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="https://test",
    ) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
def sign_in(client, store):
    """Seed a guest row (unless nickname is None) and put its token in the cookie jar."""
    def _sign_in(nickname: str | None = "하늘", *, is_blocked: bool = False) -> str:
        guest_id = str(uuid4())
        if nickname is not None:
            store.seed(Table.GUESTS, id=guest_id, nickname=nickname, is_blocked=is_blocked)
        client.cookies.set("bbs_gid", guest_id)
        return guest_id
    return _sign_in


@pytest.fixture
def character(store):
    return store.seed(
        Table.SYSTEM_USERS, id=10, slug="rabbit", display_name="토끼",
        emoji="🐰", mbti="ENFP", personality="명랑함", speech_style="~했어!",
    )
