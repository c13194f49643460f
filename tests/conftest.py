"""Shared fixtures: in-memory storage, a fake API backend and a wired AppContext."""
from collections.abc import AsyncIterator

import httpx
import pytest

from dental_client.context import AppContext
from dental_client.core.config import Settings
from dental_client.core.storage import MemoryStorage
from tests.fake_api import FakePracticeApi

BASE_URL = "http://dental.test"


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, api_base_url=BASE_URL, storage_backend="memory")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def fake_api() -> FakePracticeApi:
    return FakePracticeApi()


@pytest.fixture
async def app_context(
    settings: Settings, storage: MemoryStorage, fake_api: FakePracticeApi,
) -> AsyncIterator[AppContext]:
    """AppContext whose HTTP requests are served by ``fake_api`` in-process."""
    ctx = await AppContext.create(
        settings=settings,
        storage=storage,
        transport=httpx.ASGITransport(app=fake_api.app),
    )
    yield ctx
    await ctx.aclose()
