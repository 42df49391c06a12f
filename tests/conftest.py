"""Shared test fixtures for appveyor-status."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import respx

from appveyor_status.client import AppVeyorClient
from appveyor_status.config import AppVeyorConfig
from appveyor_status.git import Git

TEST_URL = "https://ci.example.com"
TEST_TOKEN = "test-token"
API_URL = f"{TEST_URL}/api"


class FakeClock:
    """Clock whose sleeps complete immediately and advance the time."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.time = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.time

    async def sleep(self, ms: float) -> None:
        self.sleeps.append(ms)
        self.time += ms


@pytest.fixture
def config() -> AppVeyorConfig:
    return AppVeyorConfig(url=TEST_URL, token=TEST_TOKEN)


@pytest.fixture
async def client(config: AppVeyorConfig) -> AppVeyorClient:
    async with AppVeyorClient(config) as client:
        yield client


@pytest.fixture
def mock_api() -> respx.MockRouter:
    with respx.mock(base_url=API_URL) as router:
        yield router


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def git() -> AsyncMock:
    """Stand-in for the git collaborator; tests set the results they need."""
    return AsyncMock(spec=Git)
