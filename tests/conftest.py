import os

os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-key")
os.environ.setdefault("ESTIMATE_PROVIDER", "schedule")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.pop("REDIS_URL", None)

from types import SimpleNamespace
from typing import Callable, List
from unittest.mock import AsyncMock

import httpx
import pytest

from routeplanner.core.config import MapsConfig


@pytest.fixture
def maps_config() -> MapsConfig:
    return MapsConfig(api_key="test-key", timeout=2.0, max_retries=1)


@pytest.fixture
def fake_lookup() -> SimpleNamespace:
    return SimpleNamespace(
        place_details=AsyncMock(return_value=None),
        reverse_geocode=AsyncMock(return_value=None),
    )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def recording_transport():
    return RecordingTransport
