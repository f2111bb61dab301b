from dataclasses import replace
from typing import Any, Dict, Optional

import httpx
import pytest

from routeplanner.domain.exceptions import (
    MapsAuthError,
    MapsConfigurationError,
    NetworkError,
    RateLimitError,
    UpstreamError,
)
from routeplanner.services.cache import LookupCache
from routeplanner.services.google_maps import GoogleMapsClient


def json_responder(*payloads: Dict[str, Any], status_code: int = 200):
    queue = list(payloads)

    def handler(request: httpx.Request) -> httpx.Response:
        payload = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(status_code, json=payload)

    return handler


class FakeRedis:
    def __init__(self) -> None:
        self.store: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int = 0) -> None:
        self.store[key] = value


@pytest.mark.asyncio
async def test_place_details_returns_formatted_address(maps_config, recording_transport) -> None:
    transport = recording_transport(
        json_responder({"status": "OK", "result": {"formatted_address": "10 Downing St, London SW1A 2AA, UK"}})
    )
    client = GoogleMapsClient(maps_config, transport=transport)

    address = await client.place_details("ChIJ123")

    assert address == "10 Downing St, London SW1A 2AA, UK"
    request = transport.requests[0]
    assert request.url.path == "/maps/api/place/details/json"
    assert request.url.params["place_id"] == "ChIJ123"
    assert request.url.params["key"] == "test-key"
    assert request.url.params["fields"] == "formatted_address,geometry"
    assert request.url.params["region"] == "us"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["ZERO_RESULTS", "NOT_FOUND", "INVALID_REQUEST"])
async def test_place_details_treats_misses_as_none(maps_config, recording_transport, status: str) -> None:
    client = GoogleMapsClient(maps_config, transport=recording_transport(json_responder({"status": status})))

    assert await client.place_details("Eiffel+Tower") is None


@pytest.mark.asyncio
async def test_place_details_skips_blank_id(maps_config, recording_transport) -> None:
    transport = recording_transport(json_responder({"status": "OK"}))
    client = GoogleMapsClient(maps_config, transport=transport)

    assert await client.place_details("  ") is None
    assert transport.requests == []


@pytest.mark.asyncio
async def test_request_denied_is_an_auth_error(maps_config, recording_transport) -> None:
    client = GoogleMapsClient(
        maps_config,
        transport=recording_transport(
            json_responder({"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."})
        ),
    )

    with pytest.raises(MapsAuthError, match="API key is invalid"):
        await client.place_details("ChIJ123")


@pytest.mark.asyncio
async def test_missing_api_key_fails_before_any_request(maps_config, recording_transport) -> None:
    transport = recording_transport(json_responder({"status": "OK"}))
    client = GoogleMapsClient(replace(maps_config, api_key=None), transport=transport)

    with pytest.raises(MapsConfigurationError):
        await client.reverse_geocode(40.7128, -74.006)
    assert transport.requests == []


@pytest.mark.asyncio
async def test_server_error_is_upstream_error(maps_config, recording_transport) -> None:
    client = GoogleMapsClient(
        maps_config, transport=recording_transport(json_responder({}, status_code=503))
    )

    with pytest.raises(UpstreamError):
        await client.place_details("ChIJ123")


@pytest.mark.asyncio
async def test_transport_failure_is_network_error(maps_config) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = GoogleMapsClient(maps_config, transport=httpx.MockTransport(handler))

    with pytest.raises(NetworkError):
        await client.place_details("ChIJ123")


@pytest.mark.asyncio
async def test_quota_error_surfaces_without_retries_by_default(maps_config, recording_transport) -> None:
    transport = recording_transport(json_responder({"status": "OVER_QUERY_LIMIT"}))
    client = GoogleMapsClient(maps_config, transport=transport)

    with pytest.raises(RateLimitError):
        await client.place_details("ChIJ123")
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_quota_error_is_retried_when_configured(maps_config, recording_transport) -> None:
    transport = recording_transport(
        json_responder(
            {"status": "OVER_QUERY_LIMIT"},
            {"status": "OK", "result": {"formatted_address": "Retried Address"}},
        )
    )
    client = GoogleMapsClient(replace(maps_config, max_retries=2), transport=transport)

    assert await client.place_details("ChIJ123") == "Retried Address"
    assert len(transport.requests) == 2


@pytest.mark.asyncio
async def test_reverse_geocode_returns_first_result(maps_config, recording_transport) -> None:
    transport = recording_transport(
        json_responder(
            {
                "status": "OK",
                "results": [
                    {"formatted_address": "200 N Spring St, Los Angeles, CA 90012, USA"},
                    {"formatted_address": "Los Angeles, CA, USA"},
                ],
            }
        )
    )
    client = GoogleMapsClient(maps_config, transport=transport)

    address = await client.reverse_geocode(34.0522, -118.2437)

    assert address == "200 N Spring St, Los Angeles, CA 90012, USA"
    assert transport.requests[0].url.params["latlng"] == "34.0522,-118.2437"


@pytest.mark.asyncio
async def test_reverse_geocode_rejects_invalid_coordinates(maps_config, recording_transport) -> None:
    transport = recording_transport(json_responder({"status": "OK", "results": []}))
    client = GoogleMapsClient(maps_config, transport=transport)

    assert await client.reverse_geocode(95.0, 10.0) is None
    assert transport.requests == []


@pytest.mark.asyncio
async def test_successful_lookups_are_cached(maps_config, recording_transport) -> None:
    transport = recording_transport(
        json_responder({"status": "OK", "result": {"formatted_address": "Cached Street 1"}})
    )
    cache = LookupCache()
    cache.redis_client = FakeRedis()
    client = GoogleMapsClient(maps_config, cache=cache, transport=transport)

    first = await client.place_details("ChIJcache")
    second = await client.place_details("ChIJcache")

    assert first == second == "Cached Street 1"
    assert len(transport.requests) == 1


def test_validate_coordinates_bounds() -> None:
    assert GoogleMapsClient.validate_coordinates(0.0, 0.0)
    assert GoogleMapsClient.validate_coordinates(-90.0, 180.0)
    assert not GoogleMapsClient.validate_coordinates(90.1, 0.0)
    assert not GoogleMapsClient.validate_coordinates(0.0, -180.5)
