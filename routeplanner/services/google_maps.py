import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from routeplanner.core.config import MapsConfig
from routeplanner.domain.exceptions import (
    MapsAuthError,
    MapsConfigurationError,
    NetworkError,
    RateLimitError,
    UpstreamError,
)
from routeplanner.services.cache import LookupCache

logger = logging.getLogger(__name__)


class GoogleMapsClient:
    """Place details and reverse geocoding over the Google Maps web services.

    "No result" answers come back as ``None``. Credential, quota, transport
    and server failures raise the matching ``UpstreamError`` subclass so the
    caller can tell a miss from an outage.
    """

    PLACE_DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"
    GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    PLACE_FIELDS = "formatted_address,geometry"
    NO_RESULT_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND", "INVALID_REQUEST"})

    def __init__(
        self,
        config: MapsConfig,
        cache: Optional[LookupCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.cache = cache
        self._transport = transport

        if not config.api_key:
            logger.warning("Google Maps API key not configured")

    async def place_details(self, place_id: str) -> Optional[str]:
        """Return the formatted address of a place, or None if Google has none."""

        place_id = (place_id or "").strip()
        if not place_id:
            return None

        async def fetch() -> Optional[str]:
            data = await self._request(
                self.PLACE_DETAILS_URL,
                {
                    "place_id": place_id,
                    "fields": self.PLACE_FIELDS,
                    "region": self.config.region,
                    "language": self.config.language,
                },
            )
            result = (data or {}).get("result") or {}
            return result.get("formatted_address") or None

        address = await self._cached_lookup(
            "place_details", {"place_id": place_id, "language": self.config.language}, fetch
        )
        if address:
            logger.info("✓ Place %s → %s", place_id, address)
        else:
            logger.info("No address for place %s", place_id)
        return address

    async def reverse_geocode(self, lat: float, lng: float) -> Optional[str]:
        """Return the first formatted address found at a coordinate pair."""

        if not self.validate_coordinates(lat, lng):
            logger.warning("Refusing to reverse geocode invalid coordinates (%s, %s)", lat, lng)
            return None

        async def fetch() -> Optional[str]:
            data = await self._request(
                self.GEOCODE_URL,
                {"latlng": f"{lat},{lng}", "language": self.config.language},
            )
            results = (data or {}).get("results") or []
            if not results:
                return None
            return results[0].get("formatted_address") or None

        address = await self._cached_lookup(
            "reverse_geocode", {"lat": lat, "lng": lng, "language": self.config.language}, fetch
        )
        if address:
            logger.info("✓ Reverse geocoded (%s, %s) → %s", lat, lng, address)
        return address

    @staticmethod
    def validate_coordinates(lat: float, lng: float) -> bool:
        return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0

    async def _cached_lookup(
        self,
        kind: str,
        key_params: Dict[str, Any],
        fetch: Callable[[], Awaitable[Optional[str]]],
    ) -> Optional[str]:
        cache_key = self.cache.key(kind, key_params) if self.cache else None
        if cache_key:
            cached = await self.cache.get(cache_key)
            if cached:
                return cached

        value = await fetch()
        if value and cache_key:
            await self.cache.set(cache_key, value, ttl=self.config.cache_ttl_seconds)
        return value

    async def _request(self, url: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Call a Google endpoint, retrying only on quota errors."""

        if not self.config.api_key:
            raise MapsConfigurationError("Google Maps API key is not configured")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=5),
            retry=retry_if_exception_type(RateLimitError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._send(url, params)
        return None

    async def _send(self, url: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        query = {key: value for key, value in params.items() if value is not None}
        query["key"] = self.config.api_key

        async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
            try:
                response = await client.get(url, params=query)
            except httpx.TimeoutException as exc:
                logger.error("Google Maps request timeout: %s", url)
                raise NetworkError("Google Maps request timed out") from exc
            except httpx.HTTPError as exc:
                logger.error("Google Maps request failed: %s", exc)
                raise NetworkError("Google Maps request failed") from exc

        if response.status_code == 429:
            logger.warning("Google Maps rate limit exceeded")
            raise RateLimitError("Google Maps rate limit exceeded")
        if response.status_code != 200:
            logger.error("Google Maps API error: %s", response.status_code)
            raise UpstreamError(f"Google Maps API error: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Google Maps returned a non-JSON response") from exc

        status = data.get("status")
        if status == "OK":
            return data
        if status in self.NO_RESULT_STATUSES:
            logger.debug("Google Maps returned %s for %s", status, url)
            return None
        if status == "REQUEST_DENIED":
            raise MapsAuthError(data.get("error_message") or "Google Maps request denied")
        if status == "OVER_QUERY_LIMIT":
            logger.warning("Google Maps quota exceeded")
            raise RateLimitError("Google Maps quota exceeded")

        logger.error("Google Maps returned status %s: %s", status, data.get("error_message"))
        raise UpstreamError(f"Google Maps returned status {status}")
