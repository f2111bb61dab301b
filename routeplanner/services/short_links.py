import logging
import re
from typing import Callable, Optional, Protocol, Sequence, Tuple
from urllib.parse import parse_qs, urlsplit

import httpx

from routeplanner.core.config import MapsConfig
from routeplanner.domain.exceptions import NetworkError, ResolutionFailure
from routeplanner.models.schemas import Coordinates, PlaceResolution, ResolutionStatus

logger = logging.getLogger(__name__)

PlaceIdExtractor = Callable[[str], Optional[str]]

MAP_LINK_MARKERS: Sequence[str] = (
    "maps.app.goo.gl",
    "goo.gl/maps",
    "google.com/maps",
)
MAPS_QUERY_PATTERN = re.compile(r"maps\?q=")
URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)
COORDINATE_PATTERN = re.compile(r"@(-?\d+\.\d+),(-?\d+\.\d+)")
CONSENT_HOST = "consent.google.com"


class PlaceLookup(Protocol):
    async def place_details(self, place_id: str) -> Optional[str]: ...

    async def reverse_geocode(self, lat: float, lng: float) -> Optional[str]: ...


def _query_place_id(url: str) -> Optional[str]:
    try:
        values = parse_qs(urlsplit(url).query).get("place_id")
    except ValueError:
        return None
    return values[0] if values else None


def _pattern_extractor(pattern: "re.Pattern[str]") -> PlaceIdExtractor:
    def extract(url: str) -> Optional[str]:
        match = pattern.search(url)
        return match.group(1) if match else None

    return extract


# Map links encode the place differently depending on where they were shared
# from; first non-empty match wins.
PLACE_ID_STRATEGIES: Tuple[Tuple[str, PlaceIdExtractor], ...] = (
    ("query_place_id", _query_place_id),
    ("data_token", _pattern_extractor(re.compile(r"!1s([^!]+)!"))),
    ("hex_pair", _pattern_extractor(re.compile(r"[!/]([0-9a-fx]+:[0-9a-fx]+)!", re.IGNORECASE))),
    ("place_path", _pattern_extractor(re.compile(r"/place/([^/?#]+)"))),
)


class ShortLinkResolver:
    """Turns a pasted Google Maps link into a postal address."""

    def __init__(
        self,
        config: MapsConfig,
        lookup: PlaceLookup,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        strategies: Sequence[Tuple[str, PlaceIdExtractor]] = PLACE_ID_STRATEGIES,
    ) -> None:
        self.config = config
        self.lookup = lookup
        self.strategies = tuple(strategies)
        self._transport = transport

    @staticmethod
    def is_map_link(text: Optional[str]) -> bool:
        if not text:
            return False
        return any(marker in text for marker in MAP_LINK_MARKERS) or bool(
            MAPS_QUERY_PATTERN.search(text)
        )

    def normalise_url(self, text: str) -> str:
        """Pick the first map link out of pasted text."""

        for match in URL_PATTERN.finditer(text):
            if self.is_map_link(match.group(0)):
                return match.group(0)
        for token in text.split():
            if self.is_map_link(token):
                return f"https://{token.lstrip('/')}"
        return f"https://{text.strip().lstrip('/')}"

    async def expand(self, url: str) -> str:
        """Follow redirects and return the final URL."""

        headers = {"User-Agent": self.config.user_agent}
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.config.timeout,
            headers=headers,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.error("Failed to expand map link %s: %s", url, exc)
                raise NetworkError("Could not expand map link") from exc

        if response.status_code >= 400:
            logger.warning("Map link %s ended with HTTP %s", url, response.status_code)

        expanded = str(response.url)
        parts = urlsplit(expanded)
        if parts.hostname == CONSENT_HOST:
            target = parse_qs(parts.query).get("continue")
            if target:
                expanded = target[0]

        logger.info("Expanded URL: %s", expanded)
        return expanded

    def extract_place_id(self, url: str) -> Optional[str]:
        for name, extractor in self.strategies:
            place_id = extractor(url)
            if place_id:
                logger.debug("Place id via %s: %s", name, place_id)
                return place_id
        return None

    @staticmethod
    def extract_coordinates(url: str) -> Optional[Coordinates]:
        match = COORDINATE_PATTERN.search(url)
        if not match:
            return None
        lat, lng = float(match.group(1)), float(match.group(2))
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
            logger.debug("Ignoring out-of-range coordinates %s,%s", lat, lng)
            return None
        return Coordinates(lat=lat, lng=lng)

    async def resolve(self, text: str) -> PlaceResolution:
        source = (text or "").strip()
        if not self.is_map_link(source):
            return PlaceResolution(source_url=source, status=ResolutionStatus.NOT_A_MAP_LINK)

        expanded = await self.expand(self.normalise_url(source))
        place_id = self.extract_place_id(expanded)
        coordinates = self.extract_coordinates(expanded)

        address: Optional[str] = None
        if place_id:
            address = await self.lookup.place_details(place_id)

        if not address and coordinates:
            address = await self.lookup.reverse_geocode(coordinates.lat, coordinates.lng)

        status = ResolutionStatus.RESOLVED if address else ResolutionStatus.UNRESOLVED
        if not address:
            logger.info("Could not resolve map link %s", source)

        return PlaceResolution(
            source_url=source,
            expanded_url=expanded,
            place_id=place_id,
            coordinates=coordinates,
            resolved_address=address,
            status=status,
        )

    async def resolve_address(self, text: str) -> str:
        resolution = await self.resolve(text)
        if resolution.status == ResolutionStatus.NOT_A_MAP_LINK:
            raise ResolutionFailure("URL is not a recognised map link")
        if not resolution.resolved:
            raise ResolutionFailure("Could not resolve address from URL")
        return resolution.resolved_address
