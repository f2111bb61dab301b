from __future__ import annotations

from typing import List, Sequence
from urllib.parse import quote, unquote, urlsplit

GOOGLE_MAPS_DIR_URL = "https://www.google.com/maps/dir/"
APPLE_MAPS_URL = "https://maps.apple.com/"
APPLE_STOP_SEPARATOR = "+to:"


def encode_address(address: str) -> str:
    # Every reserved character is escaped, so "/" cannot split a path
    # segment and "+" cannot be confused with the Apple stop separator.
    return quote(address, safe="")


def google_maps_directions_url(addresses: Sequence[str]) -> str:
    return GOOGLE_MAPS_DIR_URL + "/".join(encode_address(a) for a in addresses)


def apple_maps_directions_url(addresses: Sequence[str]) -> str:
    """Build an Apple Maps ``saddr``/``daddr`` link.

    A single address becomes the destination; with more, the first one is
    the source and the rest are chained into ``daddr`` with ``+to:``.
    """
    encoded = [encode_address(a) for a in addresses]
    if not encoded:
        return APPLE_MAPS_URL
    if len(encoded) == 1:
        return f"{APPLE_MAPS_URL}?daddr={encoded[0]}"
    return f"{APPLE_MAPS_URL}?saddr={encoded[0]}&daddr={APPLE_STOP_SEPARATOR.join(encoded[1:])}"


def decode_google_maps_url(url: str) -> List[str]:
    path = urlsplit(url).path
    prefix = urlsplit(GOOGLE_MAPS_DIR_URL).path
    if not path.startswith(prefix):
        return []
    return [unquote(segment) for segment in path[len(prefix):].split("/") if segment]


def decode_apple_maps_url(url: str) -> List[str]:
    # parse_qs would turn the literal "+" of "+to:" into a space, so the raw
    # query is split by hand.
    raw = {}
    for pair in urlsplit(url).query.split("&"):
        if "=" in pair:
            key, value = pair.split("=", 1)
            raw[key] = value

    stops: List[str] = []
    if "saddr" in raw:
        stops.append(unquote(raw["saddr"]))
    if "daddr" in raw:
        stops.extend(unquote(part) for part in raw["daddr"].split(APPLE_STOP_SEPARATOR))
    return stops
