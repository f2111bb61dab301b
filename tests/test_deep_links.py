import pytest

from routeplanner.domain.deep_links import (
    apple_maps_directions_url,
    decode_apple_maps_url,
    decode_google_maps_url,
    encode_address,
    google_maps_directions_url,
)

AWKWARD_ADDRESSES = [
    "Unit 4/12 George St, Sydney",
    "Smith & Sons Hardware",
    "Pier 39 #B",
    "C++ Conference Centre",
    "Plaza Mayor 1, Madrid",
]


def test_encode_address_escapes_reserved_characters() -> None:
    assert encode_address("4/12 A&B #3 +x") == "4%2F12%20A%26B%20%233%20%2Bx"


def test_google_link_joins_stops_as_path_segments() -> None:
    url = google_maps_directions_url(["Times Square, New York", "Central Park"])

    assert url == "https://www.google.com/maps/dir/Times%20Square%2C%20New%20York/Central%20Park"


@pytest.mark.parametrize(
    "addresses, expected",
    [
        ([], "https://maps.apple.com/"),
        (["Central Park"], "https://maps.apple.com/?daddr=Central%20Park"),
        (["A", "B"], "https://maps.apple.com/?saddr=A&daddr=B"),
        (["A", "B", "C"], "https://maps.apple.com/?saddr=A&daddr=B+to:C"),
    ],
)
def test_apple_link_shapes(addresses, expected: str) -> None:
    assert apple_maps_directions_url(addresses) == expected


def test_links_preserve_addresses_with_reserved_characters() -> None:
    google = google_maps_directions_url(AWKWARD_ADDRESSES)
    apple = apple_maps_directions_url(AWKWARD_ADDRESSES)

    assert decode_google_maps_url(google) == AWKWARD_ADDRESSES
    assert decode_apple_maps_url(apple) == AWKWARD_ADDRESSES
    assert apple.count("+to:") == len(AWKWARD_ADDRESSES) - 2


def test_decode_google_ignores_other_urls() -> None:
    assert decode_google_maps_url("https://www.google.com/maps/place/Somewhere") == []
