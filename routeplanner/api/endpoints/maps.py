import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from routeplanner.api.deps import get_maps_client, get_short_link_resolver
from routeplanner.domain.exceptions import ResolutionFailure, UpstreamError
from routeplanner.models.schemas import (
    AddressResponse,
    ErrorResponse,
    ParseMapUrlRequest,
    PlaceResolution,
    ReverseGeocodeRequest,
)
from routeplanner.services.google_maps import GoogleMapsClient
from routeplanner.services.short_links import ShortLinkResolver

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.post("/parse-map-url", response_model=AddressResponse, responses=ERROR_RESPONSES)
async def parse_map_url(
    payload: ParseMapUrlRequest,
    resolver: ShortLinkResolver = Depends(get_short_link_resolver),
):
    """Resolve a pasted Google Maps link to a postal address"""

    url = (payload.url or "").strip()
    if not url:
        return _error(400, "URL is required")

    logger.info("Received URL to parse: %s", url)
    try:
        address = await resolver.resolve_address(url)
    except ResolutionFailure as exc:
        logger.info("Map URL not resolved: %s", exc.message)
        return _error(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("Error in parse-map-url: %s", exc)
        return _error(500, "Failed to parse map URL")

    logger.info("Resolved address: %s", address)
    return AddressResponse(address=address)


@router.post("/parse-map-url/details", response_model=PlaceResolution, responses=ERROR_RESPONSES)
async def parse_map_url_details(
    payload: ParseMapUrlRequest,
    resolver: ShortLinkResolver = Depends(get_short_link_resolver),
):
    """Same pipeline as /parse-map-url, returning every intermediate result"""

    url = (payload.url or "").strip()
    if not url:
        return _error(400, "URL is required")

    try:
        return await resolver.resolve(url)
    except UpstreamError as exc:
        logger.exception("Map URL resolution failed: %s", exc)
        return _error(500, "Failed to parse map URL")


@router.post(
    "/reverse-geocode",
    response_model=AddressResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def reverse_geocode(
    payload: ReverseGeocodeRequest,
    maps_client: GoogleMapsClient = Depends(get_maps_client),
):
    """Address for the user's current position"""

    try:
        address = await maps_client.reverse_geocode(payload.lat, payload.lng)
    except UpstreamError as exc:
        logger.exception("Reverse geocoding failed: %s", exc)
        return _error(500, "Failed to look up current location")

    if not address:
        return _error(404, "No address found for these coordinates")
    return AddressResponse(address=address)
