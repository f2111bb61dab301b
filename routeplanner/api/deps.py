from fastapi import Request

from routeplanner.domain.assembly import RouteAssembler
from routeplanner.services.google_maps import GoogleMapsClient
from routeplanner.services.short_links import ShortLinkResolver


def get_short_link_resolver(request: Request) -> ShortLinkResolver:
    return request.app.state.short_link_resolver


def get_maps_client(request: Request) -> GoogleMapsClient:
    return request.app.state.maps_client


def get_route_assembler(request: Request) -> RouteAssembler:
    return request.app.state.route_assembler
