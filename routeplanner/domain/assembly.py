from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from routeplanner.domain.deep_links import apple_maps_directions_url, google_maps_directions_url
from routeplanner.domain.estimates import EstimateProvider, RandomEstimateProvider
from routeplanner.domain.exceptions import InvalidRequestError
from routeplanner.models.schemas import (
    ItineraryEntry,
    OptimizedRoute,
    PassengerSchedule,
    RouteRequest,
    Stop,
)

logger = logging.getLogger(__name__)

# Untagged stops in multi mode alternate by their sorted position.
ALTERNATING_KINDS = ("pickup", "dropoff")


def validate_route_request(request: RouteRequest) -> None:
    if request.mode == "waypoint":
        if not (request.start_point or "").strip():
            raise InvalidRequestError("Start point is required")
        if not (request.end_point or "").strip():
            raise InvalidRequestError("End point is required")
    elif not request.stops:
        raise InvalidRequestError("At least one stop is required")

    for index, stop in enumerate(request.stops, 1):
        if not stop.address.strip():
            raise InvalidRequestError(f"Stop {index} has no address")


class RouteAssembler:
    """Builds an itinerary with map deep links from a route request.

    Multi mode orders stops by ascending priority (ties keep input order)
    and numbers them from 0. Waypoint mode keeps the input order between the
    start and end points; priorities are carried along but never reorder.
    """

    def __init__(self, estimator: Optional[EstimateProvider] = None) -> None:
        self.estimator = estimator or RandomEstimateProvider()

    def assemble(self, request: RouteRequest) -> OptimizedRoute:
        validate_route_request(request)

        if request.mode == "multi":
            entries = self._multi_entries(request.stops)
        else:
            entries = self._waypoint_entries(request.start_point, request.stops, request.end_point)

        addresses = [entry.location for entry in entries]
        total_distance, total_time = self.estimator.totals(addresses)

        logger.info("Assembled %s route with %d stops", request.mode, len(entries))

        return OptimizedRoute(
            total_distance=total_distance,
            total_time=total_time,
            waypoints=entries,
            google_maps_url=google_maps_directions_url(addresses),
            apple_maps_url=apple_maps_directions_url(addresses),
            passengers=passenger_schedules(entries),
        )

    def _multi_entries(self, stops: Sequence[Stop]) -> List[ItineraryEntry]:
        ordered = sorted(stops, key=lambda stop: stop.priority)
        return [
            self._entry(
                order,
                stop.address,
                stop.kind or ALTERNATING_KINDS[order % 2],
                priority=stop.priority,
                owner_label=stop.owner_label,
            )
            for order, stop in enumerate(ordered)
        ]

    def _waypoint_entries(
        self, start_point: str, stops: Sequence[Stop], end_point: str
    ) -> List[ItineraryEntry]:
        entries = [self._entry(0, start_point, "start")]
        for order, stop in enumerate(stops, 1):
            entries.append(
                self._entry(
                    order,
                    stop.address,
                    "waypoint",
                    priority=stop.priority,
                    owner_label=stop.owner_label,
                )
            )
        entries.append(self._entry(len(stops) + 1, end_point, "end"))
        return entries

    def _entry(
        self,
        order: int,
        address: str,
        kind: str,
        priority: Optional[int] = None,
        owner_label: Optional[str] = None,
    ) -> ItineraryEntry:
        location = address.strip()
        return ItineraryEntry(
            order=order,
            location=location,
            kind=kind,
            estimated_time=self.estimator.stop_time(order, location),
            priority=priority,
            owner_label=owner_label,
        )


def passenger_schedules(entries: Sequence[ItineraryEntry]) -> List[PassengerSchedule]:
    """Group pickup and drop-off times by owner, in itinerary order."""

    schedules: Dict[str, PassengerSchedule] = {}
    for entry in entries:
        if not entry.owner_label:
            continue
        schedule = schedules.setdefault(entry.owner_label, PassengerSchedule(name=entry.owner_label))
        if entry.kind == "pickup" and schedule.pickup_time is None:
            schedule.pickup_time = entry.estimated_time
        elif entry.kind == "dropoff" and schedule.dropoff_time is None:
            schedule.dropoff_time = entry.estimated_time
    return list(schedules.values())


def assemble(request: RouteRequest, estimator: Optional[EstimateProvider] = None) -> OptimizedRoute:
    return RouteAssembler(estimator).assemble(request)
