"""Placeholder time and distance estimates for assembled itineraries.

Nothing here talks to a routing engine. The providers only give each stop a
plausible ``HH:MM`` label and the route a pair of summary strings, so the
assembler stays pure and tests can swap in a deterministic schedule.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, Tuple

if TYPE_CHECKING:
    from routeplanner.core.config import Settings

DEFAULT_TOTAL_DISTANCE = "75 km"
DEFAULT_TOTAL_TIME = "2 hours 15 minutes"


class EstimateProvider(Protocol):
    def stop_time(self, position: int, address: str) -> str: ...

    def totals(self, addresses: Sequence[str]) -> Tuple[str, str]: ...


class RandomEstimateProvider:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        total_distance: str = DEFAULT_TOTAL_DISTANCE,
        total_time: str = DEFAULT_TOTAL_TIME,
    ) -> None:
        self.rng = rng or random.Random()
        self.total_distance = total_distance
        self.total_time = total_time

    def stop_time(self, position: int, address: str) -> str:
        return f"{self.rng.randrange(24):02d}:{self.rng.randrange(60):02d}"

    def totals(self, addresses: Sequence[str]) -> Tuple[str, str]:
        return self.total_distance, self.total_time


class ScheduleEstimateProvider:
    """Evenly spaced arrivals starting from a fixed clock time."""

    def __init__(
        self,
        start: str = "09:00",
        interval_minutes: int = 15,
        total_distance: str = DEFAULT_TOTAL_DISTANCE,
        total_time: str = DEFAULT_TOTAL_TIME,
    ) -> None:
        self.start = datetime.strptime(start.strip(), "%H:%M")
        self.interval = timedelta(minutes=interval_minutes)
        self.total_distance = total_distance
        self.total_time = total_time

    def stop_time(self, position: int, address: str) -> str:
        return (self.start + self.interval * position).strftime("%H:%M")

    def totals(self, addresses: Sequence[str]) -> Tuple[str, str]:
        return self.total_distance, self.total_time


def build_estimate_provider(settings: Settings) -> EstimateProvider:
    if settings.ESTIMATE_PROVIDER == "schedule":
        return ScheduleEstimateProvider(
            start=settings.ESTIMATE_START_TIME,
            interval_minutes=settings.ESTIMATE_INTERVAL_MINUTES,
            total_distance=settings.PLACEHOLDER_TOTAL_DISTANCE,
            total_time=settings.PLACEHOLDER_TOTAL_TIME,
        )
    return RandomEstimateProvider(
        total_distance=settings.PLACEHOLDER_TOTAL_DISTANCE,
        total_time=settings.PLACEHOLDER_TOTAL_TIME,
    )
