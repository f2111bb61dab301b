"""Route planner backend: map-link resolution and itinerary assembly."""

__version__ = "0.1.0"
