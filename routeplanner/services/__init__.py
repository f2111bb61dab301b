"""Network-facing services: Google Maps lookups and short-link resolution."""

from __future__ import annotations

__all__ = ["GoogleMapsClient", "LookupCache", "ShortLinkResolver"]

from .cache import LookupCache  # noqa: E402
from .google_maps import GoogleMapsClient  # noqa: E402
from .short_links import ShortLinkResolver  # noqa: E402
