from enum import Enum
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

StopKind = Literal["start", "end", "pickup", "dropoff", "waypoint"]
RouteMode = Literal["multi", "waypoint"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Stop(CamelModel):
    model_config = ConfigDict(frozen=True)

    address: str = Field(
        ...,
        validation_alias=AliasChoices("address", "location"),
        description="Free-form address as typed or resolved from a map link",
    )
    priority: int = Field(default=0, ge=0)
    kind: Optional[StopKind] = Field(
        default=None, validation_alias=AliasChoices("kind", "type")
    )
    owner_label: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ownerLabel", "owner_label", "passengerName"),
        description="Who the stop belongs to, e.g. a passenger name",
    )

    @field_validator("priority", mode="before")
    @classmethod
    def default_missing_priority(cls, v):
        return 0 if v is None else v

    @field_validator("owner_label")
    @classmethod
    def blank_owner_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class RouteRequest(CamelModel):
    mode: RouteMode
    stops: List[Stop] = Field(
        default_factory=list,
        validation_alias=AliasChoices("stops", "locations", "waypoints"),
    )
    start_point: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("startPoint", "start_point")
    )
    end_point: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("endPoint", "end_point")
    )


class ItineraryEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    order: int
    location: str
    kind: str
    estimated_time: str
    priority: Optional[int] = None
    owner_label: Optional[str] = None


class PassengerSchedule(CamelModel):
    name: str
    pickup_time: Optional[str] = None
    dropoff_time: Optional[str] = None


class OptimizedRoute(CamelModel):
    total_distance: str
    total_time: str
    waypoints: List[ItineraryEntry]
    google_maps_url: str
    apple_maps_url: str
    passengers: List[PassengerSchedule] = []


class Coordinates(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    NOT_A_MAP_LINK = "not_a_map_link"


class PlaceResolution(CamelModel):
    source_url: str
    expanded_url: Optional[str] = None
    place_id: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    resolved_address: Optional[str] = None
    status: ResolutionStatus = ResolutionStatus.UNRESOLVED

    @property
    def resolved(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED and bool(self.resolved_address)


class ParseMapUrlRequest(BaseModel):
    url: Optional[str] = None


class ReverseGeocodeRequest(Coordinates):
    pass


class AddressResponse(BaseModel):
    address: str


class ErrorResponse(BaseModel):
    error: str


class RouteErrorResponse(BaseModel):
    message: str
    error: bool = True
