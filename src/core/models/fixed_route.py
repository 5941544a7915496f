from pydantic import Field, model_validator

from core.models.base import ApiModel


class FixedRoute(ApiModel):
    route_id: str
    origin_place_id: str
    origin_name: str
    origin_type: str = "location"
    destination_place_id: str
    destination_name: str
    destination_type: str = "location"
    vehicle_id: str
    vehicle_name: str = ""
    price: int
    distance: float | None = None
    estimated_duration: int | None = None
    active: bool = True
    notes: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    updated_by: str | None = None


class CreateFixedRouteRequest(ApiModel):
    origin_place_id: str = Field(..., min_length=1)
    origin_name: str = Field(..., min_length=1)
    origin_type: str = "location"
    destination_place_id: str = Field(..., min_length=1)
    destination_name: str = Field(..., min_length=1)
    destination_type: str = "location"
    vehicle_id: str = Field(..., min_length=1)
    vehicle_name: str = ""
    price: int = Field(..., ge=0)
    active: bool = True
    notes: str = ""
    updated_by: str = "admin"

    @model_validator(mode="after")
    def endpoints_differ(self) -> "CreateFixedRouteRequest":
        if self.origin_place_id == self.destination_place_id:
            raise ValueError("Origin and destination must be different")
        return self


class UpdateFixedRouteRequest(ApiModel):
    price: int | None = Field(default=None, ge=0)
    active: bool | None = None
    notes: str | None = None
    vehicle_name: str | None = None
    origin_place_id: str | None = None
    origin_name: str | None = None
    destination_place_id: str | None = None
    destination_name: str | None = None
    updated_by: str = "admin"


class FixedRouteFilters(ApiModel):
    origin: str | None = None
    destination: str | None = None
    vehicle_id: str | None = None
    active: bool | None = None
    limit: int = Field(default=50, ge=1, le=100)
    cursor: str | None = None
