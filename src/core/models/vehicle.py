from pydantic import Field

from core.models.base import ApiModel
from core.models.quote import VehicleMetadata


class VehicleRates(ApiModel):
    """Per-vehicle tariff in pence, plus the metadata shown next to a fixed-route price."""

    base_fare: int = Field(..., ge=0)
    per_mile: int = Field(..., ge=0)
    per_minute: int = Field(..., ge=0)
    per_hour: int | None = Field(default=None, ge=0)
    name: str
    description: str = ""
    capacity: int = Field(..., ge=1)
    features: list[str] = Field(default_factory=list)
    image_url: str = ""

    def metadata(self) -> VehicleMetadata:
        return VehicleMetadata(
            name=self.name,
            description=self.description,
            capacity=self.capacity,
            features=self.features,
            image_url=self.image_url,
        )


class Vehicle(ApiModel):
    vehicle_id: str
    name: str
    description: str = ""
    capacity: int
    features: list[str] = Field(default_factory=list)
    base_fare: int
    per_mile: int
    per_minute: int
    per_hour: int | None = None
    active: bool = True
    image_key: str = ""
    image_url: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    updated_by: str | None = None

    def rates(self) -> VehicleRates:
        return VehicleRates(
            base_fare=self.base_fare,
            per_mile=self.per_mile,
            per_minute=self.per_minute,
            per_hour=self.per_hour,
            name=self.name,
            description=self.description,
            capacity=self.capacity,
            features=self.features,
            image_url=self.image_url,
        )


class PublicVehicle(ApiModel):
    """Vehicle as shown on the public site: no tariffs, no audit fields."""

    vehicle_id: str
    name: str
    description: str = ""
    capacity: int
    features: list[str] = Field(default_factory=list)
    image_url: str = ""
    active: bool = True


class CreateVehicleRequest(ApiModel):
    vehicle_id: str | None = Field(default=None, pattern=r"^[a-zA-Z0-9_-]+$")
    name: str = Field(..., min_length=1)
    description: str
    capacity: int = Field(..., ge=1)
    features: list[str] = Field(default_factory=list)
    base_fare: int = Field(..., ge=0)
    per_mile: int = Field(..., ge=0)
    per_minute: int = Field(..., ge=0)
    per_hour: int | None = Field(default=None, ge=0)
    active: bool = True
    image_key: str = ""
    image_url: str = ""
    updated_by: str = "admin"


class UpdateVehicleRequest(ApiModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    features: list[str] | None = None
    base_fare: int | None = Field(default=None, ge=0)
    per_mile: int | None = Field(default=None, ge=0)
    per_minute: int | None = Field(default=None, ge=0)
    per_hour: int | None = Field(default=None, ge=0)
    active: bool | None = None
    image_key: str | None = None
    image_url: str | None = None
    updated_by: str = "admin"
