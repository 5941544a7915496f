"""
Pydantic models for Durdle.
"""

from core.models.base import ApiModel
from core.models.booking import (
    ALLOWED_TRANSITIONS,
    Booking,
    BookingListFilters,
    BookingStatus,
    CreateBookingRequest,
    UpdateBookingStatusRequest,
    can_transition,
)
from core.models.comment import Comment, CommentStatus, CreateCommentRequest, UpdateCommentRequest
from core.models.fixed_route import (
    CreateFixedRouteRequest,
    FixedRoute,
    FixedRouteFilters,
    UpdateFixedRouteRequest,
)
from core.models.quote import (
    JourneyType,
    Location,
    Pricing,
    PricingBreakdown,
    Quote,
    QuoteExportFilters,
    QuoteListFilters,
    QuoteRequest,
    QuoteStatus,
    RouteDetails,
    Waypoint,
)
from core.models.upload import PresignedUpload, UploadRequest
from core.models.vehicle import CreateVehicleRequest, PublicVehicle, UpdateVehicleRequest, Vehicle, VehicleRates

__all__ = [
    "ALLOWED_TRANSITIONS",
    "ApiModel",
    "Booking",
    "BookingListFilters",
    "BookingStatus",
    "Comment",
    "CommentStatus",
    "CreateBookingRequest",
    "CreateCommentRequest",
    "CreateFixedRouteRequest",
    "CreateVehicleRequest",
    "FixedRoute",
    "FixedRouteFilters",
    "JourneyType",
    "Location",
    "PresignedUpload",
    "Pricing",
    "PricingBreakdown",
    "PublicVehicle",
    "Quote",
    "QuoteExportFilters",
    "QuoteListFilters",
    "QuoteRequest",
    "QuoteStatus",
    "RouteDetails",
    "UpdateBookingStatusRequest",
    "UpdateCommentRequest",
    "UpdateFixedRouteRequest",
    "UploadRequest",
    "Vehicle",
    "VehicleRates",
    "Waypoint",
    "can_transition",
]
