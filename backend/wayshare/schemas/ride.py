"""
WayShare Backend - Ride, RideRequest and Message Transfer Objects
==================================================================

What:  API contract for /api/rides, /api/ride-requests and /api/messages.

Timestamps are ISO 8601. Offsets are honoured and normalised to UTC on
storage; naive values are read as UTC. Responses always carry UTC ("Z").

Example (RideDTO on the wire):
    {
        "id": 12,
        "startLocation": "A",
        "endLocation": "B",
        "startTime": "2024-07-01T08:00:00Z",
        "endTime": null,
        "isRecurring": false,
        "member": {"id": 1}
    }
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from wayshare.schemas.common import EntityDTO, RefDTO, partial_model


class RideDTO(EntityDTO):
    """
    A ride offer.

    endTime, if present, should not precede startTime; this is left to
    clients and is not validated here.
    """
    start_location: str = Field(min_length=1, max_length=255)
    end_location: str = Field(min_length=1, max_length=255)
    start_time: datetime = Field(description="Departure time")
    end_time: Optional[datetime] = Field(default=None, description="Expected arrival time")
    is_recurring: Optional[bool] = Field(default=None)
    member: Optional[RefDTO] = Field(default=None, description="Member offering the ride")


class RideRequestDTO(EntityDTO):
    # Free text: PENDING, ACCEPTED, ... are conventions, not an enum
    status: str = Field(min_length=1, max_length=255)
    request_time: datetime
    ride: Optional[RefDTO] = None


class MessageDTO(EntityDTO):
    content: str = Field(min_length=1)
    timestamp: datetime
    ride: Optional[RefDTO] = None


RidePatchDTO = partial_model(RideDTO)
RideRequestPatchDTO = partial_model(RideRequestDTO)
MessagePatchDTO = partial_model(MessageDTO)
