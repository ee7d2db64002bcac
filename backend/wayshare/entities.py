"""
WayShare Backend - Entity Registry
===================================

What:  The one place where the seven entity types are described.
How:   Each EntityDefinition binds together the pieces the generic layers
       need: names and REST path, the ORM record class, the transfer object
       and its merge-patch variant, the mapper, the service, and whether the
       collection endpoint is paginated.
Who:   Read by main.create_app() (one router per entity), by the seed loader
       (table order), and by the exception handlers (entity name lookup).

Adding an entity = model + DTO + one EntityDefinition below.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type

from wayshare.models import Member, Message, Notification, Profile, Rating, Ride, RideRequest
from wayshare.schemas.common import EntityDTO
from wayshare.schemas.member import MemberDTO, MemberPatchDTO, ProfileDTO, ProfilePatchDTO
from wayshare.schemas.notification import NotificationDTO, NotificationPatchDTO
from wayshare.schemas.rating import RatingDTO, RatingPatchDTO
from wayshare.schemas.ride import (
    MessageDTO,
    MessagePatchDTO,
    RideDTO,
    RideRequestDTO,
    RideRequestPatchDTO,
    RidePatchDTO,
)
from wayshare.services.crud_service import CrudService
from wayshare.services.mapper import EntityMapper


@dataclass(frozen=True)
class EntityDefinition:
    """
    Attributes:
        name:       lowerCamel entity name used in alerts/errors ("rideRequest")
        title:      display name used for OpenAPI tags and logs ("RideRequest")
        path:       plural REST segment, /api/<path> ("ride-requests")
        dto:        transfer object for create / full update / responses
        patch_dto:  merge-patch variant (all fields optional)
        service:    CrudService bound to this entity's mapper
        paginated:  whether GET /api/<path> honours page/size (infinite scroll)
    """

    name: str
    title: str
    path: str
    dto: Type[EntityDTO]
    patch_dto: Type[EntityDTO]
    service: CrudService
    paginated: bool = False

    @property
    def mapper(self) -> EntityMapper:
        return self.service.mapper

    @property
    def table(self) -> str:
        return self.mapper.record_class.__tablename__

    @property
    def owned(self) -> bool:
        return self.service.owner_attribute is not None


# ── Mappers ───────────────────────────────────────────────────────────────

PROFILE_MAPPER = EntityMapper(
    Profile, ProfileDTO,
    fields=("first_name", "last_name", "photo", "contact_details"),
)

MEMBER_MAPPER = EntityMapper(
    Member, MemberDTO,
    fields=("login", "password_hash", "email", "activated"),
    references={"profile": "profile_id"},
)

RIDE_MAPPER = EntityMapper(
    Ride, RideDTO,
    fields=("start_location", "end_location", "start_time", "end_time", "is_recurring"),
    references={"member": "member_id"},
)

RIDE_REQUEST_MAPPER = EntityMapper(
    RideRequest, RideRequestDTO,
    fields=("status", "request_time"),
    references={"ride": "ride_id"},
)

NOTIFICATION_MAPPER = EntityMapper(
    Notification, NotificationDTO,
    fields=("message", "timestamp", "is_read"),
    references={"member": "member_id"},
)

MESSAGE_MAPPER = EntityMapper(
    Message, MessageDTO,
    fields=("content", "timestamp"),
    references={"ride": "ride_id"},
)

RATING_MAPPER = EntityMapper(
    Rating, RatingDTO,
    fields=("score", "feedback"),
    references={"giver": "giver_id", "receiver": "receiver_id"},
)


# ── Definitions ───────────────────────────────────────────────────────────
# Order matters for seeding: parents before children.

ENTITIES: Tuple[EntityDefinition, ...] = (
    EntityDefinition(
        name="profile", title="Profile", path="profiles",
        dto=ProfileDTO, patch_dto=ProfilePatchDTO,
        service=CrudService("profile", PROFILE_MAPPER),
    ),
    EntityDefinition(
        name="member", title="Member", path="members",
        dto=MemberDTO, patch_dto=MemberPatchDTO,
        service=CrudService("member", MEMBER_MAPPER, owner_attribute="id"),
    ),
    EntityDefinition(
        name="ride", title="Ride", path="rides",
        dto=RideDTO, patch_dto=RidePatchDTO,
        service=CrudService("ride", RIDE_MAPPER, owner_attribute="member_id"),
    ),
    EntityDefinition(
        name="rideRequest", title="RideRequest", path="ride-requests",
        dto=RideRequestDTO, patch_dto=RideRequestPatchDTO,
        service=CrudService("rideRequest", RIDE_REQUEST_MAPPER),
        paginated=True,
    ),
    EntityDefinition(
        name="notification", title="Notification", path="notifications",
        dto=NotificationDTO, patch_dto=NotificationPatchDTO,
        service=CrudService("notification", NOTIFICATION_MAPPER, owner_attribute="member_id"),
        paginated=True,
    ),
    EntityDefinition(
        name="message", title="Message", path="messages",
        dto=MessageDTO, patch_dto=MessagePatchDTO,
        service=CrudService("message", MESSAGE_MAPPER),
    ),
    EntityDefinition(
        name="rating", title="Rating", path="ratings",
        dto=RatingDTO, patch_dto=RatingPatchDTO,
        service=CrudService("rating", RATING_MAPPER, owner_attribute="giver_id"),
    ),
)

ENTITIES_BY_NAME: Dict[str, EntityDefinition] = {e.name: e for e in ENTITIES}
ENTITIES_BY_PATH: Dict[str, EntityDefinition] = {e.path: e for e in ENTITIES}


def entity_for_path(url_path: str) -> Optional[EntityDefinition]:
    """Resolve "/api/rides/3" → the Ride definition; None outside /api/<entity>."""
    parts = [p for p in url_path.split("/") if p]
    if len(parts) >= 2 and parts[0] == "api":
        return ENTITIES_BY_PATH.get(parts[1])
    return None
