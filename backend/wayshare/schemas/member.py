"""
WayShare Backend - Member and Profile Transfer Objects
=======================================================

What:  API contract for /api/members and /api/profiles.

Example (MemberDTO on the wire):
    {
        "id": 1,
        "login": "alice",
        "passwordHash": "$2a$10$...",
        "email": "alice@example.com",
        "activated": true,
        "profile": {"id": 7}
    }
"""

from typing import Optional

from pydantic import Field

from wayshare.schemas.common import EntityDTO, RefDTO, partial_model


class MemberDTO(EntityDTO):
    login: str = Field(min_length=1, max_length=50, description="Unique login name")
    password_hash: str = Field(min_length=1, max_length=60, description="Password hash")
    email: Optional[str] = Field(
        default=None, min_length=5, max_length=254, description="Unique e-mail address"
    )
    activated: bool = Field(default=False, description="Whether the account is activated")
    profile: Optional[RefDTO] = Field(default=None, description="One-to-one profile reference")


class ProfileDTO(EntityDTO):
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    photo: Optional[str] = Field(default=None, max_length=1024, description="Avatar URL or storage key")
    contact_details: Optional[str] = Field(default=None, max_length=1024)


MemberPatchDTO = partial_model(MemberDTO)
ProfilePatchDTO = partial_model(ProfileDTO)
