"""
WayShare Backend - Member and Profile SQLAlchemy Models
========================================================

What:  ORM models for the `members` and `profiles` tables.
Who:   Mapped by MEMBER_MAPPER / PROFILE_MAPPER; read by Alembic for migrations.

Table Design:
    - Member is the aggregate root: rides, notifications and ratings all
      point back at it.
    - members.profile_id is a UNIQUE nullable foreign key, which is what
      makes Member ↔ Profile one-to-one.
    - login and email carry UNIQUE constraints; the service layer turns a
      violation into a 400 ValidationError.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wayshare.database import Base
from wayshare.models.types import Identifier

if TYPE_CHECKING:
    from wayshare.models.notification import Notification
    from wayshare.models.rating import Rating
    from wayshare.models.ride import Ride


class Profile(Base):
    """Personal details of a member, shown on ride listings."""

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # URL or storage key of the avatar
    photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    contact_details: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    member: Mapped[Optional["Member"]] = relationship(back_populates="profile")

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, first_name='{self.first_name}', last_name='{self.last_name}')>"


class Member(Base):
    """
    A registered user of the platform.

    Lifecycle:
        1. Created by POST /api/members (activated defaults to false)
        2. Profile attached by setting profile = {"id": ...}
        3. Deleting a member that still owns rides, notifications or ratings
           fails on the foreign keys (no cascade rules)
    """

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    login: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(60), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(254), nullable=True, unique=True)
    activated: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    profile_id: Mapped[Optional[int]] = mapped_column(
        Identifier,
        ForeignKey("profiles.id", name="fk_member__profile_id"),
        nullable=True,
        unique=True,
    )

    # ── Relationships ─────────────────────────────────────────────────────
    # Never traversed by the mappers (they copy FK columns only); declared so
    # ORM queries and joins can use them.
    profile: Mapped[Optional[Profile]] = relationship(back_populates="member")
    rides: Mapped[List["Ride"]] = relationship(back_populates="member")
    notifications: Mapped[List["Notification"]] = relationship(back_populates="member")
    ratings_given: Mapped[List["Rating"]] = relationship(
        back_populates="giver", foreign_keys="Rating.giver_id"
    )
    ratings_received: Mapped[List["Rating"]] = relationship(
        back_populates="receiver", foreign_keys="Rating.receiver_id"
    )

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, login='{self.login}', activated={self.activated})>"
