"""
WayShare Backend - Ride, RideRequest and Message SQLAlchemy Models
===================================================================

What:  ORM models for the `rides`, `ride_requests` and `messages` tables.

Table Design:
    - rides.member_id: the member offering the ride
    - ride_requests.ride_id / messages.ride_id: children of a ride
    - All timestamps are UTCDateTime (TIMESTAMP WITH TIME ZONE, UTC on read)
    - end_time >= start_time is not checked anywhere; it is a logical rule
      for clients only
    - ride_requests.status is free text: no enum, no check constraint
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wayshare.database import Base
from wayshare.models.types import Identifier, UTCDateTime

if TYPE_CHECKING:
    from wayshare.models.member import Member


class Ride(Base):
    """A trip offered by a member, from start_location to end_location."""

    __tablename__ = "rides"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    start_location: Mapped[str] = mapped_column(String(255), nullable=False)
    end_location: Mapped[str] = mapped_column(String(255), nullable=False)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    is_recurring: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    member_id: Mapped[Optional[int]] = mapped_column(
        Identifier,
        ForeignKey("members.id", name="fk_ride__member_id"),
        nullable=True,
    )

    member: Mapped[Optional["Member"]] = relationship(back_populates="rides")
    requests: Mapped[List["RideRequest"]] = relationship(back_populates="ride")
    messages: Mapped[List["Message"]] = relationship(back_populates="ride")

    __table_args__ = (
        Index("idx_rides_member_id", "member_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Ride(id={self.id}, '{self.start_location}' -> '{self.end_location}', "
            f"start_time='{self.start_time}')>"
        )


class RideRequest(Base):
    """A passenger's request to join a ride."""

    __tablename__ = "ride_requests"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    status: Mapped[str] = mapped_column(String(255), nullable=False)
    request_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    ride_id: Mapped[Optional[int]] = mapped_column(
        Identifier,
        ForeignKey("rides.id", name="fk_ride_request__ride_id"),
        nullable=True,
    )

    ride: Mapped[Optional[Ride]] = relationship(back_populates="requests")

    __table_args__ = (
        Index("idx_ride_requests_ride_id", "ride_id"),
    )

    def __repr__(self) -> str:
        return f"<RideRequest(id={self.id}, status='{self.status}', ride_id={self.ride_id})>"


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    ride_id: Mapped[Optional[int]] = mapped_column(
        Identifier,
        ForeignKey("rides.id", name="fk_message__ride_id"),
        nullable=True,
    )

    ride: Mapped[Optional[Ride]] = relationship(back_populates="messages")

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, ride_id={self.ride_id}, timestamp='{self.timestamp}')>"
