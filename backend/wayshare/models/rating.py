"""
WayShare Backend - Rating SQLAlchemy Model
===========================================

What:  ORM model for the `ratings` table: a score one member gives another.

The 1..5 range of `score` is enforced by the transfer-object validation
only (RatingDTO); the column itself is an unconstrained integer, so rows
loaded from seed files or written by other tools are not re-checked.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wayshare.database import Base
from wayshare.models.types import Identifier

if TYPE_CHECKING:
    from wayshare.models.member import Member


class Rating(Base):
    __tablename__ = "ratings"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    giver_id: Mapped[Optional[int]] = mapped_column(
        Identifier,
        ForeignKey("members.id", name="fk_rating__giver_id"),
        nullable=True,
    )
    receiver_id: Mapped[Optional[int]] = mapped_column(
        Identifier,
        ForeignKey("members.id", name="fk_rating__receiver_id"),
        nullable=True,
    )

    giver: Mapped[Optional["Member"]] = relationship(
        back_populates="ratings_given", foreign_keys=[giver_id]
    )
    receiver: Mapped[Optional["Member"]] = relationship(
        back_populates="ratings_received", foreign_keys=[receiver_id]
    )

    def __repr__(self) -> str:
        return (
            f"<Rating(id={self.id}, score={self.score}, "
            f"giver_id={self.giver_id}, receiver_id={self.receiver_id})>"
        )
