"""ORM models; importing this package registers every table on Base.metadata."""

from wayshare.models.member import Member, Profile
from wayshare.models.notification import Notification
from wayshare.models.rating import Rating
from wayshare.models.ride import Message, Ride, RideRequest

__all__ = [
    "Member",
    "Message",
    "Notification",
    "Profile",
    "Rating",
    "Ride",
    "RideRequest",
]
