"""
WayShare Backend - Entity Mapper Unit Tests
============================================

What:  Tests for EntityMapper projections on all seven entity types.
How:   Pure in-memory records; no session, no database.

What we test:
    ✅ record → transfer → record keeps every field and foreign key
    ✅ relationships travel as identity-only references
    ✅ merge-patch touches only the supplied fields
    ✅ sort field resolution (camelCase, snake_case, references)
"""

from datetime import datetime, timezone

import pytest

from wayshare.entities import (
    MEMBER_MAPPER,
    MESSAGE_MAPPER,
    NOTIFICATION_MAPPER,
    PROFILE_MAPPER,
    RATING_MAPPER,
    RIDE_MAPPER,
    RIDE_REQUEST_MAPPER,
)
from wayshare.models import Member, Message, Notification, Profile, Rating, Ride, RideRequest
from wayshare.schemas.common import RefDTO
from wayshare.schemas.ride import RideDTO, RidePatchDTO

T0 = datetime(2024, 7, 1, 8, 0, tzinfo=timezone.utc)
T1 = datetime(2024, 7, 1, 9, 30, tzinfo=timezone.utc)

RECORDS = [
    (PROFILE_MAPPER, Profile(id=1, first_name="Camille", last_name="Durand", photo="p.png", contact_details="+33")),
    (MEMBER_MAPPER, Member(id=2, login="camille", password_hash="h", email="c@example.org", activated=True, profile_id=1)),
    (RIDE_MAPPER, Ride(id=3, start_location="A", end_location="B", start_time=T0, end_time=T1, is_recurring=False, member_id=2)),
    (RIDE_REQUEST_MAPPER, RideRequest(id=4, status="PENDING", request_time=T0, ride_id=3)),
    (NOTIFICATION_MAPPER, Notification(id=5, message="hello", timestamp=T0, is_read=False, member_id=2)),
    (MESSAGE_MAPPER, Message(id=6, content="on my way", timestamp=T1, ride_id=3)),
    (RATING_MAPPER, Rating(id=7, score=5, feedback="great", giver_id=2, receiver_id=8)),
]


class TestRoundTrip:
    """to_record(to_transfer(r)) must reproduce r."""

    @pytest.mark.parametrize("mapper,record", RECORDS, ids=lambda v: getattr(v, "__tablename__", None))
    def test_round_trip_preserves_every_column(self, mapper, record):
        restored = mapper.to_record(mapper.to_transfer(record))
        assert mapper.snapshot(restored) == mapper.snapshot(record)

    def test_round_trip_with_null_references(self):
        ride = Ride(id=9, start_location="A", end_location="B", start_time=T0, member_id=None)
        transfer = RIDE_MAPPER.to_transfer(ride)
        assert transfer.member is None
        assert RIDE_MAPPER.to_record(transfer).member_id is None


class TestToTransfer:

    def test_relationships_are_identity_only(self):
        rating = Rating(id=7, score=3, giver_id=2, receiver_id=8)
        transfer = RATING_MAPPER.to_transfer(rating)
        assert transfer.giver.model_dump() == {"id": 2}
        assert transfer.receiver.model_dump() == {"id": 8}

    def test_wire_names_are_camel_case(self):
        ride = Ride(id=3, start_location="A", end_location="B", start_time=T0, is_recurring=True, member_id=2)
        wire = RIDE_MAPPER.to_transfer(ride).model_dump(by_alias=True, mode="json")
        assert wire["startLocation"] == "A"
        assert wire["isRecurring"] is True
        assert wire["member"] == {"id": 2}

    def test_new_transfer_has_no_id(self):
        dto = RideDTO(startLocation="A", endLocation="B", startTime=T0)
        assert RIDE_MAPPER.to_record(dto).id is None


class TestApplyNonNullFields:
    """Merge-patch semantics."""

    def _ride(self):
        return Ride(
            id=3, start_location="A", end_location="B",
            start_time=T0, end_time=T1, is_recurring=False, member_id=2,
        )

    def test_only_supplied_field_changes(self):
        ride = self._ride()
        before = RIDE_MAPPER.snapshot(ride)

        RIDE_MAPPER.apply_non_null_fields(RidePatchDTO(id=3, endLocation="C"), ride)

        after = RIDE_MAPPER.snapshot(ride)
        assert after["end_location"] == "C"
        assert {k: v for k, v in after.items() if k != "end_location"} == {
            k: v for k, v in before.items() if k != "end_location"
        }

    def test_null_fields_do_not_clear_values(self):
        ride = self._ride()
        RIDE_MAPPER.apply_non_null_fields(RidePatchDTO(id=3, endTime=None, member=None), ride)
        assert ride.end_time == T1
        assert ride.member_id == 2

    def test_reference_overwrites_foreign_key(self):
        ride = self._ride()
        RIDE_MAPPER.apply_non_null_fields(RidePatchDTO(id=3, member=RefDTO(id=11)), ride)
        assert ride.member_id == 11

    def test_id_is_never_copied(self):
        ride = self._ride()
        RIDE_MAPPER.apply_non_null_fields(RidePatchDTO(id=99, startLocation="Z"), ride)
        assert ride.id == 3


class TestSortAttribute:

    @pytest.mark.parametrize("wire,attribute", [
        ("id", "id"),
        ("startTime", "start_time"),
        ("start_time", "start_time"),
        ("member", "member_id"),
        ("member.id", "member_id"),
    ])
    def test_known_fields(self, wire, attribute):
        assert RIDE_MAPPER.sort_attribute(wire) == attribute

    def test_unknown_field(self):
        assert RIDE_MAPPER.sort_attribute("color") is None
