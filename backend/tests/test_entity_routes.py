"""
WayShare Backend - Entity Endpoint Tests
=========================================

What:  HTTP-level tests of the generated CRUD routers.
How:   httpx AsyncClient over ASGITransport into a fresh app, backed by a
       throwaway SQLite schema (see conftest.py).

What we test:
    ✅ create → read → delete → read-404 round trip on rides
    ✅ id guards: idexists, idnull, idinvalid, idnotfound
    ✅ merge-patch semantics and content type
    ✅ rating score boundaries (0/6 rejected, 1/5 accepted)
    ✅ alert / error headers
    ✅ sorting, owner filtering, pagination headers
    ✅ out-of-range keys and dangling references answer 400
"""

from datetime import datetime

import pytest

ALERT = "X-wayShareApp-alert"
ERROR = "X-wayShareApp-error"
PARAMS = "X-wayShareApp-params"


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestRideLifecycle:

    @pytest.mark.asyncio
    async def test_create_read_delete(self, test_client, ride_payload):
        """The canonical scenario: create, read back, delete, read 404."""
        created = await test_client.post("/api/rides", json=ride_payload)

        assert created.status_code == 201
        body = created.json()
        assert body["id"] is not None
        assert body["startLocation"] == "A"
        assert body["endLocation"] == "B"
        assert _parse_time(body["startTime"]) == _parse_time(ride_payload["startTime"])
        assert created.headers["Location"] == f"/api/rides/{body['id']}"
        assert created.headers[ALERT] == "wayShareApp.ride.created"
        assert created.headers[PARAMS] == str(body["id"])

        fetched = await test_client.get(f"/api/rides/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json() == body

        deleted = await test_client.delete(f"/api/rides/{body['id']}")
        assert deleted.status_code == 204
        assert deleted.headers[ALERT] == "wayShareApp.ride.deleted"
        assert deleted.headers[PARAMS] == str(body["id"])

        gone = await test_client.get(f"/api/rides/{body['id']}")
        assert gone.status_code == 404
        assert gone.json()["error_key"] == "idnotfound"

    @pytest.mark.asyncio
    async def test_offsets_are_normalised_to_utc(self, test_client, ride_payload):
        ride_payload["startTime"] = "2024-07-01T10:00:00+02:00"
        created = await test_client.post("/api/rides", json=ride_payload)
        assert _parse_time(created.json()["startTime"]).utcoffset().total_seconds() == 0
        assert _parse_time(created.json()["startTime"]) == _parse_time("2024-07-01T08:00:00Z")

    @pytest.mark.asyncio
    async def test_delete_unknown_id_succeeds(self, test_client):
        response = await test_client.delete("/api/rides/424242")
        assert response.status_code == 204


class TestIdGuards:

    async def _create_ride(self, client, payload):
        return (await client.post("/api/rides", json=payload)).json()

    @pytest.mark.asyncio
    async def test_create_with_id_is_rejected(self, test_client, ride_payload):
        response = await test_client.post("/api/rides", json={**ride_payload, "id": 7})

        assert response.status_code == 400
        assert response.json()["error_key"] == "idexists"
        assert response.headers[ERROR] == "error.idexists"
        assert response.headers[PARAMS] == "ride"
        assert (await test_client.get("/api/rides")).json() == []

    @pytest.mark.asyncio
    async def test_update_without_id(self, test_client, ride_payload):
        ride = await self._create_ride(test_client, ride_payload)

        response = await test_client.put(f"/api/rides/{ride['id']}", json=ride_payload)

        assert response.status_code == 400
        assert response.json()["error_key"] == "idnull"

    @pytest.mark.asyncio
    async def test_update_with_mismatched_id_changes_nothing(self, test_client, ride_payload):
        ride = await self._create_ride(test_client, ride_payload)

        response = await test_client.put(
            f"/api/rides/{ride['id']}",
            json={**ride_payload, "id": ride["id"] + 1, "endLocation": "Z"},
        )

        assert response.status_code == 400
        assert response.json()["error_key"] == "idinvalid"
        assert response.headers[ERROR] == "error.idinvalid"
        assert (await test_client.get(f"/api/rides/{ride['id']}")).json()["endLocation"] == "B"

    @pytest.mark.asyncio
    async def test_update_unknown_record_is_bad_request(self, test_client, ride_payload):
        response = await test_client.put("/api/rides/999", json={**ride_payload, "id": 999})

        assert response.status_code == 400
        assert response.json()["error_key"] == "idnotfound"

    @pytest.mark.asyncio
    async def test_full_update(self, test_client, ride_payload):
        ride = await self._create_ride(test_client, ride_payload)

        response = await test_client.put(
            f"/api/rides/{ride['id']}",
            json={**ride_payload, "id": ride["id"], "endLocation": "C", "isRecurring": True},
        )

        assert response.status_code == 200
        assert response.json()["endLocation"] == "C"
        assert response.json()["isRecurring"] is True
        assert response.headers[ALERT] == "wayShareApp.ride.updated"


class TestPartialUpdate:

    @pytest.mark.asyncio
    async def test_merge_patch_changes_only_given_fields(self, test_client, ride_payload):
        ride = (await test_client.post("/api/rides", json={**ride_payload, "isRecurring": True})).json()

        response = await test_client.patch(
            f"/api/rides/{ride['id']}",
            json={"id": ride["id"], "endLocation": "C"},
            headers={"Content-Type": "application/merge-patch+json"},
        )

        assert response.status_code == 200
        patched = response.json()
        assert patched["endLocation"] == "C"
        assert {k: v for k, v in patched.items() if k != "endLocation"} == {
            k: v for k, v in ride.items() if k != "endLocation"
        }
        assert response.headers[ALERT] == "wayShareApp.ride.updated"

    @pytest.mark.asyncio
    async def test_plain_json_is_accepted(self, test_client, ride_payload):
        ride = (await test_client.post("/api/rides", json=ride_payload)).json()
        response = await test_client.patch(f"/api/rides/{ride['id']}", json={"id": ride["id"], "isRecurring": False})
        assert response.status_code == 200
        assert response.json()["isRecurring"] is False

    @pytest.mark.asyncio
    async def test_patch_unknown_record_is_bad_request(self, test_client):
        response = await test_client.patch(
            "/api/rides/999",
            json={"id": 999, "endLocation": "C"},
            headers={"Content-Type": "application/merge-patch+json"},
        )
        assert response.status_code == 400
        assert response.json()["error_key"] == "idnotfound"
        assert response.headers[ERROR] == "error.idnotfound"

    @pytest.mark.asyncio
    async def test_patch_with_mismatched_id(self, test_client, ride_payload):
        ride = (await test_client.post("/api/rides", json=ride_payload)).json()
        response = await test_client.patch(f"/api/rides/{ride['id']}", json={"id": 0, "endLocation": "C"})
        assert response.status_code == 400
        assert response.json()["error_key"] == "idinvalid"

    @pytest.mark.asyncio
    async def test_patch_still_validates_values(self, test_client, rating_payload):
        rating = (await test_client.post("/api/ratings", json=rating_payload)).json()
        response = await test_client.patch(f"/api/ratings/{rating['id']}", json={"id": rating["id"], "score": 9})
        assert response.status_code == 400


class TestValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [0, 6])
    async def test_rating_out_of_range(self, test_client, rating_payload, score):
        response = await test_client.post("/api/ratings", json={**rating_payload, "score": score})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "bad_request"
        assert body["error_key"] == "validation"
        assert body["entity_name"] == "rating"
        assert body["details"]["errors"][0]["field"] == "score"
        assert response.headers[ERROR] == "error.validation"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [1, 5])
    async def test_rating_boundaries_accepted(self, test_client, rating_payload, score):
        response = await test_client.post("/api/ratings", json={**rating_payload, "score": score})
        assert response.status_code == 201
        assert response.json()["score"] == score

    @pytest.mark.asyncio
    async def test_missing_required_field(self, test_client, ride_payload):
        del ride_payload["startTime"]
        response = await test_client.post("/api/rides", json=ride_payload)
        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "startTime"

    @pytest.mark.asyncio
    async def test_duplicate_login(self, test_client, member_payload):
        assert (await test_client.post("/api/members", json=member_payload)).status_code == 201

        response = await test_client.post("/api/members", json={**member_payload, "email": "other@example.org"})

        assert response.status_code == 400
        assert response.json()["error_key"] == "constraintviolation"


class TestKeyBounds:

    TOO_BIG = 10**30

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    async def test_oversized_path_id(self, test_client, method):
        response = await test_client.request(method, f"/api/rides/{self.TOO_BIG}")
        assert response.status_code == 400
        assert response.json()["error_key"] == "validation"

    @pytest.mark.asyncio
    async def test_oversized_path_id_on_update(self, test_client, ride_payload):
        response = await test_client.put(f"/api/rides/{self.TOO_BIG}", json={**ride_payload, "id": self.TOO_BIG})
        assert response.status_code == 400
        assert response.json()["error_key"] == "validation"

    @pytest.mark.asyncio
    async def test_oversized_owner_filter(self, test_client):
        response = await test_client.get("/api/rides", params={"memberId": self.TOO_BIG})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_page_past_the_key_range(self, test_client):
        response = await test_client.get("/api/ride-requests", params={"page": 10**17, "size": 100})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_oversized_reference(self, test_client, ride_payload):
        response = await test_client.post("/api/rides", json={**ride_payload, "member": {"id": self.TOO_BIG}})
        assert response.status_code == 400
        assert response.json()["error_key"] == "validation"


class TestRelationships:

    @pytest.mark.asyncio
    async def test_references_are_identity_only(self, test_client, member_payload, ride_payload):
        profile = (await test_client.post("/api/profiles", json={"firstName": "Alice"})).json()
        member = (
            await test_client.post("/api/members", json={**member_payload, "profile": {"id": profile["id"]}})
        ).json()
        assert member["profile"] == {"id": profile["id"]}

        ride = (await test_client.post("/api/rides", json={**ride_payload, "member": {"id": member["id"]}})).json()
        assert ride["member"] == {"id": member["id"]}

    @pytest.mark.asyncio
    async def test_dangling_reference_rejected(self, test_client, ride_payload):
        response = await test_client.post("/api/rides", json={**ride_payload, "member": {"id": 999}})

        assert response.status_code == 400
        assert response.json()["error_key"] == "constraintviolation"
        assert (await test_client.get("/api/rides")).headers["X-Total-Count"] == "0"

    @pytest.mark.asyncio
    async def test_referenced_parent_cannot_be_deleted(self, test_client, member_payload, ride_payload):
        member = (await test_client.post("/api/members", json=member_payload)).json()
        await test_client.post("/api/rides", json={**ride_payload, "member": {"id": member["id"]}})

        response = await test_client.delete(f"/api/members/{member['id']}")

        assert response.status_code == 400
        assert response.json()["error_key"] == "constraintviolation"
        assert (await test_client.get(f"/api/members/{member['id']}")).status_code == 200

    @pytest.mark.asyncio
    async def test_owner_filter(self, test_client, member_payload, ride_payload):
        alice = (await test_client.post("/api/members", json=member_payload)).json()
        bob = (
            await test_client.post("/api/members", json={"login": "bob", "passwordHash": "h"})
        ).json()
        await test_client.post("/api/rides", json={**ride_payload, "member": {"id": alice["id"]}})
        await test_client.post("/api/rides", json={**ride_payload, "member": {"id": bob["id"]}})

        response = await test_client.get("/api/rides", params={"memberId": bob["id"]})

        assert [r["member"]["id"] for r in response.json()] == [bob["id"]]
        assert response.headers["X-Total-Count"] == "1"


class TestCollections:

    @pytest.mark.asyncio
    async def test_sort_descending(self, test_client, ride_payload):
        for location in ("B", "C", "A"):
            await test_client.post("/api/rides", json={**ride_payload, "startLocation": location})

        response = await test_client.get("/api/rides", params={"sort": "startLocation,desc"})

        assert [r["startLocation"] for r in response.json()] == ["C", "B", "A"]
        assert response.headers["X-Total-Count"] == "3"
        assert "Link" not in response.headers

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sort", ["color,asc", "id,sideways"])
    async def test_invalid_sort(self, test_client, sort):
        response = await test_client.get("/api/rides", params={"sort": sort})
        assert response.status_code == 400
        assert response.json()["error_key"] == "sortinvalid"

    @pytest.mark.asyncio
    async def test_paginated_collection(self, test_client):
        for i in range(5):
            await test_client.post(
                "/api/ride-requests",
                json={"status": f"PENDING-{i}", "requestTime": f"2024-06-0{i + 1}T10:00:00Z"},
            )

        response = await test_client.get(
            "/api/ride-requests", params={"page": 1, "size": 2, "sort": "requestTime,desc"}
        )

        assert response.status_code == 200
        assert [r["status"] for r in response.json()] == ["PENDING-2", "PENDING-1"]
        assert response.headers["X-Total-Count"] == "5"
        link = response.headers["Link"]
        for rel in ("next", "prev", "last", "first"):
            assert f'rel="{rel}"' in link

    @pytest.mark.asyncio
    async def test_page_size_out_of_range(self, test_client):
        response = await test_client.get("/api/notifications", params={"size": 0})
        assert response.status_code == 400
        assert response.json()["entity_name"] == "notification"

    @pytest.mark.asyncio
    async def test_empty_collection(self, test_client):
        response = await test_client.get("/api/messages")
        assert response.status_code == 200
        assert response.json() == []
        assert response.headers["X-Total-Count"] == "0"
