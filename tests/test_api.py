from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from app.core.database import get_db
from app.routers import rental_settings as rental_settings_router

BOOKING = {
    "start_date": "2025-06-01T00:00:00Z",
    "end_date": "2025-06-05T00:00:00Z",
    "before_pictures": ["rentals/before/1.jpg"],
}


@pytest.fixture
def booking(property_):
    return {**BOOKING, "property_id": str(property_.id)}


async def create(client, caller, user, payload):
    caller.user = user
    return await client.post("/v1/rentals", json=payload)


async def test_booking_scenario(client, caller, tenant, property_, booking):
    response = await create(client, caller, tenant, booking)
    assert response.status_code == 201
    rental = response.json()
    assert rental["status"] == "pending"
    assert rental["year"] == 2025
    assert rental["property_name"] == "Sea View Villa"

    response = await client.post("/v1/rentals", json=booking)
    assert response.status_code == 409
    assert response.json() == {
        "detail": "You have already rented this property this year",
        "code": "duplicate_rental",
    }

    response = await client.put(
        f"/v1/rentals/{rental['id']}/complete",
        json={"before_pictures": "rentals/before/1.jpg", "after_pictures": ["rentals/after/1.jpg"]},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["before_pictures"] == ["rentals/before/1.jpg"]

    response = await client.get(
        f"/v1/properties/{property_.id}/occupancy", params={"at": "2025-06-03T00:00:00"}
    )
    assert response.json()["occupied"] is True
    response = await client.get(
        f"/v1/properties/{property_.id}/occupancy", params={"at": "2025-07-01T00:00:00"}
    )
    assert response.json()["occupied"] is False


async def test_requires_authentication(client, booking):
    response = await client.post("/v1/rentals", json=booking)
    assert response.status_code == 401


async def test_duration_error_body(client, caller, tenant, booking):
    payload = {**booking, "end_date": "2025-06-12T00:00:00Z"}
    response = await create(client, caller, tenant, payload)
    assert response.status_code == 400
    assert response.json() == {
        "detail": "Rental duration must be between 3 and 7 days",
        "code": "invalid_duration",
    }


async def test_property_reference_must_be_unambiguous(client, caller, tenant, property_):
    response = await create(
        client, caller, tenant, {**BOOKING, "property_id": str(property_.id), "property_name": "Sea View Villa"}
    )
    assert response.status_code == 422
    response = await create(client, caller, tenant, BOOKING)
    assert response.status_code == 422


async def test_booking_by_unknown_name(client, caller, tenant, property_):
    response = await create(client, caller, tenant, {**BOOKING, "property_name": "Nowhere Inn"})
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


async def test_only_owner_can_complete(client, caller, tenant, other_tenant, booking):
    rental = (await create(client, caller, tenant, booking)).json()
    caller.user = other_tenant
    response = await client.put(
        f"/v1/rentals/{rental['id']}/complete",
        json={"before_pictures": ["b.jpg"], "after_pictures": ["a.jpg"]},
    )
    assert response.status_code == 403


async def test_my_rentals_only_shows_callers(client, caller, tenant, other_tenant, booking):
    await create(client, caller, tenant, booking)
    await create(client, caller, other_tenant, booking)

    caller.user = tenant
    response = await client.get("/v1/rentals/my-rentals")
    assert response.status_code == 200
    assert [r["user_id"] for r in response.json()] == [str(tenant.id)]


class TestAdmin:
    async def test_tenant_cannot_use_admin_routes(self, client, caller, tenant, booking):
        rental = (await create(client, caller, tenant, booking)).json()
        assert (await client.get("/v1/rentals")).status_code == 403
        response = await client.put(f"/v1/rentals/{rental['id']}/status", json={"status": "approved"})
        assert response.status_code == 403
        assert (await client.delete(f"/v1/rentals/{rental['id']}")).status_code == 403

    async def test_approve_then_occupied(self, client, caller, tenant, admin, property_, booking):
        rental = (await create(client, caller, tenant, booking)).json()

        caller.user = admin
        response = await client.put(f"/v1/rentals/{rental['id']}/status", json={"status": "approved"})
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        response = await client.get(
            f"/v1/properties/{property_.id}/occupancy", params={"at": "2025-06-05T00:00:00Z"}
        )
        assert response.json()["occupied"] is True

        listing = (await client.get("/v1/rentals")).json()
        assert [r["id"] for r in listing] == [rental["id"]]

    async def test_invalid_status(self, client, caller, tenant, admin, booking):
        rental = (await create(client, caller, tenant, booking)).json()
        caller.user = admin
        response = await client.put(f"/v1/rentals/{rental['id']}/status", json={"status": "archived"})
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

        response = await client.get(f"/v1/rentals/{rental['id']}")
        assert response.json()["status"] == "pending"

    async def test_terminal_status_is_final(self, client, caller, tenant, admin, booking):
        rental = (await create(client, caller, tenant, booking)).json()
        caller.user = admin
        await client.put(f"/v1/rentals/{rental['id']}/status", json={"status": "rejected"})
        response = await client.put(f"/v1/rentals/{rental['id']}/status", json={"status": "approved"})
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_transition"

    async def test_delete(self, client, caller, tenant, admin, property_, booking):
        rental = (await create(client, caller, tenant, booking)).json()
        caller.user = admin
        response = await client.delete(f"/v1/rentals/{rental['id']}")
        assert response.status_code == 204

        assert (await client.get(f"/v1/rentals/{rental['id']}")).status_code == 404
        history = await client.get(f"/v1/properties/{property_.id}/rental-history")
        assert history.json() == []

        assert (await client.delete(f"/v1/rentals/{rental['id']}")).status_code == 404

    async def test_rental_history(self, client, caller, tenant, admin, property_, booking):
        rental = (await create(client, caller, tenant, booking)).json()
        caller.user = admin
        response = await client.get(f"/v1/properties/{property_.id}/rental-history")
        assert response.status_code == 200
        assert response.json() == [
            {
                "rental_id": rental["id"],
                "member_id": str(tenant.id),
                "start_date": "2025-06-01T00:00:00",
                "end_date": "2025-06-05T00:00:00",
            }
        ]


class TestRentalSettings:
    async def test_upsert_applies_to_new_bookings(self, client, caller, tenant, admin, booking):
        caller.user = admin
        payload = {"country": "Egypt", "city": "Hurghada", "min_duration": 5, "max_duration": 7}
        response = await client.put("/v1/rental-settings", json=payload)
        assert response.status_code == 200
        setting = response.json()

        response = await client.put("/v1/rental-settings", json={**payload, "min_duration": 6})
        assert response.json()["id"] == setting["id"]
        assert response.json()["min_duration"] == 6

        response = await create(client, caller, tenant, booking)
        assert response.status_code == 400
        assert response.json()["detail"] == "Rental duration must be between 6 and 7 days"

        caller.user = admin
        response = await client.delete(f"/v1/rental-settings/{setting['id']}")
        assert response.status_code == 204
        assert (await create(client, caller, tenant, booking)).status_code == 201

    @pytest.mark.parametrize(
        "bounds",
        [
            {"min_duration": 2, "max_duration": 7},
            {"min_duration": 3, "max_duration": 8},
            {"min_duration": 6, "max_duration": 4},
        ],
    )
    async def test_bounds_are_validated(self, client, caller, admin, bounds):
        caller.user = admin
        response = await client.put("/v1/rental-settings", json={"country": "Egypt", **bounds})
        assert response.status_code == 422

    async def test_admin_only(self, client, caller, tenant):
        caller.user = tenant
        assert (await client.get("/v1/rental-settings")).status_code == 403

    async def test_lost_first_save_is_a_retryable_conflict(self, client, caller, admin, monkeypatch):
        caller.user = admin
        payload = {"country": "Egypt", "city": None, "min_duration": 3, "max_duration": 5}
        assert (await client.put("/v1/rental-settings", json=payload)).status_code == 200

        async def not_found_yet(db, country, city):
            return None

        # A concurrent save that looked before the first one committed.
        monkeypatch.setattr(rental_settings_router, "find_setting", not_found_yet)
        response = await client.put("/v1/rental-settings", json={**payload, "max_duration": 6})
        assert response.status_code == 409
        assert response.json()["code"] == "duplicate_rental_setting"
        assert response.json()["retryable"] is True

        monkeypatch.undo()
        settings = (await client.get("/v1/rental-settings")).json()
        assert [(s["city"], s["max_duration"]) for s in settings] == [(None, 5)]


class TestEvidence:
    async def test_presign_and_links(self, client, caller, tenant, booking):
        rental = (await create(client, caller, tenant, booking)).json()
        response = await client.post(
            f"/v1/rentals/{rental['id']}/evidence/presign",
            json={"kind": "after", "file_name": "kitchen.PNG", "mime_type": "image/png", "file_size_bytes": 2048},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["object_path"].startswith(f"rentals/{rental['id']}/after/")
        assert body["object_path"].endswith(".png")
        assert body["upload_url"].startswith("https://uploads.test/")

        links = (await client.get(f"/v1/rentals/{rental['id']}/evidence")).json()
        assert links["before_pictures"] == ["https://uploads.test/rentals/before/1.jpg?sig=get"]
        assert links["after_pictures"] == []

    async def test_rejects_non_images(self, client, caller, tenant, booking):
        rental = (await create(client, caller, tenant, booking)).json()
        response = await client.post(
            f"/v1/rentals/{rental['id']}/evidence/presign",
            json={"kind": "before", "file_name": "notes.pdf", "mime_type": "application/pdf", "file_size_bytes": 10},
        )
        assert response.status_code == 400


class TestAuthAndProperties:
    async def test_sync_creates_tenant_once(self, client, caller):
        caller.user = SimpleNamespace(firebase_uid="newcomer", email="new@example.com", id=None, role=None)
        first = await client.post("/v1/auth/sync", json={"full_name": "New Comer"})
        assert first.status_code == 200
        assert first.json()["role"] == "tenant"

        second = await client.post("/v1/auth/sync", json={})
        assert second.json()["db_user_id"] == first.json()["db_user_id"]

    async def test_create_property_duplicate_name(self, client, caller, admin, property_):
        caller.user = admin
        payload = {"name": "Sea View Villa", "location": "Elsewhere", "country": "Egypt"}
        response = await client.post("/v1/properties", json=payload)
        assert response.status_code == 409

    async def test_list_properties_reports_current_occupancy(self, client, property_):
        response = await client.get("/v1/properties")
        assert response.status_code == 200
        assert response.json()[0]["name"] == "Sea View Villa"
        assert response.json()[0]["is_rented"] is False

    async def test_unknown_property_occupancy(self, client):
        import uuid

        response = await client.get(f"/v1/properties/{uuid.uuid4()}/occupancy")
        assert response.status_code == 404


class UnreachableDatabase:
    async def execute(self, *args, **kwargs):
        raise OperationalError(
            "SELECT rentals.id FROM rentals",
            {},
            ConnectionRefusedError("connection refused host=db.internal port=5432"),
        )

    async def rollback(self):
        pass


async def test_database_outage_is_a_generic_503(client, caller, tenant):
    from app.main import app

    async def unreachable_db():
        yield UnreachableDatabase()

    app.dependency_overrides[get_db] = unreachable_db
    caller.user = tenant

    response = await client.get("/v1/rentals/my-rentals")
    assert response.status_code == 503
    assert response.json() == {
        "detail": "Service temporarily unavailable",
        "code": "infrastructure_error",
    }
    assert "db.internal" not in response.text
    assert "SELECT" not in response.text
