"""Tests for the /api/bookings endpoints."""

import pytest

from tests.mocks.models import (
    AGENCY_ID,
    AGENT_ID,
    EXISTING_BOOKING_ID,
    FREELANCE_AGENT_ID,
    KAYAK_ID,
    MONDAY,
    TUESDAY,
    at,
    booking_payload,
)


def _times(day, start, end):
    return {"start_time": at(day, start).isoformat(), "end_time": at(day, end).isoformat()}


class TestListBookings:
    def test_list_all(self, client):
        resp = client.get("/api/bookings")
        assert resp.status_code == 200
        assert [b["id"] for b in resp.json()["items"]] == [EXISTING_BOOKING_ID]

    @pytest.mark.parametrize(
        ("params", "expected"),
        [
            ({"status": "confirmed"}, 1),
            ({"status": "cancelled"}, 0),
            ({"status": ["pending", "confirmed"]}, 1),
            ({"date": MONDAY.isoformat()}, 1),
            ({"date": TUESDAY.isoformat()}, 0),
            ({"date_from": TUESDAY.isoformat()}, 0),
            ({"activity_id": KAYAK_ID}, 0),
            ({"search": "existing"}, 1),
        ],
    )
    def test_filters(self, client, params, expected):
        resp = client.get("/api/bookings", params=params)
        assert resp.status_code == 200
        assert len(resp.json()["items"]) == expected

    def test_invalid_date_filter(self, client):
        assert client.get("/api/bookings", params={"date": "01-09-2025"}).status_code == 400

    def test_invalid_status_filter(self, client):
        assert client.get("/api/bookings", params={"status": "lost"}).status_code == 400


class TestCreateBooking:
    def test_create_within_capacity(self, client):
        resp = client.post("/api/bookings", json=booking_payload(participants=2))
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "pending"
        assert data["participants"] == 2
        assert client.get(f"/api/bookings/{data['id']}").status_code == 200

    def test_capacity_exceeded(self, client):
        client.post("/api/bookings", json=booking_payload(participants=2))
        resp = client.post("/api/bookings", json=booking_payload(participants=1))
        assert resp.status_code == 409
        assert resp.json() == {
            "success": False,
            "error": "Slot capacity exceeded. Current: 6, Requested: 1, Maximum: 6",
            "validation_type": "slot_availability",
        }

    def test_zero_participants_is_schema_error(self, client):
        payload = booking_payload() | {"participants": 0}
        resp = client.post("/api/bookings", json=payload)
        assert resp.status_code == 400
        assert resp.json()["details"][0]["field"] == "participants"

    def test_end_before_start_rejected(self, client):
        payload = booking_payload() | _times(MONDAY, "11:00", "09:00")
        assert client.post("/api/bookings", json=payload).status_code == 400

    def test_above_activity_maximum(self, client):
        resp = client.post("/api/bookings", json=booking_payload(participants=11))
        assert resp.status_code == 400
        assert resp.json()["validation_type"] == "participant_limit"

    def test_unknown_activity(self, client):
        resp = client.post("/api/bookings", json=booking_payload(activity_id="nope"))
        assert resp.status_code == 404
        assert resp.json()["error"] == "Activity not found"

    def test_unknown_agent(self, client):
        resp = client.post("/api/bookings", json=booking_payload(agent_id="nope"))
        assert resp.status_code == 404
        assert resp.json()["error"] == "Agent not found"

    def test_day_without_schedule(self, client):
        payload = booking_payload() | _times(TUESDAY, "09:00", "11:00")
        resp = client.post("/api/bookings", json=payload)
        assert resp.status_code == 409
        assert resp.json()["error"] == "No schedule available for this day"

    def test_disabled_slot(self, client):
        payload = booking_payload() | _times(MONDAY, "13:00", "15:00")
        resp = client.post("/api/bookings", json=payload)
        assert resp.status_code == 409
        assert resp.json()["error"] == "Time slot is not available"

    def test_time_outside_any_slot(self, client):
        payload = booking_payload() | _times(MONDAY, "11:30", "12:30")
        resp = client.post("/api/bookings", json=payload)
        assert resp.status_code == 409
        assert resp.json()["error"] == "No available time slot found for requested time"

    def test_agent_blackout(self, client):
        client.post(
            f"/api/agents/{FREELANCE_AGENT_ID}/unavailable-dates",
            json={"date": MONDAY.isoformat()},
        )
        resp = client.post("/api/bookings", json=booking_payload(agent_id=FREELANCE_AGENT_ID))
        assert resp.status_code == 409
        assert resp.json()["validation_type"] == "agent_unavailable_date"
        assert resp.json()["error"] == "Date 2025-09-01 is unavailable for agent Lena Ho"

    def test_agency_blackout(self, client):
        client.post(
            "/api/agency-unavailable-schedules",
            json={"agency_id": AGENCY_ID, "date": MONDAY.isoformat()},
        )
        resp = client.post("/api/bookings", json=booking_payload(agent_id=AGENT_ID))
        assert resp.status_code == 409
        assert resp.json()["error"] == "Date 2025-09-01 is unavailable for agency North Shore Tours"

        # The freelance agent belongs to no agency and is unaffected.
        resp = client.post("/api/bookings", json=booking_payload(agent_id=FREELANCE_AGENT_ID))
        assert resp.status_code == 201


class TestValidateBooking:
    def test_valid_request(self, client):
        resp = client.post("/api/bookings/validate", json=booking_payload(participants=2))
        assert resp.status_code == 200
        data = resp.json()
        assert data["is_valid"] is True
        assert data["message"] == "Booking can be created successfully"
        assert data["slot_info"] == {
            "start_time": "09:00",
            "end_time": "11:00",
            "max_capacity": 6,
            "current_bookings": 4,
            "remaining_capacity": 2,
            "capacity_after_booking": 0,
        }
        assert data["conflicting_bookings"] == 1
        assert data["alternative_slots"] == []

    def test_does_not_create(self, client):
        client.post("/api/bookings/validate", json=booking_payload(participants=2))
        assert client.get("/api/bookings").json()["meta"]["total_items"] == 1

    def test_alternatives_capped(self, client):
        payload = booking_payload(activity_id=KAYAK_ID) | _times(MONDAY, "10:00", "11:00")
        resp = client.post("/api/bookings/validate", json=payload)
        assert resp.status_code == 200
        alternatives = [s["slot_id"] for s in resp.json()["alternative_slots"]]
        assert alternatives == ["kayak-1", "kayak-3", "kayak-4"]

    def test_exclude_own_booking(self, client):
        payload = booking_payload(participants=6) | {"exclude_booking_id": EXISTING_BOOKING_ID}
        resp = client.post("/api/bookings/validate", json=payload)
        assert resp.status_code == 200
        assert resp.json()["conflicting_bookings"] == 0

    def test_rejected(self, client):
        resp = client.post("/api/bookings/validate", json=booking_payload(participants=3))
        assert resp.status_code == 409
        assert resp.json()["error"] == "Slot capacity exceeded. Current: 4, Requested: 3, Maximum: 6"

    def test_unknown_activity(self, client):
        resp = client.post("/api/bookings/validate", json=booking_payload(activity_id="nope"))
        assert resp.status_code == 404


class TestUpdateBooking:
    def test_grow_into_own_seats(self, client):
        resp = client.put(f"/api/bookings/{EXISTING_BOOKING_ID}", json={"participants": 6})
        assert resp.status_code == 200
        assert resp.json()["participants"] == 6

    def test_grow_beyond_slot(self, client):
        resp = client.put(f"/api/bookings/{EXISTING_BOOKING_ID}", json={"participants": 7})
        assert resp.status_code == 409
        assert resp.json()["error"] == "Slot capacity exceeded. Current: 0, Requested: 7, Maximum: 6"
        assert client.get(f"/api/bookings/{EXISTING_BOOKING_ID}").json()["participants"] == 4

    def test_non_capacity_change(self, client):
        resp = client.put(f"/api/bookings/{EXISTING_BOOKING_ID}", json={"notes": "Window seat"})
        assert resp.status_code == 200
        assert resp.json()["notes"] == "Window seat"

    def test_update_missing_booking(self, client):
        assert client.put("/api/bookings/missing", json={"notes": "x"}).status_code == 404


class TestBookingStatus:
    def test_allowed_transition(self, client):
        resp = client.patch(
            f"/api/bookings/{EXISTING_BOOKING_ID}/status", json={"status": "completed"}
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

    def test_forbidden_transition(self, client):
        client.patch(f"/api/bookings/{EXISTING_BOOKING_ID}/status", json={"status": "cancelled"})
        resp = client.patch(
            f"/api/bookings/{EXISTING_BOOKING_ID}/status", json={"status": "confirmed"}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Cannot change booking status from cancelled to confirmed"

    def test_cancel_frees_capacity(self, client):
        client.patch(f"/api/bookings/{EXISTING_BOOKING_ID}/status", json={"status": "cancelled"})
        resp = client.post("/api/bookings", json=booking_payload(participants=6))
        assert resp.status_code == 201

    def test_unknown_status_value(self, client):
        resp = client.patch(f"/api/bookings/{EXISTING_BOOKING_ID}/status", json={"status": "lost"})
        assert resp.status_code == 400


class TestDeleteBooking:
    def test_delete(self, client):
        assert client.delete(f"/api/bookings/{EXISTING_BOOKING_ID}").status_code == 204
        assert client.get(f"/api/bookings/{EXISTING_BOOKING_ID}").status_code == 404

    def test_delete_missing(self, client):
        assert client.delete("/api/bookings/missing").status_code == 404
