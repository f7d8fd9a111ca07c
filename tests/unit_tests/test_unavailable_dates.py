"""Tests for the /api/{activities,agents}/{id}/unavailable-dates endpoints."""

import pytest

from tests.mocks.models import AGENT_ID, SURFING_ID

COLLECTIONS = [("activities", SURFING_ID, "activity"), ("agents", AGENT_ID, "agent")]


@pytest.mark.parametrize(("collection", "entity_id", "entity_type"), COLLECTIONS)
class TestUnavailableDates:
    def _url(self, collection, entity_id):
        return f"/api/{collection}/{entity_id}/unavailable-dates"

    def test_empty_list(self, client, collection, entity_id, entity_type):
        resp = client.get(self._url(collection, entity_id))
        assert resp.status_code == 200
        assert resp.json() == {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "unavailable_dates": [],
            "total_dates": 0,
            "added_date": None,
            "removed_date": None,
        }

    def test_add_date(self, client, collection, entity_id, entity_type):
        resp = client.post(self._url(collection, entity_id), json={"date": "2025-12-25"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["unavailable_dates"] == ["2025-12-25"]
        assert data["added_date"] == "2025-12-25"

    def test_add_duplicate_date_rejected(self, client, collection, entity_id, entity_type):
        client.post(self._url(collection, entity_id), json={"date": "2025-12-25"})
        resp = client.post(self._url(collection, entity_id), json={"date": "2025-12-25"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Date is already in unavailable dates list"

    @pytest.mark.parametrize("bad", ["2025-12-32", "25-12-2025", "2025-2-1"])
    def test_add_invalid_date_rejected(self, client, collection, entity_id, entity_type, bad):
        resp = client.post(self._url(collection, entity_id), json={"date": bad})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid date format. Use YYYY-MM-DD"

    def test_replace_dedups_and_sorts(self, client, collection, entity_id, entity_type):
        client.post(self._url(collection, entity_id), json={"date": "2025-01-01"})
        resp = client.put(
            self._url(collection, entity_id),
            json={"unavailable_dates": ["2025-12-31", "2025-12-25", "2025-12-31"]},
        )
        assert resp.status_code == 200
        assert resp.json()["unavailable_dates"] == ["2025-12-25", "2025-12-31"]
        assert resp.json()["total_dates"] == 2

    def test_replace_with_invalid_date_changes_nothing(
        self, client, collection, entity_id, entity_type
    ):
        client.post(self._url(collection, entity_id), json={"date": "2025-01-01"})
        resp = client.put(
            self._url(collection, entity_id),
            json={"unavailable_dates": ["2025-12-25", "tomorrow"]},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid date format: tomorrow. Use YYYY-MM-DD"
        assert client.get(self._url(collection, entity_id)).json()["unavailable_dates"] == [
            "2025-01-01"
        ]

    def test_remove_date(self, client, collection, entity_id, entity_type):
        client.post(self._url(collection, entity_id), json={"date": "2025-12-25"})
        resp = client.delete(self._url(collection, entity_id), params={"date": "2025-12-25"})
        assert resp.status_code == 200
        assert resp.json()["unavailable_dates"] == []
        assert resp.json()["removed_date"] == "2025-12-25"

    def test_remove_missing_date(self, client, collection, entity_id, entity_type):
        resp = client.delete(self._url(collection, entity_id), params={"date": "2025-12-25"})
        assert resp.status_code == 404
        assert resp.json()["error"] == "Date is not in unavailable dates list"

    def test_unknown_entity(self, client, collection, entity_id, entity_type):
        resp = client.get(self._url(collection, "no-such-id"))
        assert resp.status_code == 404


def test_unknown_collection(client):
    resp = client.get(f"/api/clubs/{SURFING_ID}/unavailable-dates")
    assert resp.status_code == 400
