import asyncio
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError as PostgrestAPIError

from app.domain.models import ItineraryDay, ItineraryItem
from app.domain.repositories import InMemoryTripRepository, RepositoryError, SupabaseTripRepository

TRIP_ID = "trip-goa"


def _run(coro):
    return asyncio.run(coro)


class TestInMemoryConstraints:
    def test_day_requires_existing_trip(self, repo):
        with pytest.raises(RepositoryError):
            _run(repo.insert_day(ItineraryDay(trip_id="ghost", day_number=1)))

    def test_day_number_unique_per_trip(self, repo):
        _run(repo.insert_day(ItineraryDay(trip_id=TRIP_ID, day_number=1)))
        with pytest.raises(RepositoryError):
            _run(repo.insert_day(ItineraryDay(trip_id=TRIP_ID, day_number=1)))

    def test_item_requires_existing_day(self, repo):
        with pytest.raises(RepositoryError):
            _run(repo.insert_items([ItineraryItem(day_id="ghost", place_name="Baga")]))
        assert repo.items == {}

    def test_days_cannot_be_deleted_before_items(self, repo):
        day = _run(repo.insert_day(ItineraryDay(trip_id=TRIP_ID, day_number=1)))
        _run(repo.insert_items([ItineraryItem(day_id=day.id, place_name="Baga")]))

        with pytest.raises(RepositoryError):
            _run(repo.delete_days_for_trip(TRIP_ID))

        _run(repo.delete_items_for_days([day.id]))
        _run(repo.delete_days_for_trip(TRIP_ID))
        assert _run(repo.list_day_ids(TRIP_ID)) == []

    def test_list_days_ordered_by_day_number(self, repo):
        for number in (3, 1, 2):
            _run(repo.insert_day(ItineraryDay(trip_id=TRIP_ID, day_number=number)))
        assert [day.day_number for day in _run(repo.list_days(TRIP_ID))] == [1, 2, 3]

    def test_unknown_trip_raises_key_error(self):
        with pytest.raises(KeyError):
            _run(InMemoryTripRepository().get_trip("missing"))


class TestSupabaseRepository:
    def _client(self, data=None, error=None):
        client = MagicMock()
        query = client.table.return_value
        for name in ("select", "eq", "in_", "order", "insert", "update", "delete"):
            getattr(query, name).return_value = query
        if error is not None:
            query.execute.side_effect = error
        else:
            query.execute.return_value = MagicMock(data=data or [])
        return client, query

    def test_requires_client(self):
        with pytest.raises(ValueError):
            SupabaseTripRepository(None)

    def test_get_trip_maps_row(self):
        client, query = self._client(
            data=[{"id": TRIP_ID, "user_id": "u1", "destination": "Goa", "num_days": 3, "start_date": "2026-12-01"}]
        )
        trip = _run(SupabaseTripRepository(client).get_trip(TRIP_ID))

        client.table.assert_called_with("trips")
        query.eq.assert_called_with("id", TRIP_ID)
        assert trip.destination == "Goa"
        assert trip.start_date.isoformat() == "2026-12-01"

    def test_delete_items_filters_by_day_ids(self):
        client, query = self._client()
        _run(SupabaseTripRepository(client).delete_items_for_days(["d1", "d2"]))

        client.table.assert_called_with("itinerary_items")
        query.in_.assert_called_with("day_id", ["d1", "d2"])

    def test_insert_day_returns_stored_row(self):
        client, query = self._client(
            data=[{"id": "d1", "trip_id": TRIP_ID, "day_number": 1, "summary": "Arrival", "date": None}]
        )
        day = _run(SupabaseTripRepository(client).insert_day(ItineraryDay(trip_id=TRIP_ID, day_number=1)))

        query.insert.assert_called_with({"trip_id": TRIP_ID, "day_number": 1, "summary": None, "date": None})
        assert day.id == "d1"

    def test_postgrest_error_becomes_repository_error(self):
        client, _ = self._client(error=PostgrestAPIError({"message": "duplicate key value", "code": "23505"}))
        with pytest.raises(RepositoryError, match="duplicate key value"):
            _run(SupabaseTripRepository(client).insert_items([ItineraryItem(day_id="d1", place_name="Baga")]))
