from abc import ABC, abstractmethod
import asyncio
from datetime import datetime
from typing import Any, Dict, List
from uuid import uuid4

from postgrest.exceptions import APIError as PostgrestAPIError

from .models import ItineraryDay, ItineraryItem, Trip

TRIPS_TABLE = "trips"
DAYS_TABLE = "itinerary_days"
ITEMS_TABLE = "itinerary_items"


class RepositoryError(Exception):
    """A data-store call was rejected (constraint violation, transport failure)."""


class TripRepository(ABC):
    @abstractmethod
    async def save_trip(self, trip: Trip) -> Trip:
        raise NotImplementedError

    @abstractmethod
    async def get_trip(self, trip_id: str) -> Trip:
        raise NotImplementedError

    @abstractmethod
    async def get_trip_by_slug(self, slug: str) -> Trip:
        raise NotImplementedError

    @abstractmethod
    async def update_trip(self, trip_id: str, fields: Dict[str, Any]) -> Trip:
        raise NotImplementedError

    @abstractmethod
    async def list_day_ids(self, trip_id: str) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    async def delete_items_for_days(self, day_ids: List[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete_days_for_trip(self, trip_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def insert_day(self, day: ItineraryDay) -> ItineraryDay:
        raise NotImplementedError

    @abstractmethod
    async def insert_items(self, items: List[ItineraryItem]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def list_days(self, trip_id: str) -> List[ItineraryDay]:
        raise NotImplementedError

    @abstractmethod
    async def list_items(self, day_ids: List[str]) -> List[ItineraryItem]:
        raise NotImplementedError


class InMemoryTripRepository(TripRepository):
    """
    Dict-backed tables with the same foreign keys and unique constraints as the
    hosted schema, so ordering mistakes surface as RepositoryError.
    """

    def __init__(self):
        self.trips: Dict[str, Dict[str, Any]] = {}
        self.days: Dict[str, Dict[str, Any]] = {}
        self.items: Dict[str, Dict[str, Any]] = {}

    async def save_trip(self, trip: Trip) -> Trip:
        self.trips[trip.id] = trip.to_row()
        return trip

    async def get_trip(self, trip_id: str) -> Trip:
        if trip_id not in self.trips:
            raise KeyError("Trip not found")
        return Trip.from_row(self.trips[trip_id])

    async def get_trip_by_slug(self, slug: str) -> Trip:
        for row in self.trips.values():
            if row.get("public_slug") == slug:
                return Trip.from_row(row)
        raise KeyError("Trip not found")

    async def update_trip(self, trip_id: str, fields: Dict[str, Any]) -> Trip:
        if trip_id not in self.trips:
            raise KeyError("Trip not found")
        self.trips[trip_id].update(fields)
        return Trip.from_row(self.trips[trip_id])

    async def list_day_ids(self, trip_id: str) -> List[str]:
        return [row["id"] for row in self.days.values() if row["trip_id"] == trip_id]

    async def delete_items_for_days(self, day_ids: List[str]) -> None:
        targets = set(day_ids)
        for item_id in [key for key, row in self.items.items() if row["day_id"] in targets]:
            del self.items[item_id]

    async def delete_days_for_trip(self, trip_id: str) -> None:
        doomed = {key for key, row in self.days.items() if row["trip_id"] == trip_id}
        if any(row["day_id"] in doomed for row in self.items.values()):
            raise RepositoryError("update or delete on itinerary_days violates foreign key itinerary_items_day_id_fkey")
        for day_id in doomed:
            del self.days[day_id]

    async def insert_day(self, day: ItineraryDay) -> ItineraryDay:
        if day.trip_id not in self.trips:
            raise RepositoryError("insert on itinerary_days violates foreign key itinerary_days_trip_id_fkey")
        for row in self.days.values():
            if row["trip_id"] == day.trip_id and row["day_number"] == day.day_number:
                raise RepositoryError(f"duplicate day_number {day.day_number} for trip {day.trip_id}")
        row = day.to_row()
        row["id"] = str(uuid4())
        row["created_at"] = datetime.utcnow().isoformat()
        self.days[row["id"]] = row
        return ItineraryDay.from_row(row)

    async def insert_items(self, items: List[ItineraryItem]) -> None:
        rows = [item.to_row() for item in items]
        # whole batch is rejected, matching a single multi-row insert
        for row in rows:
            if row["day_id"] not in self.days:
                raise RepositoryError("insert on itinerary_items violates foreign key itinerary_items_day_id_fkey")
        for row in rows:
            row["id"] = str(uuid4())
            self.items[row["id"]] = row

    async def list_days(self, trip_id: str) -> List[ItineraryDay]:
        rows = [row for row in self.days.values() if row["trip_id"] == trip_id]
        return [ItineraryDay.from_row(row) for row in sorted(rows, key=lambda r: r["day_number"])]

    async def list_items(self, day_ids: List[str]) -> List[ItineraryItem]:
        targets = set(day_ids)
        rows = [row for row in self.items.values() if row["day_id"] in targets]
        rows.sort(key=lambda r: r["sort_order"] if r.get("sort_order") is not None else 0)
        return [ItineraryItem.from_row(row) for row in rows]


class SupabaseTripRepository(TripRepository):
    """
    Supabase-backed repository over the trips / itinerary_days / itinerary_items tables.
    The client is synchronous, so every call runs in a worker thread.
    """

    def __init__(self, client):
        if client is None:
            raise ValueError("Supabase client is required for SupabaseTripRepository")
        self.client = client

    async def _execute(self, build_query) -> List[Dict[str, Any]]:
        try:
            response = await asyncio.to_thread(lambda: build_query().execute())
        except PostgrestAPIError as exc:
            raise RepositoryError(exc.message or str(exc)) from exc
        return getattr(response, "data", None) or []

    async def save_trip(self, trip: Trip) -> Trip:
        rows = await self._execute(lambda: self.client.table(TRIPS_TABLE).insert(trip.to_row()))
        return Trip.from_row(rows[0]) if rows else trip

    async def get_trip(self, trip_id: str) -> Trip:
        rows = await self._execute(lambda: self.client.table(TRIPS_TABLE).select("*").eq("id", trip_id))
        if not rows:
            raise KeyError("Trip not found")
        return Trip.from_row(rows[0])

    async def get_trip_by_slug(self, slug: str) -> Trip:
        rows = await self._execute(lambda: self.client.table(TRIPS_TABLE).select("*").eq("public_slug", slug))
        if not rows:
            raise KeyError("Trip not found")
        return Trip.from_row(rows[0])

    async def update_trip(self, trip_id: str, fields: Dict[str, Any]) -> Trip:
        rows = await self._execute(lambda: self.client.table(TRIPS_TABLE).update(fields).eq("id", trip_id))
        if not rows:
            raise KeyError("Trip not found")
        return Trip.from_row(rows[0])

    async def list_day_ids(self, trip_id: str) -> List[str]:
        rows = await self._execute(lambda: self.client.table(DAYS_TABLE).select("id").eq("trip_id", trip_id))
        return [row["id"] for row in rows]

    async def delete_items_for_days(self, day_ids: List[str]) -> None:
        await self._execute(lambda: self.client.table(ITEMS_TABLE).delete().in_("day_id", day_ids))

    async def delete_days_for_trip(self, trip_id: str) -> None:
        await self._execute(lambda: self.client.table(DAYS_TABLE).delete().eq("trip_id", trip_id))

    async def insert_day(self, day: ItineraryDay) -> ItineraryDay:
        rows = await self._execute(lambda: self.client.table(DAYS_TABLE).insert(day.to_row()))
        if not rows:
            raise RepositoryError(f"insert of day {day.day_number} returned no row")
        return ItineraryDay.from_row(rows[0])

    async def insert_items(self, items: List[ItineraryItem]) -> None:
        payload = [item.to_row() for item in items]
        await self._execute(lambda: self.client.table(ITEMS_TABLE).insert(payload))

    async def list_days(self, trip_id: str) -> List[ItineraryDay]:
        rows = await self._execute(
            lambda: self.client.table(DAYS_TABLE).select("*").eq("trip_id", trip_id).order("day_number")
        )
        return [ItineraryDay.from_row(row) for row in rows]

    async def list_items(self, day_ids: List[str]) -> List[ItineraryItem]:
        if not day_ids:
            return []
        rows = await self._execute(
            lambda: self.client.table(ITEMS_TABLE).select("*").in_("day_id", day_ids).order("sort_order")
        )
        return [ItineraryItem.from_row(row) for row in rows]
