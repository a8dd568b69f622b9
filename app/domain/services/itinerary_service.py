from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional
from uuid import uuid4

from app.ai.itinerary_graph import generate_itinerary, graph_for
from app.ai.openai_client import ChatGateway
from app.ai.prompts import DEFAULT_CURRENCY
from app.api.models.schemas import (
    GenerateItineraryRequest,
    GeneratedActivity,
    GeneratedItinerary,
    TripItineraryView,
)
from app.core.errors import NotFoundError
from app.domain.locks import TripGenerationGuard
from app.domain.models import STATUS_GENERATED, ItineraryDay, ItineraryItem, Trip
from app.domain.repositories import RepositoryError, TripRepository

logger = logging.getLogger(__name__)


def _item_from_activity(day_id: str, index: int, activity: GeneratedActivity) -> ItineraryItem:
    # sort_order falls back to list position; ordering then depends on the model
    # keeping its own list order
    return ItineraryItem(
        day_id=day_id,
        place_name=activity.place_name,
        description=activity.description,
        time_slot=activity.time_slot,
        start_time=activity.start_time,
        duration_minutes=activity.duration_minutes,
        estimated_cost=activity.estimated_cost,
        coordinates=activity.coordinates.model_dump() if activity.coordinates else None,
        tips=activity.tips,
        is_backup=activity.is_backup,
        transport_mode=activity.transport_mode,
        transport_duration_minutes=activity.transport_duration_minutes,
        transport_cost=activity.transport_cost,
        sort_order=activity.sort_order if activity.sort_order is not None else index,
    )


class ItineraryService:
    def __init__(self, repo: TripRepository, gateway: Optional[ChatGateway] = None, guard: Optional[TripGenerationGuard] = None):
        self.repo = repo
        self.gateway = gateway
        self.guard = guard or TripGenerationGuard()
        self._graph = graph_for(gateway) if gateway is not None else None

    async def generate(self, request: GenerateItineraryRequest) -> None:
        """
        Generate and persist a fresh itinerary for ``request.tripId``.

        Existing days and items are replaced wholesale. Per-day and per-item insert
        failures are logged and skipped; the trip is still marked generated. Any other
        failure propagates and leaves the trip status untouched.
        """
        if self._graph is None:
            raise RuntimeError("ItineraryService was built without a chat gateway")
        trip = await self._get_trip(request.tripId)

        async with self.guard.hold(trip.id):
            itinerary = await generate_itinerary(self._graph, request, trip.currency or DEFAULT_CURRENCY)
            start_date = request.startDate or trip.start_date
            written = await self._replace_itinerary(trip.id, itinerary, start_date)
            await self.repo.update_trip(
                trip.id,
                {
                    "budget_breakdown": itinerary.budget_breakdown.model_dump() if itinerary.budget_breakdown else None,
                    "local_tips": itinerary.local_tips.model_dump() if itinerary.local_tips else None,
                    "status": STATUS_GENERATED,
                },
            )
        logger.info("Generated itinerary for trip %s: %s/%s days written", trip.id, written, len(itinerary.days))

    async def _replace_itinerary(self, trip_id: str, itinerary: GeneratedItinerary, start_date: Optional[date]) -> int:
        # items first: itinerary_items.day_id references itinerary_days
        existing_day_ids = await self.repo.list_day_ids(trip_id)
        if existing_day_ids:
            await self.repo.delete_items_for_days(existing_day_ids)
            await self.repo.delete_days_for_trip(trip_id)

        written = 0
        for day in itinerary.days:
            try:
                day_row = await self.repo.insert_day(
                    ItineraryDay(
                        trip_id=trip_id,
                        day_number=day.day_number,
                        summary=day.summary,
                        day_date=start_date + timedelta(days=day.day_number - 1) if start_date else None,
                    )
                )
            except RepositoryError as exc:
                logger.error("Day insert error (trip %s, day %s): %s", trip_id, day.day_number, exc)
                continue
            written += 1

            if not day.activities:
                continue
            items = [_item_from_activity(day_row.id, idx, activity) for idx, activity in enumerate(day.activities)]
            try:
                await self.repo.insert_items(items)
            except RepositoryError as exc:
                logger.error("Items insert error (trip %s, day %s): %s", trip_id, day.day_number, exc)
        return written

    async def get_itinerary_view(self, trip_ref: str) -> TripItineraryView:
        """Look up by trip id, then by public slug, and group the stored rows for display."""
        try:
            trip = await self.repo.get_trip(trip_ref)
        except KeyError:
            try:
                trip = await self.repo.get_trip_by_slug(trip_ref)
            except KeyError:
                raise NotFoundError("Trip not found")

        days = await self.repo.list_days(trip.id)
        items = await self.repo.list_items([day.id for day in days if day.id])
        items_by_day: Dict[str, List[ItineraryItem]] = {}
        for item in items:
            items_by_day.setdefault(item.day_id, []).append(item)
        return TripItineraryView(
            trip=trip.to_summary(),
            days=[day.to_view(items_by_day.get(day.id or "", [])) for day in days],
        )

    async def share_trip(self, trip_id: str) -> str:
        trip = await self._get_trip(trip_id)
        if trip.public_slug:
            return trip.public_slug
        slug = uuid4().hex[:8]
        await self.repo.update_trip(trip.id, {"public_slug": slug})
        return slug

    async def _get_trip(self, trip_id: str) -> Trip:
        try:
            return await self.repo.get_trip(trip_id)
        except KeyError:
            raise NotFoundError("Trip not found")
