from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from app.api.models.schemas import (
    Coordinates,
    ItineraryDayView,
    ItineraryItemView,
    LocalTips,
    TIME_SLOTS,
    TripSummary,
)

STATUS_DRAFT = "draft"
STATUS_GENERATED = "generated"


def _parse_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_dt(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.utcnow()
    if value.endswith("Z"):
        value = value.replace("Z", "+00:00")
    return datetime.fromisoformat(value)


@dataclass
class Trip:
    id: str
    user_id: str
    destination: str
    num_days: int = 1
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    currency: Optional[str] = "INR"
    interests: List[str] = field(default_factory=list)
    travel_style: Optional[str] = None
    travel_pace: Optional[str] = None
    status: Optional[str] = STATUS_DRAFT
    budget_breakdown: Optional[Dict[str, float]] = None
    local_tips: Optional[Dict[str, List[str]]] = None
    public_slug: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        row["start_date"] = self.start_date.isoformat() if self.start_date else None
        row["end_date"] = self.end_date.isoformat() if self.end_date else None
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Trip":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            destination=row["destination"],
            num_days=row.get("num_days") or 1,
            start_date=_parse_date(row.get("start_date")),
            end_date=_parse_date(row.get("end_date")),
            budget_min=row.get("budget_min"),
            budget_max=row.get("budget_max"),
            currency=row.get("currency"),
            interests=list(row.get("interests") or []),
            travel_style=row.get("travel_style"),
            travel_pace=row.get("travel_pace"),
            status=row.get("status"),
            budget_breakdown=row.get("budget_breakdown"),
            local_tips=row.get("local_tips"),
            public_slug=row.get("public_slug"),
        )

    def to_summary(self) -> TripSummary:
        return TripSummary(
            id=self.id,
            destination=self.destination,
            numDays=self.num_days,
            startDate=self.start_date,
            endDate=self.end_date,
            budgetMin=self.budget_min,
            budgetMax=self.budget_max,
            currency=self.currency,
            interests=self.interests,
            travelStyle=self.travel_style,
            travelPace=self.travel_pace,
            status=self.status,
            budgetBreakdown=self.budget_breakdown,
            localTips=LocalTips.model_validate(self.local_tips) if self.local_tips else None,
            publicSlug=self.public_slug,
        )


@dataclass
class ItineraryDay:
    trip_id: str
    day_number: int
    summary: Optional[str] = None
    day_date: Optional[date] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "trip_id": self.trip_id,
            "day_number": self.day_number,
            "summary": self.summary,
            "date": self.day_date.isoformat() if self.day_date else None,
        }
        if self.id:
            row["id"] = self.id
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ItineraryDay":
        return cls(
            id=row["id"],
            trip_id=row["trip_id"],
            day_number=row["day_number"],
            summary=row.get("summary"),
            day_date=_parse_date(row.get("date")),
            created_at=_parse_dt(row.get("created_at")),
        )

    def to_view(self, items: List["ItineraryItem"]) -> ItineraryDayView:
        """Group items by time slot with backups split out, each list in sort order."""
        ordered = sorted(items, key=lambda item: item.sort_order if item.sort_order is not None else 0)
        slots: Dict[str, List[ItineraryItemView]] = {slot: [] for slot in TIME_SLOTS}
        backups: List[ItineraryItemView] = []
        for item in ordered:
            if item.is_backup:
                backups.append(item.to_view())
            else:
                slots.setdefault(item.time_slot, []).append(item.to_view())
        return ItineraryDayView(
            id=self.id or "",
            dayNumber=self.day_number,
            dayDate=self.day_date,
            summary=self.summary,
            slots=slots,
            backups=backups,
        )


@dataclass
class ItineraryItem:
    day_id: str
    place_name: str
    time_slot: str = "morning"
    description: Optional[str] = None
    start_time: Optional[str] = None
    duration_minutes: Optional[int] = 60
    estimated_cost: Optional[float] = 0
    coordinates: Optional[Dict[str, float]] = None
    tips: Optional[str] = None
    is_backup: bool = False
    transport_mode: Optional[str] = None
    transport_duration_minutes: Optional[int] = None
    transport_cost: Optional[float] = 0
    sort_order: Optional[int] = None
    id: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        if not self.id:
            row.pop("id")
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ItineraryItem":
        return cls(
            id=row["id"],
            day_id=row["day_id"],
            place_name=row["place_name"],
            time_slot=row.get("time_slot") or "morning",
            description=row.get("description"),
            start_time=row.get("start_time"),
            duration_minutes=row.get("duration_minutes"),
            estimated_cost=row.get("estimated_cost"),
            coordinates=row.get("coordinates"),
            tips=row.get("tips"),
            is_backup=bool(row.get("is_backup")),
            transport_mode=row.get("transport_mode"),
            transport_duration_minutes=row.get("transport_duration_minutes"),
            transport_cost=row.get("transport_cost"),
            sort_order=row.get("sort_order"),
        )

    def to_view(self) -> ItineraryItemView:
        return ItineraryItemView(
            id=self.id or "",
            placeName=self.place_name,
            description=self.description,
            timeSlot=self.time_slot,
            startTime=self.start_time,
            durationMinutes=self.duration_minutes,
            estimatedCost=self.estimated_cost,
            coordinates=Coordinates.model_validate(self.coordinates) if self.coordinates else None,
            tips=self.tips,
            isBackup=self.is_backup,
            transportMode=self.transport_mode,
            transportDurationMinutes=self.transport_duration_minutes,
            transportCost=self.transport_cost,
            sortOrder=self.sort_order,
        )
