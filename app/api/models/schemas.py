from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

TimeSlot = Literal["morning", "afternoon", "evening"]
TransportMode = Literal["walk", "bus", "cab", "auto"]

TIME_SLOTS: tuple[str, ...] = ("morning", "afternoon", "evening")
BUDGET_CATEGORIES: tuple[str, ...] = ("accommodation", "food", "transport", "activities", "miscellaneous")

# ---------- Generate request/response ----------


class GenerateItineraryRequest(BaseModel):
    tripId: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    numDays: int = Field(ge=1)
    budgetMin: float = Field(ge=0)
    budgetMax: float = Field(ge=0)
    interests: List[str] = Field(default_factory=list)
    travelStyle: Optional[str] = None
    travelPace: Optional[str] = None
    startDate: Optional[date] = None

    @field_validator("interests", mode="before")
    @classmethod
    def _null_interests(cls, value: Any) -> Any:
        return [] if value is None else value


class GenerateItineraryResponse(BaseModel):
    success: bool = True


# ---------- Model output contract ----------


class Coordinates(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class GeneratedActivity(BaseModel):
    """One activity as returned by the model, with storage defaults applied."""

    model_config = ConfigDict(extra="ignore")

    place_name: str = Field(min_length=1)
    description: Optional[str] = None
    time_slot: TimeSlot = "morning"
    start_time: Optional[str] = None
    duration_minutes: int = Field(default=60, gt=0)
    estimated_cost: float = Field(default=0, ge=0)
    coordinates: Optional[Coordinates] = None
    tips: Optional[str] = None
    is_backup: bool = False
    transport_mode: Optional[TransportMode] = None
    transport_duration_minutes: Optional[int] = Field(default=None, ge=0)
    transport_cost: float = Field(default=0, ge=0)
    sort_order: Optional[int] = None

    @field_validator(
        "time_slot", "transport_mode", "duration_minutes", "estimated_cost", "transport_cost", "is_backup", mode="before"
    )
    @classmethod
    def _blank_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        # labels are case-insensitive; "" and null both fall back to the field default
        if isinstance(value, str) and info.field_name in ("time_slot", "transport_mode"):
            value = value.strip().lower() or None
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class GeneratedDay(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day_number: int = Field(ge=1)
    summary: Optional[str] = None
    activities: List[GeneratedActivity] = Field(default_factory=list)

    @field_validator("activities", mode="before")
    @classmethod
    def _null_activities(cls, value: Any) -> Any:
        return [] if value is None else value


class BudgetBreakdown(BaseModel):
    accommodation: float = Field(ge=0)
    food: float = Field(ge=0)
    transport: float = Field(ge=0)
    activities: float = Field(ge=0)
    miscellaneous: float = Field(ge=0)

    def total(self) -> float:
        return sum(getattr(self, name) for name in BUDGET_CATEGORIES)


class LocalTips(BaseModel):
    tips: List[str] = Field(default_factory=list)
    scams: List[str] = Field(default_factory=list)


class GeneratedItinerary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    days: List[GeneratedDay] = Field(min_length=1)
    budget_breakdown: Optional[BudgetBreakdown] = None
    local_tips: Optional[LocalTips] = None

    @model_validator(mode="after")
    def _unique_day_numbers(self) -> "GeneratedItinerary":
        seen: set[int] = set()
        for day in self.days:
            if day.day_number in seen:
                raise ValueError(f"duplicate day_number {day.day_number}")
            seen.add(day.day_number)
        return self


# ---------- Itinerary view ----------


class ItineraryItemView(BaseModel):
    id: str
    placeName: str
    description: Optional[str] = None
    timeSlot: str
    startTime: Optional[str] = None
    durationMinutes: Optional[int] = None
    estimatedCost: Optional[float] = None
    coordinates: Optional[Coordinates] = None
    tips: Optional[str] = None
    isBackup: bool = False
    transportMode: Optional[str] = None
    transportDurationMinutes: Optional[int] = None
    transportCost: Optional[float] = None
    sortOrder: Optional[int] = None


class ItineraryDayView(BaseModel):
    id: str
    dayNumber: int
    dayDate: Optional[date] = None
    summary: Optional[str] = None
    slots: Dict[str, List[ItineraryItemView]]
    backups: List[ItineraryItemView]


class TripSummary(BaseModel):
    id: str
    destination: str
    numDays: int
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    budgetMin: Optional[float] = None
    budgetMax: Optional[float] = None
    currency: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    travelStyle: Optional[str] = None
    travelPace: Optional[str] = None
    status: Optional[str] = None
    budgetBreakdown: Optional[Dict[str, float]] = None
    localTips: Optional[LocalTips] = None
    publicSlug: Optional[str] = None


class TripItineraryView(BaseModel):
    trip: TripSummary
    days: List[ItineraryDayView]


class ShareTripResponse(BaseModel):
    publicSlug: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Dict[str, Any]] = None
