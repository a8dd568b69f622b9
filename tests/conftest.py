import asyncio
import copy
import json
from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient

from app.ai.openai_client import ChatGateway
from app.api.models.schemas import GenerateItineraryRequest
from app.core.config import GeneratorConfig, Settings, get_settings
from app.dependencies import get_chat_gateway, get_generation_guard, get_trip_repo
from app.domain.locks import TripGenerationGuard
from app.domain.models import Trip
from app.domain.repositories import InMemoryTripRepository
from app.main import app

TRIP_ID = "trip-goa"

CONFIG = GeneratorConfig(
    llm_api_key="test-key",
    llm_base_url="https://gateway.test/v1",
    llm_model="google/gemini-3-flash-preview",
    llm_timeout_seconds=5.0,
)


def _activity(name, slot, sort_order=None, is_backup=False):
    activity = {
        "place_name": name,
        "description": f"Visit {name}",
        "time_slot": slot,
        "start_time": "09:00 AM",
        "duration_minutes": 90,
        "estimated_cost": 500,
        "coordinates": {"lat": 15.49, "lng": 73.82},
        "tips": "Go early",
        "is_backup": is_backup,
        "transport_mode": "cab",
        "transport_duration_minutes": 20,
        "transport_cost": 150,
    }
    if sort_order is not None:
        activity["sort_order"] = sort_order
    return activity


def build_itinerary(num_days=3, prefix="Goa"):
    days = []
    for day in range(1, num_days + 1):
        days.append(
            {
                "day_number": day,
                "summary": f"{prefix} day {day}",
                "activities": [
                    _activity(f"{prefix} Beach {day}", "morning", 1),
                    _activity(f"{prefix} Fort {day}", "afternoon", 2),
                    _activity(f"{prefix} Market {day}", "evening", 3),
                    _activity(f"{prefix} Museum {day}", "afternoon", 4, is_backup=True),
                ],
            }
        )
    return {
        "days": days,
        "budget_breakdown": {
            "accommodation": 9000,
            "food": 5000,
            "transport": 3000,
            "activities": 4000,
            "miscellaneous": 1000,
        },
        "local_tips": {
            "tips": ["Carry sunscreen", "Rent a scooter"],
            "scams": ["Overpriced taxi rides"],
        },
    }


def completion(content, status_code=200):
    return httpx.Response(
        status_code,
        json={
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 1760000000,
            "model": CONFIG.llm_model,
            "choices": [
                {
                    "index": 0,
                    "finish_reason": "stop",
                    "message": {"role": "assistant", "content": content},
                }
            ],
        },
    )


class ScriptedGateway:
    """Queue of replies served to a real ChatGateway through httpx.MockTransport."""

    def __init__(self):
        self.replies = []
        self.requests = []

    def reply_json(self, payload):
        self.replies.append(completion(json.dumps(payload)))

    def reply_text(self, content):
        self.replies.append(completion(content))

    def reply_status(self, status_code, body=None):
        self.replies.append(httpx.Response(status_code, json=body or {"error": {"message": "upstream said no"}}))

    def handler(self, request):
        self.requests.append(request)
        if not self.replies:
            raise AssertionError("unexpected gateway call")
        return self.replies.pop(0)

    def gateway(self):
        transport = httpx.MockTransport(self.handler)
        return ChatGateway(CONFIG, http_client=httpx.AsyncClient(transport=transport))


@pytest.fixture
def itinerary_payload():
    return copy.deepcopy(build_itinerary())


@pytest.fixture
def scripted():
    return ScriptedGateway()


@pytest.fixture
def repo():
    repository = InMemoryTripRepository()
    asyncio.run(
        repository.save_trip(
            Trip(
                id=TRIP_ID,
                user_id="user-1",
                destination="Goa",
                num_days=3,
                start_date=date(2026, 12, 1),
                end_date=date(2026, 12, 3),
                budget_min=5000,
                budget_max=30000,
                interests=["beaches", "food"],
                travel_style="friends",
                travel_pace="relaxed",
            )
        )
    )
    return repository


@pytest.fixture
def generate_request():
    return GenerateItineraryRequest(
        tripId=TRIP_ID,
        destination="Goa",
        numDays=3,
        budgetMin=5000,
        budgetMax=30000,
        interests=["beaches", "food"],
        travelStyle="friends",
        travelPace="relaxed",
        startDate=date(2026, 12, 1),
    )


@pytest.fixture
def request_body(generate_request):
    return generate_request.model_dump(mode="json")


@pytest.fixture
def client(repo, scripted):
    guard = TripGenerationGuard()
    app.dependency_overrides[get_trip_repo] = lambda: repo
    app.dependency_overrides[get_chat_gateway] = scripted.gateway
    app.dependency_overrides[get_generation_guard] = lambda: guard
    app.dependency_overrides[get_settings] = lambda: Settings(llm_api_key="test-key")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_itinerary():
    return build_itinerary
