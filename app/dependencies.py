from functools import lru_cache
from typing import Optional

from fastapi import Depends

from app.ai.openai_client import ChatGateway
from app.core.config import DataStoreConfig, GeneratorConfig, Settings, get_settings, settings
from app.domain.locks import TripGenerationGuard
from app.domain.repositories import (
    InMemoryTripRepository,
    SupabaseTripRepository,
    TripRepository,
)
from app.domain.services.itinerary_service import ItineraryService
from app.external.supabase_client import get_supabase_client

_memory_repo = InMemoryTripRepository()
_guard = TripGenerationGuard()


def get_generator_config(app_settings: Settings = Depends(get_settings)) -> GeneratorConfig:
    return app_settings.generator_config()


def get_data_store_config(app_settings: Settings = Depends(get_settings)) -> Optional[DataStoreConfig]:
    return app_settings.data_store_config()


@lru_cache(maxsize=4)
def _gateway_for(config: GeneratorConfig) -> ChatGateway:
    return ChatGateway(config)


def get_chat_gateway(config: GeneratorConfig = Depends(get_generator_config)) -> ChatGateway:
    return _gateway_for(config)


def get_trip_repo(store: Optional[DataStoreConfig] = Depends(get_data_store_config)) -> TripRepository:
    if store is None:
        return _memory_repo
    return SupabaseTripRepository(get_supabase_client(store))


def get_generation_guard() -> TripGenerationGuard:
    return _guard


def get_itinerary_service(
    repo: TripRepository = Depends(get_trip_repo),
    gateway: ChatGateway = Depends(get_chat_gateway),
    guard: TripGenerationGuard = Depends(get_generation_guard),
) -> ItineraryService:
    return ItineraryService(repo=repo, gateway=gateway, guard=guard)


def get_trip_reader(
    repo: TripRepository = Depends(get_trip_repo),
    guard: TripGenerationGuard = Depends(get_generation_guard),
) -> ItineraryService:
    return ItineraryService(repo=repo, guard=guard)


__all__ = [
    "get_generator_config",
    "get_data_store_config",
    "get_chat_gateway",
    "get_trip_repo",
    "get_generation_guard",
    "get_itinerary_service",
    "get_trip_reader",
    "settings",
]
