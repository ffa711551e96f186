"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from diet_coach.adapters.file_store import FileKeyValueStore
from diet_coach.adapters.openai_responses_client import OpenAIResponsesClient
from diet_coach.adapters.supabase_store import SupabaseKeyValueStore
from diet_coach.config import Settings, parse_store_backend
from diet_coach.services.coach import CoachService
from diet_coach.services.ledger import KeyValueStore, LedgerService
from diet_coach.services.vision import FoodAnalysisService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger_service: LedgerService
    food_analysis_service: FoodAnalysisService
    coach_service: CoachService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueStore:
    """Create the key-value store selected by settings."""
    if parse_store_backend(settings.store_backend) == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required for the "
                "supabase store backend"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client)
    return FileKeyValueStore(settings.data_dir)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    ledger_service = LedgerService(
        store=build_store(resolved_settings),
        key_prefix=resolved_settings.store_key_prefix,
        default_timezone=resolved_settings.default_timezone,
    )
    openai_client = OpenAIResponsesClient.create(resolved_settings.openai_api_key)
    food_analysis_service = FoodAnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    coach_service = CoachService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        web_search=resolved_settings.openai_web_search,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        ledger_service=ledger_service,
        food_analysis_service=food_analysis_service,
        coach_service=coach_service,
        close_resources=close_resources,
    )
