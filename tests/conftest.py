"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

import pytest

from diet_coach.config import Settings
from diet_coach.containers import AppContainer
from diet_coach.domain.meals import MealRecord, NutritionInfo
from diet_coach.services.coach import CoachClient, CoachReply, CoachService
from diet_coach.services.ledger import KeyValueStore, LedgerService
from diet_coach.services.vision import FoodAnalysisService, VisionClient

FIXED_NOW = datetime(2024, 3, 14, 13, 30)


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    values: dict[str, str] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)
    fail_reads: bool = False
    fail_writes: bool = False

    def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise ConnectionError("store unavailable")
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise ConnectionError("store unavailable for writes")
        self.writes.append(key)
        self.values[key] = value


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "food_name": "Pan Seared Salmon Fillet",
            "is_food": True,
            "confidence": 0.91,
            "nutrition": {"calories": 420, "protein": 38, "carbs": 2, "fat": 28},
        }
    )
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)
    data_urls: list[str] = field(default_factory=list)

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        self.data_urls.append(image_data_url)
        if self.error:
            raise self.error
        return self.payload


@dataclass
class FakeCoachClient(CoachClient):
    """Fake coach client that records calls and returns a fixed reply."""

    text: str = (
        "STATUS: WARNING\n"
        "REASONING: Protein is lagging behind the calorie pace.\n"
        "ACTION: Add a 200g Greek yogurt with berries this afternoon."
    )
    references: list[dict[str, str]] = field(default_factory=list)
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        web_search: bool,
    ) -> CoachReply:
        self.calls.append(
            {"instructions": instructions, "prompt": prompt, "web_search": web_search}
        )
        if self.error:
            raise self.error
        return CoachReply(text=self.text, references=list(self.references))


def fixed_clock(now: datetime) -> Callable[[tzinfo], datetime]:
    """Return a clock that always reports ``now`` in the requested timezone."""

    def clock(tz: tzinfo) -> datetime:
        return now.replace(tzinfo=tz)

    return clock


def make_meal(
    meal_id: str, calories: float, protein: float, carbs: float = 0, fat: float = 0
) -> MealRecord:
    return MealRecord(
        id=meal_id,
        timestamp=1710423000000,
        food_name=f"meal-{meal_id}",
        nutrition=NutritionInfo(
            calories=calories, protein=protein, carbs=carbs, fat=fat
        ),
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(openai_api_key="openai-key", data_dir=tmp_path)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def coach_client() -> FakeCoachClient:
    return FakeCoachClient()


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def ledger_service(store: InMemoryKeyValueStore) -> LedgerService:
    return LedgerService(store=store, clock=fixed_clock(FIXED_NOW))


@pytest.fixture
def container(
    settings: Settings,
    ledger_service: LedgerService,
    coach_client: FakeCoachClient,
    vision_client: FakeVisionClient,
) -> AppContainer:
    food_analysis_service = FoodAnalysisService(
        client=vision_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )
    coach_service = CoachService(
        client=coach_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ledger_service=ledger_service,
        food_analysis_service=food_analysis_service,
        coach_service=coach_service,
        close_resources=close_resources,
    )
