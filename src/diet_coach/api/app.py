"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import UTC, datetime
from uuid import uuid4
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import FastAPI, HTTPException, Request

from diet_coach.api.models import MealCreate, ProfileUpdate, QuestionRequest
from diet_coach.app_logging import configure_logging
from diet_coach.containers import AppContainer
from diet_coach.domain.meals import MealRecord
from diet_coach.services.calibration import calibrate_targets
from diet_coach.services.ledger import Ledger
from diet_coach.services.totals import compute_pace, compute_progress


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/users/{identity}/ledger")
    async def get_ledger(identity: str, request: Request) -> dict[str, object]:
        """Return today's ledger, applying the day-boundary reset."""
        state_container: AppContainer = request.app.state.container
        ledger = await _open_ledger(state_container, identity)
        return _snapshot(state_container, ledger)

    @app.post("/users/{identity}/analysis")
    async def analyze_food(
        identity: str, request: Request, hint: str | None = None
    ) -> dict[str, object]:
        """Classify an uploaded food image sent as the raw request body."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        analysis = await state_container.food_analysis_service.analyze(
            image_bytes, hint=hint
        )
        logger.info(
            "Food analysis: identity=%s food=%s is_food=%s",
            identity,
            analysis.food_name,
            analysis.is_food,
        )
        return analysis.model_dump()

    @app.post("/users/{identity}/meals")
    async def add_meal(
        identity: str, meal: MealCreate, request: Request
    ) -> dict[str, object]:
        """Log an accepted analysis as a meal and refresh advice."""
        state_container: AppContainer = request.app.state.container
        ledger = await _open_ledger(state_container, identity)
        timestamp = meal.timestamp
        if timestamp is None:
            timestamp = int(datetime.now(tz=UTC).timestamp() * 1000)
        ledger.add_meal(
            MealRecord(
                id=uuid4().hex,
                timestamp=timestamp,
                food_name=meal.food_name,
                nutrition=meal.nutrition,
                image=meal.image,
            )
        )
        await state_container.coach_service.refresh(ledger)
        return _snapshot(state_container, ledger)

    @app.delete("/users/{identity}/meals/{meal_id}")
    async def remove_meal(
        identity: str, meal_id: str, request: Request
    ) -> dict[str, object]:
        """Remove a meal by id. Unknown ids leave the ledger untouched."""
        state_container: AppContainer = request.app.state.container
        ledger = await _open_ledger(state_container, identity)
        if ledger.remove_meal(meal_id):
            await state_container.coach_service.refresh(ledger)
        return _snapshot(state_container, ledger)

    @app.patch("/users/{identity}/profile")
    async def update_profile(
        identity: str, update: ProfileUpdate, request: Request
    ) -> dict[str, object]:
        """Apply settings edits and refresh advice."""
        state_container: AppContainer = request.app.state.container
        if update.timezone is not None and not _is_valid_timezone(update.timezone):
            raise HTTPException(status_code=422, detail="Unknown timezone")
        ledger = await _open_ledger(state_container, identity)
        ledger.update_profile(update.changes())
        await state_container.coach_service.refresh(ledger)
        return _snapshot(state_container, ledger)

    @app.post("/users/{identity}/profile/calibrate")
    async def calibrate_profile(identity: str, request: Request) -> dict[str, object]:
        """Recompute daily targets from the profile's biometrics."""
        state_container: AppContainer = request.app.state.container
        ledger = await _open_ledger(state_container, identity)
        targets = calibrate_targets(ledger.profile)
        ledger.update_profile(
            {
                "daily_calorie_target": targets.daily_calorie_target,
                "daily_protein_target": targets.daily_protein_target,
            }
        )
        await state_container.coach_service.refresh(ledger)
        snapshot = _snapshot(state_container, ledger)
        snapshot["calibration"] = asdict(targets)
        return snapshot

    @app.post("/users/{identity}/advice")
    async def refresh_advice(identity: str, request: Request) -> dict[str, object]:
        """Regenerate advice for today's ledger."""
        state_container: AppContainer = request.app.state.container
        ledger = await _open_ledger(state_container, identity)
        await state_container.coach_service.refresh(ledger)
        return _snapshot(state_container, ledger)

    @app.post("/users/{identity}/ask")
    async def ask_agent(
        identity: str, question: QuestionRequest, request: Request
    ) -> dict[str, str]:
        """Answer a free-form question about today's diet."""
        state_container: AppContainer = request.app.state.container
        ledger = await _open_ledger(state_container, identity)
        answer = await state_container.coach_service.ask(ledger, question.question)
        return {"answer": answer}

    return app


async def _open_ledger(state_container: AppContainer, identity: str) -> Ledger:
    """Load the ledger; an empty ledger also drops any stale decision."""
    ledger = state_container.ledger_service.load(identity)
    if not ledger.meals:
        await state_container.coach_service.refresh(ledger)
    return ledger


def _snapshot(state_container: AppContainer, ledger: Ledger) -> dict[str, object]:
    """Serialize the ledger with its derived totals and latest advice."""
    totals = ledger.totals
    now = state_container.ledger_service.now(ledger.profile)
    decision = state_container.coach_service.latest(ledger.identity)
    return {
        "identity": ledger.identity,
        "profile": ledger.profile.model_dump(mode="json"),
        "meals": [meal.model_dump(mode="json") for meal in ledger.meals],
        "totals": asdict(totals),
        "progress": asdict(compute_progress(totals, ledger.profile)),
        "pace": asdict(compute_pace(totals, ledger.profile, now)),
        "decision": decision.model_dump(mode="json") if decision else None,
        "thinking": state_container.coach_service.board.is_thinking(ledger.identity),
    }


def _is_valid_timezone(value: str) -> bool:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True
