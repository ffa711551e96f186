"""Daily ledger: today's meals and profile for one identity."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import TypeAdapter, ValidationError

from diet_coach.domain.meals import MealRecord, NutritionTotals
from diet_coach.domain.profile import DietGoal, Profile
from diet_coach.services.totals import compute_totals

_logger = logging.getLogger(__name__)

_MEALS_ADAPTER = TypeAdapter(list[MealRecord])

LedgerObserver = Callable[["Ledger"], None]


class KeyValueStore(Protocol):
    """Persistence interface for string blobs keyed by name."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""


def default_profile(identity: str, today: str) -> Profile:
    """Build the profile used for an identity with nothing stored."""
    return Profile(
        name=identity,
        goal=DietGoal.MAINTENANCE,
        daily_calorie_target=2400,
        daily_protein_target=150,
        age=30,
        weight_kg=75,
        height_cm=180,
        sex="male",
        activity_level=1.375,
        last_active_date=today,
    )


def reconcile_day(
    profile: Profile, stored_meals: list[MealRecord], today: str
) -> list[MealRecord]:
    """Apply the day-boundary reset and return today's meals.

    Updates ``profile.last_active_date`` in place. A profile that has never
    recorded a day keeps its meals.
    """
    if profile.last_active_date is None:
        profile.last_active_date = today
        return stored_meals
    if profile.last_active_date != today:
        profile.last_active_date = today
        return []
    return stored_meals


@dataclass
class Ledger:
    """Mutable profile and meal list for the active identity."""

    identity: str
    profile: Profile
    meals: list[MealRecord] = field(default_factory=list)
    _observers: list[LedgerObserver] = field(default_factory=list, repr=False)

    @property
    def totals(self) -> NutritionTotals:
        """Totals folded from the current meals."""
        return compute_totals(self.meals)

    def subscribe(self, observer: LedgerObserver) -> None:
        """Register a callback run after every ledger change."""
        self._observers.append(observer)

    def reconcile(self, today: str) -> bool:
        """Reset the ledger if ``today`` is a new calendar day."""
        previous_date = self.profile.last_active_date
        previous_count = len(self.meals)
        self.meals = reconcile_day(self.profile, self.meals, today)
        changed = (
            previous_date != self.profile.last_active_date
            or previous_count != len(self.meals)
        )
        if changed:
            _logger.info(
                "Ledger day rollover: identity=%s from=%s to=%s cleared=%s",
                self.identity,
                previous_date,
                today,
                previous_count - len(self.meals),
            )
            self._notify()
        return changed

    def add_meal(self, record: MealRecord) -> None:
        """Append a meal to today's list."""
        self.meals = [*self.meals, record]
        self._notify()

    def remove_meal(self, meal_id: str) -> bool:
        """Remove a meal by id. Returns False when the id is absent."""
        remaining = [meal for meal in self.meals if meal.id != meal_id]
        if len(remaining) == len(self.meals):
            return False
        self.meals = remaining
        self._notify()
        return True

    def update_profile(self, changes: dict[str, object]) -> None:
        """Apply settings edits to the profile. The identity is not editable."""
        updates = {key: value for key, value in changes.items() if key != "name"}
        self.profile = Profile.model_validate(
            {**self.profile.model_dump(), **updates}
        )
        self._notify()

    def _notify(self) -> None:
        for observer in self._observers:
            observer(self)


def _system_now(tz: tzinfo) -> datetime:
    return datetime.now(tz=tz)


@dataclass
class LedgerService:
    """Loads and saves ledgers in a key-value store."""

    store: KeyValueStore
    key_prefix: str = "diet_pro"
    default_timezone: str = "UTC"
    clock: Callable[[tzinfo], datetime] = _system_now

    def load(self, identity: str) -> Ledger:
        """Load the ledger for an identity and apply the day-boundary reset.

        Never raises: missing or malformed stored data falls back to defaults
        and failed writes are logged while the in-memory ledger is kept.
        """
        profile = self._read_profile(identity)
        today = self.today(profile)
        if profile is None:
            profile = default_profile(identity, today)
        meals = self._read_meals(identity)
        ledger = Ledger(identity=identity, profile=profile, meals=meals)
        ledger.subscribe(self._persist)
        ledger.reconcile(today)
        return ledger

    def save(self, identity: str, profile: Profile, meals: list[MealRecord]) -> None:
        """Write the profile and meals under identity-namespaced keys."""
        self.store.set(self.profile_key(identity), profile.model_dump_json())
        self.store.set(
            self.meals_key(identity), _MEALS_ADAPTER.dump_json(meals).decode("utf-8")
        )

    def today(self, profile: Profile | None = None) -> str:
        """Return today's calendar-day string in the profile's timezone."""
        return self.now(profile).date().isoformat()

    def now(self, profile: Profile | None = None) -> datetime:
        """Return the current time in the profile's timezone."""
        timezone_name = (profile.timezone if profile else None) or self.default_timezone
        return self.clock(_resolve_timezone(timezone_name))

    def profile_key(self, identity: str) -> str:
        return f"{self.key_prefix}_{identity}_profile"

    def meals_key(self, identity: str) -> str:
        return f"{self.key_prefix}_{identity}_meals"

    def _persist(self, ledger: Ledger) -> None:
        try:
            self.save(ledger.identity, ledger.profile, ledger.meals)
        except Exception:
            _logger.exception(
                "Failed to persist ledger", extra={"identity": ledger.identity}
            )

    def _read_profile(self, identity: str) -> Profile | None:
        raw = self._read(self.profile_key(identity))
        if raw is None:
            return None
        try:
            return Profile.model_validate_json(raw)
        except ValidationError:
            _logger.warning(
                "Discarding malformed stored profile: identity=%s", identity
            )
            return None

    def _read_meals(self, identity: str) -> list[MealRecord]:
        raw = self._read(self.meals_key(identity))
        if raw is None:
            return []
        try:
            return _MEALS_ADAPTER.validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding malformed stored meals: identity=%s", identity)
            return []

    def _read(self, key: str) -> str | None:
        try:
            return self.store.get(key)
        except Exception:
            _logger.exception("Failed to read from store", extra={"key": key})
            return None


def _resolve_timezone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        _logger.warning("Unknown timezone %s, using UTC", name)
        return UTC
