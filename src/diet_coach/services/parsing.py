"""Decoders for replies from the reasoning service.

Every public function here is total: malformed or missing fields fall back to
neutral defaults instead of raising.
"""

import json
import logging
import re
from collections.abc import Callable, Iterable

from pydantic import ValidationError

from diet_coach.domain.coach import AgentDecision, DecisionStatus, Reference
from diet_coach.domain.meals import NutritionInfo
from diet_coach.domain.vision import FoodAnalysis

MAX_REFERENCES = 3
DEFAULT_REASONING = "Maintaining baseline metabolic efficiency."
DEFAULT_SUGGESTION = "Proceed with standard nutritional schedule."

_STATUS_PATTERN = re.compile(r"STATUS:[\s*]*(\w+)", re.IGNORECASE)
_REASONING_PATTERN = re.compile(r"REASONING:[ \t*]*([^\n]+)", re.IGNORECASE)
_ACTION_PATTERN = re.compile(r"ACTION:[ \t*]*([^\n]+)", re.IGNORECASE)
_CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_DECISION_KEYS = frozenset({"status", "reasoning", "suggestion", "action"})

_FOOD_KEY_ALIASES = {"foodName": "food_name", "isFood": "is_food"}

_logger = logging.getLogger(__name__)

DecisionDecoder = Callable[[str], AgentDecision | None]


def default_decision(references: list[Reference] | None = None) -> AgentDecision:
    """Neutral decision used whenever a reply cannot be decoded."""
    return AgentDecision(
        status=DecisionStatus.OPTIMAL,
        reasoning=DEFAULT_REASONING,
        suggestion=DEFAULT_SUGGESTION,
        references=list(references or [])[:MAX_REFERENCES],
    )


def default_food_analysis() -> FoodAnalysis:
    """Neutral analysis used when the image could not be classified."""
    return FoodAnalysis(
        food_name="Unknown item",
        is_food=False,
        confidence=0.0,
        nutrition=NutritionInfo(),
    )


def parse_decision(
    text: str | None, references: Iterable[object] | None = None
) -> AgentDecision:
    """Decode a decision, trying structured JSON before labeled text."""
    cited = parse_references(references)
    raw = (text or "").strip()
    decoders: tuple[DecisionDecoder, ...] = (
        decode_structured_decision,
        decode_labeled_decision,
    )
    for decoder in decoders:
        decision = decoder(raw)
        if decision is not None:
            merged = cited or decision.references
            return decision.model_copy(update={"references": merged[:MAX_REFERENCES]})
    _logger.info("Reply had no decodable decision; using default")
    return default_decision(cited)


def decode_structured_decision(text: str) -> AgentDecision | None:
    """Decode a JSON reply with status, reasoning and suggestion fields.

    Returns None unless at least one decision key is present; each missing or
    mistyped field takes its default.
    """
    payload = _load_json(text)
    if not isinstance(payload, dict) or not _DECISION_KEYS & payload.keys():
        return None
    if "suggestion" not in payload and "action" in payload:
        payload = {**payload, "suggestion": payload["action"]}
    references = payload.get("references")
    if not isinstance(references, list):
        references = None
    return AgentDecision(
        status=_parse_status(_text_field(payload, "status")),
        reasoning=_text_field(payload, "reasoning") or DEFAULT_REASONING,
        suggestion=_text_field(payload, "suggestion") or DEFAULT_SUGGESTION,
        references=parse_references(references),
    )


def decode_labeled_decision(text: str) -> AgentDecision | None:
    """Decode ``STATUS:``/``REASONING:``/``ACTION:`` labeled free text.

    Returns None when none of the labels are present; missing labels take
    their default values.
    """
    status = _STATUS_PATTERN.search(text)
    reasoning = _REASONING_PATTERN.search(text)
    action = _ACTION_PATTERN.search(text)
    if status is None and reasoning is None and action is None:
        return None
    return AgentDecision(
        status=_parse_status(status.group(1) if status else None),
        reasoning=_clean(reasoning.group(1) if reasoning else "") or DEFAULT_REASONING,
        suggestion=_clean(action.group(1) if action else "") or DEFAULT_SUGGESTION,
    )


def parse_references(references: Iterable[object] | None) -> list[Reference]:
    """Validate reference links, dropping invalid ones, capped at three."""
    parsed: list[Reference] = []
    for item in references or []:
        if isinstance(item, Reference):
            parsed.append(item)
        elif isinstance(item, dict):
            try:
                parsed.append(Reference.model_validate(item))
            except ValidationError:
                continue
        if len(parsed) == MAX_REFERENCES:
            break
    return parsed


def parse_food_analysis(payload: object) -> FoodAnalysis:
    """Validate a food analysis payload, falling back to a non-food result."""
    data = _load_json(payload) if isinstance(payload, str) else payload
    if not isinstance(data, dict):
        _logger.warning("Food analysis reply was not an object")
        return default_food_analysis()
    normalized = {_FOOD_KEY_ALIASES.get(key, key): value for key, value in data.items()}
    try:
        return FoodAnalysis.model_validate(normalized)
    except ValidationError as exc:
        _logger.warning("Food analysis reply failed validation: %s", exc)
        return default_food_analysis()


def _parse_status(raw: str | None) -> DecisionStatus:
    if not raw:
        return DecisionStatus.OPTIMAL
    try:
        return DecisionStatus(raw.strip().upper())
    except ValueError:
        return DecisionStatus.OPTIMAL


def _load_json(text: str) -> object | None:
    stripped = text.strip()
    fenced = _CODE_FENCE_PATTERN.search(stripped)
    if fenced:
        stripped = fenced.group(1)
    if not stripped:
        return None
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        return None


def _clean(value: str) -> str:
    return value.strip().strip("*").strip()


def _text_field(payload: dict[str, object], key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""
