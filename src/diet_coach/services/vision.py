"""Food image analysis using a vision-capable LLM."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from diet_coach.domain.vision import FoodAnalysis
from diet_coach.services.parsing import default_food_analysis, parse_food_analysis
from diet_coach.services.prompts import FOOD_ANALYSIS_SCHEMA, build_food_analysis_prompt

_logger = logging.getLogger(__name__)


class VisionClient(Protocol):
    """Interface for LLM image classification."""

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
        """Return structured analysis data for one image."""


@dataclass
class FoodAnalysisService:
    """Service that prepares analysis prompts and validates results."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(
        self, image_bytes: bytes, hint: str | None = None
    ) -> FoodAnalysis:
        """Classify a food image. Failures yield a neutral non-food analysis."""
        if not image_bytes:
            return default_food_analysis()
        data_url = _to_data_url(image_bytes)
        try:
            raw = await self.client.analyze(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                image_data_url=data_url,
                schema=FOOD_ANALYSIS_SCHEMA,
                prompt=build_food_analysis_prompt(hint),
            )
        except Exception:
            _logger.exception("Food analysis call failed")
            return default_food_analysis()
        return parse_food_analysis(raw)


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
