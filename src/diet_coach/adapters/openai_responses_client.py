"""OpenAI Responses API client shared by food analysis and coaching."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from diet_coach.services.coach import CoachClient, CoachReply
from diet_coach.services.vision import VisionClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIResponsesClient(VisionClient, CoachClient):
    """Vision and text generation backed by one AsyncOpenAI session."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIResponsesClient":
        """Create a client with its own HTTP session."""
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Classify a food image using a strict JSON schema output."""
        payload = _base_payload(model, reasoning_effort, store)
        payload["input"] = [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": prompt},
                    {"type": "input_image", "image_url": image_data_url},
                ],
            }
        ]
        payload["text"] = {
            "format": {
                "type": "json_schema",
                "name": "food_analysis",
                "strict": True,
                "schema": schema,
            }
        }

        response = await self.client.responses.create(**payload)
        if not response.output_text:
            raise RuntimeError("OpenAI returned an empty food analysis")
        return json.loads(response.output_text)

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
        """Generate coaching text, optionally grounded with web search."""
        payload = _base_payload(model, reasoning_effort, store)
        payload["instructions"] = instructions
        payload["input"] = prompt
        if web_search:
            payload["tools"] = [{"type": "web_search"}]

        response = await self.client.responses.create(**payload)
        references = _extract_citations(response)
        _logger.debug("Coach reply received: references=%d", len(references))
        return CoachReply(text=response.output_text or "", references=references)

    async def close(self) -> None:
        await self.client.close()


def _base_payload(
    model: str, reasoning_effort: str | None, store: bool
) -> dict[str, object]:
    payload: dict[str, object] = {"model": model, "store": store}
    if reasoning_effort:
        payload["reasoning"] = {"effort": reasoning_effort}
    return payload


def _extract_citations(response: object) -> list[dict[str, str]]:
    """Collect unique url_citation annotations from message output."""
    citations: list[dict[str, str]] = []
    seen: set[str] = set()
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            for annotation in getattr(content, "annotations", None) or []:
                if getattr(annotation, "type", None) != "url_citation":
                    continue
                url = getattr(annotation, "url", None)
                if not url or url in seen:
                    continue
                seen.add(url)
                title = getattr(annotation, "title", None) or url
                citations.append({"title": title, "uri": url})
    return citations
