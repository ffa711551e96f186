"""Tests for the food analysis service."""

import asyncio

from diet_coach.services.vision import FoodAnalysisService, _to_data_url
from tests.conftest import FakeVisionClient


def _service(client: FakeVisionClient) -> FoodAnalysisService:
    return FoodAnalysisService(
        client=client,
        model="gpt-5.2",
        reasoning_effort="low",
        store=False,
    )


def test_analyze_returns_structured_analysis() -> None:
    client = FakeVisionClient()

    result = asyncio.run(_service(client).analyze(b"image-bytes", hint="with rice"))

    assert result.is_food is True
    assert result.food_name == "Pan Seared Salmon Fillet"
    assert result.nutrition.protein == 38
    assert client.prompts[0].endswith("with rice")
    assert client.data_urls[0].startswith("data:image/jpeg;base64,")


def test_analyze_falls_back_when_client_fails() -> None:
    client = FakeVisionClient(error=RuntimeError("OpenAI returned an empty response"))

    result = asyncio.run(_service(client).analyze(b"image-bytes"))

    assert result.is_food is False
    assert result.food_name == "Unknown item"


def test_analyze_falls_back_on_malformed_payload() -> None:
    client = FakeVisionClient(payload={"food_name": "mystery"})

    result = asyncio.run(_service(client).analyze(b"image-bytes"))

    assert result.is_food is False


def test_analyze_skips_call_for_empty_upload() -> None:
    client = FakeVisionClient()

    result = asyncio.run(_service(client).analyze(b""))

    assert result.is_food is False
    assert client.prompts == []


def test_to_data_url_uses_png_header() -> None:
    data = b"\x89PNG\r\n\x1a\n" + b"rest"
    url = _to_data_url(data)

    assert url.startswith("data:image/png;base64,")


def test_to_data_url_detects_webp() -> None:
    url = _to_data_url(b"RIFF\x00\x00\x00\x00WEBPVP8 ")

    assert url.startswith("data:image/webp;base64,")


def test_to_data_url_defaults_to_jpeg() -> None:
    data = b"unknown"
    url = _to_data_url(data)

    assert url.startswith("data:image/jpeg;base64,")
