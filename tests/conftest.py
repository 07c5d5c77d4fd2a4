"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar

import pytest
from pydantic import BaseModel

from omniintel.config import Settings
from omniintel.gemini import parse_model_from_text
from omniintel.models import GroundingSource, Report, Topic

T = TypeVar("T", bound=BaseModel)

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDRfake-image-data"


class MockGeminiClient:
    """A mock Gemini client that returns pre-configured responses.

    Responses that are exceptions are raised instead of returned.
    """

    def __init__(self) -> None:
        self.call_count = 0
        self.prompts: list[str] = []
        self._responses: list[Any] = []
        self._response_index = 0
        self.grounded_responses: list[Any] = []
        self.image_responses: list[Any] = []

    def set_responses(self, responses: list[Any]) -> None:
        self._responses = responses
        self._response_index = 0

    def generate(
        self,
        prompt: str,
        *,
        model_id: str | None = None,
        response_model: type[T] | None = None,
        use_search_grounding: bool = False,
        temperature: float = 0.2,
    ) -> str | T:
        self.call_count += 1
        self.prompts.append(prompt)

        if self._response_index < len(self._responses):
            resp = self._responses[self._response_index]
            self._response_index += 1
            if isinstance(resp, Exception):
                raise resp
            if response_model is not None and isinstance(resp, str):
                return parse_model_from_text(resp, response_model)
            if response_model is not None and isinstance(resp, (dict, list)):
                return response_model.model_validate(resp)
            return resp

        if response_model is not None:
            return response_model.model_validate([])
        return ""

    def generate_with_sources(
        self,
        prompt: str,
        *,
        model_id: str | None = None,
        thinking_budget: int | None = None,
        temperature: float = 0.7,
    ) -> tuple[str, list[GroundingSource]]:
        self.call_count += 1
        self.prompts.append(prompt)
        resp = self.grounded_responses.pop(0) if self.grounded_responses else ("", [])
        if isinstance(resp, Exception):
            raise resp
        return resp

    def generate_image(
        self,
        prompt: str,
        *,
        model_id: str,
        aspect_ratio: str = "16:9",
    ) -> bytes | None:
        self.call_count += 1
        resp = self.image_responses.pop(0) if self.image_responses else None
        if isinstance(resp, Exception):
            raise resp
        return resp


@pytest.fixture
def mock_client() -> MockGeminiClient:
    return MockGeminiClient()


@pytest.fixture
def sample_settings(tmp_path: Path) -> Settings:
    return Settings(
        gemini_api_key="test-key",
        scan_model_id="test-scan-model",
        writer_model_id="test-writer-model",
        image_model_id="test-image-model",
        topic_count=3,
        output_dir=str(tmp_path / "output"),
    )


@pytest.fixture
def sample_topics() -> list[Topic]:
    return [
        Topic(
            id="id-1",
            title="Open-Weight Model Tops Leaderboard",
            summary="A new open-weight model beats closed models on reasoning benchmarks.",
            platform_tags=["Hugging Face", "Reddit"],
            impact_score=92,
            category="Model Release",
        ),
        Topic(
            id="id-2",
            title="EU Finalizes AI Act Guidance",
            summary="Regulators publish compliance guidance for general-purpose models.",
            platform_tags=["BBC"],
            impact_score=75,
            category="Policy/Regulation",
        ),
        Topic(
            id="id-3",
            title="Agents Ship in Office Suite",
            summary="A major vendor rolls out autonomous agents to enterprise users.",
            platform_tags=["TechCrunch"],
            impact_score=64,
            category="Model Release",
        ),
    ]


@pytest.fixture
def sample_report() -> Report:
    return Report(
        markdown="# Report\n\n## The Signal\nSomething happened.",
        sources=[GroundingSource(title="Example", uri="https://example.com/a")],
        cover_image=PNG_BYTES,
    )


def _make_report(topic: Topic, with_image: bool = False) -> Report:
    return Report(
        markdown=f"# {topic.title}\n\n{topic.summary}",
        sources=[GroundingSource(title=topic.title, uri=f"https://example.com/{topic.id}")],
        cover_image=PNG_BYTES if with_image else None,
    )


@pytest.fixture
def make_report():
    return _make_report
