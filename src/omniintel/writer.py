"""Report generation – grounded markdown brief plus a best-effort cover image."""

from __future__ import annotations

import logging
import re
from concurrent.futures import Future, ThreadPoolExecutor

from omniintel.config import Settings
from omniintel.errors import GenerationError
from omniintel.gemini import GeminiClient
from omniintel.models import Report, Topic, dedupe_sources

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"^[-=*_]{3,}$")


def _build_report_prompt(topic: Topic) -> str:
    return f"""You are OmniIntel's chief technical analyst: calm, objective, geeky.
Write an in-depth technical brief on: "{topic.title} - {topic.summary}"

Core requirements:
1. Length: 300-500 words.
2. MUST include a markdown table comparing parameters, benchmarks or the historical evolution.
3. MUST include a "Guru View" section:
   - Quote or simulate the perspective of top figures (Andrej Karpathy, Yann LeCun,
     François Chollet, Jeff Dean, Demis Hassabis or core Hugging Face engineers).
   - Focus on de-hyping: architectural limits, the real cost of compute, or criticism
     of AGI hype.
   - Views must be hard-core and touch concrete points such as Transformer
     architecture, token efficiency, memory bottlenecks or data contamination.

Structure:
# {topic.title}

## The Signal
[concise facts, no emotion]

## Mechanics & Data
[technical explanation + markdown data table]

## The Guru View
> **[Expert name]**: [core opinion, sharp and objective]
>
> **[Another expert / developer]**: [supporting or opposing view]

## The Landscape
[OmniIntel's technical forecast for the next 6 months]

Formatting rules:
- Never use horizontal rules (----).
- Keep the layout compact."""


def _build_image_prompt(topic: Topic) -> str:
    return (
        f"Editorial illustration for a tech news article about: {topic.title}. "
        "Futuristic, data-driven, high tech HUD elements, isometric view, "
        "cybernetic colors (cyan, neon purple), clean composition."
    )


def strip_separator_lines(markdown: str) -> str:
    """Remove horizontal-rule lines, keeping table rows."""
    lines = markdown.split("\n")
    kept = [
        line
        for line in lines
        if not (_SEPARATOR_RE.match(line.strip()) and "|" not in line)
    ]
    return "\n".join(kept)


class ReportWriter:
    def __init__(self, client: GeminiClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    def generate(self, topic: Topic) -> Report:
        """Generate the report for one topic.

        Text and cover image are requested concurrently. A failed text call
        raises GenerationError; a failed image call only drops the image.
        """
        logger.info("Generating report for %s: %s", topic.id, topic.title)

        with ThreadPoolExecutor(max_workers=2) as pool:
            text_future = pool.submit(
                self._client.generate_with_sources,
                _build_report_prompt(topic),
                model_id=self._settings.writer_model_id,
                thinking_budget=self._settings.writer_thinking_budget,
            )
            image_future = pool.submit(
                self._client.generate_image,
                _build_image_prompt(topic),
                model_id=self._settings.image_model_id,
            )
            cover_image = self._image_or_none(image_future, topic)

            try:
                markdown, sources = text_future.result()
            except Exception as exc:
                logger.exception("Report generation failed for %s", topic.id)
                raise GenerationError(f"Report generation failed for {topic.title!r}") from exc

        markdown = strip_separator_lines(markdown)
        if not markdown.strip():
            raise GenerationError(f"Report generation returned no text for {topic.title!r}")

        return Report(
            markdown=markdown,
            sources=dedupe_sources(sources),
            cover_image=cover_image,
        )

    @staticmethod
    def _image_or_none(future: Future[bytes | None], topic: Topic) -> bytes | None:
        try:
            return future.result()
        except Exception:
            logger.warning("Image generation failed for %s, skipping image", topic.id, exc_info=True)
            return None
