"""Thin wrapper around the Google GenAI client: text, grounded text and images, with retry."""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, TypeVar

from google import genai
from google.genai import types
from pydantic import BaseModel

from omniintel.config import Settings
from omniintel.models import GroundingSource

logger = logging.getLogger(__name__)
T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")

_MAX_RETRIES = 5
_INITIAL_BACKOFF = 5.0
_CALL_DELAY = 2.0  # seconds between calls to stay within free-tier RPM


class GeminiClient:
    """Shared by the scanner and the report writer.

    Safe to use from the two worker threads of a single report generation:
    call spacing and the call counter are guarded by a lock.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._client = genai.Client(api_key=settings.gemini_api_key)
        self._model_id = settings.scan_model_id
        self.call_count = 0
        self._last_call_time: float = 0.0
        self._lock = threading.Lock()

    def generate(
        self,
        prompt: str,
        *,
        model_id: str | None = None,
        response_model: type[T] | None = None,
        use_search_grounding: bool = False,
        temperature: float = 0.2,
    ) -> str | T:
        """Generate content, optionally with structured output or search grounding.

        If response_model is provided AND use_search_grounding is False, uses native
        structured output. Otherwise falls back to manual JSON parsing.
        """
        use_native_schema = response_model is not None and not use_search_grounding
        config = _build_config(
            temperature=temperature,
            use_search_grounding=use_search_grounding,
            response_model=response_model if use_native_schema else None,
        )

        response = self._call_with_retry(
            lambda: self._client.models.generate_content(
                model=model_id or self._model_id,
                contents=prompt,
                config=config,
            )
        )
        response_text = response.text or ""

        if response_model is None:
            return response_text

        if use_native_schema:
            return response_model.model_validate_json(response_text)

        # Fallback: parse JSON from free-text response
        return parse_model_from_text(response_text, response_model)

    def generate_with_sources(
        self,
        prompt: str,
        *,
        model_id: str | None = None,
        thinking_budget: int | None = None,
        temperature: float = 0.7,
    ) -> tuple[str, list[GroundingSource]]:
        """Search-grounded generation returning the text and the web grounding chunks."""
        config = _build_config(
            temperature=temperature,
            use_search_grounding=True,
            thinking_budget=thinking_budget,
        )
        response = self._call_with_retry(
            lambda: self._client.models.generate_content(
                model=model_id or self._model_id,
                contents=prompt,
                config=config,
            )
        )
        return response.text or "", extract_grounding_sources(response)

    def generate_image(
        self,
        prompt: str,
        *,
        model_id: str,
        aspect_ratio: str = "16:9",
    ) -> bytes | None:
        """Generate one image and return its raw bytes, or None if the model returned none."""
        config = types.GenerateImagesConfig(number_of_images=1, aspect_ratio=aspect_ratio)
        response = self._call_with_retry(
            lambda: self._client.models.generate_images(
                model=model_id,
                prompt=prompt,
                config=config,
            )
        )
        images = response.generated_images or []
        if not images or images[0].image is None:
            return None
        return images[0].image.image_bytes or None

    def _wait_for_slot(self) -> None:
        # Rate-limit: wait between calls to avoid hitting RPM quota
        with self._lock:
            now = time.monotonic()
            wait = 0.0
            if self._last_call_time > 0:
                wait = max(0.0, self._last_call_time + _CALL_DELAY - now)
            self._last_call_time = now + wait
            self.call_count += 1
        if wait:
            time.sleep(wait)

    def _call_with_retry(self, call: Callable[[], R]) -> R:
        backoff = _INITIAL_BACKOFF
        last_exc: Exception | None = None

        for attempt in range(_MAX_RETRIES):
            self._wait_for_slot()
            try:
                return call()
            except Exception as exc:
                last_exc = exc
                is_rate_limit = "429" in str(exc) or "RESOURCE_EXHAUSTED" in str(exc)

                # Check if quota is hard-zero (limit: 0), no point retrying
                if is_rate_limit and "limit: 0" in str(exc):
                    logger.warning("Quota is zero, not retrying: %s", exc)
                    break

                if attempt < _MAX_RETRIES - 1:
                    wait = min(backoff, 15.0) if is_rate_limit else backoff
                    logger.warning(
                        "Gemini call failed (attempt %d/%d), retrying in %.0fs: %s",
                        attempt + 1,
                        _MAX_RETRIES,
                        wait,
                        exc,
                    )
                    time.sleep(wait)
                    backoff *= 2

        raise RuntimeError("Gemini call failed after retries") from last_exc


def _build_config(
    *,
    temperature: float,
    use_search_grounding: bool = False,
    response_model: type[BaseModel] | None = None,
    thinking_budget: int | None = None,
) -> types.GenerateContentConfig:
    config_kwargs: dict[str, Any] = {"temperature": temperature}
    if use_search_grounding:
        config_kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
    if response_model is not None:
        config_kwargs["response_mime_type"] = "application/json"
        config_kwargs["response_schema"] = response_model
    if thinking_budget is not None:
        config_kwargs["thinking_config"] = types.ThinkingConfig(thinking_budget=thinking_budget)
    return types.GenerateContentConfig(**config_kwargs)


def extract_grounding_sources(response: Any) -> list[GroundingSource]:
    """Collect web grounding chunks of the first candidate, in response order."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources: list[GroundingSource] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None or not getattr(web, "uri", None):
            continue
        sources.append(GroundingSource(title=web.title or "", uri=web.uri))
    return sources


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the stripped text if unfenced."""
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned

    json_lines = []
    in_fence = False
    for line in cleaned.split("\n"):
        if line.strip().startswith("```") and not in_fence:
            in_fence = True
            continue
        if line.strip() == "```" and in_fence:
            break
        if in_fence:
            json_lines.append(line)
    return "\n".join(json_lines)


def parse_model_from_text(text: str, model: type[T]) -> T:
    """Extract JSON from text that may contain markdown fences or surrounding prose."""
    cleaned = strip_code_fences(text)

    try:
        return model.model_validate_json(cleaned)
    except Exception:
        # Last resort: take the outermost array or object, whichever opens first
        brackets = [("[", "]"), ("{", "}")]
        brackets.sort(key=lambda pair: _find_or_end(cleaned, pair[0]))
        for opening, closing in brackets:
            start = cleaned.find(opening)
            end = cleaned.rfind(closing)
            if start != -1 and end > start:
                return model.model_validate(json.loads(cleaned[start : end + 1]))
        raise


def _find_or_end(text: str, char: str) -> int:
    index = text.find(char)
    return len(text) if index == -1 else index
