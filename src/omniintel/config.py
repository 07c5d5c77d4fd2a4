"""Configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    scan_model_id: str = "gemini-2.5-flash"
    writer_model_id: str = "gemini-3-pro-preview"
    image_model_id: str = "imagen-4.0-generate-001"
    writer_thinking_budget: int = 2048
    topic_count: int = 10
    archive_prefix: str = "OmniIntel"
    output_dir: str = "output"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            gemini_api_key=os.environ.get("GEMINI_API_KEY", ""),
            scan_model_id=os.environ.get("GEMINI_SCAN_MODEL_ID", "gemini-2.5-flash"),
            writer_model_id=os.environ.get("GEMINI_WRITER_MODEL_ID", "gemini-3-pro-preview"),
            image_model_id=os.environ.get("GEMINI_IMAGE_MODEL_ID", "imagen-4.0-generate-001"),
            writer_thinking_budget=int(os.environ.get("WRITER_THINKING_BUDGET", "2048")),
            topic_count=int(os.environ.get("TOPIC_COUNT", "10")),
            archive_prefix=os.environ.get("ARCHIVE_PREFIX", "OmniIntel"),
            output_dir=os.environ.get("OUTPUT_DIR", "output"),
        )
