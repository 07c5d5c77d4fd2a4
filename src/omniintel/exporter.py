"""Batch export – resolve every topic's report and pack them into one ZIP archive."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Sequence

from omniintel.archive import ArchiveBuilder, prepend_cover_image
from omniintel.cache import ContentCache
from omniintel.errors import ExportCancelledError, GenerationError, OmniIntelError
from omniintel.models import Report, Topic
from omniintel.progress import ProgressReporter
from omniintel.sanitize import sanitize_name

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Uncategorized"


def archive_root_label(prefix: str, day: date) -> str:
    return f"{prefix}_Reports_{day.isoformat()}"


def archive_filename(prefix: str, day: date) -> str:
    return f"{prefix}_Intelligence_Pack_{day.isoformat()}.zip"


def export_archive(
    topics: Sequence[Topic],
    cache: ContentCache,
    generate: Callable[[Topic], Report],
    *,
    progress: ProgressReporter | None = None,
    today: date | None = None,
    archive_prefix: str = "OmniIntel",
    should_cancel: Callable[[], bool] | None = None,
) -> bytes | None:
    """Build the archive for ``topics`` and return the ZIP bytes.

    Topics are processed one at a time in input order. Cached reports are
    reused; missing ones are generated and cached. Any generation or
    packaging failure aborts the whole export, and no bytes are returned.
    Returns None when there is nothing to export.
    """
    if not topics:
        logger.info("No topics to export")
        return None

    progress = progress or ProgressReporter()
    today = today or date.today()
    total = len(topics)

    try:
        builder = ArchiveBuilder()
        root = builder.create_root(archive_root_label(archive_prefix, today))
        progress.update(0, total, "initializing archive")

        for index, topic in enumerate(topics):
            if should_cancel is not None and should_cancel():
                raise ExportCancelledError(f"Export cancelled after {index}/{total} topics")

            progress.update(index + 1, total, f"generating: {topic.title}")
            report = _resolve_report(topic, cache, generate)

            folder = builder.add_category_folder(
                root, sanitize_name(topic.category, fallback=DEFAULT_CATEGORY)
            )
            base_name = folder.reserve_name(sanitize_name(topic.title, fallback=topic.id))

            markdown = report.markdown
            if report.cover_image:
                image_name = f"{base_name}.png"
                builder.add_binary_file(folder, image_name, report.cover_image)
                markdown = prepend_cover_image(markdown, image_name)
            builder.add_text_file(folder, f"{base_name}.md", markdown)

        progress.update(total, total, "packaging archive")
        payload = builder.serialize()
    except OmniIntelError as exc:
        logger.debug("Archive export aborted: %s", exc)
        raise
    finally:
        progress.clear()

    logger.info("Exported %d topics (%d bytes)", total, len(payload))
    return payload


def _resolve_report(
    topic: Topic,
    cache: ContentCache,
    generate: Callable[[Topic], Report],
) -> Report:
    cached = cache.get(topic.id)
    if cached is not None:
        logger.debug("Cache hit for %s", topic.id)
        return cached

    try:
        report = generate(topic)
    except OmniIntelError:
        raise
    except Exception as exc:
        raise GenerationError(f"Report generation failed for {topic.title!r}") from exc

    cache.put(topic.id, report)
    return report


def save_archive(payload: bytes, output_dir: str | Path, file_name: str) -> Path:
    """Write the archive bytes to ``output_dir/file_name`` and return the path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / file_name
    path.write_bytes(payload)
    logger.info("Wrote archive to %s", path)
    return path
