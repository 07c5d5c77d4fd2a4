"""Entry point – scan today's topics and export them as an offline archive."""

from __future__ import annotations

import logging
from pathlib import Path

from omniintel.config import Settings
from omniintel.gemini import GeminiClient
from omniintel.models import ExportProgress
from omniintel.scanner import TopicScanner
from omniintel.session import Session
from omniintel.writer import ReportWriter

logger = logging.getLogger(__name__)


def _log_progress(progress: ExportProgress | None) -> None:
    if progress is None:
        logger.info("Export finished")
        return
    logger.info("[%d/%d] %s", progress.current, progress.total, progress.label)


def run_export(settings: Settings) -> Path | None:
    """Run one scan followed by a full export. Returns the archive path, or None."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    client = GeminiClient(settings)
    scanner = TopicScanner(client, settings)
    writer = ReportWriter(client, settings)
    session = Session(
        scanner.discover,
        writer.generate,
        archive_prefix=settings.archive_prefix,
        output_dir=settings.output_dir,
    )
    session.progress.subscribe(_log_progress)

    logger.info("=== Scan ===")
    topics = session.scan()
    if not topics:
        logger.warning(session.error or "Scan returned no topics")
        return None

    logger.info("=== Export ===")
    path = session.export()
    if path is None:
        logger.error(session.error or "Nothing exported")
    logger.info("Gemini calls: %d", client.call_count)
    return path


def main() -> None:
    """CLI entry point."""
    settings = Settings.from_env()
    if not settings.gemini_api_key:
        raise SystemExit("GEMINI_API_KEY environment variable is required")
    if run_export(settings) is None:
        raise SystemExit(1)
