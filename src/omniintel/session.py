"""Interactive session – an explicit state machine around scan, read and export."""

from __future__ import annotations

import enum
import logging
from datetime import date
from pathlib import Path
from typing import Callable

from omniintel.cache import ContentCache
from omniintel.errors import InvalidTransitionError, OmniIntelError
from omniintel.exporter import archive_filename, export_archive, save_archive
from omniintel.models import Report, Topic
from omniintel.progress import ProgressReporter

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    LISTING = "listing"
    GENERATING = "generating"
    READING = "reading"


class SessionEvent(enum.Enum):
    SCAN_START = "scan_start"
    SCAN_SUCCESS = "scan_success"
    SCAN_FAILURE = "scan_failure"
    TOPIC_SELECT = "topic_select"
    GENERATION_SUCCESS = "generation_success"
    GENERATION_FAILURE = "generation_failure"
    MODAL_CLOSE = "modal_close"


TRANSITIONS: dict[tuple[SessionState, SessionEvent], SessionState] = {
    (SessionState.IDLE, SessionEvent.SCAN_START): SessionState.SCANNING,
    (SessionState.LISTING, SessionEvent.SCAN_START): SessionState.SCANNING,
    (SessionState.SCANNING, SessionEvent.SCAN_SUCCESS): SessionState.LISTING,
    (SessionState.SCANNING, SessionEvent.SCAN_FAILURE): SessionState.IDLE,
    (SessionState.LISTING, SessionEvent.TOPIC_SELECT): SessionState.GENERATING,
    (SessionState.GENERATING, SessionEvent.GENERATION_SUCCESS): SessionState.READING,
    (SessionState.GENERATING, SessionEvent.GENERATION_FAILURE): SessionState.LISTING,
    (SessionState.READING, SessionEvent.MODAL_CLOSE): SessionState.LISTING,
}

SCAN_FAILED_MESSAGE = "Intelligence scan failed: {reason}. Check the API key or retry later."
REPORT_FAILED_MESSAGE = "Could not generate the report for this topic."
EXPORT_FAILED_MESSAGE = "Archive export failed, see the log for details."


class Session:
    """One browsing session: the topic list, the report cache and the reader/export flows.

    ``discover`` and ``generate`` are the two remote collaborators, usually
    ``TopicScanner.discover`` and ``ReportWriter.generate``.
    """

    def __init__(
        self,
        discover: Callable[[], list[Topic]],
        generate: Callable[[Topic], Report],
        *,
        archive_prefix: str = "OmniIntel",
        output_dir: str | Path = "output",
    ) -> None:
        self._discover = discover
        self._generate = generate
        self._archive_prefix = archive_prefix
        self._output_dir = Path(output_dir)

        self.state = SessionState.IDLE
        self.topics: list[Topic] = []
        self.cache = ContentCache()
        self.progress = ProgressReporter()
        self.selected_topic: Topic | None = None
        self.report: Report | None = None
        self.error: str | None = None
        self.is_exporting = False

    def dispatch(self, event: SessionEvent) -> SessionState:
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            raise InvalidTransitionError(self.state, event)
        logger.debug("Session %s --%s--> %s", self.state.value, event.value, target.value)
        self.state = target
        return target

    def scan(self) -> list[Topic]:
        self.dispatch(SessionEvent.SCAN_START)
        self.error = None
        try:
            topics = self._discover()
        except Exception as exc:
            logger.exception("Scan failed")
            self.error = SCAN_FAILED_MESSAGE.format(reason=exc)
            self.dispatch(SessionEvent.SCAN_FAILURE)
            return []

        self.topics = list(topics)
        self.cache.clear()
        self.dispatch(SessionEvent.SCAN_SUCCESS)
        logger.info("Session listing %d topics", len(self.topics))
        return self.topics

    def select_topic(self, topic: Topic) -> Report | None:
        self.dispatch(SessionEvent.TOPIC_SELECT)
        self.selected_topic = topic
        self.report = None

        report = self.cache.get(topic.id)
        if report is None:
            try:
                report = self._generate(topic)
            except Exception:
                logger.exception("Report generation failed for %s", topic.id)
                self.error = REPORT_FAILED_MESSAGE
                self.selected_topic = None
                self.dispatch(SessionEvent.GENERATION_FAILURE)
                return None
            self.cache.put(topic.id, report)

        self.report = report
        self.dispatch(SessionEvent.GENERATION_SUCCESS)
        return report

    def close_report(self) -> None:
        self.dispatch(SessionEvent.MODAL_CLOSE)
        self.selected_topic = None
        self.report = None

    def export(
        self,
        *,
        today: date | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ) -> Path | None:
        """Export every listed topic to a ZIP file. Returns its path, or None."""
        if self.state is not SessionState.LISTING:
            raise InvalidTransitionError(self.state, "export")
        if self.is_exporting:
            logger.warning("Export already in progress")
            return None

        today = today or date.today()
        self.is_exporting = True
        try:
            payload = export_archive(
                self.topics,
                self.cache,
                self._generate,
                progress=self.progress,
                today=today,
                archive_prefix=self._archive_prefix,
                should_cancel=should_cancel,
            )
            if payload is None:
                return None
            return save_archive(
                payload,
                self._output_dir,
                archive_filename(self._archive_prefix, today),
            )
        except (OmniIntelError, OSError):
            logger.exception("Batch export failed")
            self.error = EXPORT_FAILED_MESSAGE
            return None
        finally:
            self.is_exporting = False
