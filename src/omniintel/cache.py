"""Session-scoped cache of generated reports, keyed by topic id."""

from __future__ import annotations

from omniintel.models import Report


class ContentCache:
    def __init__(self) -> None:
        self._reports: dict[str, Report] = {}

    def get(self, topic_id: str) -> Report | None:
        return self._reports.get(topic_id)

    def put(self, topic_id: str, report: Report) -> None:
        self._reports[topic_id] = report

    def clear(self) -> None:
        """Drop every entry. Called when a new scan replaces the topic list."""
        self._reports.clear()

    def __contains__(self, topic_id: object) -> bool:
        return topic_id in self._reports

    def __len__(self) -> int:
        return len(self._reports)
