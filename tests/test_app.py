"""Integration test for the scan-and-export entry point."""

import io
import zipfile
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from omniintel.app import main, run_export
from omniintel.config import Settings
from omniintel.errors import DiscoveryError
from omniintel.models import GroundingSource, Report


def test_run_export_end_to_end(sample_settings: Settings, sample_topics):
    reports = {
        t.id: Report(
            markdown=f"# {t.title}",
            sources=[GroundingSource(title="src", uri="https://example.com")],
            cover_image=b"\x89PNG" if t.id == "id-1" else None,
        )
        for t in sample_topics
    }

    with (
        patch("omniintel.app.GeminiClient") as MockGemini,
        patch("omniintel.app.TopicScanner") as MockScanner,
        patch("omniintel.app.ReportWriter") as MockWriter,
    ):
        MockGemini.return_value = MagicMock(call_count=3)
        MockScanner.return_value.discover.return_value = sample_topics
        MockWriter.return_value.generate.side_effect = lambda topic: reports[topic.id]

        path = run_export(sample_settings)

    today = date.today().isoformat()
    assert path == Path(sample_settings.output_dir) / f"OmniIntel_Intelligence_Pack_{today}.zip"
    with zipfile.ZipFile(io.BytesIO(path.read_bytes())) as zf:
        names = zf.namelist()
    root = f"OmniIntel_Reports_{today}"
    assert f"{root}/Model Release/Open-Weight Model Tops Leaderboard.png" in names
    assert len([n for n in names if n.endswith(".md")]) == 3
    assert MockWriter.return_value.generate.call_count == 3


def test_run_export_scan_failure(sample_settings: Settings):
    with (
        patch("omniintel.app.GeminiClient"),
        patch("omniintel.app.TopicScanner") as MockScanner,
        patch("omniintel.app.ReportWriter"),
    ):
        MockScanner.return_value.discover.side_effect = DiscoveryError("quota")
        assert run_export(sample_settings) is None

    assert not Path(sample_settings.output_dir).exists()


def test_main_requires_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert "GEMINI_API_KEY" in str(excinfo.value)
