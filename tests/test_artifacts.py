"""Tests for artifact persistence and dashboard loading."""

from __future__ import annotations

from datetime import date
import json

import pytest

from helpers import DISPLAY_DATE, RUN_DATE
from invest_briefing.defaults import DEFAULT_STOCKS, DEFAULT_THEMES, sample_news
from invest_briefing.models import SchemaError
from invest_briefing.reporting.artifacts import (
    latest_artifact,
    load_analysis,
    load_dashboard_data,
    write_artifacts,
)


class TestWriteArtifacts:
    def test_writes_dated_files(self, tmp_path, sample_analysis_value) -> None:
        json_path, html_path = write_artifacts(sample_analysis_value, "<html></html>", tmp_path / "out", RUN_DATE)

        assert json_path.name == "analysis-2026-10-19.json"
        assert html_path.name == "analysis-2026-10-19.html"
        assert html_path.read_text(encoding="utf-8") == "<html></html>"

    def test_json_is_pretty_printed_utf8(self, tmp_path, sample_analysis_value) -> None:
        json_path, _ = write_artifacts(sample_analysis_value, "", tmp_path, RUN_DATE)
        text = json_path.read_text(encoding="utf-8")

        assert "\n  \"date\"" in text
        assert DISPLAY_DATE in text
        assert json.loads(text)["aiPowered"] is True

    def test_round_trip(self, tmp_path, sample_analysis_value) -> None:
        json_path, _ = write_artifacts(sample_analysis_value, "", tmp_path, RUN_DATE)
        assert load_analysis(json_path) == sample_analysis_value

    def test_load_rejects_wrong_shape(self, tmp_path) -> None:
        path = tmp_path / "analysis-2026-10-19.json"
        path.write_text(json.dumps({"date": "x", "news": []}), encoding="utf-8")
        with pytest.raises(SchemaError):
            load_analysis(path)


class TestLatestArtifact:
    def test_missing_directory(self, tmp_path) -> None:
        assert latest_artifact(tmp_path / "nope") is None

    def test_picks_newest_by_filename_date(self, tmp_path) -> None:
        for name in ("analysis-2026-10-17.json", "analysis-2026-10-19.json", "analysis-2026-10-18.json"):
            (tmp_path / name).write_text("{}", encoding="utf-8")
        (tmp_path / "analysis-latest.json").write_text("{}", encoding="utf-8")
        (tmp_path / "analysis-2026-13-40.json").write_text("{}", encoding="utf-8")

        assert latest_artifact(tmp_path).name == "analysis-2026-10-19.json"


class TestDashboardData:
    def test_sample_placeholder_when_no_artifact(self, tmp_path) -> None:
        analysis = load_dashboard_data(tmp_path, RUN_DATE, "2026-10-18T22:30:00Z")

        assert analysis.ai_powered is False
        assert analysis.date == DISPLAY_DATE
        assert list(analysis.news) == sample_news(DISPLAY_DATE)
        assert analysis.sectors == DEFAULT_THEMES
        assert analysis.stocks == DEFAULT_STOCKS

    def test_latest_artifact_is_loaded(self, tmp_path, sample_analysis_value) -> None:
        write_artifacts(sample_analysis_value, "", tmp_path, date(2026, 10, 18))
        assert load_dashboard_data(tmp_path, RUN_DATE, "unused") == sample_analysis_value
