from __future__ import annotations

from datetime import date
import json
from pathlib import Path
import re

from invest_briefing.defaults import sample_analysis
from invest_briefing.models import DailyAnalysis

ARTIFACT_PATTERN = re.compile(r"^analysis-(\d{4})-(\d{2})-(\d{2})\.json$")


def artifact_paths(output_dir: str | Path, run_date: date) -> tuple[Path, Path]:
    out_dir = Path(output_dir)
    stem = f"analysis-{run_date.isoformat()}"
    return out_dir / f"{stem}.json", out_dir / f"{stem}.html"


def write_artifacts(
    analysis: DailyAnalysis,
    html: str,
    output_dir: str | Path,
    run_date: date,
) -> tuple[Path, Path]:
    """Write the JSON snapshot and rendered HTML for ``run_date``; returns both paths."""
    json_path, html_path = artifact_paths(output_dir, run_date)
    json_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.write_text(json.dumps(analysis.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    html_path.write_text(html, encoding="utf-8")
    return json_path, html_path


def load_analysis(path: str | Path) -> DailyAnalysis:
    with Path(path).open("r", encoding="utf-8") as fh:
        loaded = json.load(fh)
    return DailyAnalysis.from_dict(loaded)


def latest_artifact(output_dir: str | Path) -> Path | None:
    out_dir = Path(output_dir)
    if not out_dir.is_dir():
        return None

    dated: list[tuple[date, Path]] = []
    for path in out_dir.glob("analysis-*.json"):
        match = ARTIFACT_PATTERN.match(path.name)
        if not match:
            continue
        y, m, d = match.groups()
        try:
            dated.append((date(int(y), int(m), int(d)), path))
        except ValueError:
            continue

    if not dated:
        return None
    dated.sort(key=lambda x: (x[0], x[1].as_posix()))
    return dated[-1][1]


def load_dashboard_data(output_dir: str | Path, today: date, generated_at: str) -> DailyAnalysis:
    """Latest persisted analysis, or the sample placeholder when none exists yet."""
    latest = latest_artifact(output_dir)
    if latest is None:
        return sample_analysis(today, generated_at)
    return load_analysis(latest)
