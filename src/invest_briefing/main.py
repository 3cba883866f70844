from __future__ import annotations

import argparse
from datetime import date, datetime, timezone
import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from invest_briefing.collectors.news import KST
from invest_briefing.config import VARIANTS, load_settings
from invest_briefing.pipeline import DailyReportPipeline
from invest_briefing.reporting.artifacts import load_dashboard_data

LOGGER = logging.getLogger("invest_briefing")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Daily AI investment briefing")
    parser.add_argument("--config", default=None, help="Path to report YAML")
    parser.add_argument("--as-of", dest="as_of", default=None, help="Run date (YYYY-MM-DD), defaults to today in KST")
    parser.add_argument("--output", default=None, help="Artifact directory")
    parser.add_argument("--query", default=None)
    parser.add_argument("--count", type=int, default=None, help="Number of news items to fetch")
    parser.add_argument("--variant", choices=VARIANTS, default=None)
    parser.add_argument("--no-email", dest="send_email", action="store_false")
    parser.add_argument(
        "--print-dashboard",
        action="store_true",
        help="Print the latest analysis (or the sample placeholder) as JSON and exit",
    )
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def _load_env() -> None:
    dotenv_path = Path.cwd() / ".env"
    if dotenv_path.is_file():
        load_dotenv(dotenv_path=dotenv_path, override=False)
        # If an empty env var is already set, prefer non-empty value from .env.
        if not os.getenv("GEMINI_API_KEY", "").strip():
            load_dotenv(dotenv_path=dotenv_path, override=True)
    else:
        load_dotenv(override=False)


def main(argv: list[str] | None = None) -> int:
    _load_env()
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.config, os.environ).with_overrides(
            query=args.query,
            news_count=args.count,
            variant=args.variant,
            output_dir=args.output,
        )
        as_of = date.fromisoformat(args.as_of) if args.as_of else None

        if args.print_dashboard:
            today = as_of or datetime.now(KST).date()
            generated_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
            analysis = load_dashboard_data(settings.output_dir, today, generated_at)
            print(json.dumps(analysis.to_dict(), ensure_ascii=False, indent=2))
            return 0

        result = DailyReportPipeline(settings).run(as_of, send_email=args.send_email)
    except Exception:
        LOGGER.exception("Daily analysis failed")
        return 1

    print(f"Report generated: {result.html_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
