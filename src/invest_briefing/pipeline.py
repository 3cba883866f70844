from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timezone
import logging

from invest_briefing.analysis.analyzer import MarketAnalyzer
from invest_briefing.analysis.gemini import GeminiClient
from invest_briefing.collectors.news import KST, NaverNewsCollector
from invest_briefing.config import Settings
from invest_briefing.defaults import korean_display_date
from invest_briefing.delivery.email import ResendMailer
from invest_briefing.models import DailyAnalysis, PipelineResult
from invest_briefing.reporting.artifacts import write_artifacts
from invest_briefing.reporting.html_report import render_html

LOGGER = logging.getLogger(__name__)


def _now_kst() -> datetime:
    return datetime.now(KST)


class DailyReportPipeline:
    def __init__(
        self,
        settings: Settings,
        *,
        news: NaverNewsCollector | None = None,
        llm: GeminiClient | None = None,
        mailer: ResendMailer | None = None,
        clock: Callable[[], datetime] = _now_kst,
    ) -> None:
        self.settings = settings
        self.news = news or NaverNewsCollector(settings)
        self.llm = llm or GeminiClient(settings)
        self.analyzer = MarketAnalyzer(
            self.llm,
            variant=settings.variant,
            theme_count=settings.theme_count,
            stock_count=settings.stock_count,
        )
        self.mailer = mailer or ResendMailer(settings)
        self.clock = clock

    def run(self, run_date: date | None = None, *, send_email: bool = True) -> PipelineResult:
        now = self.clock()
        run_date = run_date or now.date()
        display_date = korean_display_date(run_date)
        self.news.display_date = display_date
        ai_powered = self.settings.credentials.has_gemini

        LOGGER.info("Starting AI investment analysis for %s", display_date)
        LOGGER.info("Gemini API: %s", "enabled" if ai_powered else "disabled (using default analysis)")

        LOGGER.info("Fetching news...")
        news = self.news.fetch_news(self.settings.query, self.settings.news_count)
        LOGGER.info("Collected %d news item(s)", len(news))

        LOGGER.info("Analyzing themes...")
        themes = self.analyzer.analyze_themes(news)
        LOGGER.info("Analyzed %d theme(s)", len(themes))

        LOGGER.info("Generating stock recommendations...")
        stocks = self.analyzer.recommend_stocks(themes, news)
        LOGGER.info("Recommended %d stock(s)", len(stocks))

        LOGGER.info("Generating investment insight...")
        insight = self.analyzer.summarize_insight(themes, stocks)
        LOGGER.info("Insight generated")

        analysis = DailyAnalysis(
            date=display_date,
            generated_at=now.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
            ai_powered=ai_powered,
            news=tuple(news),
            sectors=tuple(themes),
            stocks=tuple(stocks),
            insight=insight,
        )

        html = render_html(analysis)
        json_path, html_path = write_artifacts(analysis, html, self.settings.output_dir, run_date)
        LOGGER.info("Saved JSON: %s", json_path)
        LOGGER.info("Saved HTML: %s", html_path)

        delivered = False
        if send_email:
            LOGGER.info("Sending email...")
            delivered = self.mailer.send_report(html, display_date)
        else:
            LOGGER.info("Email delivery disabled for this run.")

        LOGGER.info("AI analysis complete (delivered=%s)", delivered)
        return PipelineResult(
            analysis=analysis,
            html=html,
            json_path=json_path,
            html_path=html_path,
            delivered=delivered,
        )
