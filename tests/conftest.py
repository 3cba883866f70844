"""Shared fixtures for the invest_briefing test suite."""

from __future__ import annotations

import pytest

from helpers import DISPLAY_DATE
from invest_briefing.config import Credentials, Settings
from invest_briefing.models import DailyAnalysis, NewsItem, StockRecommendation, Theme


@pytest.fixture
def offline_settings(tmp_path) -> Settings:
    return Settings(output_dir=str(tmp_path / "output"))


@pytest.fixture
def full_credentials() -> Credentials:
    return Credentials(
        naver_client_id="naver-id",
        naver_client_secret="naver-secret",
        gemini_api_key="gemini-key",
        resend_api_key="resend-key",
        email_to="investor@example.com",
    )


@pytest.fixture
def online_settings(tmp_path, full_credentials) -> Settings:
    return Settings(credentials=full_credentials, output_dir=str(tmp_path / "output"))


@pytest.fixture
def sample_theme() -> Theme:
    return Theme(
        name="원전",
        outlook="bullish",
        reason="체코 원전 수주 이후 추가 수출 기대",
        keywords=("SMR", "두산에너빌리티"),
    )


@pytest.fixture
def sample_stock() -> StockRecommendation:
    return StockRecommendation(
        code="005930",
        name="삼성전자",
        sector="AI/반도체",
        current_price=72500,
        target_price=85000,
        stop_loss=68000,
        entry_price=71000,
        rsi_value=42,
        support_level=70000,
        resistance_level=75000,
        fundamental_analysis="HBM 생산 확대",
        technical_analysis="60일선 지지",
        investment_scenario="71,000원 분할 매수",
    )


@pytest.fixture
def sample_analysis_value(sample_theme, sample_stock) -> DailyAnalysis:
    return DailyAnalysis(
        date=DISPLAY_DATE,
        generated_at="2026-10-18T22:30:00Z",
        ai_powered=True,
        news=(
            NewsItem(
                id="1",
                title="원전 수출 확대",
                source="hankyung.com",
                summary="정부가 원전 수출 지원책을 발표했다.",
                link="https://n.news.naver.com/1",
                published_at="2026.10.19 06:10",
            ),
        ),
        sectors=(sample_theme,),
        stocks=(sample_stock,),
        insight="원전과 반도체에 주목하세요.",
    )
