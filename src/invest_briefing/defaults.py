"""Hand-authored datasets used whenever a live source is unavailable."""

from __future__ import annotations

from datetime import date

from invest_briefing.models import DailyAnalysis, NewsItem, StockRecommendation, Theme

_WEEKDAYS_KO = ("월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일")

DEFAULT_INSIGHT = "오늘도 분할 매수와 손절 원칙을 지키며 안정적인 투자를 권장합니다."


def korean_display_date(day: date) -> str:
    """Format ``day`` the way the report header shows it, e.g. ``2026년 10월 19일 월요일``."""
    return f"{day.year}년 {day.month}월 {day.day}일 {_WEEKDAYS_KO[day.weekday()]}"


def sample_news(display_date: str) -> list[NewsItem]:
    return [
        NewsItem(
            id="1",
            title="반도체 업황 회복세 뚜렷...AI 수요 급증",
            source="economy.sample.com",
            summary="AI 반도체 수요 증가로 업황 회복이 본격화되고 있습니다.",
            link="#",
            published_at=display_date,
        ),
        NewsItem(
            id="2",
            title="금리 인하 기대감에 성장주 강세",
            source="finance.sample.com",
            summary="연준의 금리 인하 시사에 기술주 중심으로 상승세를 보이고 있습니다.",
            link="#",
            published_at=display_date,
        ),
    ]


DEFAULT_THEMES: tuple[Theme, ...] = (
    Theme(
        name="AI/반도체",
        outlook="bullish",
        reason="AI 반도체 수요 급증, 글로벌 테크 기업 투자 확대",
        keywords=("엔비디아", "HBM", "AI 가속기", "삼성전자", "SK하이닉스"),
    ),
    Theme(
        name="2차전지",
        outlook="neutral",
        reason="전기차 수요 둔화 우려 vs 장기 성장성",
        keywords=("LG에너지솔루션", "삼성SDI", "전고체", "리튬", "ESS"),
    ),
    Theme(
        name="바이오",
        outlook="bullish",
        reason="신약 개발 성과 기대, FDA 승인 모멘텀",
        keywords=("셀트리온", "삼성바이오로직스", "ADC", "비만치료제", "GLP-1"),
    ),
)

DEFAULT_STOCKS: tuple[StockRecommendation, ...] = (
    StockRecommendation(
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
        fundamental_analysis="HBM 생산 확대로 AI 반도체 수혜 기대. 파운드리 경쟁력 회복 중.",
        technical_analysis="60일선 지지 확인, RSI 과매도권 진입으로 반등 가능성.",
        investment_scenario=(
            "71,000원 부근 분할 매수 진입, 1차 목표 78,000원, 최종 목표 85,000원. 68,000원 이탈 시 손절."
        ),
    ),
    StockRecommendation(
        code="000660",
        name="SK하이닉스",
        sector="AI/반도체",
        current_price=178000,
        target_price=220000,
        stop_loss=165000,
        entry_price=175000,
        rsi_value=55,
        support_level=170000,
        resistance_level=185000,
        fundamental_analysis="HBM3E 독점 공급으로 수익성 개선. AI 서버 수요 급증.",
        technical_analysis="상승 채널 유지 중. 185,000원 돌파 시 추가 상승 여력.",
        investment_scenario="175,000원 매수, 목표가 220,000원 (수익률 25%). 165,000원 손절.",
    ),
    StockRecommendation(
        code="068270",
        name="셀트리온",
        sector="바이오",
        current_price=185000,
        target_price=220000,
        stop_loss=170000,
        entry_price=180000,
        rsi_value=48,
        support_level=175000,
        resistance_level=195000,
        fundamental_analysis="바이오시밀러 시장 확대와 신약 파이프라인 기대.",
        technical_analysis="박스권 하단 지지 후 반등 시도 중.",
        investment_scenario="180,000원 분할 매수, 195,000원 돌파 시 추가 매수. 170,000원 손절.",
    ),
)


def sample_analysis(day: date, generated_at: str) -> DailyAnalysis:
    """Placeholder analysis for a dashboard that has no persisted artifact yet."""
    display_date = korean_display_date(day)
    return DailyAnalysis(
        date=display_date,
        generated_at=generated_at,
        ai_powered=False,
        news=tuple(sample_news(display_date)),
        sectors=DEFAULT_THEMES,
        stocks=DEFAULT_STOCKS,
        insight=DEFAULT_INSIGHT,
    )
