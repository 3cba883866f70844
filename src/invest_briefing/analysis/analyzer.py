from __future__ import annotations

from collections.abc import Callable, Sequence
import json
import logging
from typing import Protocol, TypeVar

from invest_briefing.defaults import DEFAULT_INSIGHT, DEFAULT_STOCKS, DEFAULT_THEMES
from invest_briefing.models import NewsItem, SchemaError, StockRecommendation, Theme

LOGGER = logging.getLogger(__name__)
STOCK_PROMPT_NEWS_LIMIT = 5

T = TypeVar("T")


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str | None: ...


class MarketAnalyzer:
    """Turns news into themes, stock picks and a one-line insight.

    The model is treated as an untrusted text source: a missing reply,
    prose without a JSON array, or an array that does not decode falls back
    to the built-in datasets instead of raising.
    """

    def __init__(
        self,
        llm: TextGenerator,
        *,
        variant: str = "simple",
        theme_count: int = 3,
        stock_count: int = 3,
    ) -> None:
        self.llm = llm
        self.variant = variant
        self.theme_count = theme_count
        self.stock_count = stock_count

    @property
    def advanced(self) -> bool:
        return self.variant == "advanced"

    def analyze_themes(self, news: Sequence[NewsItem]) -> list[Theme]:
        prompt = build_theme_prompt(news, self.theme_count, advanced=self.advanced)
        return self._decode_reply(self.llm.generate(prompt), Theme.from_dict, DEFAULT_THEMES, "theme analysis")

    def recommend_stocks(self, themes: Sequence[Theme], news: Sequence[NewsItem]) -> list[StockRecommendation]:
        prompt = build_stock_prompt(themes, news, self.stock_count, advanced=self.advanced)
        return self._decode_reply(
            self.llm.generate(prompt),
            StockRecommendation.from_dict,
            DEFAULT_STOCKS,
            "stock recommendation",
        )

    def summarize_insight(self, themes: Sequence[Theme], stocks: Sequence[StockRecommendation]) -> str:
        reply = self.llm.generate(build_insight_prompt(themes, stocks))
        if reply is None or not reply.strip():
            LOGGER.warning("No insight from model, using default insight.")
            return DEFAULT_INSIGHT
        return reply.strip()

    def _decode_reply(
        self,
        reply: str | None,
        decode: Callable[[object], T],
        fallback: Sequence[T],
        label: str,
    ) -> list[T]:
        if reply is None:
            LOGGER.warning("No model reply for %s, using defaults.", label)
            return list(fallback)

        items = extract_json_array(reply)
        if not items:
            LOGGER.warning("Model reply for %s has no usable JSON array, using defaults.", label)
            return list(fallback)

        try:
            decoded = [decode(item) for item in items]
        except SchemaError as exc:
            LOGGER.warning("Model reply for %s does not match schema (%s), using defaults.", label, exc)
            return list(fallback)

        LOGGER.info("AI %s parsed: %d item(s)", label, len(decoded))
        return decoded


def extract_json_array(text: str) -> list[object] | None:
    """Return the first JSON array embedded in ``text``.

    Every ``[`` is tried as the start of a JSON value, so surrounding prose,
    code fences and stray brackets before the real array are skipped.
    """
    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, list):
            return value
        start = text.find("[", start + 1)
    return None


def _news_lines(news: Sequence[NewsItem], *, with_summary: bool) -> str:
    if with_summary:
        return "\n".join(f"- {item.title}: {item.summary}" for item in news)
    return "\n".join(f"- {item.title}" for item in news)


def build_theme_prompt(news: Sequence[NewsItem], count: int, *, advanced: bool = False) -> str:
    if advanced:
        schema = (
            "[\n"
            "  {\n"
            '    "name": "테마명",\n'
            '    "outlook": "bullish 또는 bearish 또는 neutral",\n'
            '    "reason": "해당 테마를 추천하는 구체적인 이유 (2-3문장)",\n'
            '    "keywords": ["관련 키워드 5개"],\n'
            '    "triggerNews": "이 테마를 촉발한 뉴스 헤드라인",\n'
            '    "directBeneficiary": "직접 수혜 업종/기업",\n'
            '    "indirectBeneficiary": "간접 수혜 업종/기업 (숨은 연결고리)",\n'
            '    "risk": "테마가 꺾일 수 있는 리스크"\n'
            "  }\n"
            "]"
        )
        role = "당신은 뉴스에서 투자 테마의 연쇄 효과를 찾아내는 전문 증권 애널리스트입니다."
    else:
        schema = (
            "[\n"
            "  {\n"
            '    "name": "섹터명",\n'
            '    "outlook": "bullish 또는 bearish 또는 neutral",\n'
            '    "reason": "해당 섹터를 추천하는 구체적인 이유 (2-3문장)",\n'
            '    "keywords": ["관련 키워드 5개"]\n'
            "  }\n"
            "]"
        )
        role = "당신은 전문 증권 애널리스트입니다."

    return (
        f"{role} 다음 뉴스를 분석하여 투자 유망 섹터를 추천해주세요.\n\n"
        "오늘의 주요 뉴스:\n"
        f"{_news_lines(news, with_summary=True)}\n\n"
        f"다음 JSON 형식으로 정확히 {count}개의 유망 섹터를 분석해주세요:\n"
        f"{schema}\n\n"
        "JSON만 출력하세요."
    )


def build_stock_prompt(
    themes: Sequence[Theme],
    news: Sequence[NewsItem],
    count: int,
    *,
    advanced: bool = False,
) -> str:
    theme_names = ", ".join(theme.name for theme in themes)
    extra_fields = ""
    guidance = "실제 한국 상장 종목만 추천하세요."
    if advanced:
        extra_fields = (
            ',\n    "riskFactor": "핵심 리스크 요인",\n'
            '    "whyNow": "지금 매수해야 하는 이유",\n'
            '    "hiddenLink": "뉴스와 종목 사이의 숨은 연결고리"'
        )
        guidance = (
            "실제 현재 상장된 한국 종목만 추천하세요. "
            "누구나 아는 대형주보다 시장이 아직 주목하지 않은 중소형 숨은 수혜주를 우선하되, "
            "대형주는 모멘텀이 확실한 경우에만 포함하세요."
        )

    return (
        "당신은 전문 증권 애널리스트입니다. 다음 정보를 바탕으로 투자 종목을 추천해주세요.\n\n"
        f"유망 섹터: {theme_names}\n\n"
        "최근 뉴스:\n"
        f"{_news_lines(news[:STOCK_PROMPT_NEWS_LIMIT], with_summary=False)}\n\n"
        f"다음 JSON 형식으로 정확히 {count}개의 종목을 추천해주세요. {guidance}\n"
        "[\n"
        "  {\n"
        '    "code": "종목코드 (예: 005930)",\n'
        '    "name": "종목명",\n'
        '    "sector": "해당 섹터",\n'
        '    "currentPrice": 현재가(숫자),\n'
        '    "targetPrice": 목표가(숫자),\n'
        '    "stopLoss": 손절가(숫자),\n'
        '    "entryPrice": 진입가(숫자),\n'
        '    "rsiValue": RSI값(30-70 사이 숫자),\n'
        '    "supportLevel": 지지선(숫자),\n'
        '    "resistanceLevel": 저항선(숫자),\n'
        '    "fundamentalAnalysis": "기본적 분석 (2-3문장)",\n'
        '    "technicalAnalysis": "기술적 분석 (2-3문장)",\n'
        f'    "investmentScenario": "구체적인 매매 시나리오"{extra_fields}\n'
        "  }\n"
        "]\n\n"
        "JSON만 출력하세요."
    )


def build_insight_prompt(themes: Sequence[Theme], stocks: Sequence[StockRecommendation]) -> str:
    return (
        "당신은 전문 투자 자문가입니다. 오늘의 시장 상황을 종합하여 간단한 투자 조언을 작성해주세요.\n\n"
        f"유망 섹터: {', '.join(theme.name for theme in themes)}\n"
        f"추천 종목: {', '.join(stock.name for stock in stocks)}\n\n"
        "100자 이내로 오늘의 핵심 투자 포인트를 작성해주세요."
    )
