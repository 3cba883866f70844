"""Tests for prompt construction, JSON extraction and analyzer fallbacks."""

from __future__ import annotations

from dataclasses import replace
import json

import pytest

from helpers import DISPLAY_DATE, ScriptedLLM
from invest_briefing.analysis.analyzer import (
    MarketAnalyzer,
    build_stock_prompt,
    build_theme_prompt,
    extract_json_array,
)
from invest_briefing.defaults import DEFAULT_INSIGHT, DEFAULT_STOCKS, DEFAULT_THEMES, sample_news
from invest_briefing.models import StockRecommendation, Theme
from invest_briefing.reporting.html_report import render_html

THEMES_JSON = [
    {"name": "원전", "outlook": "bullish", "reason": "수출 확대", "keywords": ["SMR", "한전기술"]},
    {"name": "조선", "outlook": "neutral", "reason": "수주 둔화", "keywords": ["LNG선"]},
    {"name": "건설", "outlook": "bearish", "reason": "PF 부실", "keywords": []},
]

STOCK_JSON = {
    "code": "034020",
    "name": "두산에너빌리티",
    "sector": "원전",
    "currentPrice": 21000,
    "targetPrice": 26000,
    "stopLoss": 19000,
    "entryPrice": 20500,
    "rsiValue": 58.5,
    "supportLevel": 20000,
    "resistanceLevel": 22500,
    "fundamentalAnalysis": "수주 잔고 증가",
    "technicalAnalysis": "박스권 상단 돌파 시도",
    "investmentScenario": "20,500원 분할 매수",
}


class TestExtractJsonArray:
    def test_plain_array(self) -> None:
        assert extract_json_array("[1, 2]") == [1, 2]

    def test_array_inside_code_fence(self) -> None:
        reply = "분석 결과입니다:\n```json\n" + json.dumps(THEMES_JSON, ensure_ascii=False) + "\n```\n감사합니다."
        assert extract_json_array(reply) == THEMES_JSON

    def test_skips_stray_brackets_before_array(self) -> None:
        reply = "[참고] 자료 기준으로 작성했습니다. " + json.dumps(THEMES_JSON) + " 이상 [끝]"
        assert extract_json_array(reply) == THEMES_JSON

    def test_first_of_multiple_arrays(self) -> None:
        assert extract_json_array('["a"] and then ["b"]') == ["a"]

    def test_no_array(self) -> None:
        assert extract_json_array("오늘은 분석할 수 없습니다.") is None

    def test_unterminated_array(self) -> None:
        assert extract_json_array('[{"name": "원전"') is None


class TestAnalyzeThemes:
    def test_valid_reply_is_returned_as_parsed(self) -> None:
        analyzer = MarketAnalyzer(ScriptedLLM(json.dumps(THEMES_JSON, ensure_ascii=False)))

        themes = analyzer.analyze_themes(sample_news(DISPLAY_DATE))

        assert themes == [Theme.from_dict(item) for item in THEMES_JSON]
        assert [theme.to_dict() for theme in themes] == THEMES_JSON

    def test_unknown_outlook_is_kept_verbatim(self) -> None:
        payload = [{"name": "리츠", "outlook": "sideways", "reason": "금리", "keywords": []}]
        analyzer = MarketAnalyzer(ScriptedLLM(json.dumps(payload)))

        assert analyzer.analyze_themes([])[0].outlook == "sideways"

    def test_none_reply_falls_back(self) -> None:
        assert MarketAnalyzer(ScriptedLLM(None)).analyze_themes([]) == list(DEFAULT_THEMES)

    def test_prose_reply_falls_back(self) -> None:
        analyzer = MarketAnalyzer(ScriptedLLM("죄송합니다. 답변드릴 수 없습니다."))
        assert analyzer.analyze_themes([]) == list(DEFAULT_THEMES)

    def test_object_reply_falls_back(self) -> None:
        analyzer = MarketAnalyzer(ScriptedLLM('{"name": "원전", "outlook": "bullish"}'))
        assert analyzer.analyze_themes([]) == list(DEFAULT_THEMES)

    def test_wrong_shape_falls_back(self) -> None:
        analyzer = MarketAnalyzer(ScriptedLLM('[{"name": "원전"}]'))
        assert analyzer.analyze_themes([]) == list(DEFAULT_THEMES)

    def test_empty_array_falls_back(self) -> None:
        assert MarketAnalyzer(ScriptedLLM("[]")).analyze_themes([]) == list(DEFAULT_THEMES)

    def test_prompt_embeds_all_headlines_and_count(self) -> None:
        llm = ScriptedLLM(None)
        news = sample_news(DISPLAY_DATE)

        MarketAnalyzer(llm, theme_count=3).analyze_themes(news)

        prompt = llm.prompts[0]
        assert "정확히 3개" in prompt
        for item in news:
            assert f"- {item.title}: {item.summary}" in prompt
        assert "triggerNews" not in prompt

    def test_advanced_prompt_asks_for_beneficiaries(self) -> None:
        prompt = build_theme_prompt(sample_news(DISPLAY_DATE), 4, advanced=True)
        assert "정확히 4개" in prompt
        for key in ("triggerNews", "directBeneficiary", "indirectBeneficiary", "risk"):
            assert key in prompt


class TestRecommendStocks:
    def test_valid_reply_is_returned_as_parsed(self) -> None:
        analyzer = MarketAnalyzer(ScriptedLLM(json.dumps([STOCK_JSON], ensure_ascii=False)))

        stocks = analyzer.recommend_stocks(list(DEFAULT_THEMES), [])

        assert stocks == [StockRecommendation.from_dict(STOCK_JSON)]
        assert stocks[0].to_dict() == STOCK_JSON

    def test_theme_key_is_accepted_for_sector(self) -> None:
        payload = dict(STOCK_JSON)
        payload["theme"] = payload.pop("sector")
        analyzer = MarketAnalyzer(ScriptedLLM(json.dumps([payload])))

        assert analyzer.recommend_stocks([], [])[0].sector == "원전"

    def test_string_price_falls_back(self) -> None:
        payload = dict(STOCK_JSON, currentPrice="21,000원")
        analyzer = MarketAnalyzer(ScriptedLLM(json.dumps([payload])))

        assert analyzer.recommend_stocks([], []) == list(DEFAULT_STOCKS)

    def test_numeric_string_price_is_accepted(self) -> None:
        payload = dict(STOCK_JSON, currentPrice="21000")
        analyzer = MarketAnalyzer(ScriptedLLM(json.dumps([payload])))

        assert analyzer.recommend_stocks([], [])[0].current_price == 21000

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_price_falls_back(self, literal) -> None:
        reply = json.dumps([STOCK_JSON], ensure_ascii=False).replace('"currentPrice": 21000', f'"currentPrice": {literal}')
        assert literal in reply
        analyzer = MarketAnalyzer(ScriptedLLM(reply))

        assert analyzer.recommend_stocks([], []) == list(DEFAULT_STOCKS)

    def test_tiny_price_decodes_and_renders(self, sample_analysis_value) -> None:
        payload = dict(STOCK_JSON, currentPrice=1e-310)
        stocks = MarketAnalyzer(ScriptedLLM(json.dumps([payload]))).recommend_stocks([], [])

        assert stocks[0].current_price == 1e-310
        html = render_html(replace(sample_analysis_value, stocks=tuple(stocks)))
        assert "26,000원 (+0%)" in html

    def test_none_reply_falls_back(self) -> None:
        assert MarketAnalyzer(ScriptedLLM(None)).recommend_stocks([], []) == list(DEFAULT_STOCKS)

    def test_prompt_limits_headlines_to_five(self, sample_analysis_value) -> None:
        news = list(sample_analysis_value.news) * 7
        prompt = build_stock_prompt(list(DEFAULT_THEMES), news, 3)

        assert prompt.count(f"- {news[0].title}") == 5
        assert "유망 섹터: AI/반도체, 2차전지, 바이오" in prompt
        assert "hiddenLink" not in prompt

    def test_advanced_prompt_prefers_hidden_beneficiaries(self) -> None:
        prompt = build_stock_prompt(list(DEFAULT_THEMES), [], 4, advanced=True)

        assert "정확히 4개" in prompt
        assert "중소형" in prompt
        for key in ("riskFactor", "whyNow", "hiddenLink"):
            assert key in prompt


class TestSummarizeInsight:
    def test_reply_is_stripped(self) -> None:
        analyzer = MarketAnalyzer(ScriptedLLM("  반도체 비중 확대  \n"))
        assert analyzer.summarize_insight(list(DEFAULT_THEMES), list(DEFAULT_STOCKS)) == "반도체 비중 확대"

    def test_none_reply_uses_default(self) -> None:
        analyzer = MarketAnalyzer(ScriptedLLM(None))
        assert analyzer.summarize_insight([], []) == DEFAULT_INSIGHT

    def test_prompt_names_themes_and_stocks(self) -> None:
        llm = ScriptedLLM("ok")
        MarketAnalyzer(llm).summarize_insight(list(DEFAULT_THEMES), list(DEFAULT_STOCKS))

        assert "유망 섹터: AI/반도체, 2차전지, 바이오" in llm.prompts[0]
        assert "추천 종목: 삼성전자, SK하이닉스, 셀트리온" in llm.prompts[0]
