from __future__ import annotations

from html import escape
import math

from invest_briefing.models import DailyAnalysis, NewsItem, StockRecommendation, Theme

NEWS_LIMIT = 5

OUTLOOK_STYLES: dict[str, tuple[str, str]] = {
    "bullish": ("bullish", "📈 강세"),
    "bearish": ("bearish", "📉 약세"),
    "neutral": ("neutral", "➡️ 중립"),
}

STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; line-height: 1.6; color: #333; max-width: 700px; margin: 0 auto; padding: 20px; }
    h1 { color: #1a1a2e; border-bottom: 3px solid #4f46e5; padding-bottom: 10px; }
    h2 { color: #4f46e5; margin-top: 30px; }
    .insight { background: linear-gradient(135deg, #4f46e5 0%, #7c3aed 100%); color: white; padding: 20px; border-radius: 12px; margin: 20px 0; }
    .insight p { margin: 0; font-size: 16px; }
    .ai-badge { background: #fbbf24; color: #1a1a2e; padding: 4px 8px; border-radius: 4px; font-size: 11px; font-weight: 600; }
    .ai-badge.offline { background: #e2e8f0; color: #475569; }
    .card { background: #f8fafc; border-radius: 12px; padding: 16px; margin: 12px 0; border-left: 4px solid #4f46e5; }
    .bullish { border-left-color: #22c55e; }
    .bearish { border-left-color: #ef4444; }
    .neutral { border-left-color: #f59e0b; }
    .badge { display: inline-block; padding: 4px 12px; border-radius: 20px; font-size: 12px; font-weight: 600; }
    .badge-bullish { background: #dcfce7; color: #166534; }
    .badge-bearish { background: #fee2e2; color: #991b1b; }
    .badge-neutral { background: #fef3c7; color: #92400e; }
    .badge-sector { background: #e0e7ff; color: #4338ca; margin-left: 8px; }
    .stock-grid { display: grid; gap: 8px; margin-top: 8px; }
    .stock-row { display: flex; justify-content: space-between; padding: 8px; background: white; border-radius: 8px; }
    .price { font-weight: 600; color: #4f46e5; }
    .target { color: #22c55e; }
    .stop { color: #ef4444; }
    .keywords { display: flex; gap: 8px; flex-wrap: wrap; margin-top: 8px; }
    .keyword { background: #e0e7ff; color: #4338ca; padding: 4px 10px; border-radius: 16px; font-size: 12px; }
    .detail { color: #475569; font-size: 14px; margin: 4px 0; }
    .news-link { color: #4f46e5; text-decoration: none; }
    .news-source { color: #64748b; font-size: 12px; }
    .empty { color: #64748b; text-align: center; padding: 16px; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e2e8f0; color: #64748b; font-size: 12px; }
"""


def outlook_style(outlook: str) -> tuple[str, str]:
    """CSS class and label for an outlook; anything unrecognised is neutral."""
    return OUTLOOK_STYLES.get(outlook, OUTLOOK_STYLES["neutral"])


def expected_return_pct(current_price: float, target_price: float) -> int:
    if not current_price:
        return 0
    pct = (target_price / current_price - 1) * 100
    # Tiny prices overflow the ratio to inf.
    if not math.isfinite(pct):
        return 0
    # Half-up rounding; round() would send 0.5 to the even neighbour.
    return math.floor(pct + 0.5)


def format_won(value: float) -> str:
    if not math.isfinite(value):
        return "-"
    if float(value).is_integer():
        return f"{int(value):,}원"
    return f"{value:,.2f}".rstrip("0").rstrip(".") + "원"


def render_html(analysis: DailyAnalysis) -> str:
    if analysis.ai_powered:
        ai_badge = '<span class="ai-badge">🤖 AI Powered</span>'
    else:
        ai_badge = '<span class="ai-badge offline">기본 분석</span>'

    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '  <meta charset="utf-8">',
        f"  <title>오늘의 AI 투자 분석 - {escape(analysis.date)}</title>",
        f"  <style>{STYLE}  </style>",
        "</head>",
        "<body>",
        f"  <h1>📈 오늘의 AI 투자 분석 {ai_badge}</h1>",
        f"  <p><strong>{escape(analysis.date)}</strong></p>",
    ]

    if analysis.insight:
        lines.extend(
            [
                '  <div class="insight">',
                f"    <p>💡 <strong>오늘의 투자 포인트:</strong> {escape(analysis.insight)}</p>",
                "  </div>",
            ]
        )

    lines.append("  <h2>📰 주요 뉴스</h2>")
    lines.extend(_section([_news_card(item) for item in analysis.news[:NEWS_LIMIT]], "수집된 뉴스가 없습니다."))

    lines.append("  <h2>🎯 AI 추천 유망 섹터</h2>")
    lines.extend(_section([_theme_card(theme) for theme in analysis.sectors], "섹터 분석 데이터가 없습니다."))

    lines.append("  <h2>💎 AI 추천 종목</h2>")
    lines.extend(_section([_stock_card(stock) for stock in analysis.stocks], "추천 종목 데이터가 없습니다."))

    lines.extend(
        [
            '  <div class="footer">',
            "    <p>⚠️ 본 분석은 AI가 생성한 참고용 정보이며, 투자의 최종 책임은 본인에게 있습니다.</p>",
            "    <p>🤖 Powered by Google Gemini AI | 매일 자동 생성</p>",
            "  </div>",
            "</body>",
            "</html>",
            "",
        ]
    )
    return "\n".join(lines)


def _section(cards: list[str], empty_message: str) -> list[str]:
    if not cards:
        return [f'  <p class="empty">{empty_message}</p>']
    return cards


def _detail(label: str, value: str | None) -> str:
    if not value:
        return ""
    return f'\n    <p class="detail"><strong>{label}:</strong> {escape(value)}</p>'


def _news_card(item: NewsItem) -> str:
    return (
        '  <div class="card">\n'
        f'    <a href="{escape(item.link)}" class="news-link"><strong>{escape(item.title)}</strong></a>\n'
        f'    <p class="news-source">{escape(item.source)} · {escape(item.published_at)}</p>\n'
        f"    <p>{escape(item.summary)}</p>\n"
        "  </div>"
    )


def _theme_card(theme: Theme) -> str:
    css_class, label = outlook_style(theme.outlook)
    keywords = "".join(f'<span class="keyword">{escape(keyword)}</span>' for keyword in theme.keywords)
    keyword_block = f'\n    <div class="keywords">{keywords}</div>' if keywords else ""
    details = (
        _detail("📰 촉발 뉴스", theme.trigger_news)
        + _detail("🎯 직접 수혜", theme.direct_beneficiary)
        + _detail("🔗 간접 수혜", theme.indirect_beneficiary)
        + _detail("⚠️ 리스크", theme.risk)
    )
    return (
        f'  <div class="card {css_class}">\n'
        f"    <strong>{escape(theme.name)}</strong>\n"
        f'    <span class="badge badge-{css_class}">{label}</span>\n'
        f"    <p>{escape(theme.reason)}</p>"
        f"{details}{keyword_block}\n"
        "  </div>"
    )


def _stock_row(label: str, value: str, css_class: str = "") -> str:
    class_attr = f' class="{css_class}"' if css_class else ""
    return f'      <div class="stock-row"><span>{label}</span><span{class_attr}>{value}</span></div>\n'


def _stock_card(stock: StockRecommendation) -> str:
    pct = expected_return_pct(stock.current_price, stock.target_price)
    rows = (
        _stock_row("현재가", format_won(stock.current_price), "price")
        + _stock_row("목표가", f"{format_won(stock.target_price)} ({pct:+d}%)", "target")
        + _stock_row("손절가", format_won(stock.stop_loss), "stop")
        + _stock_row("진입가", format_won(stock.entry_price))
        + _stock_row("지지선 / 저항선", f"{format_won(stock.support_level)} / {format_won(stock.resistance_level)}")
        + _stock_row("RSI", escape(str(stock.rsi_value)))
    )
    extras = (
        _detail("⏰ 왜 지금", stock.why_now)
        + _detail("🔗 숨은 연결고리", stock.hidden_link)
        + _detail("⚠️ 리스크", stock.risk_factor)
    )
    return (
        '  <div class="card">\n'
        f'    <strong>{escape(stock.name)}</strong> <span style="color:#64748b">({escape(stock.code)})</span>\n'
        f'    <span class="badge badge-sector">{escape(stock.sector)}</span>\n'
        '    <div class="stock-grid">\n'
        f"{rows}"
        "    </div>\n"
        f"    <p><strong>🔍 기본적 분석:</strong> {escape(stock.fundamental_analysis)}</p>\n"
        f"    <p><strong>📊 기술적 분석:</strong> {escape(stock.technical_analysis)}</p>\n"
        f"    <p><strong>🎯 투자 시나리오:</strong> {escape(stock.investment_scenario)}</p>"
        f"{extras}\n"
        "  </div>"
    )
