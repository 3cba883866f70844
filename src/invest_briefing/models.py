from __future__ import annotations

from dataclasses import dataclass
import math
from pathlib import Path
from typing import Any


class SchemaError(ValueError):
    """Raised when a payload does not match the expected entity shape."""


def _require_mapping(payload: object, entity: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise SchemaError(f"{entity} must be an object, got {type(payload).__name__}")
    return payload


def _text(payload: dict[str, Any], key: str, entity: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise SchemaError(f"{entity}.{key} must be a string")
    return value


def _optional_text(payload: dict[str, Any], key: str, entity: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise SchemaError(f"{entity}.{key} must be a string when present")
    return value


def _number(payload: dict[str, Any], key: str, entity: str) -> int | float:
    value = payload.get(key)
    if isinstance(value, str):
        value = _numeric_text(value)
    # bool is an int subclass; a model answering `true` for a price is malformed.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaError(f"{entity}.{key} must be a number")
    if not math.isfinite(value):
        raise SchemaError(f"{entity}.{key} must be finite")
    return value


def _numeric_text(value: str) -> int | float | None:
    """Parse a bare numeric string such as ``"72500"``; anything else is None."""
    try:
        number = float(value.strip())
    except ValueError:
        return None
    if number.is_integer():
        return int(number)
    return number


def _put_optional(out: dict[str, Any], key: str, value: str | None) -> None:
    if value is not None:
        out[key] = value


@dataclass(frozen=True, slots=True)
class NewsItem:
    id: str
    title: str
    source: str
    summary: str
    link: str
    published_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "source": self.source,
            "summary": self.summary,
            "link": self.link,
            "publishedAt": self.published_at,
        }

    @classmethod
    def from_dict(cls, payload: object) -> NewsItem:
        data = _require_mapping(payload, "NewsItem")
        return cls(
            id=_text(data, "id", "NewsItem"),
            title=_text(data, "title", "NewsItem"),
            source=_text(data, "source", "NewsItem"),
            summary=_text(data, "summary", "NewsItem"),
            link=_text(data, "link", "NewsItem"),
            published_at=_text(data, "publishedAt", "NewsItem"),
        )


@dataclass(frozen=True, slots=True)
class Theme:
    name: str
    outlook: str
    reason: str
    keywords: tuple[str, ...] = ()
    trigger_news: str | None = None
    direct_beneficiary: str | None = None
    indirect_beneficiary: str | None = None
    risk: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "outlook": self.outlook,
            "reason": self.reason,
            "keywords": list(self.keywords),
        }
        _put_optional(out, "triggerNews", self.trigger_news)
        _put_optional(out, "directBeneficiary", self.direct_beneficiary)
        _put_optional(out, "indirectBeneficiary", self.indirect_beneficiary)
        _put_optional(out, "risk", self.risk)
        return out

    @classmethod
    def from_dict(cls, payload: object) -> Theme:
        data = _require_mapping(payload, "Theme")
        keywords = data.get("keywords", [])
        if keywords is None:
            keywords = []
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise SchemaError("Theme.keywords must be a list of strings")
        return cls(
            name=_text(data, "name", "Theme"),
            outlook=_text(data, "outlook", "Theme"),
            reason=_text(data, "reason", "Theme"),
            keywords=tuple(keywords),
            trigger_news=_optional_text(data, "triggerNews", "Theme"),
            direct_beneficiary=_optional_text(data, "directBeneficiary", "Theme"),
            indirect_beneficiary=_optional_text(data, "indirectBeneficiary", "Theme"),
            risk=_optional_text(data, "risk", "Theme"),
        )


@dataclass(frozen=True, slots=True)
class StockRecommendation:
    code: str
    name: str
    sector: str
    current_price: int | float
    target_price: int | float
    stop_loss: int | float
    entry_price: int | float
    rsi_value: int | float
    support_level: int | float
    resistance_level: int | float
    fundamental_analysis: str
    technical_analysis: str
    investment_scenario: str
    risk_factor: str | None = None
    why_now: str | None = None
    hidden_link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "code": self.code,
            "name": self.name,
            "sector": self.sector,
            "currentPrice": self.current_price,
            "targetPrice": self.target_price,
            "stopLoss": self.stop_loss,
            "entryPrice": self.entry_price,
            "rsiValue": self.rsi_value,
            "supportLevel": self.support_level,
            "resistanceLevel": self.resistance_level,
            "fundamentalAnalysis": self.fundamental_analysis,
            "technicalAnalysis": self.technical_analysis,
            "investmentScenario": self.investment_scenario,
        }
        _put_optional(out, "riskFactor", self.risk_factor)
        _put_optional(out, "whyNow", self.why_now)
        _put_optional(out, "hiddenLink", self.hidden_link)
        return out

    @classmethod
    def from_dict(cls, payload: object) -> StockRecommendation:
        data = _require_mapping(payload, "StockRecommendation")
        entity = "StockRecommendation"
        # Some replies rename "sector" to "theme"; accept either key.
        sector_key = "sector" if "sector" in data else "theme"
        return cls(
            code=_text(data, "code", entity),
            name=_text(data, "name", entity),
            sector=_text(data, sector_key, entity),
            current_price=_number(data, "currentPrice", entity),
            target_price=_number(data, "targetPrice", entity),
            stop_loss=_number(data, "stopLoss", entity),
            entry_price=_number(data, "entryPrice", entity),
            rsi_value=_number(data, "rsiValue", entity),
            support_level=_number(data, "supportLevel", entity),
            resistance_level=_number(data, "resistanceLevel", entity),
            fundamental_analysis=_text(data, "fundamentalAnalysis", entity),
            technical_analysis=_text(data, "technicalAnalysis", entity),
            investment_scenario=_text(data, "investmentScenario", entity),
            risk_factor=_optional_text(data, "riskFactor", entity),
            why_now=_optional_text(data, "whyNow", entity),
            hidden_link=_optional_text(data, "hiddenLink", entity),
        )


@dataclass(frozen=True, slots=True)
class DailyAnalysis:
    date: str
    generated_at: str
    ai_powered: bool
    news: tuple[NewsItem, ...] = ()
    sectors: tuple[Theme, ...] = ()
    stocks: tuple[StockRecommendation, ...] = ()
    insight: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "date": self.date,
            "news": [item.to_dict() for item in self.news],
            "sectors": [theme.to_dict() for theme in self.sectors],
            "stocks": [stock.to_dict() for stock in self.stocks],
        }
        _put_optional(out, "insight", self.insight)
        out["generatedAt"] = self.generated_at
        out["aiPowered"] = self.ai_powered
        return out

    @classmethod
    def from_dict(cls, payload: object) -> DailyAnalysis:
        data = _require_mapping(payload, "DailyAnalysis")
        ai_powered = data.get("aiPowered")
        if not isinstance(ai_powered, bool):
            raise SchemaError("DailyAnalysis.aiPowered must be a boolean")
        return cls(
            date=_text(data, "date", "DailyAnalysis"),
            generated_at=_text(data, "generatedAt", "DailyAnalysis"),
            ai_powered=ai_powered,
            news=tuple(NewsItem.from_dict(item) for item in _list(data, "news")),
            sectors=tuple(Theme.from_dict(item) for item in _list(data, "sectors")),
            stocks=tuple(StockRecommendation.from_dict(item) for item in _list(data, "stocks")),
            insight=_optional_text(data, "insight", "DailyAnalysis"),
        )


def _list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise SchemaError(f"DailyAnalysis.{key} must be a list")
    return value


@dataclass(slots=True)
class PipelineResult:
    analysis: DailyAnalysis
    html: str
    json_path: Path | None = None
    html_path: Path | None = None
    delivered: bool = False
