from __future__ import annotations

from datetime import timedelta, timezone
from email.utils import parsedate_to_datetime
from html import unescape
import logging
import re
from typing import Any
from urllib.parse import urlparse

import requests

from invest_briefing.config import Settings
from invest_briefing.defaults import sample_news
from invest_briefing.models import NewsItem

LOGGER = logging.getLogger(__name__)
NAVER_NEWS_URL = "https://openapi.naver.com/v1/search/news.json"
FALLBACK_SOURCE = "뉴스"
KST = timezone(timedelta(hours=9))


class NaverNewsCollector:
    """News collector via the Naver news search API."""

    def __init__(
        self,
        settings: Settings,
        display_date: str = "",
        session: requests.Session | None = None,
    ) -> None:
        self.credentials = settings.credentials
        self.timeout = settings.timeout_seconds
        self.display_date = display_date
        self.session = session or requests.Session()

    def fetch_news(self, query: str, count: int) -> list[NewsItem]:
        if not self.credentials.has_naver:
            LOGGER.warning("Naver API credentials are not set. Using sample news.")
            return sample_news(self.display_date)

        params = {"query": query, "display": count, "sort": "date"}
        headers = {
            "X-Naver-Client-Id": self.credentials.naver_client_id,
            "X-Naver-Client-Secret": self.credentials.naver_client_secret,
        }

        try:
            response = self.session.get(NAVER_NEWS_URL, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.HTTPError as exc:
            LOGGER.error("Naver news request failed: %s %s", exc, _body(exc.response))
            return sample_news(self.display_date)
        except (requests.RequestException, ValueError) as exc:
            LOGGER.error("Naver news request failed: %s", exc)
            return sample_news(self.display_date)

        raw_items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(raw_items, list):
            LOGGER.error("Naver news response has no item list. Using sample news.")
            return sample_news(self.display_date)

        return [_to_news_item(index, raw) for index, raw in enumerate(raw_items, start=1) if isinstance(raw, dict)]


def _to_news_item(index: int, raw: dict[str, Any]) -> NewsItem:
    return NewsItem(
        id=str(index),
        title=_strip_html(str(raw.get("title") or "")),
        source=extract_domain(str(raw.get("originallink") or "")),
        summary=_strip_html(str(raw.get("description") or "")),
        link=str(raw.get("link") or ""),
        published_at=_format_pub_date(str(raw.get("pubDate") or "")),
    )


def extract_domain(url: str) -> str:
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return FALLBACK_SOURCE
    if not hostname:
        return FALLBACK_SOURCE
    return hostname.removeprefix("www.")


def _strip_html(text: str) -> str:
    if not text:
        return ""
    no_tags = re.sub(r"<[^>]*>", "", text)
    return unescape(no_tags).strip()


def _format_pub_date(value: str) -> str:
    if not value:
        return ""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=KST)
    return parsed.astimezone(KST).strftime("%Y.%m.%d %H:%M")


def _body(response: requests.Response | None) -> str:
    if response is None:
        return ""
    return response.text[:500]
