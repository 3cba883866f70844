from __future__ import annotations

import logging
from typing import Any

import requests

from invest_briefing.config import Settings

LOGGER = logging.getLogger(__name__)


class GeminiClient:
    """Thin Gemini ``generateContent`` client returning plain text or None."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.config = settings.gemini
        self.timeout = settings.timeout_seconds
        self._api_key = settings.credentials.gemini_api_key
        self.session = session or requests.Session()

    def generate(self, prompt: str) -> str | None:
        if not self._api_key:
            LOGGER.warning("Gemini API key is not set. Skipping model call.")
            return None

        endpoint = f"{self.config.base_url.rstrip('/')}/models/{self.config.model}:generateContent"
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "topP": self.config.top_p,
                "maxOutputTokens": self.config.max_output_tokens,
            },
        }

        try:
            response = self.session.post(
                endpoint,
                headers={"Content-Type": "application/json", "x-goog-api-key": self._api_key},
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            LOGGER.error("Gemini API call failed: %s", exc)
            return None

        if not response.ok:
            LOGGER.error("Gemini API error: %s - %s", response.status_code, response.text[:500])
            return None

        try:
            payload = response.json()
        except ValueError as exc:
            LOGGER.error("Gemini API returned a non-JSON body: %s", exc)
            return None

        return _first_candidate_text(payload)


def _first_candidate_text(payload: Any) -> str | None:
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text:
        return None
    return text
