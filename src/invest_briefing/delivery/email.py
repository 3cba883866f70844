from __future__ import annotations

import logging

import requests

from invest_briefing.config import Settings

LOGGER = logging.getLogger(__name__)


class ResendMailer:
    """Sends the rendered report through the Resend email API."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.config = settings.email
        self.timeout = settings.timeout_seconds
        self._api_key = settings.credentials.resend_api_key
        self.recipients = settings.credentials.recipients
        self.session = session or requests.Session()

    def send_report(self, html: str, date: str) -> bool:
        if not self._api_key or not self.recipients:
            LOGGER.warning(
                "Email settings missing, skipping delivery (EMAIL_TO: %s, RESEND_API_KEY: %s)",
                "set" if self.recipients else "unset",
                "set" if self._api_key else "unset",
            )
            return False

        body = {
            "from": self.config.sender,
            "to": self.recipients,
            "subject": f"📈 오늘의 AI 투자 분석 - {date}",
            "html": html,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = self.session.post(self.config.endpoint, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            LOGGER.error("Email delivery failed: %s", exc)
            return False

        if not response.ok:
            LOGGER.error("Email delivery failed: %s - %s", response.status_code, response.text[:500])
            return False

        LOGGER.info("Email sent to %d recipient(s).", len(self.recipients))
        return True
