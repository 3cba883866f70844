from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

VARIANTS = ("simple", "advanced")
DEFAULT_QUERY = "경제 증시 투자 주식"
DEFAULT_SENDER = "Investment Bot <onboarding@resend.dev>"


@dataclass(frozen=True, slots=True)
class Credentials:
    naver_client_id: str = ""
    naver_client_secret: str = ""
    gemini_api_key: str = ""
    resend_api_key: str = ""
    email_to: str = ""

    @property
    def has_naver(self) -> bool:
        return bool(self.naver_client_id and self.naver_client_secret)

    @property
    def has_gemini(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def recipients(self) -> list[str]:
        return [addr.strip() for addr in self.email_to.split(",") if addr.strip()]


@dataclass(frozen=True, slots=True)
class GeminiConfig:
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    temperature: float = 0.7
    top_p: float = 0.95
    max_output_tokens: int = 4096


@dataclass(frozen=True, slots=True)
class EmailConfig:
    sender: str = DEFAULT_SENDER
    endpoint: str = "https://api.resend.com/emails"


@dataclass(frozen=True, slots=True)
class Settings:
    credentials: Credentials = field(default_factory=Credentials)
    query: str = DEFAULT_QUERY
    news_count: int = 10
    variant: str = "simple"
    output_dir: str = "output"
    timeout_seconds: int = 30
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    email: EmailConfig = field(default_factory=EmailConfig)

    @property
    def theme_count(self) -> int:
        return 4 if self.variant == "advanced" else 3

    @property
    def stock_count(self) -> int:
        return 4 if self.variant == "advanced" else 3

    def with_overrides(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        applied = {key: value for key, value in overrides.items() if value is not None}
        if not applied:
            return self
        updated = replace(self, **applied)
        _validate(updated)
        return updated


def credentials_from_env(env: Mapping[str, str]) -> Credentials:
    return Credentials(
        naver_client_id=env.get("NAVER_CLIENT_ID", "").strip(),
        naver_client_secret=env.get("NAVER_CLIENT_SECRET", "").strip(),
        gemini_api_key=env.get("GEMINI_API_KEY", "").strip(),
        resend_api_key=env.get("RESEND_API_KEY", "").strip(),
        email_to=env.get("EMAIL_TO", "").strip(),
    )


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        loaded = yaml.safe_load(fh)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Invalid report config: {path}")
    return loaded


def load_settings(path: str | Path | None, env: Mapping[str, str]) -> Settings:
    """Build run settings from an optional YAML file plus environment credentials.

    Environment values ``GEMINI_MODEL`` and ``EMAIL_FROM`` take precedence
    over the YAML ``gemini.model`` and ``email.sender`` keys.
    """
    loaded = _load_yaml(Path(path)) if path is not None else {}

    gemini_raw = dict(loaded.get("gemini") or {})
    model_override = env.get("GEMINI_MODEL", "").strip()
    if model_override:
        gemini_raw["model"] = model_override
    gemini = GeminiConfig(**gemini_raw)

    email_raw = dict(loaded.get("email") or {})
    sender_override = env.get("EMAIL_FROM", "").strip()
    if sender_override:
        email_raw["sender"] = sender_override
    email = EmailConfig(**email_raw)

    defaults = Settings()
    settings = Settings(
        credentials=credentials_from_env(env),
        query=str(loaded.get("query", defaults.query)),
        news_count=int(loaded.get("news_count", defaults.news_count)),
        variant=str(loaded.get("variant", defaults.variant)),
        output_dir=str(loaded.get("output_dir", defaults.output_dir)),
        timeout_seconds=int(loaded.get("timeout_seconds", defaults.timeout_seconds)),
        gemini=gemini,
        email=email,
    )
    _validate(settings)
    return settings


def _validate(settings: Settings) -> None:
    if settings.variant not in VARIANTS:
        raise ValueError(f"Unknown variant {settings.variant!r}; expected one of {', '.join(VARIANTS)}")
    if not 1 <= settings.news_count <= 100:
        raise ValueError(f"news_count must be between 1 and 100, got {settings.news_count}")
    if settings.timeout_seconds <= 0:
        raise ValueError(f"timeout_seconds must be positive, got {settings.timeout_seconds}")
