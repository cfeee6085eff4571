import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from .errors import ConfigError


DEFAULT_AUTH_URL = "https://grnd.gg/auth"
DEFAULT_COMPLAINTS_URL = "https://grnd.gg/admin/complaints"
DEFAULT_ROLE_ID = "1470322549224378450"


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str


@dataclass
class AppConfig:
    webhook_url: str
    role_id: str
    discord_email: Optional[str]
    discord_password: Optional[str]
    headless: bool
    browser_channel: Optional[str]
    auth_url: str
    complaints_url: str
    auth_state_path: str
    ledger_path: str
    poll_seconds: int
    page_timeout_ms: int

    def require_credentials(self) -> Credentials:
        missing: List[str] = []
        if not self.discord_email:
            missing.append("DISCORD_EMAIL")
        if not self.discord_password:
            missing.append("DISCORD_PASSWORD")
        if missing:
            raise ConfigError(
                f"Missing required environment variable(s): {', '.join(missing)}. "
                "They are needed for the first login when no saved session exists."
            )
        return Credentials(email=str(self.discord_email), password=str(self.discord_password))


def _parse_bool(value: str, default: bool) -> bool:
    if not value:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        value = value[1:-1].strip()
    return value or None


def _parse_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def load_config() -> AppConfig:
    load_dotenv()

    webhook_url = _clean(os.getenv("DISCORD_WEBHOOK_URL"))
    if not webhook_url:
        raise ConfigError("Missing required environment variable: DISCORD_WEBHOOK_URL")

    return AppConfig(
        webhook_url=webhook_url,
        role_id=_clean(os.getenv("DISCORD_ROLE_ID")) or DEFAULT_ROLE_ID,
        discord_email=_clean(os.getenv("DISCORD_EMAIL")),
        discord_password=_clean(os.getenv("DISCORD_PASSWORD")),
        headless=_parse_bool(os.getenv("HEADLESS", "true"), default=True),
        browser_channel=_clean(os.getenv("PLAYWRIGHT_BROWSER_CHANNEL")),
        auth_url=_clean(os.getenv("AUTH_URL")) or DEFAULT_AUTH_URL,
        complaints_url=_clean(os.getenv("COMPLAINTS_URL")) or DEFAULT_COMPLAINTS_URL,
        auth_state_path=_clean(os.getenv("AUTH_STATE_PATH")) or "auth.json",
        ledger_path=_clean(os.getenv("LEDGER_PATH")) or "notified_ids.json",
        poll_seconds=max(1, _parse_int("POLL_SECONDS", 30)),
        page_timeout_ms=_parse_int("PAGE_TIMEOUT_MS", 30000),
    )
