import pytest

from complaint_monitor import config as config_module
from complaint_monitor.config import DEFAULT_AUTH_URL, DEFAULT_ROLE_ID, load_config
from complaint_monitor.errors import ConfigError


ENV_VARS = [
    "DISCORD_EMAIL",
    "DISCORD_PASSWORD",
    "DISCORD_WEBHOOK_URL",
    "DISCORD_ROLE_ID",
    "HEADLESS",
    "PLAYWRIGHT_BROWSER_CHANNEL",
    "AUTH_URL",
    "COMPLAINTS_URL",
    "AUTH_STATE_PATH",
    "LEDGER_PATH",
    "POLL_SECONDS",
    "PAGE_TIMEOUT_MS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "load_dotenv", lambda: False)


def test_defaults(monkeypatch):
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.com/api/webhooks/1/t")

    cfg = load_config()

    assert cfg.role_id == DEFAULT_ROLE_ID
    assert cfg.auth_url == DEFAULT_AUTH_URL
    assert cfg.headless is True
    assert cfg.browser_channel is None
    assert cfg.poll_seconds == 30
    assert cfg.auth_state_path == "auth.json"
    assert cfg.ledger_path == "notified_ids.json"


def test_missing_webhook_is_a_config_error():
    with pytest.raises(ConfigError):
        load_config()


def test_headless_flag_and_quoted_secrets(monkeypatch):
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.com/api/webhooks/1/t")
    monkeypatch.setenv("HEADLESS", "false")
    monkeypatch.setenv("DISCORD_EMAIL", " 'me@example.com' ")
    monkeypatch.setenv("DISCORD_PASSWORD", '"pw"')

    cfg = load_config()
    creds = cfg.require_credentials()

    assert cfg.headless is False
    assert creds.email == "me@example.com"
    assert creds.password == "pw"


def test_require_credentials_names_missing_variables(monkeypatch):
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.com/api/webhooks/1/t")
    monkeypatch.setenv("DISCORD_EMAIL", "me@example.com")

    with pytest.raises(ConfigError, match="DISCORD_PASSWORD"):
        load_config().require_credentials()


def test_bad_integer_is_a_config_error(monkeypatch):
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.com/api/webhooks/1/t")
    monkeypatch.setenv("POLL_SECONDS", "thirty")

    with pytest.raises(ConfigError, match="POLL_SECONDS"):
        load_config()
