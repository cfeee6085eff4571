import time
from enum import Enum
from typing import Callable, Optional, Tuple

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, Error as PlaywrightError

from .config import AppConfig, Credentials
from .errors import AuthenticationError
from .logs import log_json
from .session import SessionCache


DISCORD_LOGIN_URL = "https://discord.com/login"
ADMIN_MARKER = "grnd.gg/admin"
CONSENT_MARKERS = ("discord.com/oauth2", "discord.com/authorize")
CONSENT_BUTTON_SELECTOR = (
    'button:has-text("Authorize"), button:has-text("Авторизовать"), '
    'button:has-text("Continue"), button:has-text("Продолжить")'
)

LOGIN_SETTLE_MS = 10_000
AUTH_BUDGET_SECONDS = 120.0
AUTH_POLL_SECONDS = 1.2
CONSENT_CLICK_TIMEOUT_MS = 2000


class AuthState(Enum):
    NAVIGATING = "navigating"
    AWAITING_CONSENT = "awaiting_consent"
    AUTHENTICATED = "authenticated"
    TIMED_OUT = "timed_out"


def next_auth_state(url: str, elapsed: float, budget: float = AUTH_BUDGET_SECONDS) -> AuthState:
    if elapsed >= budget:
        return AuthState.TIMED_OUT
    # Only a URL check; an error page under /admin would also pass.
    if ADMIN_MARKER in url:
        return AuthState.AUTHENTICATED
    if any(marker in url for marker in CONSENT_MARKERS):
        return AuthState.AWAITING_CONSENT
    return AuthState.NAVIGATING


def discord_login(page: Page, credentials: Credentials, cache: SessionCache) -> None:
    log_json("discord_login", url=DISCORD_LOGIN_URL)
    page.goto(DISCORD_LOGIN_URL, wait_until="domcontentloaded")

    page.fill('input[name="email"]', credentials.email)
    page.fill('input[name="password"]', credentials.password)
    page.click('button[type="submit"]')

    # A captcha, if shown, has to be solved by hand within this window.
    page.wait_for_timeout(LOGIN_SETTLE_MS)

    cache.save_cookies(page.context.cookies())
    log_json("session_saved", path=str(cache.path), stage="discord_login")


def click_consent(page: Page) -> bool:
    button = page.locator(CONSENT_BUTTON_SELECTOR)
    try:
        if not button.count():
            return False
        log_json("consent_click")
        button.first.click(timeout=CONSENT_CLICK_TIMEOUT_MS)
    except PlaywrightError as e:
        log_json("consent_click_failed", level="warning", message=str(e))
        return False
    return True


def ensure_site_auth(
    context: BrowserContext,
    page: Page,
    cache: SessionCache,
    auth_url: str,
    budget: float = AUTH_BUDGET_SECONDS,
    step: float = AUTH_POLL_SECONDS,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    log_json("site_auth_start", url=auth_url)
    page.goto(auth_url, wait_until="domcontentloaded")

    started = clock()
    while True:
        url = page.url
        state = next_auth_state(url, clock() - started, budget)

        if state is AuthState.AUTHENTICATED:
            log_json("site_auth_done", url=url)
            cache.save_context(context)
            log_json("session_saved", path=str(cache.path), stage="site_auth")
            return

        if state is AuthState.TIMED_OUT:
            cache.save_context_best_effort(context)
            raise AuthenticationError(
                f"Site authorization via {auth_url} did not reach the admin area within {budget:.0f}s "
                f"(last url: {url})"
            )

        if state is AuthState.AWAITING_CONSENT:
            click_consent(page)

        page.wait_for_timeout(round(step * 1000))


def launch_browser(config: AppConfig, playwright: Playwright) -> Browser:
    return playwright.chromium.launch(
        headless=config.headless,
        channel=config.browser_channel,
        args=["--disable-dev-shm-usage"],
    )


def open_session(
    config: AppConfig,
    playwright: Playwright,
    budget: float = AUTH_BUDGET_SECONDS,
    clock: Callable[[], float] = time.monotonic,
) -> Tuple[Browser, BrowserContext, Page]:
    cache = SessionCache(config.auth_state_path)

    if cache.exists():
        state = cache.load()
        log_json("session_reused", path=str(cache.path), cookies=len(state["cookies"]))
        browser = launch_browser(config, playwright)
        context = browser.new_context(storage_state=state)
        return browser, context, context.new_page()

    credentials = config.require_credentials()
    log_json("session_missing", path=str(cache.path), message="performing first login")

    browser = launch_browser(config, playwright)
    context: Optional[BrowserContext] = None
    try:
        context = browser.new_context()
        page = context.new_page()
        discord_login(page, credentials, cache)
        ensure_site_auth(context, page, cache, config.auth_url, budget=budget, clock=clock)
    except BaseException:
        if context is not None:
            context.close()
        browser.close()
        raise
    return browser, context, page
