from playwright.sync_api import sync_playwright

from .auth import DISCORD_LOGIN_URL, ensure_site_auth
from .config import load_config
from .logs import log_json
from .session import SessionCache


def main() -> None:
    config = load_config()
    cache = SessionCache(config.auth_state_path)

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=False, channel=config.browser_channel)
        context = browser.new_context()
        try:
            page = context.new_page()
            page.goto(DISCORD_LOGIN_URL, wait_until="domcontentloaded")
            if config.discord_email and config.discord_password:
                page.fill('input[name="email"]', config.discord_email)
                page.fill('input[name="password"]', config.discord_password)

            print("Log in to Discord in the opened browser (solve any captcha), then press Enter here...")
            input()

            cache.save_cookies(context.cookies())
            ensure_site_auth(context, page, cache, config.auth_url)
        finally:
            context.close()
            browser.close()

    log_json("login_state_saved", path=str(cache.path))
    print(f"Saved Playwright storage state to: {cache.path}")
    print("Copy this file next to the headless deployment to skip the interactive login.")


if __name__ == "__main__":
    main()
