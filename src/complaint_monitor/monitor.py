import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from playwright.sync_api import Page, sync_playwright

from .auth import open_session
from .config import AppConfig, load_config
from .extractor import Complaint, get_complaints
from .ledger import NotifiedLedger
from .logs import install_excepthook, log_json, utc_ts
from .notifier import send_complaint


NOTIFY_SPACING_SECONDS = 0.4


def run_cycle(
    page: Page,
    config: AppConfig,
    ledger: NotifiedLedger,
    notify: Optional[Callable[[Complaint], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    send = notify or (lambda complaint: send_complaint(config, complaint, sleep=sleep))

    page.goto(config.complaints_url, wait_until="networkidle", timeout=config.page_timeout_ms)

    complaints = get_complaints(page)
    log_json("complaints_found", count=len(complaints))

    sent = 0
    try:
        for complaint in ledger.filter_new(complaints):
            send(complaint)
            ledger.add(complaint.id)
            sent += 1
            sleep(NOTIFY_SPACING_SECONDS)
    except BaseException:
        # Keep what was delivered before the failure; the original error wins.
        if sent:
            try:
                ledger.flush()
            except OSError as e:
                log_json("ledger_flush_failed", level="error", path=str(ledger.path), message=str(e))
        raise

    if sent:
        ledger.flush()
        log_json("complaints_sent", count=sent, ledger_size=len(ledger))
    else:
        log_json("no_new_complaints")
    return sent


def monitor_loop(config: AppConfig) -> None:
    ledger = NotifiedLedger.load(config.ledger_path)
    log_json("ledger_loaded", path=config.ledger_path, size=len(ledger))

    with sync_playwright() as p:
        browser, context, page = open_session(config, p)
        try:
            log_json("monitor_started", complaints_url=config.complaints_url, poll_seconds=config.poll_seconds)
            while True:
                fetched_at = datetime.now(timezone.utc)
                log_json("heartbeat", stage="fetch", fetch_time_utc=utc_ts(fetched_at))
                try:
                    run_cycle(page, config, ledger)
                except Exception as e:
                    log_json("cycle_error", level="error", error_type=type(e).__name__, message=str(e))

                next_fetch = datetime.now(timezone.utc) + timedelta(seconds=config.poll_seconds)
                log_json("heartbeat", stage="next_fetch", next_fetch_time_utc=utc_ts(next_fetch))
                time.sleep(config.poll_seconds)
        finally:
            context.close()
            browser.close()


def main() -> None:
    install_excepthook()
    config = load_config()
    monitor_loop(config)


if __name__ == "__main__":
    main()
