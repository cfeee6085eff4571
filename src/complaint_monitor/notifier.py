import math
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from .config import AppConfig
from .errors import WebhookError
from .extractor import Complaint
from .logs import log_json


MAX_ATTEMPTS = 5
FALLBACK_RETRY_MS = 3000
MAX_ERROR_LENGTH = 800
EMBED_COLOR = 15158332


def build_payload(complaint: Complaint, role_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    sent_at = now or datetime.now(timezone.utc)
    return {
        "content": f"<@&{role_id}>",
        "allowed_mentions": {"roles": [role_id]},
        "embeds": [
            {
                "title": "🚨 Новая жалоба",
                "color": EMBED_COLOR,
                "fields": [
                    {"name": "ID", "value": f"#{complaint.id}", "inline": True},
                    {"name": "От", "value": complaint.from_ or "—", "inline": True},
                    {"name": "На", "value": complaint.on or "—", "inline": True},
                    {"name": "Дата", "value": complaint.date or "—"},
                ],
                "footer": {"text": "grnd.gg • admin panel"},
                "timestamp": sent_at.astimezone(timezone.utc).isoformat(),
            }
        ],
    }


def retry_after_ms(headers: Mapping[str, str]) -> int:
    raw = headers.get("retry-after")
    if raw is None or not str(raw).strip():
        return FALLBACK_RETRY_MS
    try:
        seconds = float(raw)
    except ValueError:
        return FALLBACK_RETRY_MS
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        return FALLBACK_RETRY_MS
    return math.ceil(seconds * 1000)


def send_webhook(
    webhook_url: str,
    payload: Dict[str, Any],
    max_attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
    timeout: int = 30,
) -> None:
    for attempt in range(1, max_attempts + 1):
        resp = requests.post(webhook_url, json=payload, timeout=timeout)

        if resp.ok:
            return

        if resp.status_code == 429:
            wait_ms = retry_after_ms(resp.headers)
            log_json(
                "webhook_rate_limited",
                level="warning",
                attempt=attempt,
                max_attempts=max_attempts,
                retry_after_ms=wait_ms,
            )
            if attempt < max_attempts:
                sleep(wait_ms / 1000)
            continue

        message = f"Discord webhook error {resp.status_code} {resp.reason}: {resp.text}"
        raise WebhookError(message[:MAX_ERROR_LENGTH], status=resp.status_code)

    raise WebhookError("Discord webhook failed after retries (429)", status=429)


def send_complaint(config: AppConfig, complaint: Complaint, sleep: Callable[[float], None] = time.sleep) -> None:
    send_webhook(config.webhook_url, build_payload(complaint, config.role_id), sleep=sleep)
    log_json("complaint_notified", id=complaint.id, from_=complaint.from_, on=complaint.on, date=complaint.date)
