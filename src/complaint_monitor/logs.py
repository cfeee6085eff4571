import json
import sys
import traceback
from datetime import datetime, timezone
from types import TracebackType
from typing import Optional, Type


def utc_ts(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def log_json(event: str, level: str = "info", **fields: object) -> None:
    payload = {
        "ts_utc": utc_ts(datetime.now(timezone.utc)),
        "level": level,
        "event": event,
        **fields,
    }
    print(json.dumps(payload, ensure_ascii=False, default=str), flush=True)


def _log_uncaught(
    exc_type: Type[BaseException],
    exc: BaseException,
    tb: Optional[TracebackType],
) -> None:
    log_json(
        "uncaught_exception",
        level="error",
        error_type=exc_type.__name__,
        message=str(exc),
        traceback="".join(traceback.format_exception(exc_type, exc, tb)),
    )


def install_excepthook() -> None:
    # Logs only; the interpreter still exits afterwards.
    sys.excepthook = _log_uncaught
