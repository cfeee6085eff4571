import json
from pathlib import Path
from typing import Any, Dict, List, Union

from playwright.sync_api import BrowserContext, Error as PlaywrightError

from .errors import SessionCacheError
from .jsonfile import write_json_atomic
from .logs import log_json


class SessionCache:
    """Playwright storage state saved between runs.

    Accepts both a bare cookie list and a full storage-state object, since
    the file is first written with cookies only and later with the whole
    context state.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SessionCacheError(f"Cannot read session cache {self.path}: {e}") from e

        if isinstance(data, list):
            return {"cookies": data, "origins": []}
        if isinstance(data, dict) and isinstance(data.get("cookies"), list):
            origins = data.get("origins")
            return {"cookies": data["cookies"], "origins": origins if isinstance(origins, list) else []}
        raise SessionCacheError(
            f"Session cache {self.path} must hold a cookie array or an object with a 'cookies' array"
        )

    def save_cookies(self, cookies: List[Dict[str, Any]]) -> None:
        write_json_atomic(self.path, {"cookies": cookies})

    def save_context(self, context: BrowserContext) -> None:
        write_json_atomic(self.path, context.storage_state())

    def save_context_best_effort(self, context: BrowserContext) -> bool:
        try:
            self.save_context(context)
        except (PlaywrightError, OSError) as e:
            log_json("session_save_failed", level="warning", path=str(self.path), message=str(e))
            return False
        return True
