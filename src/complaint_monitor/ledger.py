import json
from pathlib import Path
from typing import Iterable, List, Set, Union

from .errors import LedgerError
from .extractor import Complaint
from .jsonfile import write_json_atomic


class NotifiedLedger:
    """Ids of complaints already relayed to the webhook.

    The file is a JSON array of strings. It only grows, and each flush
    rewrites it completely.
    """

    def __init__(self, path: Union[str, Path], ids: Iterable[str] = ()) -> None:
        self.path = Path(path)
        self._order: List[str] = []
        self._seen: Set[str] = set()
        for item in ids:
            self.add(item)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "NotifiedLedger":
        path = Path(path)
        if not path.exists():
            return cls(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise LedgerError(f"Cannot read notified-id ledger {path}: {e}") from e
        if not isinstance(data, list):
            raise LedgerError(f"Notified-id ledger {path} must contain a JSON array")
        return cls(path, (str(item) for item in data))

    def __contains__(self, complaint_id: object) -> bool:
        return complaint_id in self._seen

    def __len__(self) -> int:
        return len(self._order)

    def ids(self) -> List[str]:
        return list(self._order)

    def add(self, complaint_id: str) -> None:
        if complaint_id in self._seen:
            return
        self._seen.add(complaint_id)
        self._order.append(complaint_id)

    def filter_new(self, complaints: Iterable[Complaint]) -> List[Complaint]:
        fresh = []
        batch: Set[str] = set()
        for complaint in complaints:
            if not complaint.id or complaint.id in self._seen or complaint.id in batch:
                continue
            batch.add(complaint.id)
            fresh.append(complaint)
        return fresh

    def flush(self) -> None:
        write_json_atomic(self.path, self._order)
