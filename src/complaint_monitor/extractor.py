from dataclasses import dataclass
from typing import List, Sequence

from playwright.sync_api import Page


TABLE_SELECTOR = ".table-component-index table"
ROW_SELECTOR = f"{TABLE_SELECTOR} tbody tr"
TABLE_TIMEOUT_MS = 15000


@dataclass(frozen=True)
class Complaint:
    id: str
    from_: str
    on: str
    date: str


def parse_rows(rows: Sequence[Sequence[str]]) -> List[Complaint]:
    complaints = []
    for cells in rows:
        if not isinstance(cells, (list, tuple)) or len(cells) < 4:
            continue
        cid, from_, on, date = (str(c or "").strip() for c in cells[:4])
        complaints.append(Complaint(id=cid, from_=from_, on=on, date=date))
    return complaints


def get_complaints(page: Page, timeout_ms: int = TABLE_TIMEOUT_MS) -> List[Complaint]:
    page.wait_for_selector(TABLE_SELECTOR, timeout=timeout_ms)

    rows = page.evaluate(
        """
        (rowSelector) => Array.from(document.querySelectorAll(rowSelector)).map(
          (row) => Array.from(row.querySelectorAll('td')).map((td) => td.innerText || '')
        )
        """,
        ROW_SELECTOR,
    )

    if not isinstance(rows, list):
        return []
    return parse_rows(rows)
