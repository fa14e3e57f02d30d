"""
CSV import of a bookmaker bet history.

Each row is normalized independently.  A row with a hard-fail field is
skipped and reported (``Row 3: invalid Odds '0.5'``); processing always
continues with the next row.  Soft-default fields never stop a row.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from ledger.core.record import build_bet_record
from ledger.models import Bet

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "Date",
    "Fixture",
    "Bookie",
    "Bet",
    "Bet Type",
    "Stake (£)",
    "Stake (Unit)",
    "Odds",
    "Result",
    "Cash Out Value",
)

#: Error labels use the CSV headers the user sees.
COLUMN_LABELS = {
    "placedAt": "Date",
    "bookmaker": "Bookie",
    "fixture": "Fixture",
    "selection": "Bet",
    "stake": "Stake (£)",
    "odds": "Odds",
}

MAX_UNCATEGORIZED = 20


@dataclass
class ImportSummary:
    processed: int = 0
    imported: int = 0
    errors: List[str] = field(default_factory=list)
    uncategorized: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def failed(self) -> int:
        return len(self.errors)


def read_csv_rows(source: Union[str, Path, io.TextIOBase]) -> List[Dict[str, str]]:
    """Read a CSV file (or open text stream) into header-keyed rows.

    Blank lines are skipped and cells are trimmed.  Raises ``ValueError`` if
    a required column is missing.
    """
    if isinstance(source, (str, Path)):
        with open(source, newline="", encoding="utf-8-sig") as fh:
            return read_csv_rows(fh)

    reader = csv.DictReader(source)
    headers = [h.strip() for h in (reader.fieldnames or [])]
    rows = [
        {h: (v or "").strip() for h, v in zip(headers, raw.values())}
        for raw in reader
        if any((v or "").strip() for v in raw.values() if isinstance(v, str))
    ]
    if rows:
        missing = [c for c in REQUIRED_COLUMNS if c not in headers]
        if missing:
            raise ValueError(f"Missing required column: {missing[0]}")
    return rows


def row_to_raw(row: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Map CSV headers onto the payload keys the normalizer expects.

    The CSV "Bet Type" column carries the stake type (NORMAL/FREE); the bet
    type itself is always inferred from the "Bet" text.
    """
    return {
        "placedAt": row.get("Date"),
        "fixture": row.get("Fixture"),
        "bookmaker": row.get("Bookie"),
        "selection": row.get("Bet"),
        "stakeType": row.get("Bet Type"),
        "stake": row.get("Stake (£)"),
        "odds": row.get("Odds"),
        "result": row.get("Result"),
        "cashOutValue": row.get("Cash Out Value"),
        "betType": None,
        "playerPropMarket": None,
    }


def import_rows(
    db: Optional[Session],
    rows: Iterable[Dict[str, str]],
    owner: str,
    dry_run: bool = False,
) -> ImportSummary:
    """Normalize ``rows`` and add the valid ones to ``db``.

    With ``dry_run`` nothing touches the session (``db`` may be ``None``).
    Row numbers count the header as line 1.
    """
    summary = ImportSummary(dry_run=dry_run)
    seen_uncategorized = set()

    for row_num, row in enumerate(rows, start=2):
        summary.processed += 1
        outcome = build_bet_record(row_to_raw(row), labels=COLUMN_LABELS)

        if not outcome.ok:
            message = "; ".join(e.message for e in outcome.errors)
            summary.errors.append(f"Row {row_num}: {message}")
            logger.debug("Row %d skipped: %s", row_num, message)
            continue

        record = outcome.record
        if outcome.uncategorized and record.selection not in seen_uncategorized:
            seen_uncategorized.add(record.selection)
            if len(summary.uncategorized) < MAX_UNCATEGORIZED:
                summary.uncategorized.append(record.selection)

        if not dry_run:
            db.add(Bet(owner=owner, **record.to_columns()))
        summary.imported += 1

    if not dry_run and summary.imported:
        db.commit()

    logger.info(
        "Import %s: %d processed, %d imported, %d failed",
        "dry-run" if dry_run else "done",
        summary.processed, summary.imported, summary.failed,
    )
    return summary
