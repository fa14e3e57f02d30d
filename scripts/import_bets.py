#!/usr/bin/env python3
"""
Import a bookmaker bet history CSV into the ledger.

=============================================================================
HOW TO RUN
=============================================================================

    python scripts/import_bets.py --file imports/bets.csv --owner user1
    python scripts/import_bets.py --file imports/bets.csv --dry-run
    python scripts/import_bets.py --list-owners

Expected header (one bet per row):

    Date,Fixture,Bookie,Bet,Bet Type,Stake (£),Stake (Unit),Odds,Result,Cash Out Value

"Bet Type" is the stake type (NORMAL or FREE).  The ledger's own bet type and
player-prop market are inferred from the "Bet" text.  Rows with an unusable
date, bookmaker, stake or odds are skipped and listed; everything else is
imported.  --dry-run validates and reports without writing.
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dotenv import load_dotenv
load_dotenv()

from ledger.core.taxonomy import PLAYER_PROP_MARKETS
from ledger.models import SessionLocal, init_db
from ledger.services.bet_ledger import list_owners
from ledger.services.importer import import_rows, read_csv_rows

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_FILE = os.path.join("imports", "bets.csv")
MAX_PRINTED_ERRORS = 50


def resolve_owner(db, requested):
    """Use --owner if given, else the ledger's only owner."""
    if requested:
        return requested
    owners = list_owners(db)
    if len(owners) == 1:
        return owners[0]
    if not owners:
        raise ValueError("Ledger is empty; pass --owner (e.g. --owner user1)")
    raise ValueError(f"Several owners found ({', '.join(owners)}); pass --owner")


def print_summary(summary, owner):
    print("=" * 60)
    print(f"{'DRY RUN — ' if summary.dry_run else ''}Import for {owner}")
    print(f"  Rows processed : {summary.processed}")
    print(f"  Imported       : {summary.imported}{' (not written)' if summary.dry_run else ''}")
    print(f"  Failed         : {summary.failed}")

    if summary.errors:
        print("\nErrors:")
        for err in summary.errors[:MAX_PRINTED_ERRORS]:
            print(f"  {err}")
        if summary.failed > MAX_PRINTED_ERRORS:
            print(f"  ... and {summary.failed - MAX_PRINTED_ERRORS} more")

    if summary.uncategorized:
        print("\nPlayer props with no recognised market:")
        for selection in summary.uncategorized:
            print(f"  - {selection}")
        print(f"\nKnown markets: {', '.join(PLAYER_PROP_MARKETS)}")
    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(description="Import bets from a CSV export")
    parser.add_argument("--file", default=DEFAULT_FILE, help=f"CSV path (default: {DEFAULT_FILE})")
    parser.add_argument("--owner", help="Ledger owner the bets belong to (e.g. user1)")
    parser.add_argument("--list-owners", action="store_true", help="Print known owners and exit")
    parser.add_argument("--dry-run", action="store_true", help="Validate only; write nothing")
    args = parser.parse_args()

    init_db()
    db = SessionLocal()
    try:
        if args.list_owners:
            owners = list_owners(db)
            print("\n".join(owners) if owners else "No owners yet")
            return 0

        if not os.path.exists(args.file):
            logger.error("CSV file not found: %s", args.file)
            return 1

        try:
            owner = resolve_owner(db, args.owner)
            rows = read_csv_rows(args.file)
        except ValueError as exc:
            logger.error("%s", exc)
            return 1

        logger.info("Importing %d rows from %s for %s", len(rows), args.file, owner)
        summary = import_rows(None if args.dry_run else db, rows, owner, dry_run=args.dry_run)
        print_summary(summary, owner)
        return 0
    except Exception as exc:
        db.rollback()
        logger.error("Import failed: %s", exc, exc_info=True)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
