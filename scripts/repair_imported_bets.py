#!/usr/bin/env python3
"""
Fix player-prop data written by the first CSV importer:

  * "bb" selections become Bet Builder bets
  * foul props (other than fouls won) get the Fouls Committed Over market
  * "Sael Kumbedi O0.5 fouls won" becomes "Sael Kumbedi Fouls Won Over 0.5"
  * player props without a market get one inferred where possible

    python scripts/repair_imported_bets.py --owner user1            # dry run
    python scripts/repair_imported_bets.py --owner user1 --apply
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dotenv import load_dotenv
load_dotenv()

from ledger.models import SessionLocal
from ledger.services.maintenance import run_legacy_repair

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Repair legacy imported bets for one owner")
    parser.add_argument("--owner", required=True, help="Ledger owner (e.g. user1)")
    parser.add_argument("--apply", action="store_true", help="Persist changes (default: dry run)")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        summary = run_legacy_repair(db, args.owner, apply=args.apply)
    finally:
        db.close()

    print(f"{'Repair complete' if summary.applied else 'Dry run'} for {summary.owner}")
    print(f"Rows needing update: {summary.changed}")
    print(f"BB rows updated: {summary.counts.get('bb_rows', 0)}")
    print(f"Fouls Committed market updates: {summary.counts.get('fouls_committed_markets', 0)}")
    print(f"Legacy player-prop selections normalized: {summary.counts.get('legacy_selections', 0)}")
    print(f"Missing markets backfilled: {summary.counts.get('markets_backfilled', 0)}")
    for err in summary.errors:
        print(f"  ❌ {err}")
    if not summary.applied and summary.changed:
        print("Re-run with --apply to persist these changes.")

    return 1 if summary.errors else 0


if __name__ == "__main__":
    sys.exit(main())
