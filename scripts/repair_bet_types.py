#!/usr/bin/env python3
"""
Retrofit an owner's bets onto the six-type bet taxonomy
(Accumulator, Bet Builder, Superboost, Player Prop, FT Result, Other).

    python scripts/repair_bet_types.py --owner user1            # dry run
    python scripts/repair_bet_types.py --owner user1 --apply

Safe to re-run: a second --apply reports zero rows needing update.
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dotenv import load_dotenv
load_dotenv()

from ledger.models import SessionLocal
from ledger.services.maintenance import run_retrofit

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Retrofit bet types for one owner")
    parser.add_argument("--owner", required=True, help="Ledger owner (e.g. user1)")
    parser.add_argument("--apply", action="store_true", help="Persist changes (default: dry run)")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        summary = run_retrofit(db, args.owner, apply=args.apply)
    finally:
        db.close()

    print(f"{'Applied' if summary.applied else 'Dry run'} retrofit for {summary.owner}")
    print(f"Rows scanned: {summary.scanned}")
    print(f"Rows needing update: {summary.changed}")
    print(f"Bet type changes: {summary.counts.get('bet_type_changes', 0)}")
    print(f"Selection changes: {summary.counts.get('selection_changes', 0)}")
    print(f"Player prop market cleared: {summary.counts.get('markets_cleared', 0)}")
    for err in summary.errors:
        print(f"  ❌ {err}")
    if not summary.applied and summary.changed:
        print("Re-run with --apply to persist these changes.")

    return 1 if summary.errors else 0


if __name__ == "__main__":
    sys.exit(main())
