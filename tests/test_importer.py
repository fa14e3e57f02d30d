"""Tests for the CSV import pipeline."""

import io
from unittest.mock import MagicMock

import pytest

from ledger.services.importer import (
    MAX_UNCATEGORIZED,
    import_rows,
    read_csv_rows,
    row_to_raw,
)

HEADER = "Date,Fixture,Bookie,Bet,Bet Type,Stake (£),Stake (Unit),Odds,Result,Cash Out Value\n"


def _csv(*lines):
    return io.StringIO(HEADER + "".join(line + "\n" for line in lines))


VALID = "09/03/2024,Arsenal v Chelsea,Bet365,Saka 1+ SOT,NORMAL,£10,1,2.5,Won,"
BAD_ODDS = "09/03/2024,Arsenal v Chelsea,Bet365,Kane AGS,NORMAL,£10,1,0.5,Lost,"


# ---------------------------------------------------------------------------
# read_csv_rows
# ---------------------------------------------------------------------------

def test_read_csv_rows_trims_and_skips_blank_lines():
    rows = read_csv_rows(_csv(VALID, "", ",,,,,,,,,", " 10/03/2024 , Spurs v Leeds ,SkyBet,bb,FREE,5,1,3/1,,"))
    assert len(rows) == 2
    assert rows[1]["Fixture"] == "Spurs v Leeds"
    assert rows[1]["Date"] == "10/03/2024"


def test_read_csv_rows_missing_column():
    stream = io.StringIO("Date,Fixture,Bookie,Bet\n09/03/2024,A v B,Bet365,bb\n")
    with pytest.raises(ValueError, match="Missing required column: Bet Type"):
        read_csv_rows(stream)


def test_read_csv_rows_from_path(tmp_path):
    path = tmp_path / "bets.csv"
    path.write_text("\ufeff" + HEADER + VALID + "\n", encoding="utf-8")
    rows = read_csv_rows(path)
    assert rows[0]["Date"] == "09/03/2024"


def test_row_to_raw_maps_bet_type_to_stake_type():
    raw = row_to_raw(read_csv_rows(_csv(VALID))[0])
    assert raw["stakeType"] == "NORMAL"
    assert raw["betType"] is None
    assert raw["selection"] == "Saka 1+ SOT"


# ---------------------------------------------------------------------------
# import_rows
# ---------------------------------------------------------------------------

def test_dry_run_one_valid_one_invalid():
    rows = read_csv_rows(_csv(VALID, BAD_ODDS))
    summary = import_rows(None, rows, "user1", dry_run=True)
    assert summary.processed == 2
    assert summary.imported == 1
    assert summary.errors == ["Row 3: invalid Odds '0.5'"]


def test_dry_run_never_touches_session():
    db = MagicMock()
    import_rows(db, read_csv_rows(_csv(VALID, BAD_ODDS)), "user1", dry_run=True)
    db.add.assert_not_called()
    db.commit.assert_not_called()


def test_import_adds_only_valid_rows():
    db = MagicMock()
    summary = import_rows(db, read_csv_rows(_csv(VALID, BAD_ODDS)), "user1")
    assert summary.imported == 1
    assert db.add.call_count == 1
    db.commit.assert_called_once()

    bet = db.add.call_args[0][0]
    assert bet.owner == "user1"
    assert bet.bookmaker == "Bet365"
    assert bet.player_prop_market == "SOT Over"
    assert bet.result == "WON"
    assert bet.profit == pytest.approx(15.0)
    assert bet.potential_return == pytest.approx(25.0)


def test_row_errors_join_every_field():
    bad = "31/02/2024,,Coral,Kane AGS,NORMAL,abc,1,2.5,Won,"
    summary = import_rows(None, read_csv_rows(_csv(bad)), "user1", dry_run=True)
    assert summary.errors == [
        "Row 2: invalid Date '31/02/2024'; unsupported Bookie 'Coral'; empty Fixture; invalid Stake (£) 'abc'"
    ]


def test_free_bet_and_cash_out_rows():
    rows = read_csv_rows(_csv(
        "09/03/2024,A v B,SkyBet,bb,FREE,5,1,3/1,Lost,",
        "09/03/2024,A v B,Betfair,Kane AGS,NORMAL,10,1,4.0,Cashed Out,6.50",
    ))
    db = MagicMock()
    import_rows(db, rows, "user1")
    free_bet, cashed = [c[0][0] for c in db.add.call_args_list]
    assert free_bet.selection == "Bet Builder"
    assert free_bet.bet_type == "Bet Builder"
    assert free_bet.odds == pytest.approx(4.0)
    assert free_bet.profit == 0
    assert cashed.result == "VOID"
    assert cashed.profit == pytest.approx(-3.5)


def test_uncategorized_report_is_distinct_and_capped():
    lines = [f"09/03/2024,A v B,Bet365,Player {i} header goal,NORMAL,1,1,2,,"
             for i in range(MAX_UNCATEGORIZED + 5)]
    lines.append("09/03/2024,A v B,Bet365,Player 0 header goal,NORMAL,1,1,2,,")
    summary = import_rows(None, read_csv_rows(_csv(*lines)), "user1", dry_run=True)
    assert summary.imported == MAX_UNCATEGORIZED + 6
    assert len(summary.uncategorized) == MAX_UNCATEGORIZED
    assert len(set(summary.uncategorized)) == MAX_UNCATEGORIZED
