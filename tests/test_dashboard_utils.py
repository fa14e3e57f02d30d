"""Tests for the pure dashboard helpers."""

from dashboard.utils import format_money, profit_by_group


def test_undetermined_groups_are_not_plotted_as_zero():
    groups = {
        "Bet365": {"bets": 2, "total_profit": 5.0},
        "SkyBet": {"bets": 1, "total_profit": None},
        "Betfair": {"bets": 1, "total_profit": 0.0},
    }
    rows, undetermined = profit_by_group(groups)
    assert [r["group"] for r in rows] == ["Bet365", "Betfair"]
    assert rows[1]["profit"] == 0.0
    assert undetermined == ["SkyBet"]


def test_format_money_undetermined():
    assert format_money(None) == "—"
    assert format_money(float("nan")) == "—"
    assert format_money(-3.5) == "£-3.50"
