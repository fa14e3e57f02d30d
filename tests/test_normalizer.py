"""Tests for normalizer.py: enumerated fields, keyword inference, numbers and dates."""

from datetime import date, datetime

import pytest

from ledger.core.normalizer import (
    BET_TYPE_RULES,
    PLAYER_PROP_MARKET_RULES,
    canonical_selection,
    check_bookmaker,
    check_cash_out_value,
    check_odds,
    check_placed_at,
    check_required_text,
    check_result,
    check_stake,
    check_stake_type,
    clean_number,
    infer_bet_type,
    infer_player_prop_market,
    normalize_bookmaker,
    normalize_result,
    normalize_stake_type,
    parse_placed_at,
)
from ledger.core.taxonomy import BetResult, BetType, Bookmaker, PlayerPropMarket, StakeType
from ledger.core.validation import Accepted, Defaulted, Rejected


# ---------------------------------------------------------------------------
# Bookmaker
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw, expected", [
    ("BET365",        Bookmaker.BET365),
    ("bet365",        Bookmaker.BET365),
    ("  Bet365 ",     Bookmaker.BET365),
    ("paddypower",    Bookmaker.PADDYPOWER),
    ("WILLIAMHILL",   Bookmaker.WILLIAMHILL),
    ("betuk",         Bookmaker.BETUK),
    ("bet 365",       None),
    ("Paddy Power",   None),
    ("Coral",         None),
    ("",              None),
    (None,            None),
])
def test_normalize_bookmaker(raw, expected):
    assert normalize_bookmaker(raw) == expected


def test_bookmaker_compares_as_string():
    assert normalize_bookmaker("BET365") == "Bet365"


# ---------------------------------------------------------------------------
# Result and stake type
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw, expected", [
    ("win",         BetResult.WON),
    ("WON",         BetResult.WON),
    ("Loss",        BetResult.LOST),
    ("lost",        BetResult.LOST),
    ("void",        BetResult.VOID),
    ("Cashed Out",  BetResult.VOID),
    ("cashed_out",  BetResult.VOID),
    ("CASHEDOUT",   BetResult.VOID),
    ("open",        BetResult.OPEN),
    ("pending",     BetResult.OPEN),
    ("",            BetResult.OPEN),
    (None,          BetResult.OPEN),
])
def test_normalize_result(raw, expected):
    assert normalize_result(raw) is expected


@pytest.mark.parametrize("raw, expected", [
    ("FREE",    StakeType.FREE),
    (" free ",  StakeType.FREE),
    ("NORMAL",  StakeType.NORMAL),
    ("promo",   StakeType.NORMAL),
    (None,      StakeType.NORMAL),
])
def test_normalize_stake_type(raw, expected):
    assert normalize_stake_type(raw) is expected


# ---------------------------------------------------------------------------
# Bet type inference
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("selection, expected", [
    ("Arsenal x Chelsea x Spurs",  BetType.ACCUMULATOR),
    ("Saturday acca",              BetType.ACCUMULATOR),
    ("5 fold Accumulator",         BetType.ACCUMULATOR),
    ("Saka + Kane builder",        BetType.ACCUMULATOR),  # accumulator rule is checked first
    ("bb",                         BetType.BET_BUILDER),
    ("Saka bet builder",           BetType.BET_BUILDER),
    ("superboost",                 BetType.SUPERBOOST),
    ("Superboost Kane 2+ goals",   BetType.PLAYER_PROP),  # equality only
    ("Salah 1+ SOT",               BetType.PLAYER_PROP),
    ("Arsenal to win",             BetType.PLAYER_PROP),  # no FT Result at creation time
    ("",                           BetType.PLAYER_PROP),
])
def test_infer_bet_type(selection, expected):
    assert infer_bet_type(selection) is expected


def test_bet_type_rules_are_ordered():
    assert [bet_type for _, bet_type in BET_TYPE_RULES] == [
        BetType.ACCUMULATOR, BetType.BET_BUILDER, BetType.SUPERBOOST,
    ]


# ---------------------------------------------------------------------------
# Player prop market inference
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("selection, expected", [
    ("Messi AGS",                    PlayerPropMarket.AGS),
    ("Haaland anytime goalscorer",   PlayerPropMarket.AGS),
    ("Saka U1.5 SOT",                PlayerPropMarket.SOT_UNDER),
    ("Saka under 1.5 shots on target", PlayerPropMarket.SOT_UNDER),
    ("Kane 2+ shots on target",      PlayerPropMarket.SOT_OVER),
    ("Kane over 2.5 shots",          PlayerPropMarket.SHOTS_OVER),
    ("Kane under 2.5 shots",         PlayerPropMarket.SHOTS_UNDER),
    ("Kumbedi 1+ fouls won",         PlayerPropMarket.FOULS_WON_OVER),
    ("Xhaka 2+ fouls committed",     PlayerPropMarket.FOULS_COMMITTED_OVER),
    ("Xhaka 2+ fouls",               PlayerPropMarket.FOULS_COMMITTED_OVER),
    ("Rice 2+ tackles",              PlayerPropMarket.TACKLES_OVER),
    ("Casemiro to be carded",        PlayerPropMarket.TO_BE_CARDED),
    ("random text",                  None),
    ("bags of goals",                None),  # "ags" only as a word
    ("",                             None),
    (None,                           None),
])
def test_infer_player_prop_market(selection, expected):
    assert infer_player_prop_market(selection) == expected


def test_sot_rules_win_over_shots():
    markets = [m for _, m in PLAYER_PROP_MARKET_RULES]
    assert markets.index(PlayerPropMarket.SOT_OVER) < markets.index(PlayerPropMarket.SHOTS_OVER)
    assert infer_player_prop_market("Saka shots on target") is PlayerPropMarket.SOT_OVER


def test_canonical_selection_expands_bb():
    assert canonical_selection(" BB ") == "Bet Builder"
    assert canonical_selection(" Saka 1+ SOT ") == "Saka 1+ SOT"


# ---------------------------------------------------------------------------
# Numbers and dates
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw, expected", [
    ("£1,250.50", 1250.5),
    ("€ 10",      10.0),
    ("$5",        5.0),
    ("2.5",       2.5),
    (7,           7.0),
    ("abc",       None),
    ("",          None),
    ("£",         None),
    (None,        None),
    (True,        None),
    ("nan",       None),
])
def test_clean_number(raw, expected):
    assert clean_number(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("2024-03-09",                  date(2024, 3, 9)),
    ("2024-03-09T10:00:00Z",        date(2024, 3, 9)),
    ("2024-03-09T23:30:00-02:00",   date(2024, 3, 10)),  # UTC calendar day
    ("09/03/2024",                  date(2024, 3, 9)),   # day first
    ("09/03/24",                    date(2024, 3, 9)),
    ("09-03-2024",                  date(2024, 3, 9)),
    ("9 Mar 2024",                  date(2024, 3, 9)),
    ("9 March 2024",                date(2024, 3, 9)),
    (datetime(2024, 3, 9, 21, 15),  date(2024, 3, 9)),
    (date(2024, 3, 9),              date(2024, 3, 9)),
    ("31/02/2024",                  None),
    ("yesterday",                   None),
    ("",                            None),
    (None,                          None),
])
def test_parse_placed_at(raw, expected):
    assert parse_placed_at(raw) == expected


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------

def test_hard_fail_validators_reject_with_label():
    assert check_bookmaker("bet 365") == Rejected("unsupported bookmaker 'bet 365'")
    assert check_stake("0", "Stake (£)") == Rejected("invalid Stake (£) '0'")
    assert check_odds("0.5", "Odds") == Rejected("invalid Odds '0.5'")
    assert check_required_text("   ", "fixture") == Rejected("empty fixture")
    assert check_placed_at("soon") == Rejected("invalid placedAt 'soon'")


def test_hard_fail_validators_accept():
    assert check_bookmaker("skybet") == Accepted(Bookmaker.SKYBET)
    assert check_stake("£10") == Accepted(10.0)
    assert check_odds("6/4") == Accepted(2.5)
    assert check_odds(1) == Accepted(1.0)
    assert check_odds("2.3333333") == Accepted(2.33333)


def test_rejected_has_no_value():
    assert Rejected("nope").value is None


def test_soft_validators_default():
    assert check_stake_type("promo") == Defaulted(StakeType.NORMAL, "promo")
    assert check_result("") == Defaulted(BetResult.OPEN, "")
    assert check_result("Cashed Out") == Accepted(BetResult.VOID)
    assert check_result("open") == Accepted(BetResult.OPEN)


@pytest.mark.parametrize("raw, result, expected", [
    ("7",    BetResult.VOID, Accepted(7.0)),
    ("£0",   BetResult.VOID, Accepted(0.0)),
    (None,   BetResult.VOID, Accepted(None)),
    ("-1",   BetResult.VOID, Defaulted(None, "-1")),
    ("7",    BetResult.WON,  Defaulted(None, "7")),
    ("",     BetResult.LOST, Accepted(None)),
])
def test_check_cash_out_value(raw, result, expected):
    assert check_cash_out_value(raw, result) == expected
