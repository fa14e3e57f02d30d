"""
Streamlit Dashboard for the Bet Ledger
P&L overview and bet entry; history lives in pages/1_Bet_History.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date

import pandas as pd
import plotly.graph_objects as go
import plotly.express as px
import streamlit as st

from dashboard.utils import (
    api_get,
    api_post,
    display_odds,
    format_money,
    profit_by_group,
    sidebar_api_key,
    sidebar_odds_format,
)
from ledger.core.odds import OddsFormat, parse_user_odds

st.set_page_config(
    page_title="Bet Ledger",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)

sidebar_api_key()
odds_format = sidebar_odds_format()

with st.sidebar:
    st.markdown("---")
    st.caption("See sidebar pages for the full bet history.")


# ==============================================================================
# P&L OVERVIEW
# ==============================================================================

st.title("Bet Ledger")

perf = api_get("/api/performance/summary")

if perf and perf.get("total_bets", 0) > 0:
    overall = perf["overall"]

    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Bets", overall["bets"], delta=f"{overall['open']} open", delta_color="off")
    c2.metric("Staked", f"£{overall['total_staked']:,.2f}")
    c3.metric("Profit", format_money(overall["total_profit"]))
    roi = overall.get("roi")
    c4.metric("ROI", f"{roi:.1%}" if roi is not None else "—")
    c5.metric("Win Rate", f"{overall['win_rate']:.1%}")

    if overall.get("undetermined"):
        st.caption(
            f"{overall['undetermined']} bet(s) with undetermined profit "
            "(open, or cashed out without an amount) are not in the totals."
        )

    history = api_get("/api/performance/history")
    points = (history or {}).get("data_points", [])
    if points:
        st.subheader("Cumulative P&L")
        df_hist = pd.DataFrame(points)
        last = df_hist["cumulative_profit"].iloc[-1]
        fig_pl = go.Figure()
        fig_pl.add_trace(go.Scatter(
            x=df_hist["bet_number"],
            y=df_hist["cumulative_profit"],
            mode="lines",
            fill="tozeroy",
            fillcolor="rgba(0,180,0,0.1)" if last >= 0 else "rgba(220,0,0,0.1)",
            line=dict(color="green" if last >= 0 else "red"),
            customdata=df_hist[["date", "bookmaker", "bet_type"]],
            hovertemplate="%{customdata[0]} %{customdata[1]} (%{customdata[2]})<br>£%{y:.2f}<extra></extra>",
        ))
        fig_pl.add_hline(y=0, line_dash="dash", line_color="gray")
        fig_pl.update_layout(xaxis_title="Bet Number", yaxis_title="Cumulative P&L (£)", height=320)
        st.plotly_chart(fig_pl, use_container_width=True)

    col_bk, col_bt = st.columns(2)
    for col, key, title in (
        (col_bk, "by_bookmaker", "Profit by Bookmaker"),
        (col_bt, "by_bet_type", "Profit by Bet Type"),
    ):
        rows, undetermined = profit_by_group(perf.get(key, {}))
        if rows:
            df = pd.DataFrame(rows)
            fig = px.bar(
                df, x="group", y="profit", text="bets",
                color=df["profit"] >= 0,
                color_discrete_map={True: "green", False: "red"},
            )
            fig.update_layout(title=title, showlegend=False, xaxis_title="", yaxis_title="Profit (£)", height=300)
            col.plotly_chart(fig, use_container_width=True)
        if undetermined:
            col.caption(f"Profit undetermined (all open or unknown cash-out): {', '.join(undetermined)}")
else:
    st.info("No bets recorded yet. Add one below or import a CSV with scripts/import_bets.py.")


# ==============================================================================
# ADD BET
# ==============================================================================

st.markdown("---")
st.subheader("Add Bet")

ref = api_get("/api/bookmakers") or {}
markets = api_get("/api/player-prop-markets") or {}
bet_types = api_get("/api/bet-types") or {}

with st.form("add_bet_form", clear_on_submit=True):
    col1, col2, col3 = st.columns(3)
    with col1:
        placed_at = st.date_input("Date", value=date.today())
        bookmaker = st.selectbox("Bookmaker", ref.get("bookmakers", []))
        fixture = st.text_input("Fixture", placeholder="Arsenal v Chelsea")
    with col2:
        selection = st.text_input("Selection", placeholder='e.g. "Saka 1+ SOT" or "bb"')
        bet_type = st.selectbox("Bet Type", ["(infer)"] + bet_types.get("bet_types", []))
        market = st.selectbox("Player Prop Market", ["(infer)"] + markets.get("player_prop_markets", []))
    with col3:
        stake = st.text_input("Stake (£)", placeholder="10.00")
        stake_type = st.radio("Stake Type", ["NORMAL", "FREE"], horizontal=True)
        odds_text = st.text_input(
            f"Odds ({odds_format.value})",
            placeholder="2.5" if odds_format is OddsFormat.DECIMAL else "6/4",
        )

    submitted = st.form_submit_button("Add Bet", type="primary")

if submitted:
    odds = parse_user_odds(odds_text, odds_format)
    if odds is None:
        st.error(f"'{odds_text}' is not valid {odds_format.value} odds.")
    else:
        payload = {
            "placedAt": placed_at.isoformat(),
            "bookmaker": bookmaker,
            "fixture": fixture,
            "selection": selection,
            "stake": stake,
            "stakeType": stake_type,
            "odds": odds,
            "result": "OPEN",
            "betType": None if bet_type == "(infer)" else bet_type,
            "playerPropMarket": None if market == "(infer)" else market,
        }
        created = api_post("/api/bets", payload)
        if created:
            st.success(
                f"Bet #{created['id']} added: **{created['selection']}** "
                f"@ {display_odds(created['odds'], odds_format)} ({created['betType']})"
            )


# Footer
st.markdown("---")
st.caption("Bet Ledger v1.0 | Built with Streamlit")
