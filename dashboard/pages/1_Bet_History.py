"""Bet History page — filter, page through, settle, edit and delete bets."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import pandas as pd
import streamlit as st
from dashboard.utils import (
    RESULT_ICONS,
    api_delete,
    api_get,
    api_put,
    display_odds,
    format_money,
    sidebar_api_key,
    sidebar_odds_format,
)
from ledger.core.odds import parse_user_odds

st.set_page_config(page_title="Bet History | Bet Ledger", layout="wide")
sidebar_api_key()
odds_format = sidebar_odds_format()

st.title("Bet History")

bookmakers = (api_get("/api/bookmakers") or {}).get("bookmakers", [])
bet_types = (api_get("/api/bet-types") or {}).get("bet_types", [])

# --- Filters ---
col_f1, col_f2, col_f3, col_f4 = st.columns(4)
with col_f1:
    search = st.text_input("Search fixture / selection")
with col_f2:
    bookmaker = st.selectbox("Bookmaker", ["All"] + bookmakers)
with col_f3:
    result = st.selectbox("Result", ["All", "OPEN", "WON", "LOST", "VOID"])
with col_f4:
    bet_type = st.selectbox("Bet type", ["All"] + bet_types)

page_size = st.sidebar.selectbox("Rows per page", [10, 25, 50, 100], index=1)
page = st.session_state.get("history_page", 1)

params = {"page": page, "page_size": page_size}
if search:
    params["search"] = search
if bookmaker != "All":
    params["bookmaker"] = bookmaker
if result != "All":
    params["result"] = result
if bet_type != "All":
    params["bet_type"] = bet_type

data = api_get("/api/bets", params)

if not data or not data.get("bets"):
    st.info("No bets found for this filter.")
    st.stop()

df = pd.DataFrame(data["bets"])
df["odds_display"] = df["odds"].apply(lambda o: display_odds(o, odds_format))
df["status"] = df["result"].map(lambda r: f"{RESULT_ICONS.get(r, '')} {r}")
df["profit_display"] = df["profit"].apply(format_money)

rename_map = {
    "id": "ID", "placedAt": "Date", "bookmaker": "Bookie", "fixture": "Fixture",
    "selection": "Selection", "betType": "Type", "playerPropMarket": "Market",
    "stakeType": "Stake Type", "stake": "Stake (£)", "odds_display": "Odds",
    "potentialReturn": "Returns (£)", "status": "Result", "profit_display": "P&L",
}

st.write(f"**{data['total']} bet(s)** — page {data['page']} of {max(data['pages'], 1)}")
st.dataframe(
    df[list(rename_map)].rename(columns=rename_map),
    use_container_width=True,
    hide_index=True,
)

# --- Pagination ---
prev_col, _, next_col = st.columns([1, 6, 1])
if prev_col.button("◀ Prev", disabled=page <= 1):
    st.session_state["history_page"] = page - 1
    st.rerun()
if next_col.button("Next ▶", disabled=page >= data["pages"]):
    st.session_state["history_page"] = page + 1
    st.rerun()

# --- Edit / delete ---
st.markdown("---")
st.subheader("Edit a Bet")

options = {f"#{b['id']} — {b['selection']} ({b['fixture']})": b for b in data["bets"]}
chosen = options[st.selectbox("Bet", list(options))]

with st.form(f"edit_{chosen['id']}"):
    col1, col2 = st.columns(2)
    with col1:
        new_result = st.selectbox(
            "Result", ["OPEN", "WON", "LOST", "VOID"],
            index=["OPEN", "WON", "LOST", "VOID"].index(chosen["result"]),
        )
        cash_out = st.text_input(
            "Cash out value (£, VOID only)",
            value="" if chosen["cashOutValue"] is None else f"{chosen['cashOutValue']:.2f}",
        )
        new_selection = st.text_input("Selection", value=chosen["selection"])
    with col2:
        new_stake = st.text_input("Stake (£)", value=f"{chosen['stake']:.2f}")
        new_odds = st.text_input(
            f"Odds ({odds_format.value})", value=display_odds(chosen["odds"], odds_format),
        )
        new_fixture = st.text_input("Fixture", value=chosen["fixture"])

    save_col, delete_col = st.columns(2)
    save = save_col.form_submit_button("Save", type="primary")
    delete = delete_col.form_submit_button("Delete")

if save:
    # Unchanged fractional text would round-trip to an approximation, so keep stored odds
    odds_changed = new_odds.strip() != display_odds(chosen["odds"], odds_format)
    odds = parse_user_odds(new_odds, odds_format) if odds_changed else chosen["odds"]
    if odds is None:
        st.error(f"'{new_odds}' is not valid {odds_format.value} odds.")
    else:
        changes = {
            "result": new_result,
            "cashOutValue": cash_out or None,
            "selection": new_selection,
            "fixture": new_fixture,
            "stake": new_stake,
            "odds": odds,
        }
        updated = api_put(f"/api/bets/{chosen['id']}", changes)
        if updated:
            st.success(f"Bet #{updated['id']} saved. P&L: **{format_money(updated['profit'])}**")
            st.rerun()

if delete and api_delete(f"/api/bets/{chosen['id']}"):
    st.success(f"Bet #{chosen['id']} deleted.")
    st.rerun()

# --- CSV export ---
st.markdown("---")
csv = df[list(rename_map)].rename(columns=rename_map).to_csv(index=False).encode("utf-8")
st.download_button(
    label="Export page to CSV",
    data=csv,
    file_name="bet_ledger_history.csv",
    mime="text/csv",
)
