"""Shared utilities for all dashboard pages."""

import math
import os
import requests
import streamlit as st
from dotenv import load_dotenv

from ledger.core.odds import OddsFormat, format_odds_for_display

load_dotenv()

_API_URL = os.getenv("API_URL", "http://localhost:8000")
_API_KEY = os.getenv("API_KEY_USER1", "")


def _key() -> str:
    return st.session_state.get("api_key", _API_KEY)


def _headers() -> dict:
    return {"X-API-Key": _key()}


def _show_http_error(exc: requests.HTTPError) -> None:
    response = exc.response
    if response is None:
        st.error(f"Request failed: {exc}")
        return
    try:
        detail = response.json().get("detail", str(exc))
    except ValueError:
        detail = str(exc)
    # 422 bodies carry one message per rejected field
    if isinstance(detail, dict) and detail.get("errors"):
        lines = "\n".join(f"- **{e['field']}**: {e['message']}" for e in detail["errors"])
        st.error(f"{detail.get('message', 'Rejected')}\n{lines}")
    else:
        st.error(f"API {response.status_code}: {detail}")


def _send(method: str, endpoint: str, payload: dict = None):
    try:
        r = requests.request(
            method,
            f"{_API_URL}{endpoint}",
            headers={**_headers(), "Content-Type": "application/json"},
            json=payload,
            timeout=15,
        )
        r.raise_for_status()
        return r.json() if r.content else {}
    except requests.HTTPError as exc:
        _show_http_error(exc)
        return None
    except Exception as exc:
        st.error(f"Request failed: {exc}")
        return None


def api_get(endpoint: str, params: dict = None):
    try:
        r = requests.get(f"{_API_URL}{endpoint}", headers=_headers(), params=params, timeout=15)
        r.raise_for_status()
        return r.json()
    except Exception as exc:
        st.error(f"API error: {exc}")
        return None


def api_post(endpoint: str, payload: dict):
    return _send("POST", endpoint, payload)


def api_put(endpoint: str, payload: dict):
    return _send("PUT", endpoint, payload)


def api_delete(endpoint: str) -> bool:
    return _send("DELETE", endpoint) is not None


def sidebar_api_key() -> None:
    """Show API key input in sidebar if the key is not yet set."""
    if not _key():
        with st.sidebar:
            key_input = st.text_input("API Key", type="password", key="api_key_sidebar")
            if key_input:
                st.session_state["api_key"] = key_input
                st.rerun()


def sidebar_odds_format() -> OddsFormat:
    """Decimal/fractional toggle shared by every page."""
    with st.sidebar:
        choice = st.radio(
            "Odds format",
            [OddsFormat.DECIMAL.value, OddsFormat.FRACTIONAL.value],
            key="odds_format",
            horizontal=True,
        )
    return OddsFormat(choice)


def display_odds(decimal_odds, odds_format: OddsFormat) -> str:
    if decimal_odds is None or (isinstance(decimal_odds, float) and math.isnan(decimal_odds)):
        return ""
    return format_odds_for_display(float(decimal_odds), odds_format)


def format_money(value) -> str:
    """Signed pounds; undetermined profit shows as a dash, not £0."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "—"
    return f"£{value:+,.2f}"


def profit_by_group(groups: dict):
    """
    Split a summary breakdown into bar-chart rows and the names of groups
    whose profit is undetermined.  Undetermined groups are never drawn as 0.
    """
    rows = []
    undetermined = []
    for name, stats in groups.items():
        if stats.get("total_profit") is None:
            undetermined.append(name)
        else:
            rows.append({"group": name, "profit": stats["total_profit"], "bets": stats["bets"]})
    return rows, undetermined


RESULT_ICONS = {
    "WON":  "🟢",
    "LOST": "🔴",
    "VOID": "⚪",
    "OPEN": "🔵",
}
