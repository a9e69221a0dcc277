"""
backtestlab dashboard: journal stats, cumulative-R curve and the trade table.
Run from repo root: streamlit run dashboard/app.py
Or with a journal file: BTL_JOURNAL_PATH=/path/to/journal.json streamlit run dashboard/app.py
"""

import math

import streamlit as st

from data_reader import (
    _journal_path,
    get_equity_curve,
    get_journal_rows,
    get_setup_breakdown,
    get_stats,
    load_records,
)

st.set_page_config(page_title="backtestlab", layout="wide")
st.title("backtestlab Journal")

path = _journal_path()
records = load_records(path)

if st.button("Refresh"):
    st.rerun()

if not records:
    st.warning(f"No trades found in: `{path}`")
    st.caption("Close a trade in `btl shell` (or point BTL_JOURNAL_PATH at a journal file).")
    st.stop()

stats = get_stats(records)
pf = "∞" if math.isinf(stats.profit_factor) else f"{stats.profit_factor:.2f}"

c1, c2, c3, c4, c5 = st.columns(5)
with c1:
    st.metric("Trades", stats.count)
    st.caption(f"W {stats.wins} / L {stats.losses} / F {stats.flats}")
with c2:
    st.metric("Win rate", f"{stats.win_rate:.1f}%")
with c3:
    st.metric("Expectancy", f"{stats.expectancy:+.2f}R")
with c4:
    st.metric("Profit factor", pf)
with c5:
    st.metric("Max drawdown", f"{stats.max_drawdown:.2f}R")

st.subheader("Cumulative R")
st.line_chart(get_equity_curve(records))

with st.expander("By setup", expanded=False):
    st.dataframe(get_setup_breakdown(records), use_container_width=True)

st.subheader("Trades")
st.dataframe(get_journal_rows(records), use_container_width=True)
