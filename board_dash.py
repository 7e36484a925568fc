# board_dash.py
import logging
from dataclasses import asdict

import altair as alt
import pandas as pd
import streamlit as st

from board_config import MODULE_TARGETS, ModuleKey, load_targets
from board_models import BoardResult, BucketMode, EmptyResult, FlatResult
from derived_metrics import (
    aggregate, card_totals, chart_rows, module_metric_rows, module_view, period_label,
    summary_cards,
)
from extraction import ACCEPTED_EXTENSIONS, load_upload
from utils.styles import apply_global_styles, status_pill

TREND_ICONS = {"rising": "📈", "falling": "📉", "flat": "➡️"}
WEEKS = [f"WK{n}" for n in range(1, 53)]

logger = logging.getLogger("board_metrics")
st.set_page_config(page_title="Production Board", layout="wide")
apply_global_styles()


@st.cache_data(show_spinner=False)
def _targets():
    return load_targets(logger=logger)


def kpi_card(container, card):
    container.markdown(
        f"""
        <div style="padding:12px 16px;border-radius:10px;border:1px solid #e6f0fa;">
        <div style="display:flex;justify-content:space-between;font-size:13px;color:#6b7280;">
        <span>{card.label}</span>{status_pill(card.status.value)}</div>
        <div style="font-size:30px;font-weight:800;color:#1e293b;">{card.value:,.0f}</div>
        <div style="font-size:12px;color:#6b7280;">Target: {card.target:,.0f}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def module_panel(key: ModuleKey, bundle, mode, targets):
    view = module_view(bundle)
    table = []
    for m in module_metric_rows(view, mode, targets):
        table.append({
            "Metric": m.name,
            "Target": "—" if m.hide_target_actual else f"{m.target:,.0f}",
            "Actual": "—" if m.hide_target_actual else f"{m.actual:,.0f}",
            "Gap": f"{m.gap_to_target:+,.0f}",
            "Trend": TREND_ICONS[m.trend.value],
            "Status": m.status.value,
        })
    st.markdown(f'<div class="board-panel"><h3>{key.value}</h3></div>', unsafe_allow_html=True)
    st.dataframe(pd.DataFrame(table), use_container_width=True, hide_index=True)


def trend_chart(rows, title: str):
    df = pd.DataFrame([asdict(r) for r in rows])
    if df.empty:
        st.info("No series to plot for this selection.")
        return
    long = df.melt(id_vars=["name"], value_vars=["input", "output", "gap"], var_name="Series", value_name="Units")
    order = df["name"].tolist()
    mark = alt.Chart(long).mark_line(point=True) if len(df) > 1 else alt.Chart(long).mark_bar()
    chart = mark.encode(
        x=alt.X("name:N", title=None, sort=order),
        y=alt.Y("Units:Q", title="Units"),
        color=alt.Color("Series:N", scale=alt.Scale(range=["#0072ce", "#22c55e", "#ef4444"])),
        tooltip=[alt.Tooltip("name:N", title="Period"), alt.Tooltip("Series:N"),
                 alt.Tooltip("Units:Q", format=",.0f")],
    ).properties(title=title, height=300)
    st.altair_chart(chart, use_container_width=True)


if "result" not in st.session_state:
    st.session_state["result"] = EmptyResult()
module_targets, summary_targets = _targets()

c_file, c_week, c_mode = st.columns([4, 1, 1])
with c_file:
    upload = st.file_uploader("Upload board workbook", type=[ext.lstrip(".") for ext in ACCEPTED_EXTENSIONS])
with c_week:
    week = st.selectbox("Week", WEEKS, index=5)
with c_mode:
    mode = BucketMode(st.selectbox("Monitor", [m.value for m in BucketMode]))

if upload is not None and st.session_state.get("upload_id") != upload.file_id:
    result, error = load_upload(upload.getvalue(), upload.name, logger=logger)
    st.session_state["result"] = result
    st.session_state["upload_id"] = upload.file_id
    st.session_state["upload_error"] = error
if st.session_state.get("upload_error"):
    st.error(st.session_state["upload_error"])

result = st.session_state["result"]
active = None
if isinstance(result, BoardResult):
    keys = list(result.modules)
    active = st.selectbox("Module", keys, format_func=lambda k: k.value)
elif isinstance(result, FlatResult):
    st.caption(f"Tall-row sheet: {len(result.records)} records")

rows = chart_rows(result, active)
bucketed = aggregate(rows, mode, week)
cards = summary_cards(card_totals(result, active, mode, week), mode, len(rows) or 1, summary_targets)
for col, card in zip(st.columns(4), cards):
    kpi_card(col, card)

if isinstance(result, BoardResult):
    cols = st.columns(2)
    for i, (key, bundle) in enumerate(result.modules.items()):
        with cols[i % 2]:
            module_panel(key, bundle, mode, module_targets.get(key, MODULE_TARGETS[key]))

label = "7-Day Trend" if mode is BucketMode.DAILY else f"{mode.value.title()} Totals ({period_label(mode, week)})"
trend_chart(bucketed, f"{label} ({active.value})" if active else label)
