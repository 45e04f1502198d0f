#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import pandas as pd
import requests
import streamlit as st


ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sheet_insights import settings  # noqa: E402
from sheet_insights.charts import ChartSelection, build_chart_bundle  # noqa: E402
from sheet_insights.column_detector import classify_columns  # noqa: E402
from sheet_insights.contracts import build_insights, build_upload_payload  # noqa: E402
from sheet_insights.errors import SheetInsightsError  # noqa: E402
from sheet_insights.loader import ALL_FORMATS, load_bytes  # noqa: E402
from sheet_insights.table import CanonicalTable  # noqa: E402
from sheet_insights.table_view import (  # noqa: E402
    ASC,
    DESC,
    TableViewState,
    apply_view,
    default_view_state,
    toggle_sort,
    view_summary,
    with_column_filter,
    with_search,
)
from sheet_insights.trends import analyse_trends  # noqa: E402

HEALTH_TIMEOUT_SECONDS = 2
UPLOAD_TIMEOUT_SECONDS = 120
TREND_ICONS = {"increasing": "📈", "decreasing": "📉", "stable": "➡️"}
CHART_COLORS = ["#6C3BAA", "#8B5BD9", "#A47CE5", "#BD9DF0", "#D6BEFB"]
SORT_ARROWS = {ASC: "▲", DESC: "▼"}
SORT_BUTTONS_PER_ROW = 6
VIEW_WIDGET_KEYS = {"search_term", "sort_column", "sort_direction", "bar_column", "pie_column", "scatter_x", "scatter_y"}


def ensure_state() -> None:
    st.session_state.setdefault("upload", None)
    st.session_state.setdefault("upload_source", None)
    st.session_state.setdefault("upload_error", None)
    st.session_state.setdefault("uploader_key", 0)
    st.session_state.setdefault("last_attempt", None)


def check_api_health() -> str:
    try:
        response = requests.get(f"{settings.API_BASE}/health", timeout=HEALTH_TIMEOUT_SECONDS)
    except requests.RequestException:
        return "offline"
    return "online" if response.ok else "offline"


def render_connection_status() -> None:
    status = check_api_health()
    dot = "🟢" if status == "online" else "🔴"
    label = "Online" if status == "online" else "Offline (files are parsed locally)"
    st.caption(f"{dot} API: `{settings.API_BASE}` · {label}")


def upload_via_api(name: str, content: bytes, content_type: Optional[str]) -> dict:
    response = requests.post(
        f"{settings.API_BASE}/upload",
        files={"file": (name, content, content_type or "application/octet-stream")},
        timeout=UPLOAD_TIMEOUT_SECONDS,
    )
    payload = response.json()
    if not response.ok:
        message = payload.get("error") or f"Upload failed with HTTP {response.status_code}"
        if payload.get("details"):
            message = f"{message}. {payload['details']}"
        raise RuntimeError(message)
    return payload


def upload_locally(name: str, content: bytes, content_type: Optional[str]) -> dict:
    try:
        result = load_bytes(content, name, content_type)
    except SheetInsightsError as exc:
        raise RuntimeError(f"{exc}. {exc.hint}" if exc.hint else str(exc)) from exc
    return build_upload_payload(result["table"], name)


def handle_upload(uploaded) -> None:
    content = uploaded.getvalue()
    attempt = (uploaded.name, len(content))
    if attempt == st.session_state["last_attempt"]:
        return
    st.session_state["last_attempt"] = attempt
    try:
        try:
            payload = upload_via_api(uploaded.name, content, uploaded.type)
            source = "api"
        except requests.RequestException:
            payload = upload_locally(uploaded.name, content, uploaded.type)
            source = "local"
    except RuntimeError as exc:
        st.session_state["upload_error"] = str(exc)
        return

    reset_view_widgets()
    defaults = default_view_state(payload["columns"])
    st.session_state["upload"] = payload
    st.session_state["upload_source"] = source
    st.session_state["upload_error"] = None
    st.session_state["search_term"] = defaults.search_term
    st.session_state["sort_column"] = defaults.sort_column
    st.session_state["sort_direction"] = defaults.sort_direction


def reset_view_widgets() -> None:
    for key in list(st.session_state.keys()):
        if str(key).startswith(("filter_", "sort_button_")) or key in VIEW_WIDGET_KEYS:
            del st.session_state[key]


def reset_upload() -> None:
    reset_view_widgets()
    st.session_state["upload"] = None
    st.session_state["upload_error"] = None
    st.session_state["last_attempt"] = None
    st.session_state["uploader_key"] += 1


def table_from_payload(payload: dict) -> CanonicalTable:
    return CanonicalTable(
        columns=tuple(payload["columns"]),
        rows=tuple(payload["data"]),
    )


def render_upload_form() -> None:
    st.subheader("Upload Excel or CSV File")
    uploaded = st.file_uploader(
        "Choose a file",
        type=[ext.lstrip(".") for ext in sorted(ALL_FORMATS)],
        key=f"uploader_{st.session_state['uploader_key']}",
    )
    if uploaded is not None:
        with st.spinner("Uploading and parsing..."):
            handle_upload(uploaded)
        if st.session_state["upload"] is not None:
            st.rerun()
    if st.session_state["upload_error"]:
        st.error(st.session_state["upload_error"])


def current_view_state(table: CanonicalTable) -> TableViewState:
    state = TableViewState(
        sort_column=st.session_state.get("sort_column"),
        sort_direction=st.session_state.get("sort_direction", ASC),
    )
    state = with_search(state, st.session_state.get("search_term", ""))
    for column in table.columns:
        state = with_column_filter(state, column, st.session_state.get(f"filter_{column}", ""))
    return state


def on_sort_click(column: str) -> None:
    state = TableViewState(
        sort_column=st.session_state.get("sort_column"),
        sort_direction=st.session_state.get("sort_direction", ASC),
    )
    state = toggle_sort(state, column)
    st.session_state["sort_column"] = state.sort_column
    st.session_state["sort_direction"] = state.sort_direction


def render_sort_buttons(table: CanonicalTable, state: TableViewState) -> None:
    """Header-style buttons: clicking the sorted column flips its direction."""
    st.caption("Sort by")
    columns = list(table.columns)
    for start in range(0, len(columns), SORT_BUTTONS_PER_ROW):
        chunk = columns[start : start + SORT_BUTTONS_PER_ROW]
        slots = st.columns(SORT_BUTTONS_PER_ROW)
        for slot, column in zip(slots, chunk):
            arrow = f" {SORT_ARROWS[state.sort_direction]}" if column == state.sort_column else ""
            slot.button(
                f"{column}{arrow}",
                key=f"sort_button_{column}",
                on_click=on_sort_click,
                args=(column,),
                width="stretch",
            )


def render_table(table: CanonicalTable, filename: str) -> None:
    st.subheader(filename)
    st.text_input("Search all columns...", key="search_term")
    with st.expander("Column filters"):
        filter_cols = st.columns(min(len(table.columns), 4) or 1)
        for index, column in enumerate(table.columns):
            filter_cols[index % len(filter_cols)].text_input(f"Filter {column}", key=f"filter_{column}")

    state = current_view_state(table)
    render_sort_buttons(table, state)

    rows = apply_view(table.rows, table.columns, state)
    st.caption(view_summary(len(rows), table.row_count, len(table.columns)))
    st.dataframe(pd.DataFrame(rows, columns=list(table.columns)), width="stretch", hide_index=True)


def render_trends(trends: dict) -> None:
    if not trends:
        return
    st.markdown("**Trends Detected**")
    cards = st.columns(min(len(trends), 4))
    for index, (column, trend) in enumerate(trends.items()):
        sign = "+" if trend["change_percent"] > 0 else ""
        cards[index % len(cards)].metric(
            f"{TREND_ICONS[trend['direction']]} {column}",
            trend["direction"],
            f"{sign}{trend['change_percent']}%",
            delta_color="off" if trend["direction"] == "stable" else "normal",
        )


def current_chart_selection() -> ChartSelection:
    return ChartSelection(
        bar_column=st.session_state.get("bar_column"),
        pie_column=st.session_state.get("pie_column"),
        scatter_x=st.session_state.get("scatter_x"),
        scatter_y=st.session_state.get("scatter_y"),
    )


def render_charts(table: CanonicalTable, classification: dict) -> None:
    st.subheader("Data Visualization")
    numeric = classification["numeric_columns"]
    categorical = classification["categorical_columns"]
    if not numeric:
        st.info("No numeric data found to visualize. Upload a file with numeric columns to see charts.")
        return

    render_trends(analyse_trends(table, numeric))

    left, right = st.columns(2)
    with left:
        st.selectbox("Bar Chart", numeric, key="bar_column")
    with right:
        st.markdown("**Trends Over Time**")
    bottom_left, bottom_right = st.columns(2)
    with bottom_left:
        if categorical:
            st.selectbox("Distribution - Pie Chart", categorical, key="pie_column")
    with bottom_right:
        st.markdown("**Scatter Chart**")
        x_col, y_col = st.columns(2)
        x_col.selectbox("X", numeric, key="scatter_x")
        y_col.selectbox("Y", numeric, index=1 if len(numeric) > 1 else 0, key="scatter_y")

    bundle = build_chart_bundle(table, classification, current_chart_selection())

    with left:
        if bundle["bar"]["data"]:
            st.bar_chart(pd.DataFrame(bundle["bar"]["data"]), x="name", y="value", color=CHART_COLORS[0])
    with right:
        if bundle["line"]["data"]:
            line_columns = bundle["line"]["columns"]
            st.line_chart(
                pd.DataFrame(bundle["line"]["data"]),
                x="name",
                y=line_columns,
                color=CHART_COLORS[: len(line_columns)],
            )
    with bottom_left:
        if bundle["pie"]["data"]:
            st.vega_lite_chart(
                pd.DataFrame(bundle["pie"]["data"]),
                {
                    "mark": {"type": "arc", "tooltip": True},
                    "encoding": {
                        "theta": {"field": "value", "type": "quantitative"},
                        "color": {
                            "field": "name",
                            "type": "nominal",
                            "sort": None,
                            "scale": {"range": CHART_COLORS},
                        },
                    },
                },
            )
    with bottom_right:
        if bundle["scatter"]["data"]:
            st.scatter_chart(pd.DataFrame(bundle["scatter"]["data"]), x="x", y="y", color=CHART_COLORS[0])


def render_insights(table: CanonicalTable, classification: dict) -> None:
    st.markdown("**Quick Insights**")
    st.markdown("\n".join(f"- {line}" for line in build_insights(table, classification)))


def main() -> None:
    st.set_page_config(page_title="Excel Insights", page_icon="📊", layout="wide")
    ensure_state()

    st.title("Excel Insights")
    st.caption("Lightweight Excel & CSV Analysis Tool")
    render_connection_status()

    payload = st.session_state["upload"]
    if payload is None:
        render_upload_form()
        return

    table = table_from_payload(payload)
    info, action = st.columns([4, 1])
    source_note = " (parsed locally)" if st.session_state["upload_source"] == "local" else ""
    info.success(f"**{payload['filename']}** - {payload['rowCount']} rows, {len(payload['columns'])} columns{source_note}")
    if action.button("Upload New File", width="stretch"):
        reset_upload()
        st.rerun()

    classification = classify_columns(table)
    render_table(table, payload["filename"])
    render_charts(table, classification)
    render_insights(table, classification)


if __name__ == "__main__":
    main()
