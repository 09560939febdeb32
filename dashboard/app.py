"""
Streamlit Dashboard
Brand Presence Tracker

Sections:
  1. Sidebar: analysis window
  2. Overview KPIs
  3. Alerts
  4. Mention Rate / Accuracy by platform
  5. Session trends
  6. Query performance drill-down
  7. Insights & Recommendations
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from typing import Optional
import logging

from agents.alerts import AlertThresholds, check_alerts
from agents.insights import mean_mention_rate
from config.settings import settings
from db.store import get_session_store
from models.schemas import Analysis, local_date_label
from utils.pipeline import run_analysis
from utils.report import fmt_pct, render_csv, render_json

logger = logging.getLogger(__name__)

# ─── Page Config ─────────────────────────────────────────────────────────────

st.set_page_config(
    page_title=f"AI Platform Tracker — {settings.BRAND_NAME}",
    page_icon="🤖",
    layout="wide",
)


# ─── Data ────────────────────────────────────────────────────────────────────

@st.cache_data(ttl=60, show_spinner=False)
def load_analysis(days: int) -> Optional[Analysis]:
    """None when the window is empty."""
    return run_analysis(get_session_store(settings), days, brand=settings.BRAND_NAME)


def platform_frame(analysis: Analysis) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Platform": platform,
            "Mention Rate": m.brand_mention_rate,
            "Avg Sentiment": m.avg_sentiment,
            "Sentiment Trend": m.sentiment_trend,
            "Avg Accuracy": m.avg_accuracy,
            "Accuracy Trend": m.accuracy_trend,
            "Success Rate": m.success_rate,
            "Sessions": m.total_sessions,
            "Queries": m.total_queries,
        }
        for platform, m in analysis.platform_metrics.items()
    ])


# ─── Sidebar ─────────────────────────────────────────────────────────────────

def render_sidebar() -> int:
    with st.sidebar:
        st.title("🤖 AI Platform Tracker")
        st.caption(f"Brand: **{settings.BRAND_NAME}**")
        st.divider()
        days = st.selectbox("Time range", [7, 14, 30, 90], index=2,
                            format_func=lambda d: f"Last {d} days")
        if st.button("🔄 Refresh", use_container_width=True):
            load_analysis.clear()
    return days


# ─── Sections ────────────────────────────────────────────────────────────────

def render_kpis(analysis: Analysis):
    ov = analysis.overview
    avg_rate = mean_mention_rate(analysis.platform_metrics)
    accuracies = [m.avg_accuracy for m in analysis.platform_metrics.values()]

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("📊 Sessions", ov.total_sessions)
    with col2:
        st.metric("🌐 Platforms", len(analysis.platform_metrics))
    with col3:
        st.metric("📣 Avg Mention Rate", fmt_pct(avg_rate))
    with col4:
        st.metric("🎯 Avg Accuracy", fmt_pct(sum(accuracies) / len(accuracies)))

    if ov.start and ov.end:
        st.caption(f"{local_date_label(ov.start)} → {local_date_label(ov.end)}")


def render_platform_charts(df: pd.DataFrame):
    col_l, col_r = st.columns(2)
    with col_l:
        fig = px.bar(df, x="Platform", y="Mention Rate", color="Platform",
                     title="Brand Mention Rate", range_y=[0, 1])
        fig.update_layout(showlegend=False, yaxis_tickformat=".0%")
        st.plotly_chart(fig, use_container_width=True)
    with col_r:
        fig = px.bar(df, x="Platform", y="Avg Accuracy", color="Platform",
                     title="Average Accuracy", range_y=[0, 1])
        fig.update_layout(showlegend=False, yaxis_tickformat=".0%")
        st.plotly_chart(fig, use_container_width=True)

    st.dataframe(df, hide_index=True, use_container_width=True)


def render_trends(analysis: Analysis):
    fig = go.Figure()
    for series in ("sentiment", "accuracy"):
        points = analysis.trends.get(series, [])
        fig.add_trace(go.Scatter(
            x=[p.date for p in points],
            y=[p.value for p in points],
            mode="lines+markers",
            name=series.title(),
        ))
    fig.update_layout(title="Session Averages Over Time", xaxis_title="Date")
    st.plotly_chart(fig, use_container_width=True)

    mentions = analysis.trends.get("mentions", [])
    fig = px.bar(x=[p.date for p in mentions], y=[p.value for p in mentions],
                 labels={"x": "Date", "y": "Mentions"}, title="Brand Mentions per Session")
    st.plotly_chart(fig, use_container_width=True)


def render_query_explorer(analysis: Analysis):
    platform = st.selectbox("Platform", list(analysis.platform_metrics))
    perf = analysis.platform_metrics[platform].query_performance
    if not perf:
        st.info("No successful queries recorded for this platform.")
        return
    st.dataframe(pd.DataFrame([
        {
            "Query": query,
            "Mention Rate": p.mention_rate,
            "Avg Sentiment": round(p.avg_sentiment, 3),
            "Avg Accuracy": round(p.avg_accuracy, 3),
            "Consistency": round(p.consistency, 3),
        }
        for query, p in perf.items()
    ]), hide_index=True, use_container_width=True)


def render_text_lists(analysis: Analysis):
    col_l, col_r = st.columns(2)
    with col_l:
        st.subheader("💡 Key Insights")
        for insight in analysis.insights or ["No notable changes."]:
            st.markdown(f"- {insight}")
    with col_r:
        st.subheader("🎯 Recommendations")
        for rec in analysis.recommendations or ["Nothing to recommend right now."]:
            st.markdown(f"- {rec}")


# ─── Main App ─────────────────────────────────────────────────────────────────

def main():
    st.title("🤖 AI Platform Brand Presence")
    days = render_sidebar()

    analysis = load_analysis(days)
    if analysis is None:
        st.info("No tracking data in this window yet. Record a tracking session to get started.")
        return

    render_kpis(analysis)

    alerts = check_alerts(analysis, AlertThresholds.from_settings(settings))
    for alert in alerts:
        st.warning(alert)
    st.divider()

    tab1, tab2, tab3, tab4 = st.tabs([
        "📊 Platforms",
        "📈 Trends",
        "🔎 Queries",
        "💡 Insights",
    ])
    with tab1:
        render_platform_charts(platform_frame(analysis))
    with tab2:
        render_trends(analysis)
    with tab3:
        render_query_explorer(analysis)
    with tab4:
        render_text_lists(analysis)

    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        st.download_button("⬇️ Export JSON", render_json(analysis),
                           file_name=f"ai-tracker-{days}d.json", mime="application/json")
    with col2:
        st.download_button("⬇️ Export CSV", render_csv(analysis),
                           file_name=f"ai-tracker-{days}d.csv", mime="text/csv")


if __name__ == "__main__":
    main()
