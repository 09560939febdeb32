"""
Text, JSON and CSV renderings of an Analysis.

Undefined rates (None) render as "n/a" and as an empty progress bar.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from models.schemas import Analysis, local_date_label

logger = logging.getLogger(__name__)

REPORT_FORMATS = ("json", "csv")
METRICS = ("sentiment", "accuracy", "mentions")

TREND_ICONS = {"improving": "📈", "declining": "📉", "stable": "➡️"}


# ─── Formatting helpers ──────────────────────────────────────────────────────


def fmt_pct(value: Optional[float], digits: int = 1) -> str:
    if value is None:
        return "n/a"
    return f"{value * 100:.{digits}f}%"


def progress_bar(value: Optional[float], width: int = 30) -> str:
    filled = 0 if value is None else max(0, min(width, round(value * width)))
    return "[" + "█" * filled + "░" * (width - filled) + "]"


def sentiment_icon(value: float) -> str:
    if value > 0.1:
        return "😊"
    if value < -0.1:
        return "😟"
    return "😐"


# ─── Console ─────────────────────────────────────────────────────────────────


def format_analysis(analysis: Analysis) -> str:
    ov = analysis.overview
    start = local_date_label(ov.start) if ov.start else "—"
    end = local_date_label(ov.end) if ov.end else "—"

    lines = [
        "=" * 60,
        "  AI PLATFORM PRESENCE ANALYSIS",
        "=" * 60,
        "",
        "OVERVIEW",
        f"  Brand: {ov.brand}",
        f"  Sessions Analyzed: {ov.total_sessions}",
        f"  Date Range: {start} - {end}",
        "",
        "PLATFORM PERFORMANCE",
        "-" * 60,
    ]

    for platform, m in analysis.platform_metrics.items():
        lines += [
            "",
            f"  {platform.upper()}",
            f"    Brand Mention Rate: {fmt_pct(m.brand_mention_rate)} {progress_bar(m.brand_mention_rate, 20)}",
            f"    Average Sentiment:  {m.avg_sentiment:.3f} ({m.sentiment_trend})",
            f"    Average Accuracy:   {fmt_pct(m.avg_accuracy)} {progress_bar(m.avg_accuracy, 20)}",
            f"    Query Success Rate: {fmt_pct(m.success_rate)}",
        ]

    if analysis.insights:
        lines += ["", "KEY INSIGHTS", "-" * 60]
        lines += [f"  • {insight}" for insight in analysis.insights]

    if analysis.recommendations:
        lines += ["", "RECOMMENDATIONS", "-" * 60]
        lines += [f"  → {rec}" for rec in analysis.recommendations]

    lines += ["", "=" * 60]
    return "\n".join(lines)


def format_alerts(alerts: List[str]) -> str:
    if not alerts:
        return ""
    return "\n".join(["ALERTS", "-" * 60, *alerts])


def format_metric(analysis: Analysis, metric: str) -> str:
    """Single-metric view: sentiment, accuracy or mentions."""
    metric = metric.lower()
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric}. Available metrics: {', '.join(METRICS)}")

    title = {
        "sentiment": "Sentiment Analysis",
        "accuracy": "Accuracy Analysis",
        "mentions": "Brand Mentions Analysis",
    }[metric]
    lines = [title, "-" * 50]

    for platform, m in analysis.platform_metrics.items():
        lines += ["", platform.upper()]
        if metric == "sentiment":
            lines += [
                f"  Average Sentiment: {m.avg_sentiment:.3f} {sentiment_icon(m.avg_sentiment)}",
                f"  Trend: {m.sentiment_trend} {TREND_ICONS.get(m.sentiment_trend, '')}",
            ]
        elif metric == "accuracy":
            lines += [
                f"  Average Accuracy: {fmt_pct(m.avg_accuracy)}",
                f"  {progress_bar(m.avg_accuracy)}",
                f"  Trend: {m.accuracy_trend} {TREND_ICONS.get(m.accuracy_trend, '')}",
            ]
        else:
            lines += [
                f"  Mention Rate: {fmt_pct(m.brand_mention_rate)}",
                f"  {progress_bar(m.brand_mention_rate)}",
                f"  Total Queries: {m.total_queries}",
            ]

    return "\n".join(lines)


# ─── Reports ─────────────────────────────────────────────────────────────────


def render_csv(analysis: Analysis) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Platform", "Metric", "Value"])

    for platform, m in analysis.platform_metrics.items():
        writer.writerows([
            [platform, "Brand Mention Rate", fmt_pct(m.brand_mention_rate, 2)],
            [platform, "Average Sentiment", f"{m.avg_sentiment:.4f}"],
            [platform, "Sentiment Trend", m.sentiment_trend],
            [platform, "Average Accuracy", fmt_pct(m.avg_accuracy, 2)],
            [platform, "Accuracy Trend", m.accuracy_trend],
            [platform, "Success Rate", fmt_pct(m.success_rate, 2)],
            [platform, "Total Sessions", m.total_sessions],
            [platform, "Total Queries", m.total_queries],
        ])

    return buf.getvalue()


def render_json(analysis: Analysis) -> str:
    return json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False)


def render_report(analysis: Analysis, fmt: str) -> str:
    fmt = fmt.lower()
    if fmt == "json":
        return render_json(analysis)
    if fmt == "csv":
        return render_csv(analysis)
    raise ValueError(f"Unknown report format: {fmt}. Available formats: {', '.join(REPORT_FORMATS)}")


def write_report(
    analysis: Analysis,
    fmt: str,
    output: Optional[Union[str, Path]] = None,
    reports_dir: Union[str, Path] = "reports",
) -> Path:
    """
    Render and write a report. A relative `output` is placed under `reports_dir`;
    without `output` the file is named report_<YYYY-MM-DD>.<fmt>.
    """
    content = render_report(analysis, fmt)

    path = Path(output) if output else Path(f"report_{date.today().isoformat()}.{fmt.lower()}")
    if not path.is_absolute():
        path = Path(reports_dir) / path
    path.parent.mkdir(parents=True, exist_ok=True)

    path.write_text(content, encoding="utf-8")
    logger.info(f"Report generated: {path}")
    return path
