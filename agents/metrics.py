"""
Metrics Agent
--------------
Turns each PlatformAggregate into PlatformMetrics:

  successRate       = successful / total          (None when total == 0)
  brandMentionRate  = mentions / successful       (None when successful == 0)
  avgSentiment/avgAccuracy = mean of per-session averages (0 when empty)
  trend             = mean(last W) - mean(first W), thresholded at ±0.1
  consistency       = max(0, 1 - Var(mention indicator))

Input:  AggregationOutput
Output: MetricsOutput
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Sequence

from agents.base import Agent
from agents.aggregator import AggregationOutput
from models.schemas import (
    PlatformAggregate, PlatformMetrics, QueryOccurrence,
    QueryPerformance, TrendPoint, Overview,
)

logger = logging.getLogger(__name__)

IMPROVING = "improving"
DECLINING = "declining"
STABLE = "stable"

TREND_THRESHOLD = 0.1
TREND_WINDOW = 3


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class MetricsOutput:
    overview: Overview
    platform_metrics: Dict[str, PlatformMetrics]
    trends: Dict[str, List[TrendPoint]] = field(default_factory=dict)


# ─── Statistics ──────────────────────────────────────────────────────────────


def average(values: Sequence[float]) -> float:
    """Arithmetic mean; 0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def variance(values: Sequence[float]) -> float:
    """Population variance (mean squared deviation); 0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.var(np.asarray(values, dtype=float)))


def safe_rate(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator, or None when the denominator is zero."""
    if not denominator:
        return None
    return numerator / denominator


def calculate_trend(values: Sequence[float], threshold: float = TREND_THRESHOLD) -> str:
    """
    Compare the mean of the most recent window against the earliest window.

    Windows are TREND_WINDOW points wide and overlap for short sequences.
    A two-point sequence compares its endpoints.
    """
    n = len(values)
    if n < 2:
        return STABLE

    window = TREND_WINDOW if n >= TREND_WINDOW else n - 1
    earlier = average(values[:window])
    recent = average(values[-window:])
    diff = recent - earlier

    if diff > threshold:
        return IMPROVING
    if diff < -threshold:
        return DECLINING
    return STABLE


def calculate_consistency(occurrences: Sequence[QueryOccurrence]) -> float:
    """1 - variance of the 0/1 mention indicator, floored at 0; 1 for a single occurrence."""
    if len(occurrences) < 2:
        return 1.0
    mentions = [1.0 if o.mentions_brand else 0.0 for o in occurrences]
    return max(0.0, 1.0 - variance(mentions))


def analyze_query_performance(
    responses_by_query: Dict[str, List[QueryOccurrence]],
) -> Dict[str, QueryPerformance]:
    """Per-query mention rate, mean sentiment/accuracy and mention consistency."""
    performance: Dict[str, QueryPerformance] = {}

    for query, occurrences in responses_by_query.items():
        if not occurrences:
            continue
        mentioned = sum(1 for o in occurrences if o.mentions_brand)
        performance[query] = QueryPerformance(
            mention_rate=mentioned / len(occurrences),
            avg_sentiment=average([o.sentiment or 0.0 for o in occurrences]),
            avg_accuracy=average([o.accuracy or 0.0 for o in occurrences]),
            consistency=calculate_consistency(occurrences),
        )

    return performance


def derive_platform_metrics(agg: PlatformAggregate) -> PlatformMetrics:
    """Final metrics for one platform. Pure: same aggregate, same result."""
    return PlatformMetrics(
        total_sessions=agg.sessions,
        total_queries=agg.total_queries,
        success_rate=safe_rate(agg.successful_queries, agg.total_queries),
        brand_mention_rate=safe_rate(agg.brand_mentions, agg.successful_queries),
        avg_sentiment=average(agg.sentiment_scores),
        avg_accuracy=average(agg.accuracy_scores),
        sentiment_trend=calculate_trend(agg.sentiment_scores),
        accuracy_trend=calculate_trend(agg.accuracy_scores),
        query_performance=analyze_query_performance(agg.responses_by_query),
    )


# ─── MetricsAgent ────────────────────────────────────────────────────────────


class MetricsAgent(Agent):
    """
    Stage 2: Metrics Derivation

    One PlatformMetrics per aggregate, in the aggregator's platform order.
    """

    def __init__(self):
        super().__init__(name="MetricsAgent")

    def run(self, aggregation: AggregationOutput) -> MetricsOutput:
        if not aggregation.aggregates:
            raise ValueError("No platform aggregates provided to MetricsAgent")

        platform_metrics = {
            platform: derive_platform_metrics(agg)
            for platform, agg in aggregation.aggregates.items()
        }

        for platform, m in platform_metrics.items():
            rate = "n/a" if m.brand_mention_rate is None else f"{m.brand_mention_rate:.0%}"
            self.logger.debug(
                f"  [{platform}] mentions={rate} "
                f"sent={m.avg_sentiment:+.3f} ({m.sentiment_trend}) "
                f"acc={m.avg_accuracy:.2f} ({m.accuracy_trend})"
            )

        return MetricsOutput(
            overview=aggregation.overview,
            platform_metrics=platform_metrics,
            trends=aggregation.trends,
        )
