"""
Session Aggregation Agent
--------------------------
Folds a window of tracking sessions into one PlatformAggregate per platform,
plus one trend point per session.

  - counters are summed from each platform's session summary (missing -> 0)
  - avgSentiment / avgAccuracy are appended only when the summary carries them
  - per-query occurrences are recorded only for queries that produced an analysis

Input:  List[TrackingSession]
Output: AggregationOutput
"""

import logging
from dataclasses import dataclass, field
from typing import List, Dict, Tuple

from agents.base import Agent
from models.schemas import (
    TrackingSession, PlatformAggregate, QueryOccurrence,
    TrendPoint, Overview, local_date_label,
)

logger = logging.getLogger(__name__)

TREND_SERIES = ("sentiment", "accuracy", "mentions")


# ─── Data Structures ─────────────────────────────────────────────────────────


@dataclass
class AggregationOutput:
    """Per-platform aggregates and per-session trend series."""
    overview: Overview
    aggregates: Dict[str, PlatformAggregate]
    trends: Dict[str, List[TrendPoint]] = field(default_factory=dict)

    @property
    def platforms(self) -> List[str]:
        return list(self.aggregates)


# ─── Aggregation ─────────────────────────────────────────────────────────────


def sort_sessions(sessions: List[TrackingSession]) -> List[TrackingSession]:
    """Chronological order; sessions sharing a timestamp keep their input order."""
    return sorted(sessions, key=lambda s: s.timestamp)


def session_metrics(session: TrackingSession) -> Tuple[float, float, int]:
    """
    Session-level means across the platforms that reported a summary.

    Returns (avg_sentiment, avg_accuracy, total_mentions). A platform with a
    summary but no average contributes 0 to the mean; platforms without a
    summary are not counted.
    """
    total_sentiment = 0.0
    total_accuracy = 0.0
    total_mentions = 0
    count = 0

    for result in session.results.values():
        summary = result.summary
        if summary is None:
            continue
        total_sentiment += summary.avg_sentiment or 0.0
        total_accuracy += summary.avg_accuracy or 0.0
        total_mentions += summary.brand_mentions or 0
        count += 1

    if count == 0:
        return 0.0, 0.0, total_mentions
    return total_sentiment / count, total_accuracy / count, total_mentions


def aggregate_sessions(sessions: List[TrackingSession]) -> Dict[str, PlatformAggregate]:
    """
    One PlatformAggregate per platform seen in any session (union of keys),
    in first-seen order.
    """
    aggregates: Dict[str, PlatformAggregate] = {}

    for session in sessions:
        session_date = local_date_label(session.timestamp)

        for platform, result in session.results.items():
            agg = aggregates.get(platform)
            if agg is None:
                agg = aggregates[platform] = PlatformAggregate()

            agg.sessions += 1
            summary = result.summary
            if summary is not None:
                agg.total_queries += summary.total_queries or 0
                agg.successful_queries += summary.successful_queries or 0
                agg.brand_mentions += summary.brand_mentions or 0
                if summary.avg_sentiment is not None:
                    agg.sentiment_scores.append(summary.avg_sentiment)
                if summary.avg_accuracy is not None:
                    agg.accuracy_scores.append(summary.avg_accuracy)

            for query_result in result.queries:
                analysis = query_result.analysis
                if analysis is None:
                    continue
                agg.responses_by_query.setdefault(query_result.query, []).append(
                    QueryOccurrence(
                        date=session_date,
                        mentions_brand=analysis.mentions_brand,
                        sentiment=analysis.sentiment,
                        accuracy=analysis.accuracy,
                    )
                )

    return aggregates


def build_trends(sessions: List[TrackingSession]) -> Dict[str, List[TrendPoint]]:
    """One point per session for each of the sentiment/accuracy/mentions series."""
    trends: Dict[str, List[TrendPoint]] = {name: [] for name in TREND_SERIES}
    for session in sessions:
        session_date = local_date_label(session.timestamp)
        avg_sentiment, avg_accuracy, mentions = session_metrics(session)
        trends["sentiment"].append(TrendPoint(date=session_date, value=avg_sentiment))
        trends["accuracy"].append(TrendPoint(date=session_date, value=avg_accuracy))
        trends["mentions"].append(TrendPoint(date=session_date, value=mentions))
    return trends


# ─── AggregationAgent ────────────────────────────────────────────────────────


class AggregationAgent(Agent):
    """
    Stage 1: Session Aggregation

      1. Sort sessions chronologically
      2. Accumulate per-platform counters, score sequences and query occurrences
      3. Build the per-session trend series
    """

    def __init__(self, brand: str = ""):
        super().__init__(name="AggregationAgent")
        self.brand = brand

    def run(self, sessions: List[TrackingSession]) -> AggregationOutput:
        if not sessions:
            raise ValueError("No tracking sessions provided to AggregationAgent")

        ordered = sort_sessions(sessions)
        aggregates = aggregate_sessions(ordered)

        self.logger.info(
            f"Aggregated {len(ordered)} sessions across {len(aggregates)} platforms"
        )

        return AggregationOutput(
            overview=Overview(
                total_sessions=len(ordered),
                start=ordered[0].timestamp,
                end=ordered[-1].timestamp,
                brand=self.brand,
            ),
            aggregates=aggregates,
            trends=build_trends(ordered),
        )
