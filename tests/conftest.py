"""
Shared fixtures: builders for tracking sessions and platform metrics.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, timedelta, timezone

import pytest

from models.schemas import (
    TrackingSession, PlatformResult, PlatformSummary,
    QueryResult, QueryAnalysis, PlatformMetrics, parse_timestamp,
)


def _platform(
    total=2, successful=2, mentions=1,
    sentiment=None, accuracy=None, queries=None, summary=True,
):
    return PlatformResult(
        summary=PlatformSummary(
            total_queries=total,
            successful_queries=successful,
            brand_mentions=mentions,
            avg_sentiment=sentiment,
            avg_accuracy=accuracy,
        ) if summary else None,
        queries=list(queries or []),
    )


def _query(text, mentions=True, sentiment=0.1, accuracy=0.8, failed=False):
    if failed:
        return QueryResult(query=text, analysis=None, error="timeout")
    return QueryResult(
        query=text,
        analysis=QueryAnalysis(mentions_brand=mentions, sentiment=sentiment, accuracy=accuracy),
    )


def _session(timestamp, brand="Acme Homes", **platforms):
    return TrackingSession(
        timestamp=parse_timestamp(timestamp),
        brand=brand,
        results=dict(platforms),
    )


def _metrics(
    rate=0.5, sentiment=0.0, accuracy=0.8,
    sentiment_trend="stable", accuracy_trend="stable",
    total_queries=10, success_rate=1.0,
):
    return PlatformMetrics(
        total_sessions=3,
        total_queries=total_queries,
        success_rate=success_rate,
        brand_mention_rate=rate,
        avg_sentiment=sentiment,
        avg_accuracy=accuracy,
        sentiment_trend=sentiment_trend,
        accuracy_trend=accuracy_trend,
    )


@pytest.fixture
def make_platform():
    return _platform


@pytest.fixture
def make_query():
    return _query


@pytest.fixture
def make_session():
    return _session


@pytest.fixture
def make_metrics():
    return _metrics


@pytest.fixture
def sample_sessions():
    """Three daily sessions over chatgpt/claude; claude skips the first day."""
    return [
        _session(
            "2026-10-01T12:00:00",
            chatgpt=_platform(total=2, successful=2, mentions=1, sentiment=0.05, accuracy=0.6,
                              queries=[_query("best homes in smithville", True, 0.1, 0.7),
                                       _query("new developments texas", False, 0.0, 0.5)]),
        ),
        _session(
            "2026-10-02T12:00:00",
            chatgpt=_platform(total=2, successful=1, mentions=1, sentiment=0.10, accuracy=0.7,
                              queries=[_query("best homes in smithville", True, 0.2, 0.8),
                                       _query("new developments texas", failed=True)]),
            claude=_platform(total=2, successful=2, mentions=0, sentiment=-0.05, accuracy=0.4,
                             queries=[_query("best homes in smithville", False, -0.1, 0.4),
                                      _query("new developments texas", False, 0.0, 0.4)]),
        ),
        _session(
            "2026-10-03T12:00:00",
            chatgpt=_platform(total=2, successful=2, mentions=2, sentiment=0.30, accuracy=0.9,
                              queries=[_query("best homes in smithville", True, 0.4, 0.9),
                                       _query("new developments texas", True, 0.2, 0.9)]),
            claude=_platform(total=2, successful=2, mentions=1, sentiment=-0.20, accuracy=0.35,
                             queries=[_query("best homes in smithville", True, -0.2, 0.3),
                                      _query("new developments texas", False, -0.2, 0.3)]),
        ),
    ]


@pytest.fixture
def recent_sessions():
    """Two sessions inside any default analysis window."""
    now = datetime.now(timezone.utc)
    return [
        _session(
            now - timedelta(days=3),
            chatgpt=_platform(total=2, successful=2, mentions=2, sentiment=0.2, accuracy=0.9,
                              queries=[_query("q1"), _query("q2")]),
            gemini=_platform(total=6, successful=6, mentions=0, sentiment=-0.3, accuracy=0.2,
                             queries=[_query("q1", False, -0.3, 0.2)]),
        ),
        _session(
            now - timedelta(days=1),
            chatgpt=_platform(total=2, successful=2, mentions=1, sentiment=0.25, accuracy=0.85,
                              queries=[_query("q1"), _query("q2", False)]),
        ),
    ]
