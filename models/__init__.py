"""
Core data models for the Brand Presence Tracker.
"""

from .schemas import (
    PlatformSummary,
    QueryAnalysis,
    QueryResult,
    PlatformResult,
    TrackingSession,
    QueryOccurrence,
    PlatformAggregate,
    TrendPoint,
    QueryPerformance,
    PlatformMetrics,
    Overview,
    Analysis,
    parse_timestamp,
    local_date_label,
)

__all__ = [
    "PlatformSummary",
    "QueryAnalysis",
    "QueryResult",
    "PlatformResult",
    "TrackingSession",
    "QueryOccurrence",
    "PlatformAggregate",
    "TrendPoint",
    "QueryPerformance",
    "PlatformMetrics",
    "Overview",
    "Analysis",
    "parse_timestamp",
    "local_date_label",
]
