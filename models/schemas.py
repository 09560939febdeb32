"""
Core data models / schemas for the Brand Presence Tracker.

Input records mirror the JSON layout written by a tracking run
(``timestamp``, ``brand``, ``results`` keyed by platform). Derived records
(aggregates, metrics, analysis) serialize back to the same camelCase layout
so they can be handed verbatim to JSON consumers.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import datetime


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.
    Naive values are interpreted as local time; a trailing ``Z`` is accepted.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def local_date_label(ts: datetime) -> str:
    """Calendar date of ``ts`` in the local timezone, as YYYY-MM-DD."""
    return ts.astimezone().date().isoformat()


# ---------------------------------------------------------------------------
# Raw tracking sessions
# ---------------------------------------------------------------------------

@dataclass
class PlatformSummary:
    total_queries: int = 0
    successful_queries: int = 0
    brand_mentions: int = 0
    avg_sentiment: Optional[float] = None    # comparative sentiment, signed
    avg_accuracy: Optional[float] = None     # 0–1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlatformSummary":
        return cls(
            total_queries=data.get("totalQueries") or 0,
            successful_queries=data.get("successfulQueries") or 0,
            brand_mentions=data.get("brandMentions") or 0,
            avg_sentiment=data.get("avgSentiment"),
            avg_accuracy=data.get("avgAccuracy"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "totalQueries": self.total_queries,
            "successfulQueries": self.successful_queries,
            "brandMentions": self.brand_mentions,
        }
        if self.avg_sentiment is not None:
            out["avgSentiment"] = self.avg_sentiment
        if self.avg_accuracy is not None:
            out["avgAccuracy"] = self.avg_accuracy
        return out


@dataclass
class QueryAnalysis:
    mentions_brand: bool = False
    sentiment: Optional[float] = None        # sentiment.comparative
    accuracy: Optional[float] = None         # accuracyScore, 0–1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryAnalysis":
        sentiment = data.get("sentiment") or {}
        return cls(
            mentions_brand=bool(data.get("mentionsBrand", False)),
            sentiment=sentiment.get("comparative"),
            accuracy=data.get("accuracyScore"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"mentionsBrand": self.mentions_brand}
        if self.sentiment is not None:
            out["sentiment"] = {"comparative": self.sentiment}
        if self.accuracy is not None:
            out["accuracyScore"] = self.accuracy
        return out


@dataclass
class QueryResult:
    query: str
    analysis: Optional[QueryAnalysis] = None   # None when the platform call failed
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryResult":
        analysis = data.get("analysis")
        return cls(
            query=data.get("query", ""),
            analysis=QueryAnalysis.from_dict(analysis) if analysis is not None else None,
            error=data.get("error"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"query": self.query}
        if self.analysis is not None:
            out["analysis"] = self.analysis.to_dict()
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass
class PlatformResult:
    summary: Optional[PlatformSummary] = None
    queries: List[QueryResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlatformResult":
        summary = data.get("summary")
        return cls(
            summary=PlatformSummary.from_dict(summary) if summary is not None else None,
            queries=[QueryResult.from_dict(q) for q in data.get("queries") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"queries": [q.to_dict() for q in self.queries]}
        if self.summary is not None:
            out["summary"] = self.summary.to_dict()
        return out


@dataclass
class TrackingSession:
    timestamp: datetime
    brand: str
    results: Dict[str, PlatformResult] = field(default_factory=dict)   # platform -> result
    session_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], session_id: Optional[str] = None) -> "TrackingSession":
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            brand=data.get("brand", ""),
            results={
                platform: PlatformResult.from_dict(result or {})
                for platform, result in (data.get("results") or {}).items()
            },
            session_id=session_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "brand": self.brand,
            "results": {p: r.to_dict() for p, r in self.results.items()},
        }


# ---------------------------------------------------------------------------
# Aggregation artefacts
# ---------------------------------------------------------------------------

@dataclass
class QueryOccurrence:
    date: str
    mentions_brand: bool
    sentiment: Optional[float] = None
    accuracy: Optional[float] = None


@dataclass
class PlatformAggregate:
    sessions: int = 0
    total_queries: int = 0
    successful_queries: int = 0
    brand_mentions: int = 0
    sentiment_scores: List[float] = field(default_factory=list)   # one per session, chronological
    accuracy_scores: List[float] = field(default_factory=list)
    responses_by_query: Dict[str, List[QueryOccurrence]] = field(default_factory=dict)


@dataclass
class TrendPoint:
    date: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "value": self.value}


# ---------------------------------------------------------------------------
# Derived metrics
# ---------------------------------------------------------------------------

@dataclass
class QueryPerformance:
    mention_rate: float
    avg_sentiment: float
    avg_accuracy: float
    consistency: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mentionRate": self.mention_rate,
            "avgSentiment": self.avg_sentiment,
            "avgAccuracy": self.avg_accuracy,
            "consistency": self.consistency,
        }


@dataclass
class PlatformMetrics:
    total_sessions: int
    total_queries: int
    success_rate: Optional[float]           # None when no queries were recorded
    brand_mention_rate: Optional[float]     # None when no query succeeded
    avg_sentiment: float
    avg_accuracy: float
    sentiment_trend: str                    # improving | declining | stable
    accuracy_trend: str
    query_performance: Dict[str, QueryPerformance] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSessions": self.total_sessions,
            "totalQueries": self.total_queries,
            "successRate": self.success_rate,
            "brandMentionRate": self.brand_mention_rate,
            "avgSentiment": self.avg_sentiment,
            "sentimentTrend": self.sentiment_trend,
            "avgAccuracy": self.avg_accuracy,
            "accuracyTrend": self.accuracy_trend,
            "queryPerformance": {q: p.to_dict() for q, p in self.query_performance.items()},
        }


# ---------------------------------------------------------------------------
# Analysis result
# ---------------------------------------------------------------------------

@dataclass
class Overview:
    total_sessions: int
    start: Optional[datetime]
    end: Optional[datetime]
    brand: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSessions": self.total_sessions,
            "dateRange": {
                "start": self.start.isoformat() if self.start else None,
                "end": self.end.isoformat() if self.end else None,
            },
            "brand": self.brand,
        }


@dataclass
class Analysis:
    overview: Overview
    platform_metrics: Dict[str, PlatformMetrics]
    trends: Dict[str, List[TrendPoint]]     # sentiment | accuracy | mentions
    insights: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overview": self.overview.to_dict(),
            "platformMetrics": {p: m.to_dict() for p, m in self.platform_metrics.items()},
            "trends": {
                series: [pt.to_dict() for pt in points]
                for series, points in self.trends.items()
            },
            "insights": list(self.insights),
            "recommendations": list(self.recommendations),
        }
