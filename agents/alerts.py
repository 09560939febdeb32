"""
Alert checks over a finished Analysis.

Three independent per-platform checks; any combination may fire:
  - avgSentiment below the sentiment floor
  - avgAccuracy below the accuracy floor
  - zero brand mentions after at least N queries
"""

import logging
from dataclasses import dataclass
from typing import List

from models.schemas import Analysis

logger = logging.getLogger(__name__)


@dataclass
class AlertThresholds:
    sentiment_drop: float = -0.1
    accuracy_below: float = 0.5
    missing_mentions: int = 5

    @classmethod
    def from_settings(cls, settings) -> "AlertThresholds":
        return cls(
            sentiment_drop=settings.ALERT_SENTIMENT_DROP,
            accuracy_below=settings.ALERT_ACCURACY_BELOW,
            missing_mentions=settings.ALERT_MISSING_MENTIONS,
        )


def check_alerts(analysis: Analysis, thresholds: AlertThresholds) -> List[str]:
    alerts: List[str] = []

    for platform, m in analysis.platform_metrics.items():
        if m.avg_sentiment < thresholds.sentiment_drop:
            alerts.append(f"⚠️  ALERT: Negative sentiment detected on {platform}")
        if m.avg_accuracy < thresholds.accuracy_below:
            alerts.append(
                f"⚠️  ALERT: Low accuracy on {platform} ({m.avg_accuracy * 100:.1f}%)"
            )
        # an undefined mention rate (no successful queries) is not a zero rate
        if m.brand_mention_rate == 0 and m.total_queries >= thresholds.missing_mentions:
            alerts.append(f"⚠️  ALERT: No brand mentions on {platform} in recent queries")

    if alerts:
        logger.warning(f"{len(alerts)} alert(s) raised across {len(analysis.platform_metrics)} platforms")
    return alerts
