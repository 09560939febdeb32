"""
Insight Agent
--------------
Derives plain-English observations and recommended actions from the final
per-platform metrics. Both generators only compare and sort existing fields,
so the same metrics always produce the same text in the same order.

Insights (in order):
  1. best platform for mention rate / sentiment   (only with >1 platform)
  2. per-platform sentiment and accuracy trends
  3. overall presence from the mean mention rate

Recommendations (in order):
  1. content accuracy   (mean accuracy < 0.7)
  2. visibility         (mean mention rate < 0.5)
  3. per-platform       (mention rate < 0.3)

Input:  MetricsOutput
Output: Analysis
"""

import logging
from typing import List, Dict, Optional

from agents.base import Agent
from agents.metrics import MetricsOutput, IMPROVING, DECLINING, average
from models.schemas import Analysis, PlatformMetrics

logger = logging.getLogger(__name__)

LOW_AWARENESS_RATE = 0.3
STRONG_PRESENCE_RATE = 0.7

ACCURACY_TARGET = 0.7
VISIBILITY_TARGET = 0.5
PLATFORM_MENTION_FLOOR = 0.3

ACCURACY_RECOMMENDATIONS = [
    "Update website content with more structured data to improve AI accuracy",
    "Ensure ai.txt file contains comprehensive and accurate brand information",
]

VISIBILITY_RECOMMENDATIONS = [
    "Increase brand visibility through SEO and content marketing",
    "Submit site to AI platform indices (OpenAI ChatGPT Plugins, etc.)",
    "Create more keyword-rich content around target search terms",
]


def mean_mention_rate(platform_metrics: Dict[str, PlatformMetrics]) -> Optional[float]:
    """Mean brand mention rate across all platforms; None if any rate is undefined."""
    rates = [m.brand_mention_rate for m in platform_metrics.values()]
    if not rates or any(rate is None for rate in rates):
        return None
    return average(rates)


def mean_accuracy(platform_metrics: Dict[str, PlatformMetrics]) -> float:
    return average([m.avg_accuracy for m in platform_metrics.values()])


# ─── Insights ────────────────────────────────────────────────────────────────


def generate_insights(platform_metrics: Dict[str, PlatformMetrics]) -> List[str]:
    insights: List[str] = []

    # max() keeps the first of equal values, so ties go to the earlier platform
    if len(platform_metrics) > 1:
        rated = [
            (platform, m) for platform, m in platform_metrics.items()
            if m.brand_mention_rate is not None
        ]
        if rated:
            platform, best = max(rated, key=lambda item: item[1].brand_mention_rate)
            insights.append(
                f"{platform} has the highest brand mention rate "
                f"({best.brand_mention_rate * 100:.1f}%)"
            )

        platform, best = max(platform_metrics.items(), key=lambda item: item[1].avg_sentiment)
        if best.avg_sentiment > 0:
            insights.append(
                f"{platform} provides the most positive sentiment ({best.avg_sentiment:.3f})"
            )

    for platform, m in platform_metrics.items():
        if m.sentiment_trend == IMPROVING:
            insights.append(f"Sentiment on {platform} is improving over time")
        elif m.sentiment_trend == DECLINING:
            insights.append(f"⚠️ Sentiment on {platform} is declining - may need attention")

        if m.accuracy_trend == DECLINING:
            insights.append(
                f"⚠️ Accuracy on {platform} is declining - content updates may be needed"
            )

    avg_rate = mean_mention_rate(platform_metrics)
    if avg_rate is not None:
        if avg_rate < LOW_AWARENESS_RATE:
            insights.append(
                "Brand awareness across AI platforms is low - consider increasing online presence"
            )
        elif avg_rate > STRONG_PRESENCE_RATE:
            insights.append("Strong brand presence across AI platforms")

    return insights


# ─── Recommendations ─────────────────────────────────────────────────────────


def generate_recommendations(platform_metrics: Dict[str, PlatformMetrics]) -> List[str]:
    recommendations: List[str] = []

    if mean_accuracy(platform_metrics) < ACCURACY_TARGET:
        recommendations.extend(ACCURACY_RECOMMENDATIONS)

    avg_rate = mean_mention_rate(platform_metrics)
    if avg_rate is not None and avg_rate < VISIBILITY_TARGET:
        recommendations.extend(VISIBILITY_RECOMMENDATIONS)

    for platform, m in platform_metrics.items():
        if m.brand_mention_rate is not None and m.brand_mention_rate < PLATFORM_MENTION_FLOOR:
            recommendations.append(
                f"Improve presence on {platform} through targeted content optimization"
            )

    return recommendations


# ─── InsightAgent ────────────────────────────────────────────────────────────


class InsightAgent(Agent):
    """
    Stage 3: Insights & Recommendations

    Assembles the final Analysis record.
    """

    def __init__(self):
        super().__init__(name="InsightAgent")

    def run(self, metrics: MetricsOutput) -> Analysis:
        if not metrics.platform_metrics:
            raise ValueError("No platform metrics provided to InsightAgent")

        insights = generate_insights(metrics.platform_metrics)
        recommendations = generate_recommendations(metrics.platform_metrics)

        self.logger.info(
            f"Generated {len(insights)} insights and {len(recommendations)} recommendations"
        )

        return Analysis(
            overview=metrics.overview,
            platform_metrics=metrics.platform_metrics,
            trends=metrics.trends,
            insights=insights,
            recommendations=recommendations,
        )
