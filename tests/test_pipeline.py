"""
Analysis engine tests: aggregation, metrics, insights, recommendations, alerts.
Run with: python -m pytest tests/ -v
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from agents.aggregator import (
    AggregationAgent, aggregate_sessions, build_trends, session_metrics, sort_sessions,
)
from agents.metrics import (
    MetricsAgent, average, variance, calculate_trend, calculate_consistency,
    analyze_query_performance, derive_platform_metrics,
)
from agents.insights import (
    InsightAgent, generate_insights, generate_recommendations, mean_mention_rate,
)
from agents.alerts import AlertThresholds, check_alerts
from agents.base import Orchestrator
from models.schemas import Analysis, Overview, PlatformAggregate, QueryOccurrence
from utils.pipeline import analyze_sessions


def occurrences(*mentions):
    return [QueryOccurrence(date="2026-10-01", mentions_brand=m) for m in mentions]


def analysis_of(**platform_metrics):
    return Analysis(
        overview=Overview(total_sessions=1, start=None, end=None, brand="Acme Homes"),
        platform_metrics=platform_metrics,
        trends={},
    )


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def aggregation(sample_sessions):
    return AggregationAgent(brand="Acme Homes").run(sample_sessions)


@pytest.fixture
def metrics_output(aggregation):
    return MetricsAgent().run(aggregation)


@pytest.fixture
def analysis(sample_sessions):
    return analyze_sessions(sample_sessions, brand="Acme Homes")


# ─── Aggregator Tests ────────────────────────────────────────────────────────

class TestAggregationAgent:
    def test_platform_keys_are_union_across_sessions(self, make_session, make_platform):
        sessions = [
            make_session("2026-10-01T09:00:00", chatgpt=make_platform()),
            make_session("2026-10-02T09:00:00", claude=make_platform()),
        ]
        aggregates = aggregate_sessions(sessions)
        assert list(aggregates) == ["chatgpt", "claude"]

    def test_counters_are_summed(self, aggregation):
        chatgpt = aggregation.aggregates["chatgpt"]
        assert chatgpt.sessions == 3
        assert chatgpt.total_queries == 6
        assert chatgpt.successful_queries == 5
        assert chatgpt.brand_mentions == 4

    def test_score_sequences_follow_session_order(self, aggregation):
        assert aggregation.aggregates["chatgpt"].sentiment_scores == [0.05, 0.10, 0.30]
        assert aggregation.aggregates["claude"].accuracy_scores == [0.4, 0.35]

    def test_missing_averages_are_not_appended(self, make_session, make_platform):
        sessions = [
            make_session("2026-10-01T09:00:00", chatgpt=make_platform(sentiment=0.2, accuracy=0.9)),
            make_session("2026-10-02T09:00:00", chatgpt=make_platform()),
        ]
        agg = aggregate_sessions(sessions)["chatgpt"]
        assert agg.sentiment_scores == [0.2]
        assert agg.accuracy_scores == [0.9]
        assert agg.total_queries == 4

    def test_platform_without_summary_counts_session_only(self, make_session, make_platform):
        sessions = [make_session("2026-10-01T09:00:00", perplexity=make_platform(summary=False))]
        agg = aggregate_sessions(sessions)["perplexity"]
        assert agg.sessions == 1
        assert agg.total_queries == 0
        assert agg.sentiment_scores == []

    def test_failed_queries_are_excluded(self, aggregation):
        texas = aggregation.aggregates["chatgpt"].responses_by_query["new developments texas"]
        assert [o.date for o in texas] == ["2026-10-01", "2026-10-03"]
        assert [o.mentions_brand for o in texas] == [False, True]

    def test_query_without_any_analysis_has_no_entry(self, make_session, make_platform, make_query):
        sessions = [
            make_session("2026-10-01T09:00:00",
                         chatgpt=make_platform(queries=[make_query("never answered", failed=True)])),
        ]
        agg = aggregate_sessions(sessions)["chatgpt"]
        assert "never answered" not in agg.responses_by_query

    def test_query_keys_are_case_sensitive(self, make_session, make_platform, make_query):
        sessions = [
            make_session("2026-10-01T09:00:00",
                         chatgpt=make_platform(queries=[make_query("Homes"), make_query("homes")])),
        ]
        agg = aggregate_sessions(sessions)["chatgpt"]
        assert set(agg.responses_by_query) == {"Homes", "homes"}

    def test_unsorted_input_is_sorted(self, sample_sessions):
        output = AggregationAgent().run(list(reversed(sample_sessions)))
        assert output.overview.start == sample_sessions[0].timestamp
        assert output.overview.end == sample_sessions[-1].timestamp
        assert output.aggregates["chatgpt"].sentiment_scores == [0.05, 0.10, 0.30]

    def test_sort_is_stable_for_equal_timestamps(self, make_session, make_platform):
        a = make_session("2026-10-01T09:00:00", chatgpt=make_platform(sentiment=0.1))
        b = make_session("2026-10-01T09:00:00", chatgpt=make_platform(sentiment=0.2))
        assert sort_sessions([a, b]) == [a, b]

    def test_overview(self, aggregation):
        assert aggregation.overview.total_sessions == 3
        assert aggregation.overview.brand == "Acme Homes"

    def test_trend_series_one_point_per_session(self, aggregation):
        for series in ("sentiment", "accuracy", "mentions"):
            assert len(aggregation.trends[series]) == 3
        assert [p.date for p in aggregation.trends["mentions"]] == [
            "2026-10-01", "2026-10-02", "2026-10-03",
        ]
        assert [p.value for p in aggregation.trends["mentions"]] == [1, 1, 3]
        assert aggregation.trends["sentiment"][1].value == pytest.approx(0.025)
        assert aggregation.trends["accuracy"][2].value == pytest.approx(0.625)

    def test_session_metrics_without_summaries(self, make_session, make_platform):
        session = make_session("2026-10-01T09:00:00", chatgpt=make_platform(summary=False))
        assert session_metrics(session) == (0.0, 0.0, 0)
        assert build_trends([session])["sentiment"][0].value == 0.0

    def test_empty_input_fails(self):
        result = AggregationAgent().execute([])
        assert not result.success
        assert "No tracking sessions" in result.error


# ─── Metrics Tests ───────────────────────────────────────────────────────────

class TestMetricsAgent:
    @pytest.mark.parametrize("values, expected", [
        ([0.0, 0.15], "improving"),
        ([0.0, 0.05], "stable"),
        ([0.0, -0.2], "declining"),
        ([0.5, 0.5, 0.5, 0.5], "stable"),
        ([0.1, 0.1, 0.1, 0.5, 0.5, 0.5], "improving"),
        ([0.9, 0.9, 0.9, 0.2, 0.2, 0.2], "declining"),
    ])
    def test_trend_classification(self, values, expected):
        assert calculate_trend(values) == expected

    def test_trend_windows_overlap_for_short_sequences(self):
        # last three and first three of a 4-point sequence share two points
        assert calculate_trend([0.0, 0.2, 0.2, 0.4]) == "improving"
        assert calculate_trend([0.0, 0.1, 0.1, 0.2]) == "stable"

    def test_short_sequences_are_stable(self):
        assert calculate_trend([]) == "stable"
        assert calculate_trend([0.7]) == "stable"

    def test_average(self):
        assert average([]) == 0.0
        assert average([0.4]) == pytest.approx(0.4)
        assert average([1, 2, 3]) == pytest.approx(2.0)

    def test_variance_is_population_variance(self):
        assert variance([1, 0]) == pytest.approx(0.25)
        assert variance([]) == 0.0

    def test_consistency(self):
        assert calculate_consistency(occurrences(True, True, True)) == 1.0
        assert calculate_consistency(occurrences(False, False)) == 1.0
        assert calculate_consistency(occurrences(True, False)) == pytest.approx(0.75)
        assert calculate_consistency(occurrences(True)) == 1.0

    @pytest.mark.parametrize("pattern", [
        (True, False, False), (True, True, False, False, True), (False, True) * 4,
    ])
    def test_consistency_bounds(self, pattern):
        assert 0.0 <= calculate_consistency(occurrences(*pattern)) <= 1.0

    def test_query_performance_treats_missing_values_as_zero(self):
        perf = analyze_query_performance({
            "homes": [
                QueryOccurrence(date="2026-10-01", mentions_brand=True, sentiment=None, accuracy=0.8),
                QueryOccurrence(date="2026-10-02", mentions_brand=False, sentiment=0.4, accuracy=None),
            ],
        })["homes"]
        assert perf.mention_rate == pytest.approx(0.5)
        assert perf.avg_sentiment == pytest.approx(0.2)
        assert perf.avg_accuracy == pytest.approx(0.4)
        assert perf.consistency == pytest.approx(0.75)

    def test_mention_rate_scenario(self, make_session, make_platform):
        sessions = [
            make_session("2026-10-01T09:00:00", chatgpt=make_platform(total=2, successful=2, mentions=1)),
            make_session("2026-10-02T09:00:00", chatgpt=make_platform(total=2, successful=2, mentions=1)),
        ]
        m = derive_platform_metrics(aggregate_sessions(sessions)["chatgpt"])
        assert m.brand_mention_rate == pytest.approx(0.5)
        assert m.success_rate == pytest.approx(1.0)

    def test_zero_denominators_are_undefined(self):
        m = derive_platform_metrics(PlatformAggregate(sessions=1))
        assert m.success_rate is None
        assert m.brand_mention_rate is None
        assert m.avg_sentiment == 0.0
        assert m.to_dict()["brandMentionRate"] is None

    def test_zero_successes_keeps_success_rate(self):
        m = derive_platform_metrics(PlatformAggregate(sessions=1, total_queries=4))
        assert m.success_rate == 0.0
        assert m.brand_mention_rate is None

    def test_derivation_is_deterministic(self, aggregation):
        agg = aggregation.aggregates["chatgpt"]
        first, second = derive_platform_metrics(agg), derive_platform_metrics(agg)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_platform_metrics(self, metrics_output):
        chatgpt = metrics_output.platform_metrics["chatgpt"]
        assert chatgpt.total_sessions == 3
        assert chatgpt.success_rate == pytest.approx(5 / 6)
        assert chatgpt.brand_mention_rate == pytest.approx(0.8)
        assert chatgpt.avg_sentiment == pytest.approx(0.15)
        assert chatgpt.sentiment_trend == "stable"

        claude = metrics_output.platform_metrics["claude"]
        assert claude.brand_mention_rate == pytest.approx(0.25)
        assert claude.sentiment_trend == "declining"
        assert claude.accuracy_trend == "stable"

    def test_query_performance_per_platform(self, metrics_output):
        perf = metrics_output.platform_metrics["chatgpt"].query_performance
        assert perf["best homes in smithville"].mention_rate == 1.0
        assert perf["best homes in smithville"].avg_sentiment == pytest.approx(0.7 / 3)
        assert perf["new developments texas"].consistency == pytest.approx(0.75)


# ─── Insight Tests ───────────────────────────────────────────────────────────

class TestInsights:
    def test_highest_mention_rate_comes_first(self, make_metrics):
        insights = generate_insights({
            "a": make_metrics(rate=0.8, sentiment_trend="improving"),
            "b": make_metrics(rate=0.2, sentiment_trend="declining"),
        })
        assert insights[0] == "a has the highest brand mention rate (80.0%)"

    def test_ties_go_to_first_platform(self, make_metrics):
        insights = generate_insights({
            "gemini": make_metrics(rate=0.5, sentiment=0.2),
            "chatgpt": make_metrics(rate=0.5, sentiment=0.2),
        })
        assert insights[0].startswith("gemini has the highest")
        assert insights[1] == "gemini provides the most positive sentiment (0.200)"

    def test_non_positive_best_sentiment_is_omitted(self, make_metrics):
        insights = generate_insights({
            "a": make_metrics(rate=0.6, sentiment=0.0),
            "b": make_metrics(rate=0.4, sentiment=-0.3),
        })
        assert not any("most positive sentiment" in i for i in insights)

    def test_single_platform_has_no_comparison(self, make_metrics):
        insights = generate_insights({"a": make_metrics(rate=0.5, sentiment=0.4)})
        assert insights == []

    def test_trend_sentences(self, make_metrics):
        insights = generate_insights({
            "a": make_metrics(sentiment_trend="improving", accuracy_trend="improving"),
            "b": make_metrics(sentiment_trend="declining", accuracy_trend="declining"),
        })
        assert "Sentiment on a is improving over time" in insights
        assert "⚠️ Sentiment on b is declining - may need attention" in insights
        assert "⚠️ Accuracy on b is declining - content updates may be needed" in insights
        assert not any("Accuracy on a" in i for i in insights)

    @pytest.mark.parametrize("rate, expected", [
        (0.1, "Brand awareness across AI platforms is low - consider increasing online presence"),
        (0.9, "Strong brand presence across AI platforms"),
    ])
    def test_overall_presence(self, make_metrics, rate, expected):
        assert generate_insights({"a": make_metrics(rate=rate)})[-1] == expected

    @pytest.mark.parametrize("rate", [0.3, 0.5, 0.7])
    def test_middle_presence_is_silent(self, make_metrics, rate):
        assert generate_insights({"a": make_metrics(rate=rate)}) == []

    def test_undefined_rate_blocks_overall_presence(self, make_metrics):
        insights = generate_insights({
            "chatgpt": make_metrics(rate=0.9),
            "claude": make_metrics(rate=None),
        })
        assert insights == ["chatgpt has the highest brand mention rate (90.0%)"]
        assert "Strong brand presence across AI platforms" not in insights

    def test_mean_mention_rate(self, make_metrics):
        assert mean_mention_rate({"a": make_metrics(rate=0.2), "b": make_metrics(rate=0.6)}) == pytest.approx(0.4)
        assert mean_mention_rate({"a": make_metrics(rate=0.2), "b": make_metrics(rate=None)}) is None
        assert mean_mention_rate({}) is None

    def test_sample_insights(self, analysis):
        assert analysis.insights == [
            "chatgpt has the highest brand mention rate (80.0%)",
            "chatgpt provides the most positive sentiment (0.150)",
            "⚠️ Sentiment on claude is declining - may need attention",
        ]


# ─── Recommendation Tests ────────────────────────────────────────────────────

class TestRecommendations:
    def test_accuracy_threshold_is_strict(self, make_metrics):
        at_target = generate_recommendations({"a": make_metrics(rate=0.6, accuracy=0.7)})
        below = generate_recommendations({"a": make_metrics(rate=0.6, accuracy=0.69999)})
        assert at_target == []
        assert below == [
            "Update website content with more structured data to improve AI accuracy",
            "Ensure ai.txt file contains comprehensive and accurate brand information",
        ]

    def test_low_visibility(self, make_metrics):
        recs = generate_recommendations({"a": make_metrics(rate=0.4, accuracy=0.9)})
        assert len(recs) == 3
        assert recs[0] == "Increase brand visibility through SEO and content marketing"

    def test_order_and_platform_specific(self, make_metrics):
        recs = generate_recommendations({
            "chatgpt": make_metrics(rate=0.45, accuracy=0.5),
            "claude": make_metrics(rate=0.1, accuracy=0.5),
        })
        assert len(recs) == 6
        assert recs[0].startswith("Update website content")
        assert recs[2].startswith("Increase brand visibility")
        assert recs[-1] == "Improve presence on claude through targeted content optimization"

    def test_undefined_rate_gets_no_platform_recommendation(self, make_metrics):
        recs = generate_recommendations({
            "a": make_metrics(rate=None, accuracy=0.9),
            "b": make_metrics(rate=0.8, accuracy=0.9),
        })
        assert recs == []

    def test_undefined_rate_blocks_visibility(self, make_metrics):
        recs = generate_recommendations({
            "chatgpt": make_metrics(rate=0.1, accuracy=0.9),
            "claude": make_metrics(rate=None, accuracy=0.9),
        })
        assert recs == ["Improve presence on chatgpt through targeted content optimization"]
        assert not any(r.startswith("Increase brand visibility") for r in recs)

    def test_sample_recommendations(self, analysis):
        assert len(analysis.recommendations) == 3
        assert analysis.recommendations[-1] == (
            "Improve presence on claude through targeted content optimization"
        )


# ─── Alert Tests ─────────────────────────────────────────────────────────────

class TestAlerts:
    def test_all_checks_can_fire_together(self, make_metrics):
        analysis = analysis_of(
            gemini=make_metrics(rate=0.0, sentiment=-0.4, accuracy=0.2, total_queries=5),
        )
        alerts = check_alerts(analysis, AlertThresholds(-0.1, 0.5, 5))
        assert alerts == [
            "⚠️  ALERT: Negative sentiment detected on gemini",
            "⚠️  ALERT: Low accuracy on gemini (20.0%)",
            "⚠️  ALERT: No brand mentions on gemini in recent queries",
        ]

    def test_missing_mentions_needs_enough_queries(self, make_metrics):
        analysis = analysis_of(a=make_metrics(rate=0.0, total_queries=4))
        assert check_alerts(analysis, AlertThresholds(-0.1, 0.5, 5)) == []

    def test_undefined_rate_is_not_zero(self, make_metrics):
        analysis = analysis_of(a=make_metrics(rate=None, total_queries=10))
        assert check_alerts(analysis, AlertThresholds(-0.1, 0.5, 5)) == []

    def test_sample_alerts(self, analysis):
        alerts = check_alerts(analysis, AlertThresholds())
        assert alerts == [
            "⚠️  ALERT: Negative sentiment detected on claude",
            "⚠️  ALERT: Low accuracy on claude (37.5%)",
        ]

    def test_thresholds_from_settings(self):
        from config.settings import Settings
        cfg = Settings(ALERT_SENTIMENT_DROP=-0.5, ALERT_ACCURACY_BELOW=0.2, ALERT_MISSING_MENTIONS=3)
        assert AlertThresholds.from_settings(cfg) == AlertThresholds(-0.5, 0.2, 3)


# ─── Full Pipeline Test ──────────────────────────────────────────────────────

class TestFullPipeline:
    def test_analysis_end_to_end(self, analysis):
        data = analysis.to_dict()
        assert set(data) == {"overview", "platformMetrics", "trends", "insights", "recommendations"}
        assert data["overview"]["brand"] == "Acme Homes"
        assert data["overview"]["totalSessions"] == 3
        assert list(data["platformMetrics"]) == ["chatgpt", "claude"]
        assert len(data["trends"]["sentiment"]) == 3

    def test_orchestrator_stages(self, sample_sessions):
        orchestrator = Orchestrator([AggregationAgent(), MetricsAgent(), InsightAgent()])
        result = orchestrator.execute(sample_sessions)
        assert result.success
        assert [r.agent_name for r in orchestrator.run_history] == [
            "AggregationAgent", "MetricsAgent", "InsightAgent",
        ]

    def test_repeated_runs_match(self, sample_sessions):
        first = analyze_sessions(sample_sessions, brand="Acme Homes").to_dict()
        second = analyze_sessions(sample_sessions, brand="Acme Homes").to_dict()
        assert first == second

    def test_empty_sessions_raise(self):
        with pytest.raises(RuntimeError, match="No tracking sessions"):
            analyze_sessions([])
