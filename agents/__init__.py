from .base import Agent, AgentResult, Orchestrator
from .aggregator import AggregationAgent, AggregationOutput
from .metrics import MetricsAgent, MetricsOutput
from .insights import InsightAgent
from .alerts import AlertThresholds, check_alerts

__all__ = [
    "Agent", "AgentResult", "Orchestrator",
    "AggregationAgent", "AggregationOutput",
    "MetricsAgent", "MetricsOutput",
    "InsightAgent",
    "AlertThresholds", "check_alerts",
]
