"""
Pipeline runner: wires the three analysis agents together.

Architecture:
  AggregationAgent → MetricsAgent → InsightAgent

`analyze_sessions` is the engine itself (no I/O, no shared state);
`run_analysis` adds the session store lookup and the empty-window check.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from agents.base import Orchestrator
from agents.aggregator import AggregationAgent
from agents.metrics import MetricsAgent
from agents.insights import InsightAgent
from db.store import SessionStore
from models.schemas import Analysis, TrackingSession

logger = logging.getLogger(__name__)


def analyze_sessions(sessions: List[TrackingSession], brand: str = "") -> Analysis:
    """
    Build the full Analysis for a non-empty list of sessions.

    Raises RuntimeError if any stage fails (including an empty session list).
    """
    pipeline = Orchestrator([
        AggregationAgent(brand=brand),
        MetricsAgent(),
        InsightAgent(),
    ])

    result = pipeline.execute(sessions)
    if not result.success:
        raise RuntimeError(f"Analysis failed: {result.error}")

    logger.debug(pipeline.summary())
    return result.data


def run_analysis(
    store: SessionStore,
    days: int,
    brand: str = "",
    now: Optional[datetime] = None,
) -> Optional[Analysis]:
    """
    Analyze the sessions recorded in the last `days` days.

    Returns None when the window holds no sessions; the engine is not run.
    """
    sessions = store.load_recent(days, now=now)
    if not sessions:
        logger.info(f"No tracking data found in the last {days} days")
        return None

    logger.info(f"Analyzing {len(sessions)} tracking sessions from the last {days} days")
    return analyze_sessions(sessions, brand=brand)
