"""
FastAPI Route Handlers
Brand Presence Tracker

Every request loads its own session list and runs a fresh analysis; nothing
is cached between requests.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from api.schemas import HealthResponse, ConfigResponse, AlertThresholdsResponse, AlertsResponse
from agents.alerts import AlertThresholds, check_alerts
from config.settings import settings
from db.store import SessionStore, get_session_store
from models.schemas import Analysis
from utils.pipeline import run_analysis

logger = logging.getLogger(__name__)

router = APIRouter()

NO_DATA = "No tracking data available"


_store: Optional[SessionStore] = None


def get_store() -> SessionStore:
    """Dependency; the store is built once per process. Tests override it."""
    global _store
    if _store is None:
        _store = get_session_store(settings)
    return _store


def _analysis_or_404(store: SessionStore, days: int) -> Analysis:
    analysis = run_analysis(store, days, brand=settings.BRAND_NAME)
    if analysis is None:
        raise HTTPException(status_code=404, detail=NO_DATA)
    return analysis


# ─── System ──────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    return HealthResponse(
        status="ok",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/config", response_model=ConfigResponse, tags=["System"])
async def get_config():
    return ConfigResponse(
        brand=settings.BRAND_NAME,
        domain=settings.BRAND_DOMAIN,
        backend=settings.SESSION_BACKEND,
        analysisDays=settings.ANALYSIS_DAYS,
        alertThresholds=AlertThresholdsResponse(
            sentimentDrop=settings.ALERT_SENTIMENT_DROP,
            accuracyBelow=settings.ALERT_ACCURACY_BELOW,
            missingMentions=settings.ALERT_MISSING_MENTIONS,
        ),
    )


# ─── Sessions ────────────────────────────────────────────────────────────────

@router.get("/sessions", tags=["Sessions"])
def get_sessions(
    days: int = Query(settings.ANALYSIS_DAYS, ge=1),
    store: SessionStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Raw tracking sessions from the last `days` days, oldest first."""
    return [s.to_dict() for s in store.load_recent(days)]


@router.get("/latest", tags=["Sessions"])
def get_latest_session(store: SessionStore = Depends(get_store)) -> Dict[str, Any]:
    """Most recent tracking session."""
    session = store.latest()
    if session is None:
        raise HTTPException(status_code=404, detail="No tracking sessions found")
    return session.to_dict()


# ─── Analysis ────────────────────────────────────────────────────────────────

@router.get("/analysis", tags=["Analysis"])
def get_analysis(
    days: int = Query(settings.ANALYSIS_DAYS, ge=1),
    store: SessionStore = Depends(get_store),
) -> Dict[str, Any]:
    """Full analysis: overview, platform metrics, trends, insights, recommendations."""
    return _analysis_or_404(store, days).to_dict()


@router.get("/platforms", tags=["Analysis"])
def get_platform_metrics(
    days: int = Query(settings.ANALYSIS_DAYS, ge=1),
    store: SessionStore = Depends(get_store),
) -> Dict[str, Any]:
    """Per-platform metrics only."""
    analysis = _analysis_or_404(store, days)
    return {p: m.to_dict() for p, m in analysis.platform_metrics.items()}


@router.get("/alerts", response_model=AlertsResponse, tags=["Analysis"])
def get_alerts(
    days: int = Query(settings.ANALYSIS_DAYS, ge=1),
    store: SessionStore = Depends(get_store),
):
    """Threshold alerts for the analysis window."""
    analysis = _analysis_or_404(store, days)
    alerts = check_alerts(analysis, AlertThresholds.from_settings(settings))
    return AlertsResponse(days=days, count=len(alerts), alerts=alerts)
