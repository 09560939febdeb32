"""
Pydantic schemas for API responses.

Sessions, analyses and platform metrics are returned as the engine's own
camelCase dictionaries; only the fixed-shape responses are modelled here.
"""

from pydantic import BaseModel, Field
from typing import List
from datetime import datetime


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime


class AlertThresholdsResponse(BaseModel):
    sentimentDrop: float
    accuracyBelow: float
    missingMentions: int


class ConfigResponse(BaseModel):
    brand: str
    domain: str
    backend: str
    analysisDays: int = Field(..., ge=1)
    alertThresholds: AlertThresholdsResponse


class AlertsResponse(BaseModel):
    days: int
    count: int
    alerts: List[str]
