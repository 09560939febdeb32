"""
Configuration & Settings
Brand Presence Tracker
"""

from pydantic import BaseModel
import os


class Settings(BaseModel):
    # App
    APP_NAME: str = "Brand Presence Tracker"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("TRACKER_DEBUG", "").lower() in ("1", "true", "yes")

    # Brand being monitored (display only)
    BRAND_NAME: str = os.getenv("BRAND_NAME", "The Prairie Smithville")
    BRAND_DOMAIN: str = os.getenv("BRAND_DOMAIN", "theprairiesmithville.com")

    # Session storage
    # SESSION_BACKEND: "json" reads tracking_*.json files from DATA_DIR,
    # "sql" reads the tracking_session table at DATABASE_URL.
    SESSION_BACKEND: str = os.getenv("TRACKER_BACKEND", "json")
    DATA_DIR: str = os.getenv("TRACKER_DATA_DIR", "./data")
    REPORTS_DIR: str = os.getenv("TRACKER_REPORTS_DIR", "./reports")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./brand_tracker.db")

    # Analysis window
    ANALYSIS_DAYS: int = 30

    # Alert thresholds
    ALERT_SENTIMENT_DROP: float = -0.1
    ALERT_ACCURACY_BELOW: float = 0.5
    ALERT_MISSING_MENTIONS: int = 5

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3001


settings = Settings()
