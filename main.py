#!/usr/bin/env python3
"""
Entry point for the Brand Presence Tracker.

Usage:
  python main.py analyze [--days 30] [--metric sentiment|accuracy|mentions]
  python main.py report  [--format json|csv] [--output PATH] [--days 30]
  python main.py status
  python main.py api [--port 3001]
  python main.py dashboard
  python main.py test
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
from typing import List, Optional

from config.settings import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

ROOT = os.path.dirname(os.path.abspath(__file__))


def analyze(days: int, metric: Optional[str] = None) -> int:
    """Print the analysis (or one metric view) followed by any alerts."""
    from agents.alerts import AlertThresholds, check_alerts
    from db.store import get_session_store
    from utils.pipeline import run_analysis
    from utils.report import format_analysis, format_alerts, format_metric

    analysis = run_analysis(get_session_store(settings), days, brand=settings.BRAND_NAME)
    if analysis is None:
        print("\nNo tracking data found. Record a tracking session first.\n")
        return 0

    print()
    if metric:
        try:
            print(format_metric(analysis, metric))
        except ValueError as e:
            print(str(e))
            return 1
    else:
        print(format_analysis(analysis))

    alerts = check_alerts(analysis, AlertThresholds.from_settings(settings))
    if alerts:
        print()
        print(format_alerts(alerts))
    print()
    return 0


def report(fmt: str, output: Optional[str], days: int) -> int:
    from db.store import get_session_store
    from utils.pipeline import run_analysis
    from utils.report import write_report

    analysis = run_analysis(get_session_store(settings), days, brand=settings.BRAND_NAME)
    if analysis is None:
        print("\nNo tracking data available for report generation.\n")
        return 0

    try:
        path = write_report(analysis, fmt, output=output, reports_dir=settings.REPORTS_DIR)
    except ValueError as e:
        print(str(e))
        return 1
    print(f"\n✅ Report generated: {path}\n")
    return 0


def status() -> int:
    from db.store import get_session_store

    store = get_session_store(settings)
    print(f"\nBrand: {settings.BRAND_NAME}")
    print(f"Domain: {settings.BRAND_DOMAIN}")
    print(f"Backend: {settings.SESSION_BACKEND}")
    print(f"Total tracking sessions: {store.count()}")

    latest = store.latest()
    if latest is not None:
        print(f"Last tracked: {latest.timestamp.astimezone():%Y-%m-%d %H:%M:%S}")
        print(f"Platforms tracked: {', '.join(latest.results) or '—'}")
    print()
    return 0


def start_api(port: int) -> int:
    import uvicorn
    uvicorn.run("api.main:app", host=settings.API_HOST, port=port, reload=settings.DEBUG)
    return 0


def start_dashboard() -> int:
    dashboard_path = os.path.join(ROOT, "dashboard", "app.py")
    return subprocess.run([sys.executable, "-m", "streamlit", "run", dashboard_path]).returncode


def run_tests() -> int:
    return subprocess.run([sys.executable, "-m", "pytest", "tests/", "-v", "--tb=short"], cwd=ROOT).returncode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=settings.APP_NAME)
    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("analyze", help="Analyze collected tracking data")
    p.add_argument("-d", "--days", type=int, default=settings.ANALYSIS_DAYS)
    p.add_argument("-m", "--metric", help="sentiment | accuracy | mentions")

    p = sub.add_parser("report", help="Write a report file")
    p.add_argument("-f", "--format", default="json", help="json | csv")
    p.add_argument("-o", "--output")
    p.add_argument("-d", "--days", type=int, default=settings.ANALYSIS_DAYS)

    sub.add_parser("status", help="Show tracking status")

    p = sub.add_parser("api", help="Start the JSON API")
    p.add_argument("-p", "--port", type=int, default=settings.API_PORT)

    sub.add_parser("dashboard", help="Start the Streamlit dashboard")
    sub.add_parser("test", help="Run the test suite")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    command = args.command or "analyze"

    if command == "analyze":
        return analyze(getattr(args, "days", settings.ANALYSIS_DAYS), getattr(args, "metric", None))
    if command == "report":
        return report(args.format, args.output, args.days)
    if command == "status":
        return status()
    if command == "api":
        return start_api(args.port)
    if command == "dashboard":
        return start_dashboard()
    return run_tests()


if __name__ == "__main__":
    sys.exit(main())
