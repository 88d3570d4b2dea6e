#!/usr/bin/env python3
"""
Pulse-Signal Screening — Main Entry Point
==========================================
Launches the FastAPI backend with Uvicorn.
Run with:  python main.py

⚠️  DISCLAIMER: This is a WELLNESS SCREENING tool, NOT a medical device.
    Heart rate, HRV, blood pressure and risk values are ESTIMATES derived
    from camera-based pulse signals.  Do NOT use them for clinical
    diagnosis or treatment decisions.
"""

import uvicorn

from api.app import create_app
from config import API_HOST, API_PORT, LOG_LEVEL
from utils.logger import resolve_level


def main() -> None:
    uvicorn.run(
        create_app(),
        host=API_HOST,
        port=API_PORT,
        reload=False,
        log_level=resolve_level(LOG_LEVEL),
    )


if __name__ == "__main__":
    main()
