"""
api/app.py — FastAPI application factory
==========================================
Creates and configures the FastAPI instance so that `main.py` stays
minimal.

CORS
----
The session endpoints are fed by a browser capture page, so all origins
are allowed by default.  Restrict `allow_origins` to the frontend domain
in a real deployment.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from config import API_TITLE, API_VERSION


def create_app() -> FastAPI:
    """
    Construct and return the configured FastAPI application.

    A factory rather than a module-level singleton so that tests can create
    isolated app instances.
    """
    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        description=(
            "Camera-based pulse-signal screening: heart rate, HRV, "
            "estimated blood pressure and cardiovascular risk. "
            "⚠️ WELLNESS TOOL ONLY — not a medical device."
        ),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app
