"""FastAPI dashboard application factory with Jinja2 templates."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from tradecalc.config import AppSettings
from tradecalc.dashboard.routes import actions, api, pages
from tradecalc.position.calculator import PositionCalculator

TEMPLATES_DIR = Path(__file__).parent / "templates"


def create_dashboard_app(
    settings: AppSettings | None = None, lifespan: Any = None
) -> FastAPI:
    """Create and configure the calculator dashboard application.

    Args:
        settings: Application settings. Loaded from the environment when omitted.
        lifespan: Optional async context manager for application lifespan events.

    Returns:
        Configured FastAPI application with templates, calculator, and routes.
    """
    settings = settings or AppSettings()

    app = FastAPI(
        title=settings.dashboard.title,
        lifespan=lifespan,
    )

    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    app.state.settings = settings
    # One shared instance: the calculator holds no per-call state
    app.state.calculator = PositionCalculator.from_settings(settings.calculator)

    app.include_router(pages.router)
    app.include_router(api.router, prefix="/api")
    app.include_router(actions.router, prefix="/actions")

    return app
