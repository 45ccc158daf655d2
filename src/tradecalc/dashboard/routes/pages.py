"""Page routes serving the calculator HTML template."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from tradecalc.display import build_view
from tradecalc.form import TradeForm
from tradecalc.models import CalculationOutcome

log = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def calculator_index(request: Request) -> HTMLResponse:
    """Calculator page with a fresh form and the empty results prompt."""
    templates: Jinja2Templates = request.app.state.templates
    settings = request.app.state.settings

    form = TradeForm(risk_amount=settings.calculator.default_risk_amount)
    view = build_view(CalculationOutcome.empty(), settings.calculator.currency_symbol)

    log.debug("calculator_page_rendered")
    return templates.TemplateResponse(request, "index.html", {
        "title": settings.dashboard.title,
        "form": form,
        "view": view,
    })
