"""POST endpoints driven by the calculator form."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from tradecalc.display import ResultView, build_view
from tradecalc.form import TradeForm

log = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/calculate", response_class=HTMLResponse)
async def calculate_from_form(request: Request) -> HTMLResponse:
    """Recalculate from the submitted form and return the results.html partial.

    The page posts here on every field edit, so each request is one
    explicit, independent calculation. Fields rewritten by the input
    filters or by a slot toggle are sent back as out-of-band inputs.
    """
    templates: Jinja2Templates = request.app.state.templates
    settings = request.app.state.settings
    calculator = request.app.state.calculator

    submitted = await request.form()
    try:
        raw = TradeForm.from_mapping(submitted)
    except ValueError as e:
        log.warning("calculation_request_invalid", error=str(e))
        view = ResultView(state="error", message=f"Invalid value: {e}")
        return templates.TemplateResponse(
            request, "partials/results.html", {"view": view}, status_code=422
        )

    form = raw.normalized()
    # slot checkboxes post on their own, so htmx names them in this header
    trigger = request.headers.get("HX-Trigger-Name", "")
    if trigger.endswith("_enabled"):
        form = form.with_toggle_defaults(trigger)

    outcome = calculator.calculate(form.to_parameters())
    view = build_view(outcome, settings.calculator.currency_symbol)

    return templates.TemplateResponse(request, "partials/results.html", {
        "view": view,
        "updated_fields": raw.changed_fields(form),
    })
