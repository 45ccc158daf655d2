"""JSON API endpoints for the position calculator."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tradecalc.display import outcome_to_dict
from tradecalc.form import TradeForm

log = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health() -> JSONResponse:
    """Liveness probe."""
    return JSONResponse(content={"status": "ok"})


@router.post("/calculate")
async def calculate_position(request: Request) -> JSONResponse:
    """Calculate from a JSON object of form fields.

    Fields go through the same input filters as the form, so a percentage
    above 100 is capped rather than rejected.

    Ok, validation errors and Empty all return 200 with a "status" field;
    only a malformed request body returns 422.
    """
    calculator = request.app.state.calculator

    try:
        data = await request.json()
    except ValueError as e:
        log.warning("calculation_request_invalid", error=str(e))
        return JSONResponse(status_code=422, content={"detail": "Body must be JSON."})

    if not isinstance(data, dict):
        log.warning("calculation_request_invalid", error="body is not an object")
        return JSONResponse(
            status_code=422, content={"detail": "Body must be a JSON object."}
        )

    try:
        form = TradeForm.from_mapping(data).normalized()
    except ValueError as e:
        log.warning("calculation_request_invalid", error=str(e))
        return JSONResponse(status_code=422, content={"detail": f"Invalid value: {e}"})

    outcome = calculator.calculate(form.to_parameters())
    log.info("api_calculation", status=outcome.status.value)
    return JSONResponse(content=outcome_to_dict(outcome))
