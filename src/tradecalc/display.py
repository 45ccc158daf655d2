"""Presentation of calculation outcomes for the dashboard and the JSON API.

Formatting follows en-US conventions: currency with two decimals, unit
quantities with at most four, ratios as "1 : x.xx". Rounding is HALF_UP,
applied only here; the calculator itself never rounds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from tradecalc.models import CalculationOutcome, OutcomeStatus

EMPTY_PROMPT = "Enter your trade details to see the results."

_CENTS = Decimal("0.01")
_UNIT_PRECISION = Decimal("0.0001")


def _round(value: Decimal, exponent: Decimal) -> Decimal:
    # quantize raises once the result needs more digits than the precision
    with localcontext() as ctx:
        needed = value.adjusted() - exponent.as_tuple().exponent + 1
        ctx.prec = max(ctx.prec, needed)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)


def format_currency(value: Decimal, symbol: str = "$") -> str:
    """Format as currency, e.g. Decimal("1234.5") -> "$1,234.50"."""
    rounded = _round(value, _CENTS)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{rounded.copy_abs():,.2f}"


def format_units(value: Decimal) -> str:
    """Format a quantity with grouping and at most four fraction digits."""
    rounded = _round(value, _UNIT_PRECISION)
    text = f"{rounded:,.4f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_ratio(value: Decimal) -> str:
    """Format a reward-to-risk multiple, e.g. Decimal("2.5") -> "1 : 2.50"."""
    rounded = _round(value, _CENTS)
    return f"1 : {rounded:.2f}"


@dataclass
class ResultPanel:
    """One labelled figure in the results grid."""

    label: str
    value: str
    unit: str = ""
    highlight: bool = False


@dataclass
class TargetRow:
    """Projected profit at one take-profit slot."""

    slot: int  # 1-based, matches the form's "Target N" label
    label: str
    profit: str


@dataclass
class ResultView:
    """Everything the results area needs to render one outcome."""

    state: str  # "empty", "error" or "ok"
    message: str = ""
    panels: list[ResultPanel] = field(default_factory=list)
    targets: list[TargetRow] = field(default_factory=list)
    average_entry_price: str | None = None  # SPOT mode banner


def build_view(outcome: CalculationOutcome, currency_symbol: str = "$") -> ResultView:
    """Turn a calculation outcome into display-ready strings.

    Empty shows a prompt, an error shows its message, and a result shows the
    four summary panels plus one row per populated target slot. Slots keep
    their original numbering when earlier targets are disabled.
    """
    if outcome.is_empty:
        return ResultView(state=OutcomeStatus.EMPTY.value, message=EMPTY_PROMPT)

    if outcome.is_error:
        return ResultView(
            state=OutcomeStatus.ERROR.value, message=outcome.error.message
        )

    result = outcome.unwrap()
    panels = [
        ResultPanel(
            label="Position Size",
            value=format_units(result.position_size),
            unit="Units",
        ),
        ResultPanel(
            label="Total Potential Profit",
            value=format_currency(result.total_potential_profit, currency_symbol),
            highlight=True,
        ),
        ResultPanel(
            label="Total Position Value",
            value=format_currency(result.total_position_value, currency_symbol),
        ),
        ResultPanel(
            label="Risk/Reward Ratio",
            value=format_ratio(result.risk_reward_ratio),
        ),
    ]
    targets = [
        TargetRow(
            slot=slot,
            label=f"Target {slot}",
            profit=format_currency(profit, currency_symbol),
        )
        for slot, profit in enumerate(result.target_profits, start=1)
        if profit is not None
    ]
    average = (
        format_currency(result.average_entry_price, currency_symbol)
        if result.average_entry_price is not None
        else None
    )
    return ResultView(
        state=OutcomeStatus.OK.value,
        panels=panels,
        targets=targets,
        average_entry_price=average,
    )


def _decimal_to_str(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def outcome_to_dict(outcome: CalculationOutcome) -> dict[str, Any]:
    """JSON-safe representation of an outcome. Decimals become strings."""
    payload: dict[str, Any] = {
        "status": outcome.status.value,
        "result": None,
        "error": None,
    }
    if outcome.is_error:
        payload["error"] = {
            "kind": outcome.error.kind.value,
            "message": outcome.error.message,
            "target_index": outcome.error.target_index,
        }
    elif outcome.is_ok:
        result = outcome.unwrap()
        payload["result"] = {
            "position_size": str(result.position_size),
            "total_position_value": str(result.total_position_value),
            "total_potential_profit": str(result.total_potential_profit),
            "risk_reward_ratio": str(result.risk_reward_ratio),
            "target_profits": [_decimal_to_str(p) for p in result.target_profits],
            "average_entry_price": _decimal_to_str(result.average_entry_price),
        }
    return payload
