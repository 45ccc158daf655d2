"""Form-state layer: raw text inputs to an immutable TradeParameters snapshot.

Mirrors the calculator form. Every numeric field is held as the text the
user typed (possibly with thousands separators) and is only parsed when a
snapshot is taken. Empty or invalid text is absent (None), never zero.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation
from typing import Any

from tradecalc.models import (
    EntryPoint,
    InstrumentMode,
    TargetPoint,
    TradeDirection,
    TradeParameters,
)

_NUMERIC_INPUT = re.compile(r"\d*\.?\d*")
_THOUSANDS_GROUP = re.compile(r"\B(?=(\d{3})+(?!\d))")
_TRUTHY = {"1", "true", "on", "yes"}
_HUNDRED = Decimal("100")
_AMOUNT_FIELDS = (
    "entry_price",
    "stop_loss",
    "risk_amount",
    "spot_entry_price_1",
    "spot_entry_price_2",
    "spot_entry_price_3",
    "target_price_1",
    "target_price_2",
    "target_price_3",
)
_PERCENT_FIELDS = (
    "spot_allocation_1",
    "spot_allocation_2",
    "spot_allocation_3",
    "exit_percent_1",
    "exit_percent_2",
    "exit_percent_3",
)


def _strip_separators(text: str) -> str:
    return text.replace(",", "").strip()


def parse_decimal(text: str | None) -> Decimal | None:
    """Parse a form field into a Decimal.

    Thousands separators and surrounding whitespace are ignored. Empty,
    unparsable, NaN and infinite values all come back as None.
    """
    if text is None:
        return None
    cleaned = _strip_separators(str(text))
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def format_thousands(text: str) -> str | None:
    """Regroup a numeric field with comma thousands separators.

    Returns None when the text is not a plain non-negative decimal, in which
    case the caller keeps the previous field value.
    """
    sanitized = text.replace(",", "")
    if sanitized and not _NUMERIC_INPUT.fullmatch(sanitized):
        return None
    integer_part, dot, fraction = sanitized.partition(".")
    return _THOUSANDS_GROUP.sub(",", integer_part) + dot + fraction


def clamp_percent(text: str) -> str | None:
    """Validate a percentage field, capping anything above 100 at "100".

    Returns None when the text is not a plain non-negative decimal.
    """
    sanitized = text.replace(",", "")
    if sanitized and not _NUMERIC_INPUT.fullmatch(sanitized):
        return None
    value = parse_decimal(sanitized)
    if value is not None and value > _HUNDRED:
        return "100"
    return sanitized


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class TradeForm:
    """Raw calculator form state, one attribute per input field.

    Defaults match a freshly opened form: risk 10, a single target closing
    100% of the position and, in spot mode, a single entry holding 100%.
    """

    mode: InstrumentMode = InstrumentMode.FUTURES
    direction: TradeDirection = TradeDirection.LONG

    entry_price: str = ""
    stop_loss: str = ""
    risk_amount: str = "10"

    spot_entry_price_1: str = ""
    spot_allocation_1: str = "100"
    spot_entry_2_enabled: bool = False
    spot_entry_price_2: str = ""
    spot_allocation_2: str = ""
    spot_entry_3_enabled: bool = False
    spot_entry_price_3: str = ""
    spot_allocation_3: str = ""

    target_price_1: str = ""
    exit_percent_1: str = "100"
    target_2_enabled: bool = False
    target_price_2: str = ""
    exit_percent_2: str = ""
    target_3_enabled: bool = False
    target_price_3: str = ""
    exit_percent_3: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TradeForm:
        """Build a form from submitted HTML form data or a JSON object.

        Unknown keys are ignored. Checkbox fields absent from the mapping are
        unchecked, which is how browsers submit them.

        Raises:
            ValueError: If mode or direction is not a known value.
        """
        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "mode":
                if "mode" in data:
                    values["mode"] = InstrumentMode(str(data["mode"]).upper())
            elif f.name == "direction":
                if "direction" in data:
                    values["direction"] = TradeDirection(
                        str(data["direction"]).upper()
                    )
            elif f.name.endswith("_enabled"):
                values[f.name] = _as_bool(data.get(f.name, False))
            elif f.name in data:
                raw = data[f.name]
                values[f.name] = "" if raw is None else str(raw)
        return cls(**values)

    def normalized(self) -> TradeForm:
        """Apply the input filters the form runs on every keystroke.

        Price and amount fields are regrouped with thousands separators and
        percentage fields are capped at 100. Text the filters reject is kept
        as typed; it parses as absent later.
        """
        changes: dict[str, Any] = {}
        for name in _AMOUNT_FIELDS:
            formatted = format_thousands(getattr(self, name))
            if formatted is not None:
                changes[name] = formatted
        for name in _PERCENT_FIELDS:
            clamped = clamp_percent(getattr(self, name))
            if clamped is not None:
                changes[name] = clamped
        return replace(self, **changes)

    def with_toggle_defaults(self, toggled: str) -> TradeForm:
        """Apply the reset rules for the optional-slot checkbox that changed.

        Switching a target or spot entry off clears its fields. When that
        leaves both optional targets off, target 1 goes back to closing 100%;
        the same holds for spot entry 1's allocation. Other edits never
        touch these fields, so toggled must name one of the checkboxes.
        """
        changes: dict[str, Any] = {}
        if toggled in ("target_2_enabled", "target_3_enabled"):
            if not self.target_2_enabled:
                changes.update(target_price_2="", exit_percent_2="")
            if not self.target_3_enabled:
                changes.update(target_price_3="", exit_percent_3="")
            if not self.target_2_enabled and not self.target_3_enabled:
                changes["exit_percent_1"] = "100"
        elif toggled in ("spot_entry_2_enabled", "spot_entry_3_enabled"):
            if not self.spot_entry_2_enabled:
                changes.update(spot_entry_price_2="", spot_allocation_2="")
            if not self.spot_entry_3_enabled:
                changes.update(spot_entry_price_3="", spot_allocation_3="")
            if not self.spot_entry_2_enabled and not self.spot_entry_3_enabled:
                changes["spot_allocation_1"] = "100"
        return replace(self, **changes)

    def changed_fields(self, other: TradeForm) -> dict[str, str]:
        """Text fields whose value in other differs from this form."""
        return {
            name: getattr(other, name)
            for name in _AMOUNT_FIELDS + _PERCENT_FIELDS
            if getattr(self, name) != getattr(other, name)
        }

    def to_parameters(self) -> TradeParameters:
        """Take an immutable snapshot with every numeric field parsed."""
        entries = (
            EntryPoint(
                price=parse_decimal(self.spot_entry_price_1),
                allocation_percent=parse_decimal(self.spot_allocation_1),
                enabled=True,
            ),
            EntryPoint(
                price=parse_decimal(self.spot_entry_price_2),
                allocation_percent=parse_decimal(self.spot_allocation_2),
                enabled=self.spot_entry_2_enabled,
            ),
            EntryPoint(
                price=parse_decimal(self.spot_entry_price_3),
                allocation_percent=parse_decimal(self.spot_allocation_3),
                enabled=self.spot_entry_3_enabled,
            ),
        )
        targets = (
            TargetPoint(
                price=parse_decimal(self.target_price_1),
                exit_percent=parse_decimal(self.exit_percent_1),
                enabled=True,
            ),
            TargetPoint(
                price=parse_decimal(self.target_price_2),
                exit_percent=parse_decimal(self.exit_percent_2),
                enabled=self.target_2_enabled,
            ),
            TargetPoint(
                price=parse_decimal(self.target_price_3),
                exit_percent=parse_decimal(self.exit_percent_3),
                enabled=self.target_3_enabled,
            ),
        )
        return TradeParameters(
            mode=self.mode,
            direction=self.direction,
            risk_amount=parse_decimal(self.risk_amount),
            stop_loss=parse_decimal(self.stop_loss),
            entry_price=parse_decimal(self.entry_price),
            entries=entries,
            targets=targets,
        )
