"""Shared data models for the trade position calculator.

CRITICAL: All prices, amounts and percentages use Decimal. Never use float.
A missing or unparsable input is None, never zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from tradecalc.exceptions import OutcomeNotAvailable, SlotCountError

MAX_SLOTS = 3

_ZERO = Decimal("0")


def is_positive(value: Decimal | None) -> bool:
    return value is not None and value.is_finite() and value > _ZERO


class TradeDirection(str, Enum):
    """Trade direction. Decides which way the price checks point."""

    LONG = "LONG"
    SHORT = "SHORT"


class InstrumentMode(str, Enum):
    """Single entry price (futures) or weighted multi-entry basis (spot)."""

    FUTURES = "FUTURES"
    SPOT = "SPOT"


@dataclass(frozen=True)
class EntryPoint:
    """One spot entry leg with its share of the position."""

    price: Decimal | None = None
    allocation_percent: Decimal | None = None
    enabled: bool = True

    @property
    def is_active(self) -> bool:
        """Enabled with a positive price and a positive allocation."""
        return (
            self.enabled
            and is_positive(self.price)
            and is_positive(self.allocation_percent)
        )


@dataclass(frozen=True)
class TargetPoint:
    """One take-profit level and the share of the position closed there."""

    price: Decimal | None = None
    exit_percent: Decimal | None = None
    enabled: bool = True

    @property
    def is_active(self) -> bool:
        """Enabled with a positive price and a positive exit percentage."""
        return (
            self.enabled
            and is_positive(self.price)
            and is_positive(self.exit_percent)
        )


@dataclass(frozen=True)
class TradeParameters:
    """Immutable snapshot of every calculator input.

    entry_price is used in FUTURES mode, entries in SPOT mode. Slot order is
    significant: target N is always targets[N - 1].
    """

    mode: InstrumentMode = InstrumentMode.FUTURES
    direction: TradeDirection = TradeDirection.LONG
    risk_amount: Decimal | None = None
    stop_loss: Decimal | None = None
    entry_price: Decimal | None = None
    entries: tuple[EntryPoint, ...] = (EntryPoint(),)
    targets: tuple[TargetPoint, ...] = (TargetPoint(),)

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so the snapshot stays hashable
        object.__setattr__(self, "entries", tuple(self.entries))
        object.__setattr__(self, "targets", tuple(self.targets))
        if not 1 <= len(self.entries) <= MAX_SLOTS:
            raise SlotCountError(
                f"expected 1 to {MAX_SLOTS} entries, got {len(self.entries)}"
            )
        if not 1 <= len(self.targets) <= MAX_SLOTS:
            raise SlotCountError(
                f"expected 1 to {MAX_SLOTS} targets, got {len(self.targets)}"
            )


@dataclass(frozen=True)
class CalculationOutput:
    """Sizing and profit projection for a valid trade."""

    position_size: Decimal  # units of the base asset
    total_position_value: Decimal  # quote currency
    total_potential_profit: Decimal  # quote currency, sum over active targets
    risk_reward_ratio: Decimal  # total_potential_profit / risk_amount
    target_profits: tuple[Decimal | None, ...]  # always MAX_SLOTS long
    average_entry_price: Decimal | None = None  # SPOT mode only


class ValidationErrorKind(str, Enum):
    """Validation failures, listed in the order they are checked."""

    EXIT_PERCENT_EXCEEDED = "exit_percent_exceeded"
    ALLOCATION_MUST_BE_100 = "allocation_must_be_100"
    ENTRY_BELOW_STOP = "entry_below_stop"
    ENTRY_ABOVE_STOP = "entry_above_stop"
    TARGET_BELOW_ENTRY = "target_below_entry"
    TARGET_ABOVE_ENTRY = "target_above_entry"


@dataclass(frozen=True)
class ValidationError:
    """A rejected input combination with a message ready for display."""

    kind: ValidationErrorKind
    message: str
    target_index: int | None = None  # 1-based, target errors only


class OutcomeStatus(str, Enum):
    """Which of the three calculation outcomes a result holds."""

    OK = "ok"
    ERROR = "error"
    EMPTY = "empty"


@dataclass(frozen=True)
class CalculationOutcome:
    """Result of one calculation: Ok(output), Err(error) or Empty.

    Empty means the form is not filled in far enough to compute anything.
    It is neither a failure nor a zero result.
    """

    status: OutcomeStatus
    output: CalculationOutput | None = None
    error: ValidationError | None = None

    @classmethod
    def ok(cls, output: CalculationOutput) -> CalculationOutcome:
        return cls(status=OutcomeStatus.OK, output=output)

    @classmethod
    def failed(cls, error: ValidationError) -> CalculationOutcome:
        return cls(status=OutcomeStatus.ERROR, error=error)

    @classmethod
    def empty(cls) -> CalculationOutcome:
        return cls(status=OutcomeStatus.EMPTY)

    @property
    def is_ok(self) -> bool:
        return self.status is OutcomeStatus.OK

    @property
    def is_error(self) -> bool:
        return self.status is OutcomeStatus.ERROR

    @property
    def is_empty(self) -> bool:
        return self.status is OutcomeStatus.EMPTY

    def unwrap(self) -> CalculationOutput:
        """Return the output of an Ok outcome.

        Raises:
            OutcomeNotAvailable: If the outcome is an error or empty.
        """
        if self.output is None:
            raise OutcomeNotAvailable(f"calculation outcome is {self.status.value}")
        return self.output
