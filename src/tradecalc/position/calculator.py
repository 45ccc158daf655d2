"""Position size and profit projection for a single trade.

All calculations use Decimal arithmetic exclusively -- no float conversions.

Calculation flow:
1. Reject when active target exit percentages sum above 100%
2. Return Empty when entry, stop loss or risk amount is missing
3. Resolve the reference price (futures entry, or weighted spot average)
4. Validate entry and targets against the stop loss for the direction
5. position_size = risk_amount / |reference - stop_loss|
6. Profit per active target = position_size * exit% * |target - reference|

Validation fails fast: only the first failure in the order above is reported.
"""

from decimal import DefaultContext, Decimal, localcontext

from tradecalc.config import CalculatorSettings
from tradecalc.logging import get_logger
from tradecalc.models import (
    MAX_SLOTS,
    CalculationOutcome,
    CalculationOutput,
    InstrumentMode,
    TargetPoint,
    TradeDirection,
    TradeParameters,
    ValidationError,
    ValidationErrorKind,
    is_positive,
)

logger = get_logger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
DEFAULT_TOLERANCE = Decimal("0.001")


class PositionCalculator:
    """Derives position size, position value and per-target profit.

    Stateless: every call works on its own TradeParameters snapshot, so a
    single instance can be shared between callers.

    Args:
        tolerance: Absolute slack for the "sums to 100" and "exceeds 100"
            percentage checks.
    """

    def __init__(self, tolerance: Decimal = DEFAULT_TOLERANCE) -> None:
        self._tolerance = tolerance

    @classmethod
    def from_settings(cls, settings: CalculatorSettings) -> "PositionCalculator":
        return cls(tolerance=settings.tolerance)

    def calculate(self, params: TradeParameters) -> CalculationOutcome:
        """Validate the trade and project its size and profit.

        Args:
            params: Snapshot of the current inputs.

        Returns:
            Ok with a CalculationOutput, Err with the first ValidationError,
            or Empty when the inputs are not complete enough to compute.
            Inputs so large that the arithmetic leaves the Decimal range
            also come back Empty.
        """
        try:
            with localcontext(DefaultContext):
                return self._calculate(params)
        except ArithmeticError as e:
            logger.warning("calculation_out_of_range", error=repr(e))
            return CalculationOutcome.empty()

    def _calculate(self, params: TradeParameters) -> CalculationOutcome:
        targets = params.targets
        active_targets = [t for t in targets if t.is_active]

        total_exit = sum((t.exit_percent for t in active_targets), _ZERO)
        if total_exit > _HUNDRED + self._tolerance:
            return self._reject(
                ValidationErrorKind.EXIT_PERCENT_EXCEEDED,
                "Total exit percentage for active targets cannot exceed 100%.",
            )

        if not (is_positive(params.stop_loss) and is_positive(params.risk_amount)):
            return self._empty("missing_stop_or_risk")

        if params.mode is InstrumentMode.SPOT:
            outcome_or_reference = self._spot_reference(params)
        else:
            outcome_or_reference = self._futures_reference(params)

        if isinstance(outcome_or_reference, CalculationOutcome):
            return outcome_or_reference
        reference = outcome_or_reference

        risk_per_unit = abs(reference - params.stop_loss)
        if risk_per_unit <= _ZERO:
            return self._empty("zero_risk_per_unit")

        position_size = params.risk_amount / risk_per_unit
        total_position_value = position_size * reference

        target_profits: list[Decimal | None] = [None] * MAX_SLOTS
        for index, target in enumerate(targets):
            if not target.is_active:
                continue
            reward_per_unit = abs(target.price - reference)
            target_profits[index] = (
                position_size * (target.exit_percent / _HUNDRED) * reward_per_unit
            )

        total_potential_profit = sum(
            (p for p in target_profits if p is not None), _ZERO
        )
        if total_potential_profit <= _ZERO:
            return self._empty("no_potential_profit")

        output = CalculationOutput(
            position_size=position_size,
            total_position_value=total_position_value,
            total_potential_profit=total_potential_profit,
            risk_reward_ratio=total_potential_profit / params.risk_amount,
            target_profits=tuple(target_profits),
            average_entry_price=(
                reference if params.mode is InstrumentMode.SPOT else None
            ),
        )

        logger.debug(
            "calculation_completed",
            mode=params.mode.value,
            direction=params.direction.value,
            reference_price=str(reference),
            position_size=str(position_size),
            total_potential_profit=str(total_potential_profit),
            risk_reward_ratio=str(output.risk_reward_ratio),
        )
        return CalculationOutcome.ok(output)

    def _futures_reference(
        self, params: TradeParameters
    ) -> Decimal | CalculationOutcome:
        """Entry price checked against the stop loss and targets for the direction."""
        entry = params.entry_price
        if not is_positive(entry):
            return self._empty("missing_entry")

        if params.direction is TradeDirection.LONG:
            if entry <= params.stop_loss:
                return self._reject(
                    ValidationErrorKind.ENTRY_BELOW_STOP,
                    "For a Long trade, entry price must be above stop loss.",
                )
            error = self._check_targets_above(params.targets, entry, "Entry Price")
        else:
            if entry >= params.stop_loss:
                return self._reject(
                    ValidationErrorKind.ENTRY_ABOVE_STOP,
                    "For a Short trade, entry price must be below stop loss.",
                )
            error = self._check_targets_below(params.targets, entry)

        return error if error is not None else entry

    def _spot_reference(
        self, params: TradeParameters
    ) -> Decimal | CalculationOutcome:
        """Allocation-weighted average of the active entries.

        Spot has no short side: every entry must sit above the stop loss and
        targets must sit above the average whatever the direction says.
        """
        active_entries = [e for e in params.entries if e.is_active]
        if not active_entries:
            return self._empty("no_active_entry")

        total_allocation = sum((e.allocation_percent for e in active_entries), _ZERO)
        if abs(total_allocation - _HUNDRED) > self._tolerance:
            return self._reject(
                ValidationErrorKind.ALLOCATION_MUST_BE_100,
                "Total allocation for active entries must be 100%.",
            )

        if any(e.price <= params.stop_loss for e in active_entries):
            return self._reject(
                ValidationErrorKind.ENTRY_BELOW_STOP,
                "All entry prices must be above the stop loss.",
            )

        average_entry = sum(
            (e.price * (e.allocation_percent / _HUNDRED) for e in active_entries),
            _ZERO,
        )

        error = self._check_targets_above(
            params.targets, average_entry, "the average entry price"
        )
        return error if error is not None else average_entry

    def _check_targets_above(
        self,
        targets: tuple[TargetPoint, ...],
        reference: Decimal,
        reference_label: str,
    ) -> CalculationOutcome | None:
        for slot, target in enumerate(targets, start=1):
            if target.is_active and target.price <= reference:
                return self._reject(
                    ValidationErrorKind.TARGET_BELOW_ENTRY,
                    f"Target {slot} must be above {reference_label}.",
                    target_index=slot,
                )
        return None

    def _check_targets_below(
        self, targets: tuple[TargetPoint, ...], reference: Decimal
    ) -> CalculationOutcome | None:
        for slot, target in enumerate(targets, start=1):
            if target.is_active and target.price >= reference:
                return self._reject(
                    ValidationErrorKind.TARGET_ABOVE_ENTRY,
                    f"Target {slot} must be below Entry Price.",
                    target_index=slot,
                )
        return None

    @staticmethod
    def _reject(
        kind: ValidationErrorKind, message: str, target_index: int | None = None
    ) -> CalculationOutcome:
        logger.debug(
            "calculation_rejected", kind=kind.value, target_index=target_index
        )
        return CalculationOutcome.failed(
            ValidationError(kind=kind, message=message, target_index=target_index)
        )

    @staticmethod
    def _empty(reason: str) -> CalculationOutcome:
        logger.debug("calculation_empty", reason=reason)
        return CalculationOutcome.empty()


_default_calculator = PositionCalculator()


def calculate(params: TradeParameters) -> CalculationOutcome:
    """Run the calculation with the default 0.001 tolerance."""
    return _default_calculator.calculate(params)
