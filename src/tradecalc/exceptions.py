"""Custom exceptions for the trade position calculator.

Validation failures are never raised: the calculator returns them as
CalculationOutcome values. These exceptions signal programmer errors only.
"""


class CalculatorError(Exception):
    """Base exception for all calculator errors."""


class SlotCountError(CalculatorError):
    """Raised when TradeParameters carries zero or more than three entries or targets."""


class OutcomeNotAvailable(CalculatorError):
    """Raised when unwrapping a calculation outcome that holds no result."""
