"""Tests for the form-state layer: text parsing and snapshot building."""

from decimal import Decimal

import pytest

from tradecalc.form import TradeForm, clamp_percent, format_thousands, parse_decimal
from tradecalc.models import InstrumentMode, TradeDirection
from tradecalc.position.calculator import calculate


class TestParseDecimal:
    """Empty or invalid text is absent, never zero."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("100", Decimal("100")),
            ("1,234.56", Decimal("1234.56")),
            (" 42 ", Decimal("42")),
            ("0.0001", Decimal("0.0001")),
            ("0", Decimal("0")),
        ],
    )
    def test_valid(self, text: str, expected: Decimal) -> None:
        assert parse_decimal(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", ".", "NaN", "Infinity", None])
    def test_absent(self, text: str | None) -> None:
        assert parse_decimal(text) is None


class TestFormatThousands:
    """Numeric field regrouping with comma separators."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1234567", "1,234,567"),
            ("1,234567.891", "1,234,567.891"),
            ("999", "999"),
            ("1000.", "1,000."),
            (".5", ".5"),
            ("", ""),
        ],
    )
    def test_regroup(self, text: str, expected: str) -> None:
        assert format_thousands(text) == expected

    @pytest.mark.parametrize("text", ["12a", "-5", "1.2.3", "1e5"])
    def test_rejected(self, text: str) -> None:
        assert format_thousands(text) is None


class TestClampPercent:
    """Percentage fields cap at 100."""

    def test_above_hundred_clamped(self) -> None:
        assert clamp_percent("150") == "100"

    def test_within_range_kept(self) -> None:
        assert clamp_percent("33.5") == "33.5"
        assert clamp_percent("100") == "100"

    def test_partial_input_kept(self) -> None:
        assert clamp_percent("") == ""
        assert clamp_percent("12.") == "12."

    def test_non_numeric_rejected(self) -> None:
        assert clamp_percent("ten") is None


class TestFromMapping:
    """Building a form from submitted data."""

    def test_browser_form(self) -> None:
        form = TradeForm.from_mapping({
            "mode": "spot",
            "direction": "short",
            "stop_loss": "90",
            "target_2_enabled": "on",
            "target_price_2": "120",
            "unknown": "ignored",
        })

        assert form.mode is InstrumentMode.SPOT
        assert form.direction is TradeDirection.SHORT
        assert form.stop_loss == "90"
        assert form.target_2_enabled is True
        assert form.target_3_enabled is False
        assert form.target_price_2 == "120"
        assert form.risk_amount == "10"

    def test_json_values(self) -> None:
        form = TradeForm.from_mapping({
            "entry_price": 100,
            "spot_entry_2_enabled": True,
            "target_price_1": None,
        })

        assert form.entry_price == "100"
        assert form.spot_entry_2_enabled is True
        assert form.target_price_1 == ""

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError):
            TradeForm.from_mapping({"mode": "options"})


class TestNormalized:
    """Input filters applied to every submitted field."""

    def test_amounts_regrouped(self) -> None:
        form = TradeForm(
            entry_price="1234567.5",
            stop_loss="1,0000",
            risk_amount="2500",
            target_price_1="12,34",
        ).normalized()

        assert form.entry_price == "1,234,567.5"
        assert form.stop_loss == "10,000"
        assert form.risk_amount == "2,500"
        assert form.target_price_1 == "1,234"

    def test_percentages_capped(self) -> None:
        form = TradeForm(
            exit_percent_1="150",
            exit_percent_3="99.5",
            spot_allocation_2="1,000",
        ).normalized()

        assert form.exit_percent_1 == "100"
        assert form.exit_percent_3 == "99.5"
        assert form.spot_allocation_2 == "100"

    def test_rejected_text_kept(self) -> None:
        form = TradeForm(entry_price="-5", exit_percent_1="abc").normalized()

        assert form.entry_price == "-5"
        assert form.exit_percent_1 == "abc"

    def test_changed_fields(self) -> None:
        raw = TradeForm(risk_amount="1000", exit_percent_1="120", stop_loss="90")

        assert raw.changed_fields(raw.normalized()) == {
            "risk_amount": "1,000",
            "exit_percent_1": "100",
        }


class TestToggleDefaults:
    """Form reset policy for the optional-slot checkbox that changed."""

    def test_disabled_target_cleared(self) -> None:
        form = TradeForm(
            target_2_enabled=False,
            target_price_2="120",
            exit_percent_2="40",
            target_3_enabled=True,
            target_price_3="130",
            exit_percent_3="20",
            exit_percent_1="40",
        ).with_toggle_defaults("target_2_enabled")

        assert form.target_price_2 == ""
        assert form.exit_percent_2 == ""
        assert form.target_price_3 == "130"
        assert form.exit_percent_1 == "40"

    def test_all_optional_targets_off_restores_exit_one(self) -> None:
        form = TradeForm(exit_percent_1="30").with_toggle_defaults(
            "target_3_enabled"
        )

        assert form.exit_percent_1 == "100"

    def test_spot_entries_off_restores_allocation_one(self) -> None:
        form = TradeForm(
            spot_allocation_1="60",
            spot_entry_price_2="120",
            spot_allocation_2="40",
        ).with_toggle_defaults("spot_entry_2_enabled")

        assert form.spot_allocation_1 == "100"
        assert form.spot_entry_price_2 == ""
        assert form.spot_allocation_2 == ""

    def test_target_toggle_leaves_spot_fields(self) -> None:
        form = TradeForm(spot_allocation_1="60").with_toggle_defaults(
            "target_2_enabled"
        )

        assert form.spot_allocation_1 == "60"

    @pytest.mark.parametrize("name", ["", "exit_percent_1", "risk_amount"])
    def test_other_fields_change_nothing(self, name: str) -> None:
        form = TradeForm(exit_percent_1="50", spot_allocation_1="60")

        assert form.with_toggle_defaults(name) == form


class TestToParameters:
    """Snapshots carry parsed decimals and slot enable flags."""

    def test_futures_snapshot(self) -> None:
        params = TradeForm(
            entry_price="1,000",
            stop_loss="900",
            risk_amount="50",
            target_price_1="1,200",
        ).to_parameters()

        assert params.entry_price == Decimal("1000")
        assert params.stop_loss == Decimal("900")
        assert params.risk_amount == Decimal("50")
        assert params.targets[0].price == Decimal("1200")
        assert params.targets[0].exit_percent == Decimal("100")
        assert params.targets[1].enabled is False
        assert len(params.targets) == 3
        assert len(params.entries) == 3

    def test_empty_fields_absent(self) -> None:
        params = TradeForm(risk_amount="").to_parameters()

        assert params.entry_price is None
        assert params.risk_amount is None

    def test_stale_disabled_values_do_not_leak(self) -> None:
        """Without the reset policy the calculator still ignores a disabled target."""
        form = TradeForm(
            entry_price="100",
            stop_loss="90",
            target_price_1="110",
            target_2_enabled=False,
            target_price_2="50",
            exit_percent_2="80",
        )
        outcome = calculate(form.to_parameters())

        assert outcome.is_ok
        assert outcome.unwrap().target_profits == (Decimal("10"), None, None)

    def test_spot_snapshot_calculates(self) -> None:
        form = TradeForm(
            mode=InstrumentMode.SPOT,
            spot_entry_price_1="100",
            spot_allocation_1="50",
            spot_entry_2_enabled=True,
            spot_entry_price_2="120",
            spot_allocation_2="50",
            stop_loss="90",
            target_price_1="130",
        )
        result = calculate(form.to_parameters()).unwrap()

        assert result.average_entry_price == Decimal("110")
        assert result.position_size == Decimal("0.5")
