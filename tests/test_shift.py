"""Tests for the shift lifecycle."""

import pytest
from datetime import date
from decimal import Decimal

from tillbook.domain import chart
from tillbook.domain.entities import CreditBillLine, ShiftState
from tillbook.domain.errors import MissingJustificationError, ShiftStateError, ValidationError
from tillbook.domain.shift import ShiftCloseInput, calculate_shift_close


class TestCalculateShiftClose:
    """Tests for the close-of-day arithmetic."""

    def test_expected_cash_and_variance(self):
        calculation = calculate_shift_close(
            opening_float=500,
            total_sales=1000,
            card_payments=300,
            credit_bills=100,
            hiking_bar_sales=50,
            foreign_currency=0,
            shift_cash_expenses=80,
            actual_cash=960,
        )

        assert calculation.cash_sales == Decimal("550")
        assert calculation.expected_cash == Decimal("970")
        assert calculation.variance == Decimal("-10")

    def test_variance_unknown_without_count(self):
        calculation = calculate_shift_close(500, 0, 0, 0, 0, 0, 0)

        assert calculation.expected_cash == Decimal("500")
        assert calculation.variance is None


class TestShiftLifecycle:
    """Tests for opening and closing shifts."""

    def test_starts_closed(self, shift_service):
        assert shift_service.state() is ShiftState.CLOSED
        assert shift_service.current_log() is None

    def test_open_snapshots_till_float(self, shift_service):
        log = shift_service.open_day(log_date=date(2024, 3, 1))

        assert log.opening_float == Decimal("500")
        assert log.date == date(2024, 3, 1)
        assert log.is_closed is False
        assert shift_service.state() is ShiftState.OPEN
        assert shift_service.current_log().id == log.id

    def test_open_with_explicit_float(self, shift_service):
        log = shift_service.open_day(opening_float="450")

        assert log.opening_float == Decimal("450")

    def test_double_open_rejected(self, shift_service):
        shift_service.open_day()

        with pytest.raises(ShiftStateError):
            shift_service.open_day()

    def test_close_without_open_rejected(self, shift_service):
        with pytest.raises(ShiftStateError):
            shift_service.close_day(ShiftCloseInput(actual_cash=Decimal("500")))

    def test_full_day(self, shift_service, ledger):
        shift_service.open_day()
        ledger.add_expense(80, "Food", "Market run")

        log = shift_service.close_day(
            ShiftCloseInput(
                actual_cash=Decimal("960"),
                total_sales=Decimal("1000"),
                card_payments=Decimal("300"),
                hiking_bar_sales=Decimal("50"),
                credit_bill_lines=(
                    CreditBillLine(partner="Hotel Sunrise", amount=Decimal("60")),
                    CreditBillLine(partner="Trek Co", amount=Decimal("40")),
                ),
            )
        )

        assert log.is_closed is True
        assert log.expenses_cash == Decimal("80")
        assert log.credit_bills == Decimal("100")
        assert log.expected_cash == Decimal("970")
        assert log.actual_cash == Decimal("960")
        assert log.variance == Decimal("-10")
        assert [line.partner for line in log.credit_bill_lines] == ["Hotel Sunrise", "Trek Co"]
        assert shift_service.state() is ShiftState.CLOSED

    def test_reopen_after_close(self, shift_service):
        first = shift_service.open_day()
        shift_service.close_day(ShiftCloseInput(actual_cash=Decimal("500")))

        second = shift_service.open_day()

        assert second.id != first.id
        assert [log.id for log in shift_service.list_logs()] == [second.id, first.id]

    def test_foreign_currency_needs_note(self, shift_service):
        shift_service.open_day()

        with pytest.raises(MissingJustificationError):
            shift_service.close_day(
                ShiftCloseInput(actual_cash=Decimal("500"), foreign_currency=Decimal("20"), foreign_currency_note="  ")
            )

        assert shift_service.state() is ShiftState.OPEN

    def test_foreign_currency_with_note(self, shift_service):
        shift_service.open_day()

        log = shift_service.close_day(
            ShiftCloseInput(
                actual_cash=Decimal("480"),
                total_sales=Decimal("20"),
                foreign_currency=Decimal("20"),
                foreign_currency_note="EUR from tour group",
            )
        )

        assert log.foreign_currency_note == "EUR from tour group"
        assert log.expected_cash == Decimal("500")

    def test_negative_figure_rejected(self, shift_service):
        shift_service.open_day()

        with pytest.raises(ValidationError):
            shift_service.close_day(ShiftCloseInput(actual_cash=Decimal("500"), card_payments=Decimal("-1")))

    def test_expenses_before_open_not_counted(self, shift_service, ledger):
        ledger.add_expense(30, "Food", "Yesterday")
        shift_service.open_day()
        ledger.add_expense(20, "Food", "Today")
        ledger.transfer(chart.TILL_FLOAT, chart.BUSINESS_BANK, 100, "Banked")

        assert shift_service.shift_cash_expenses() == Decimal("20")

    def test_staff_loan_from_till_counts(self, shift_service, payroll_service):
        shift_service.open_day()
        payroll_service.manage_staff_loan("s1", 50, 0, chart.TILL_FLOAT)

        assert shift_service.shift_cash_expenses() == Decimal("50")

    def test_preview_does_not_close(self, shift_service):
        shift_service.open_day()

        calculation = shift_service.preview_close(ShiftCloseInput(actual_cash=Decimal("490"), total_sales=Decimal("0")))

        assert calculation.variance == Decimal("-10")
        assert shift_service.state() is ShiftState.OPEN
