"""Shift lifecycle domain service.

A shift is either closed or open; the database keeps an explicit pointer to
the open shift's log. Opening snapshots the till float, closing records the
day's takings and the counted cash against the expected figure.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from tillbook.database.base import Database
from tillbook.domain import chart
from tillbook.domain.entities import CreditBillLine, DailyLog, LoanIssue, ShiftState
from tillbook.domain.errors import MissingJustificationError, ShiftStateError, ValidationError
from tillbook.domain.ledger import LedgerService, ZERO, require_amount
from tillbook.utils.amount_parser import to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftCloseInput:
    """Figures entered at the end of a shift."""

    actual_cash: Decimal
    total_sales: Decimal = ZERO
    card_payments: Decimal = ZERO
    hiking_bar_sales: Decimal = ZERO
    foreign_currency: Decimal = ZERO
    foreign_currency_note: Optional[str] = None
    credit_bill_lines: tuple[CreditBillLine, ...] = ()

    @property
    def credit_bills(self) -> Decimal:
        return sum((line.amount for line in self.credit_bill_lines), ZERO)


@dataclass(frozen=True)
class ShiftCalculation:
    """Expected versus counted cash for a shift."""

    opening_float: Decimal
    total_sales: Decimal
    non_cash_total: Decimal
    cash_sales: Decimal
    shift_cash_expenses: Decimal
    expected_cash: Decimal
    actual_cash: Optional[Decimal] = None

    @property
    def variance(self) -> Optional[Decimal]:
        if self.actual_cash is None:
            return None
        return self.actual_cash - self.expected_cash


def calculate_shift_close(
    opening_float,
    total_sales,
    card_payments,
    credit_bills,
    hiking_bar_sales,
    foreign_currency,
    shift_cash_expenses,
    actual_cash=None,
) -> ShiftCalculation:
    """Work out cash sales, expected cash and variance for a shift.

    ``cash_sales = total_sales - (card + credit bills + hiking bar + foreign currency)``
    and ``expected_cash = opening_float + cash_sales - shift_cash_expenses``.
    """
    opening = to_money(opening_float)
    sales = to_money(total_sales)
    non_cash = (
        to_money(card_payments)
        + to_money(credit_bills)
        + to_money(hiking_bar_sales)
        + to_money(foreign_currency)
    )
    cash_sales = sales - non_cash
    expenses = to_money(shift_cash_expenses)
    return ShiftCalculation(
        opening_float=opening,
        total_sales=sales,
        non_cash_total=non_cash,
        cash_sales=cash_sales,
        shift_cash_expenses=expenses,
        expected_cash=opening + cash_sales - expenses,
        actual_cash=to_money(actual_cash) if actual_cash is not None else None,
    )


class ShiftService:
    """Service for opening and closing till shifts."""

    def __init__(self, db: Database, ledger: Optional[LedgerService] = None):
        """Initialize shift service.

        Args:
            db: Database instance
            ledger: Ledger service for till reads (created if omitted)
        """
        self.db = db
        self.ledger = ledger or LedgerService(db)

    def current_log(self) -> Optional[DailyLog]:
        """The open shift's log, or None when the shift is closed."""
        log_id = self.db.get_current_shift_id()
        if log_id is None:
            return None
        return self.db.get_daily_log(log_id)

    def state(self) -> ShiftState:
        return ShiftState.OPEN if self.current_log() is not None else ShiftState.CLOSED

    def list_logs(self) -> list[DailyLog]:
        """Shift history, most recent first."""
        return self.db.list_daily_logs()

    def open_day(self, opening_float=None, log_date: Optional[date] = None) -> DailyLog:
        """Open a shift.

        Args:
            opening_float: Float counted into the till; defaults to the till
                float balance
            log_date: Business date of the shift; defaults to today

        Raises:
            ShiftStateError: If a shift is already open
            ValidationError: If the opening float is not a non-negative number
        """
        current = self.current_log()
        if current is not None:
            raise ShiftStateError(f"Shift '{current.id}' opened on {current.date} is still open")

        if opening_float is None:
            opening = self.ledger.require_account(chart.TILL_FLOAT).balance
        else:
            opening = require_amount(opening_float, "opening float")

        log = self.db.open_daily_log(opening_float=opening, log_date=log_date or date.today())
        logger.info("Opened shift %s with float %s", log.id, opening)
        return log

    def shift_cash_expenses(self, log: Optional[DailyLog] = None) -> Decimal:
        """Cash taken out of the till since the shift opened.

        Counts till outflows into the expense accounts plus loans handed to
        staff from the till.
        """
        log = log or self.current_log()
        if log is None:
            return ZERO

        outflows = self.db.list_transactions(from_account_id=chart.TILL_FLOAT, since=log.timestamp)
        return sum(
            (
                txn.amount
                for txn in outflows
                if txn.to_account_id in chart.SHIFT_EXPENSE_ACCOUNTS
                or isinstance(txn.purpose, LoanIssue)
            ),
            ZERO,
        )

    def _validated_input(self, close_input: ShiftCloseInput) -> ShiftCloseInput:
        """Coerce and check every close figure.

        Raises:
            ValidationError: If a figure is missing, negative or non-numeric
            MissingJustificationError: If foreign currency has no note
        """
        if close_input.actual_cash is None:
            raise ValidationError("Counted cash is required to close the shift")

        lines = []
        for line in close_input.credit_bill_lines:
            if not line.partner or not line.partner.strip():
                raise ValidationError("Credit bill partner is required")
            amount = require_amount(line.amount, "credit bill amount")
            if amount == ZERO:
                raise ValidationError(f"Credit bill for '{line.partner}' must be greater than zero")
            lines.append(CreditBillLine(partner=line.partner.strip(), amount=amount))

        foreign_currency = require_amount(close_input.foreign_currency, "foreign currency")
        note = (close_input.foreign_currency_note or "").strip() or None
        if foreign_currency > ZERO and note is None:
            raise MissingJustificationError(
                "A comment is mandatory when foreign currency is entered"
            )

        return ShiftCloseInput(
            actual_cash=require_amount(close_input.actual_cash, "actual cash"),
            total_sales=require_amount(close_input.total_sales, "total sales"),
            card_payments=require_amount(close_input.card_payments, "card payments"),
            hiking_bar_sales=require_amount(close_input.hiking_bar_sales, "hiking bar sales"),
            foreign_currency=foreign_currency,
            foreign_currency_note=note,
            credit_bill_lines=tuple(lines),
        )

    def preview_close(self, close_input: ShiftCloseInput) -> ShiftCalculation:
        """Calculate the close figures for the open shift without closing it.

        Raises:
            ShiftStateError: If no shift is open
        """
        log = self.current_log()
        if log is None:
            raise ShiftStateError("No shift is open")
        return calculate_shift_close(
            opening_float=log.opening_float,
            total_sales=close_input.total_sales,
            card_payments=close_input.card_payments,
            credit_bills=close_input.credit_bills,
            hiking_bar_sales=close_input.hiking_bar_sales,
            foreign_currency=close_input.foreign_currency,
            shift_cash_expenses=self.shift_cash_expenses(log),
            actual_cash=close_input.actual_cash,
        )

    def close_day(self, close_input: ShiftCloseInput) -> DailyLog:
        """Close the open shift.

        Raises:
            ShiftStateError: If no shift is open
            MissingJustificationError: If foreign currency has no note
            ValidationError: If a figure is missing or invalid
        """
        log = self.current_log()
        if log is None:
            raise ShiftStateError("No shift is open")

        figures = self._validated_input(close_input)
        calculation = self.preview_close(figures)

        closed = self.db.close_daily_log(
            log_id=log.id,
            total_sales=figures.total_sales,
            card_payments=figures.card_payments,
            credit_bills=figures.credit_bills,
            hiking_bar_sales=figures.hiking_bar_sales,
            foreign_currency=figures.foreign_currency,
            foreign_currency_note=figures.foreign_currency_note,
            expenses_cash=calculation.shift_cash_expenses,
            expected_cash=calculation.expected_cash,
            actual_cash=figures.actual_cash,
            credit_bill_lines=figures.credit_bill_lines,
        )
        logger.info(
            "Closed shift %s: expected %s, counted %s, variance %s",
            closed.id,
            closed.expected_cash,
            closed.actual_cash,
            closed.variance,
        )
        return closed
