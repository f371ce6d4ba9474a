"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the encoding of
transaction purposes into a kind discriminator plus a JSON attribute bag.
"""

import dataclasses
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from tillbook.domain import entities as domain
from tillbook.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
    DailyLog as ORMDailyLog,
    Staff as ORMStaff,
    StaffHoliday as ORMStaffHoliday,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        balance=Decimal(orm_account.balance),
        opening_balance=Decimal(orm_account.opening_balance),
        description=orm_account.description,
    )


def purpose_to_record(purpose: Optional[domain.Purpose]) -> tuple[Optional[str], Optional[dict[str, Any]]]:
    """Encode a purpose as (kind, JSON-safe attributes)."""
    if purpose is None:
        return None, None

    data: dict[str, Any] = {}
    for f in dataclasses.fields(purpose):
        value = getattr(purpose, f.name)
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, Enum):
            value = value.value
        data[f.name] = value
    return purpose.kind, data


def purpose_from_record(kind: Optional[str], data: Optional[dict[str, Any]]) -> Optional[domain.Purpose]:
    """Decode a stored purpose; unknown kinds raise ValueError."""
    if kind is None:
        return None

    purpose_cls = domain.PURPOSE_TYPES.get(kind)
    if purpose_cls is None:
        raise ValueError(f"Unknown transaction purpose '{kind}'")

    values = dict(data or {})
    if purpose_cls is domain.SalaryPayout:
        values["cycle"] = domain.PayrollCycle(values["cycle"])
        for key in ("loan_deduction", "advance_deduction"):
            if key in values:
                values[key] = Decimal(values[key])
    return purpose_cls(**values)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        from_account_id=orm_transaction.from_account_id,
        to_account_id=orm_transaction.to_account_id,
        amount=Decimal(orm_transaction.amount),
        note=orm_transaction.note,
        timestamp=orm_transaction.timestamp,
        is_reconciled=orm_transaction.is_reconciled,
        purpose=purpose_from_record(orm_transaction.purpose_kind, orm_transaction.purpose_data),
        sequence=orm_transaction.seq,
    )


def daily_log_to_domain(orm_log: ORMDailyLog) -> domain.DailyLog:
    """Convert SQLAlchemy DailyLog model to domain DailyLog entity."""
    return domain.DailyLog(
        id=orm_log.id,
        date=orm_log.date,
        opening_float=Decimal(orm_log.opening_float),
        total_sales=Decimal(orm_log.total_sales),
        card_payments=Decimal(orm_log.card_payments),
        credit_bills=Decimal(orm_log.credit_bills),
        hiking_bar_sales=Decimal(orm_log.hiking_bar_sales),
        foreign_currency=Decimal(orm_log.foreign_currency),
        expenses_cash=Decimal(orm_log.expenses_cash),
        expected_cash=Decimal(orm_log.expected_cash),
        is_closed=orm_log.is_closed,
        timestamp=orm_log.timestamp,
        actual_cash=Decimal(orm_log.actual_cash) if orm_log.actual_cash is not None else None,
        foreign_currency_note=orm_log.foreign_currency_note,
        credit_bill_lines=tuple(
            domain.CreditBillLine(partner=line.partner, amount=Decimal(line.amount))
            for line in orm_log.credit_bill_lines
        ),
    )


def staff_to_domain(orm_staff: ORMStaff) -> domain.Staff:
    """Convert SQLAlchemy Staff model to domain Staff entity."""
    return domain.Staff(
        id=orm_staff.id,
        name=orm_staff.name,
        role=orm_staff.role,
        base_salary=Decimal(orm_staff.base_salary),
        loan_balance=Decimal(orm_staff.loan_balance),
        initial_loan_amount=Decimal(orm_staff.initial_loan_amount),
        monthly_loan_installment=Decimal(orm_staff.monthly_loan_installment),
        advance_balance=Decimal(orm_staff.advance_balance),
        joined_date=orm_staff.joined_date,
        phone=orm_staff.phone,
    )


def staff_holiday_to_domain(orm_holiday: ORMStaffHoliday) -> domain.StaffHoliday:
    """Convert SQLAlchemy StaffHoliday model to domain StaffHoliday entity."""
    return domain.StaffHoliday(
        id=orm_holiday.id,
        staff_id=orm_holiday.staff_id,
        date=orm_holiday.date,
        type=domain.HolidayType(orm_holiday.type),
    )
