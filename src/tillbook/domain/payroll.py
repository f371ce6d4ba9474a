"""Payroll domain service: staff loans, advances and payroll runs.

Each operation posts its transfers and the staff member's new loan/advance
balances in one commit, so the sub-ledger never drifts from the
transactions tagged with that staff member.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from tillbook.database.base import Database
from tillbook.domain import chart
from tillbook.domain.entities import (
    AdvanceDeduction,
    AdvanceIssue,
    LoanDeduction,
    LoanIssue,
    PayrollCycle,
    PostingBatch,
    SalaryPayout,
    Staff,
    StaffBalanceUpdate,
    Transaction,
)
from tillbook.domain.errors import UnknownStaffError, ValidationError, staff_not_found
from tillbook.domain.ledger import LedgerService, ZERO, require_amount

logger = logging.getLogger(__name__)


class OverDeductionPolicy(str, Enum):
    """What to do when a payroll deduction exceeds the outstanding balance.

    CLAMP floors the balance at zero and forgives the excess; REJECT refuses
    the payroll run.
    """

    CLAMP = "clamp"
    REJECT = "reject"


@dataclass(frozen=True)
class PayrollDefaults:
    gross: Optional[Decimal]
    loan_deduction: Decimal
    advance_deduction: Decimal


@dataclass(frozen=True)
class PayrollResult:
    """Transfers and balances produced by one payroll run."""

    staff_id: str
    cycle: PayrollCycle
    gross: Decimal
    net: Decimal
    payout: Optional[Transaction]
    loan_deduction: Optional[Transaction]
    advance_deduction: Optional[Transaction]
    loan_balance: Decimal
    advance_balance: Decimal


class PayrollService:
    """Service for the staff sub-ledger."""

    def __init__(
        self,
        db: Database,
        ledger: Optional[LedgerService] = None,
        over_deduction: OverDeductionPolicy = OverDeductionPolicy.CLAMP,
    ):
        """Initialize payroll service.

        Args:
            db: Database instance
            ledger: Ledger service to post through (created if omitted)
            over_deduction: Policy for deductions larger than the balance owed
        """
        self.db = db
        self.ledger = ledger or LedgerService(db)
        self.over_deduction = OverDeductionPolicy(over_deduction)

    def _require_staff(self, staff_id: str) -> Staff:
        staff = self.db.get_staff(staff_id)
        if staff is None:
            raise UnknownStaffError(staff_not_found(staff_id))
        return staff

    def payroll_defaults(self, staff_id: str, cycle: PayrollCycle) -> PayrollDefaults:
        """Suggested figures for a payroll run.

        A salary run defaults to base salary, one loan installment (capped at
        the loan balance) and the full advance balance. A service charge run
        has no default gross and deducts nothing.
        """
        staff = self._require_staff(staff_id)
        if PayrollCycle(cycle) is PayrollCycle.SERVICE_CHARGE:
            return PayrollDefaults(gross=None, loan_deduction=ZERO, advance_deduction=ZERO)
        return PayrollDefaults(
            gross=staff.base_salary,
            loan_deduction=min(staff.monthly_loan_installment, staff.loan_balance),
            advance_deduction=staff.advance_balance,
        )

    def manage_staff_advance(self, staff_id: str, amount, source_id: str) -> Optional[Transaction]:
        """Hand a salary advance to a staff member.

        Raises:
            UnknownStaffError: If the staff member does not exist
            ValidationError: If the amount is invalid
            UnknownAccountError: If the source account is not in the chart
        """
        staff = self._require_staff(staff_id)
        value = require_amount(amount)
        transfer = self.ledger.build_transfer(
            source_id,
            chart.STAFF_OBLIGATIONS,
            value,
            "Staff Advance given",
            purpose=AdvanceIssue(staff_id=staff_id),
        )
        if transfer is None:
            return None

        update = StaffBalanceUpdate(staff_id=staff_id, advance_balance=staff.advance_balance + value)
        posted = self.ledger.post(PostingBatch(transfers=(transfer,), staff_updates=(update,)))
        logger.info("Advance of %s to %s from %s", value, staff.name, source_id)
        return posted[0]

    def manage_staff_loan(self, staff_id: str, amount, initial_amount, source_id: str) -> Optional[Transaction]:
        """Issue a loan to a staff member.

        ``initial_loan_amount`` is replaced by ``initial_amount`` when that is
        positive, otherwise the new amount is added to it.

        Raises:
            UnknownStaffError: If the staff member does not exist
            ValidationError: If an amount is invalid
            UnknownAccountError: If the source account is not in the chart
        """
        staff = self._require_staff(staff_id)
        value = require_amount(amount)
        initial = require_amount(initial_amount or 0, "initial amount")
        transfer = self.ledger.build_transfer(
            source_id,
            chart.STAFF_OBLIGATIONS,
            value,
            "Loan issued to staff",
            purpose=LoanIssue(staff_id=staff_id),
        )
        if transfer is None:
            return None

        update = StaffBalanceUpdate(
            staff_id=staff_id,
            loan_balance=staff.loan_balance + value,
            initial_loan_amount=initial if initial > ZERO else staff.initial_loan_amount + value,
        )
        posted = self.ledger.post(PostingBatch(transfers=(transfer,), staff_updates=(update,)))
        logger.info("Loan of %s to %s from %s", value, staff.name, source_id)
        return posted[0]

    def commit_payroll(
        self,
        staff_id: str,
        cycle: PayrollCycle,
        gross,
        loan_deduction,
        advance_deduction,
        source_id: str,
    ) -> PayrollResult:
        """Pay a staff member for one cycle, net of loan and advance deductions.

        Posts the net payout from ``source_id`` to operating expenses, then
        one reconciled transfer per non-zero deduction from staff obligations
        to operating expenses. Loan and advance balances drop by the
        deductions, floored at zero under the clamp policy.

        Raises:
            UnknownStaffError: If the staff member does not exist
            ValidationError: If an amount is invalid, the deductions exceed
                gross pay, or (reject policy) a deduction exceeds its balance
            UnknownAccountError: If the source account is not in the chart
        """
        staff = self._require_staff(staff_id)
        cycle = PayrollCycle(cycle)
        gross_pay = require_amount(gross, "gross pay")
        loan_ded = require_amount(loan_deduction or 0, "loan deduction")
        advance_ded = require_amount(advance_deduction or 0, "advance deduction")

        net = gross_pay - loan_ded - advance_ded
        if net < ZERO:
            raise ValidationError(
                f"Deductions ({loan_ded + advance_ded}) exceed gross pay ({gross_pay}) for {staff.name}"
            )

        if self.over_deduction is OverDeductionPolicy.REJECT:
            if loan_ded > staff.loan_balance:
                raise ValidationError(
                    f"Loan deduction {loan_ded} exceeds {staff.name}'s loan balance {staff.loan_balance}"
                )
            if advance_ded > staff.advance_balance:
                raise ValidationError(
                    f"Advance deduction {advance_ded} exceeds {staff.name}'s advance balance {staff.advance_balance}"
                )

        if cycle is PayrollCycle.SALARY:
            note = f"Monthly Salary: {staff.name}"
        else:
            note = f"Service Charge: {staff.name}"

        payout = self.ledger.build_transfer(
            source_id,
            chart.OPERATING_EXPENSES,
            net,
            note,
            purpose=SalaryPayout(
                staff_id=staff_id,
                cycle=cycle,
                loan_deduction=loan_ded,
                advance_deduction=advance_ded,
            ),
        )
        loan_transfer = self.ledger.build_transfer(
            chart.STAFF_OBLIGATIONS,
            chart.OPERATING_EXPENSES,
            loan_ded,
            f"Loan deduction: {staff.name}",
            is_reconciled=True,
            purpose=LoanDeduction(staff_id=staff_id),
        )
        advance_transfer = self.ledger.build_transfer(
            chart.STAFF_OBLIGATIONS,
            chart.OPERATING_EXPENSES,
            advance_ded,
            f"Advance deduction: {staff.name}",
            is_reconciled=True,
            purpose=AdvanceDeduction(staff_id=staff_id),
        )

        loan_balance = max(ZERO, staff.loan_balance - loan_ded)
        advance_balance = max(ZERO, staff.advance_balance - advance_ded)
        planned = [payout, loan_transfer, advance_transfer]
        batch = PostingBatch(
            transfers=tuple(t for t in planned if t is not None),
            staff_updates=(
                StaffBalanceUpdate(
                    staff_id=staff_id,
                    loan_balance=loan_balance,
                    advance_balance=advance_balance,
                ),
            ),
        )
        posted = iter(self.ledger.post(batch))
        # Posted transactions come back in batch order; skipped transfers are None.
        results = [next(posted) if t is not None else None for t in planned]

        logger.info(
            "Payroll %s for %s: gross %s, net %s, loan %s, advance %s",
            cycle.value,
            staff.name,
            gross_pay,
            net,
            loan_ded,
            advance_ded,
        )
        return PayrollResult(
            staff_id=staff_id,
            cycle=cycle,
            gross=gross_pay,
            net=net,
            payout=results[0],
            loan_deduction=results[1],
            advance_deduction=results[2],
            loan_balance=loan_balance,
            advance_balance=advance_balance,
        )
