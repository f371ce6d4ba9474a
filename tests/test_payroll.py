"""Tests for the payroll service."""

import pytest
from decimal import Decimal

from tillbook.domain import chart
from tillbook.domain.entities import AdvanceIssue, LoanDeduction, LoanIssue, PayrollCycle, SalaryPayout
from tillbook.domain.errors import UnknownAccountError, UnknownStaffError, ValidationError
from tillbook.domain.payroll import OverDeductionPolicy, PayrollService


class TestAdvancesAndLoans:
    """Tests for handing out advances and loans."""

    def test_advance(self, payroll_service, seeded_db, balances):
        txn = payroll_service.manage_staff_advance("s2", 50, chart.TILL_FLOAT)

        assert txn.purpose == AdvanceIssue(staff_id="s2")
        assert txn.to_account_id == chart.STAFF_OBLIGATIONS
        assert seeded_db.get_staff("s2").advance_balance == Decimal("50")
        assert balances()[chart.STAFF_OBLIGATIONS] == Decimal("50")
        assert balances()[chart.TILL_FLOAT] == Decimal("450")

    def test_advances_accumulate(self, payroll_service, seeded_db):
        payroll_service.manage_staff_advance("s2", 50, chart.TILL_FLOAT)
        payroll_service.manage_staff_advance("s2", 25, chart.BUSINESS_BANK)

        assert seeded_db.get_staff("s2").advance_balance == Decimal("75")

    def test_loan_with_initial_amount(self, payroll_service, seeded_db):
        txn = payroll_service.manage_staff_loan("s1", 500, 600, chart.BUSINESS_BANK)

        staff = seeded_db.get_staff("s1")
        assert txn.purpose == LoanIssue(staff_id="s1")
        assert staff.loan_balance == Decimal("500")
        assert staff.initial_loan_amount == Decimal("600")

    def test_loan_without_initial_amount_accumulates(self, payroll_service, seeded_db):
        payroll_service.manage_staff_loan("s1", 300, 0, chart.BUSINESS_BANK)
        payroll_service.manage_staff_loan("s1", 200, None, chart.BUSINESS_BANK)

        staff = seeded_db.get_staff("s1")
        assert staff.loan_balance == Decimal("500")
        assert staff.initial_loan_amount == Decimal("500")

    def test_unknown_staff(self, payroll_service, seeded_db):
        with pytest.raises(UnknownStaffError):
            payroll_service.manage_staff_advance("s99", 50, chart.TILL_FLOAT)
        assert seeded_db.count_transactions() == 0

    def test_unknown_source_leaves_balances(self, payroll_service, seeded_db):
        with pytest.raises(UnknownAccountError):
            payroll_service.manage_staff_loan("s1", 100, 0, "nowhere")
        assert seeded_db.get_staff("s1").loan_balance == Decimal("0")

    def test_zero_advance_is_noop(self, payroll_service, seeded_db):
        assert payroll_service.manage_staff_advance("s2", 0, chart.TILL_FLOAT) is None
        assert seeded_db.get_staff("s2").advance_balance == Decimal("0")


class TestCommitPayroll:
    """Tests for payroll runs."""

    def test_netting(self, payroll_service, seeded_db, balances):
        payroll_service.manage_staff_loan("s1", 500, 0, chart.BUSINESS_BANK)
        payroll_service.manage_staff_advance("s1", 200, chart.BUSINESS_BANK)
        before = balances()

        result = payroll_service.commit_payroll("s1", PayrollCycle.SALARY, 1200, 100, 200, chart.BUSINESS_BANK)

        after = balances()
        assert result.net == Decimal("900")
        assert after[chart.BUSINESS_BANK] == before[chart.BUSINESS_BANK] - Decimal("900")
        assert after[chart.STAFF_OBLIGATIONS] == before[chart.STAFF_OBLIGATIONS] - Decimal("300")
        assert after[chart.OPERATING_EXPENSES] == before[chart.OPERATING_EXPENSES] + Decimal("1200")
        staff = seeded_db.get_staff("s1")
        assert staff.loan_balance == Decimal("400")
        assert staff.advance_balance == Decimal("0")

    def test_transfers_are_tagged(self, payroll_service):
        payroll_service.manage_staff_loan("s1", 500, 0, chart.BUSINESS_BANK)

        result = payroll_service.commit_payroll("s1", PayrollCycle.SALARY, 1200, 100, 0, chart.BUSINESS_BANK)

        assert result.payout.note == "Monthly Salary: Dinesh"
        assert result.payout.purpose == SalaryPayout(
            staff_id="s1",
            cycle=PayrollCycle.SALARY,
            loan_deduction=Decimal("100"),
            advance_deduction=Decimal("0"),
        )
        assert result.loan_deduction.note == "Loan deduction: Dinesh"
        assert result.loan_deduction.is_reconciled is True
        assert result.loan_deduction.purpose == LoanDeduction(staff_id="s1")
        assert result.advance_deduction is None

    def test_service_charge_note(self, payroll_service):
        result = payroll_service.commit_payroll("s2", PayrollCycle.SERVICE_CHARGE, 120, 0, 0, chart.TILL_FLOAT)

        assert result.payout.note == "Service Charge: Amara"
        assert result.loan_deduction is None

    def test_deductions_above_gross_rejected(self, payroll_service, seeded_db):
        payroll_service.manage_staff_loan("s3", 500, 0, chart.BUSINESS_BANK)
        count = seeded_db.count_transactions()

        with pytest.raises(ValidationError, match="exceed gross"):
            payroll_service.commit_payroll("s3", PayrollCycle.SALARY, 100, 150, 0, chart.BUSINESS_BANK)

        assert seeded_db.count_transactions() == count
        assert seeded_db.get_staff("s3").loan_balance == Decimal("500")

    def test_zero_net_skips_payout(self, payroll_service, seeded_db):
        payroll_service.manage_staff_advance("s4", 600, chart.BUSINESS_BANK)

        result = payroll_service.commit_payroll("s4", PayrollCycle.SALARY, 600, 0, 600, chart.BUSINESS_BANK)

        assert result.net == Decimal("0")
        assert result.payout is None
        assert result.advance_deduction.amount == Decimal("600")
        assert seeded_db.get_staff("s4").advance_balance == Decimal("0")

    def test_over_deduction_clamped(self, payroll_service, seeded_db):
        payroll_service.manage_staff_loan("s5", 50, 0, chart.BUSINESS_BANK)

        result = payroll_service.commit_payroll("s5", PayrollCycle.SALARY, 750, 75, 0, chart.BUSINESS_BANK)

        assert result.loan_balance == Decimal("0")
        assert seeded_db.get_staff("s5").loan_balance == Decimal("0")
        assert result.loan_deduction.amount == Decimal("75")

    def test_over_deduction_rejected_under_strict_policy(self, seeded_db, ledger):
        service = PayrollService(seeded_db, ledger, over_deduction=OverDeductionPolicy.REJECT)
        service.manage_staff_loan("s5", 50, 0, chart.BUSINESS_BANK)
        count = seeded_db.count_transactions()

        with pytest.raises(ValidationError, match="loan balance"):
            service.commit_payroll("s5", PayrollCycle.SALARY, 750, 75, 0, chart.BUSINESS_BANK)

        assert seeded_db.count_transactions() == count
        assert seeded_db.get_staff("s5").loan_balance == Decimal("50")

    def test_cycle_accepts_string(self, payroll_service):
        result = payroll_service.commit_payroll("s6", "1st", 1500, 0, 0, chart.BUSINESS_BANK)

        assert result.cycle is PayrollCycle.SALARY


class TestPayrollDefaults:
    def test_salary_defaults(self, payroll_service):
        payroll_service.manage_staff_loan("s1", 80, 0, chart.BUSINESS_BANK)
        payroll_service.manage_staff_advance("s1", 30, chart.TILL_FLOAT)

        defaults = payroll_service.payroll_defaults("s1", PayrollCycle.SALARY)

        assert defaults.gross == Decimal("1200")
        assert defaults.loan_deduction == Decimal("80")
        assert defaults.advance_deduction == Decimal("30")

    def test_service_charge_defaults(self, payroll_service):
        defaults = payroll_service.payroll_defaults("s1", PayrollCycle.SERVICE_CHARGE)

        assert defaults.gross is None
        assert defaults.loan_deduction == Decimal("0")
        assert defaults.advance_deduction == Decimal("0")
