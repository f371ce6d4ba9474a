"""Tests for database mappers."""

import pytest
from datetime import datetime, date
from decimal import Decimal

from tillbook.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
    Staff as ORMStaff,
    StaffHoliday as ORMStaffHoliday,
)
from tillbook.database.mappers import (
    account_to_domain,
    purpose_from_record,
    purpose_to_record,
    staff_holiday_to_domain,
    staff_to_domain,
    transaction_to_domain,
)
from tillbook.domain.entities import (
    Account,
    AccountType,
    CreditBill,
    ExpensePurpose,
    HolidayType,
    LoanIssue,
    PayrollCycle,
    SalaryPayout,
    Staff,
    Transaction,
)


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        orm_account = ORMAccount(
            id="till_float",
            name="Till Float",
            type="Asset",
            balance=Decimal("460.00"),
            opening_balance=Decimal("500.00"),
        )
        domain_account = account_to_domain(orm_account)

        assert isinstance(domain_account, Account)
        assert domain_account.id == "till_float"
        assert domain_account.type is AccountType.ASSET
        assert domain_account.balance == Decimal("460")
        assert domain_account.opening_balance == Decimal("500")


class TestPurposeMapper:
    """Tests for encoding transaction purposes."""

    def test_no_purpose(self):
        assert purpose_to_record(None) == (None, None)
        assert purpose_from_record(None, None) is None

    def test_salary_payout_encoding(self):
        purpose = SalaryPayout(
            staff_id="s1",
            cycle=PayrollCycle.SALARY,
            loan_deduction=Decimal("100.00"),
            advance_deduction=Decimal("0.00"),
        )

        kind, data = purpose_to_record(purpose)

        assert kind == "salary_payout"
        assert data == {
            "staff_id": "s1",
            "cycle": "1st",
            "loan_deduction": "100.00",
            "advance_deduction": "0.00",
        }
        assert purpose_from_record(kind, data) == purpose

    @pytest.mark.parametrize(
        "purpose",
        [
            ExpensePurpose(category="Food", payee_name="Market", is_stock=True),
            LoanIssue(staff_id="s3"),
            CreditBill(partner="Trek Co"),
        ],
    )
    def test_decodes_to_same_variant(self, purpose):
        kind, data = purpose_to_record(purpose)

        assert purpose_from_record(kind, data) == purpose

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown transaction purpose"):
            purpose_from_record("gift", {})


class TestTransactionMapper:
    def test_transaction_to_domain(self):
        timestamp = datetime(2024, 3, 1, 9, 30)
        orm_txn = ORMTransaction(
            seq=7,
            id="txn_1",
            from_account_id="till_float",
            to_account_id="operating_expenses",
            amount=Decimal("40.00"),
            note="Food: Vegetables",
            timestamp=timestamp,
            is_reconciled=False,
            purpose_kind="expense",
            purpose_data={"category": "Food"},
        )

        txn = transaction_to_domain(orm_txn)

        assert isinstance(txn, Transaction)
        assert txn.sequence == 7
        assert txn.amount == Decimal("40")
        assert txn.timestamp == timestamp
        assert txn.purpose == ExpensePurpose(category="Food")
        assert txn.staff_id is None


class TestStaffMapper:
    def test_staff_to_domain(self):
        orm_staff = ORMStaff(
            id="s1",
            name="Dinesh",
            role="Head Chef",
            phone=None,
            base_salary=Decimal("1200"),
            loan_balance=Decimal("300"),
            initial_loan_amount=Decimal("500"),
            monthly_loan_installment=Decimal("100"),
            advance_balance=Decimal("0"),
            joined_date=date(2023, 1, 10),
        )

        staff = staff_to_domain(orm_staff)

        assert isinstance(staff, Staff)
        assert staff.loan_balance == Decimal("300")
        assert staff.joined_date == date(2023, 1, 10)

    def test_holiday_to_domain(self):
        orm_holiday = ORMStaffHoliday(id="hol_1", staff_id="s1", date=date(2024, 3, 8), type="Half Day")

        holiday = staff_holiday_to_domain(orm_holiday)

        assert holiday.type is HolidayType.HALF_DAY
        assert holiday.date == date(2024, 3, 8)
