"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

from tillbook.domain.entities import (
    Account,
    AccountType,
    CreditBillLine,
    DailyLog,
    PostingBatch,
    Staff,
    StaffHoliday,
    HolidayType,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for tillbook."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        account_id: str,
        name: str,
        account_type: AccountType,
        opening_balance: Decimal,
        description: Optional[str] = None,
    ) -> str:
        """Create a chart of accounts entry. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, account_type: Optional[AccountType] = None) -> list[Account]:
        """List accounts in chart order, optionally filtered by type."""
        pass

    # Ledger operations
    @abstractmethod
    def commit_batch(self, batch: PostingBatch) -> list[Transaction]:
        """Apply transfers, reconciliation flags and staff balances in one commit.

        Returns the appended transactions in order. Nothing is written if any
        part of the batch fails.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[str] = None,
        from_account_id: Optional[str] = None,
        to_account_id: Optional[str] = None,
        since: Optional[datetime] = None,
        reconciled: Optional[bool] = None,
        newest_first: bool = True,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            account_id: Transactions touching this account on either side
            from_account_id: Transactions leaving this account
            to_account_id: Transactions entering this account
            since: Only transactions at or after this timestamp
            reconciled: Filter on the reconciliation flag
            newest_first: Order by append order descending
        """
        pass

    @abstractmethod
    def count_transactions(self) -> int:
        """Number of transactions in the log."""
        pass

    # Shift operations
    @abstractmethod
    def get_current_shift_id(self) -> Optional[str]:
        """ID of the open shift, or None when closed."""
        pass

    @abstractmethod
    def get_daily_log(self, log_id: str) -> Optional[DailyLog]:
        """Get shift record by ID."""
        pass

    @abstractmethod
    def list_daily_logs(self) -> list[DailyLog]:
        """List shift records, most recent first."""
        pass

    @abstractmethod
    def open_daily_log(self, opening_float: Decimal, log_date: date) -> DailyLog:
        """Create an open shift record and point the current shift at it."""
        pass

    @abstractmethod
    def close_daily_log(
        self,
        log_id: str,
        total_sales: Decimal,
        card_payments: Decimal,
        credit_bills: Decimal,
        hiking_bar_sales: Decimal,
        foreign_currency: Decimal,
        foreign_currency_note: Optional[str],
        expenses_cash: Decimal,
        expected_cash: Decimal,
        actual_cash: Decimal,
        credit_bill_lines: tuple[CreditBillLine, ...] = (),
    ) -> DailyLog:
        """Store close-time figures, mark the record closed and clear the pointer."""
        pass

    # Staff operations
    @abstractmethod
    def create_staff(
        self,
        staff_id: str,
        name: str,
        role: str,
        base_salary: Decimal,
        monthly_loan_installment: Decimal,
        joined_date: date,
        phone: Optional[str] = None,
    ) -> str:
        """Create a staff record. Returns staff ID."""
        pass

    @abstractmethod
    def get_staff(self, staff_id: str) -> Optional[Staff]:
        """Get staff member by ID."""
        pass

    @abstractmethod
    def list_staff(self) -> list[Staff]:
        """List staff members."""
        pass

    @abstractmethod
    def update_staff(self, staff_id: str, **changes) -> None:
        """Update profile fields of a staff member."""
        pass

    @abstractmethod
    def get_staff_holiday(self, staff_id: str, holiday_date: date) -> Optional[StaffHoliday]:
        """Get the holiday for a staff member on a date."""
        pass

    @abstractmethod
    def list_staff_holidays(self, staff_id: Optional[str] = None) -> list[StaffHoliday]:
        """List holidays, optionally for one staff member."""
        pass

    @abstractmethod
    def create_staff_holiday(
        self, staff_id: str, holiday_date: date, holiday_type: HolidayType
    ) -> StaffHoliday:
        """Create a holiday record."""
        pass

    @abstractmethod
    def delete_staff_holiday(self, holiday_id: str) -> None:
        """Delete a holiday record."""
        pass

    # Credit partner operations
    @abstractmethod
    def list_credit_partners(self) -> list[str]:
        """List credit partner names."""
        pass

    @abstractmethod
    def add_credit_partner(self, name: str) -> None:
        """Add a credit partner name."""
        pass

    @abstractmethod
    def delete_credit_partner(self, name: str) -> None:
        """Remove a credit partner name."""
        pass
