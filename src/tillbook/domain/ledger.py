"""Ledger domain service: the transfer primitive and ledger reads."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from tillbook.database.base import Database
from tillbook.domain import chart
from tillbook.domain.entities import (
    Account,
    AccountType,
    ExpensePurpose,
    NewTransfer,
    PostingBatch,
    Purpose,
    Transaction,
)
from tillbook.domain.errors import (
    UnknownAccountError,
    UnknownStaffError,
    ValidationError,
    account_not_found,
    staff_not_found,
)
from tillbook.utils.amount_parser import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def require_amount(value, field_name: str = "amount") -> Decimal:
    """Coerce a user-supplied amount, rejecting non-numeric or negative input.

    Raises:
        ValidationError: If the value is not a finite, non-negative number
    """
    try:
        amount = to_money(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {field_name}: {e}") from e
    if amount < ZERO:
        raise ValidationError(f"{field_name.capitalize()} must not be negative, got {amount}")
    return amount


@dataclass(frozen=True)
class BalanceMismatch:
    """Account whose stored balance disagrees with its transaction history."""

    account_id: str
    stored_balance: Decimal
    expected_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.stored_balance - self.expected_balance


class LedgerService:
    """Service for moving money between accounts and reading the ledger."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    # Accounts
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID, or None if it is not in the chart."""
        return self.db.get_account(account_id)

    def require_account(self, account_id: str) -> Account:
        """Get account by ID.

        Raises:
            UnknownAccountError: If the account is not in the chart
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise UnknownAccountError(account_not_found(account_id))
        return account

    def list_accounts(self, account_type: Optional[AccountType] = None) -> list[Account]:
        """List accounts in chart order."""
        return self.db.list_accounts(account_type)

    def total_by_type(self, account_type: AccountType) -> Decimal:
        """Sum of balances over all accounts of one type."""
        return sum((acc.balance for acc in self.db.list_accounts(account_type)), ZERO)

    def total_assets(self) -> Decimal:
        """Sum of every asset balance."""
        return self.total_by_type(AccountType.ASSET)

    def total_receivables(self) -> Decimal:
        """Sum of every receivable balance."""
        return self.total_by_type(AccountType.RECEIVABLE)

    def total_liabilities(self) -> Decimal:
        """Sum of liability and payable balances."""
        return self.total_by_type(AccountType.LIABILITY) + self.total_by_type(AccountType.PAYABLE)

    # Transfers
    def build_transfer(
        self,
        from_id: str,
        to_id: str,
        amount,
        note: str,
        is_reconciled: bool = False,
        purpose: Optional[Purpose] = None,
    ) -> Optional[NewTransfer]:
        """Validate a transfer without writing it.

        Returns None for a zero amount, which callers treat as nothing to post.

        Raises:
            ValidationError: If the amount is invalid or both sides are the same account
            UnknownAccountError: If either account is not in the chart
        """
        value = require_amount(amount)
        if from_id == to_id:
            raise ValidationError(f"Cannot transfer from account '{from_id}' to itself")
        self.require_account(from_id)
        self.require_account(to_id)
        if value == ZERO:
            return None
        return NewTransfer(
            from_account_id=from_id,
            to_account_id=to_id,
            amount=value,
            note=note,
            is_reconciled=is_reconciled,
            purpose=purpose,
        )

    def post(self, batch: PostingBatch) -> list[Transaction]:
        """Write a validated batch in one commit."""
        if batch.is_empty():
            return []
        transactions = self.db.commit_batch(batch)
        for txn in transactions:
            logger.info(
                "Posted %s: %s -> %s %s (%s)",
                txn.id,
                txn.from_account_id,
                txn.to_account_id,
                txn.amount,
                txn.note,
            )
        if batch.reconcile_ids:
            logger.info("Reconciled %d transaction(s)", len(batch.reconcile_ids))
        return transactions

    def transfer(
        self,
        from_id: str,
        to_id: str,
        amount,
        note: str,
        is_reconciled: bool = False,
        purpose: Optional[Purpose] = None,
    ) -> Optional[Transaction]:
        """Move money from one account to another.

        Debits ``from_id``, credits ``to_id`` and appends one transaction, all
        in a single commit. A zero amount is a no-op. Balances may go negative.

        Args:
            from_id: Account the money leaves
            to_id: Account the money enters
            amount: Non-negative amount
            note: Free-text note
            is_reconciled: Whether the transaction is already settled
            purpose: Optional purpose tag

        Returns:
            The new transaction, or None for a zero amount

        Raises:
            ValidationError: If the amount is invalid or from_id equals to_id
            UnknownAccountError: If either account is not in the chart
        """
        new_transfer = self.build_transfer(from_id, to_id, amount, note, is_reconciled, purpose)
        if new_transfer is None:
            logger.debug("Skipping zero transfer %s -> %s", from_id, to_id)
            return None
        return self.post(PostingBatch(transfers=(new_transfer,)))[0]

    def add_expense(
        self,
        amount,
        category: str,
        note: str,
        source_id: str = chart.TILL_FLOAT,
        sub_category: Optional[str] = None,
        payee_name: Optional[str] = None,
        vendor_id: Optional[str] = None,
        staff_id: Optional[str] = None,
        is_stock: bool = False,
    ) -> Optional[Transaction]:
        """Record an operating expense paid from ``source_id``.

        Raises:
            ValidationError: If the category is blank or the amount is invalid
        """
        if not category or not category.strip():
            raise ValidationError("Expense category is required")
        category = category.strip()
        if staff_id is not None:
            staff = self.db.get_staff(staff_id)
            if staff is None:
                raise UnknownStaffError(staff_not_found(staff_id))
            payee_name = payee_name or staff.name

        purpose = ExpensePurpose(
            category=category,
            sub_category=sub_category,
            payee_name=payee_name,
            vendor_id=vendor_id,
            staff_id=staff_id,
            is_stock=is_stock,
        )
        return self.transfer(
            source_id,
            chart.OPERATING_EXPENSES,
            amount,
            f"{category}: {note}",
            purpose=purpose,
        )

    def top_up_float(self, amount, source_id: str = chart.OWNER_EQUITY) -> Optional[Transaction]:
        """Add cash to the till float."""
        return self.transfer(source_id, chart.TILL_FLOAT, amount, "Shift Float Top-Up")

    def move_to_staff_card(self, amount) -> Optional[Transaction]:
        """Move till cash onto the staff bank card."""
        return self.transfer(
            chart.TILL_FLOAT,
            chart.STAFF_BANK_CARD,
            amount,
            "Transfer to Staff Bank Card (Bank Money)",
        )

    # Reads
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        account_id: Optional[str] = None,
        direction: Optional[str] = None,
        reconciled: Optional[bool] = None,
        since: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions, newest first.

        Args:
            account_id: Only transactions touching this account
            direction: "in" or "out" relative to ``account_id``
            reconciled: Filter on the reconciliation flag
            since: Only transactions on or after this day

        Raises:
            ValidationError: If a direction is given without an account
        """
        if direction is not None and account_id is None:
            raise ValidationError("A direction filter needs an account")
        if account_id is not None:
            self.require_account(account_id)
        start = datetime.combine(since, time.min) if since is not None else None

        if direction == "in":
            return self.db.list_transactions(to_account_id=account_id, reconciled=reconciled, since=start)
        if direction == "out":
            return self.db.list_transactions(from_account_id=account_id, reconciled=reconciled, since=start)
        if direction is not None:
            raise ValidationError(f"Unknown direction '{direction}', expected 'in' or 'out'")
        return self.db.list_transactions(account_id=account_id, reconciled=reconciled, since=start)

    def verify_balances(self) -> list[BalanceMismatch]:
        """Check every balance against opening balance plus its transaction history."""
        expected = {acc.id: acc.opening_balance for acc in self.db.list_accounts()}
        for txn in self.db.list_transactions(newest_first=False):
            expected[txn.from_account_id] = expected.get(txn.from_account_id, ZERO) - txn.amount
            expected[txn.to_account_id] = expected.get(txn.to_account_id, ZERO) + txn.amount

        mismatches = []
        for account in self.db.list_accounts():
            if account.balance != expected[account.id]:
                mismatches.append(
                    BalanceMismatch(
                        account_id=account.id,
                        stored_balance=account.balance,
                        expected_balance=expected[account.id],
                    )
                )
        if mismatches:
            logger.warning("Balance check found %d mismatched account(s)", len(mismatches))
        return mismatches
