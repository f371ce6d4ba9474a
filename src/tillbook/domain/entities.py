"""Domain model entities for tillbook.

These are pure data classes representing business concepts, independent of
database schema. The database layer maps its rows onto them, so services and
the CLI never see ORM objects.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union


class AccountType(str, Enum):
    """Kind of balance bucket in the chart of accounts."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"
    RECEIVABLE = "Receivable"
    PAYABLE = "Payable"


class PayrollCycle(str, Enum):
    """Payroll run: monthly salary on the 1st, service charge on the 15th."""

    SALARY = "1st"
    SERVICE_CHARGE = "15th"


class HolidayType(str, Enum):
    """Kind of staff leave."""

    FULL_DAY = "Full Day"
    HALF_DAY = "Half Day"
    SICK_LEAVE = "Sick Leave"


class ShiftState(str, Enum):
    """Till shift state."""

    CLOSED = "closed"
    OPEN = "open"


@dataclass(frozen=True)
class Account:
    """Chart of accounts entry with its running balance."""

    id: str
    name: str
    type: AccountType
    balance: Decimal
    opening_balance: Decimal
    description: Optional[str] = None


# Transaction purposes. Each variant is one reason money moved; the ``kind``
# value is what gets stored in the database.


@dataclass(frozen=True)
class ExpensePurpose:
    """Operating expense paid to a vendor or staff member."""

    kind: ClassVar[str] = "expense"

    category: str
    sub_category: Optional[str] = None
    payee_name: Optional[str] = None
    vendor_id: Optional[str] = None
    staff_id: Optional[str] = None
    is_stock: bool = False


@dataclass(frozen=True)
class LoanIssue:
    """Loan handed to a staff member."""

    kind: ClassVar[str] = "loan_issue"

    staff_id: str


@dataclass(frozen=True)
class LoanDeduction:
    """Loan repayment withheld from payroll."""

    kind: ClassVar[str] = "loan_deduction"

    staff_id: str


@dataclass(frozen=True)
class AdvanceIssue:
    """Salary advance handed to a staff member."""

    kind: ClassVar[str] = "advance_issue"

    staff_id: str


@dataclass(frozen=True)
class AdvanceDeduction:
    """Advance recovered from payroll."""

    kind: ClassVar[str] = "advance_deduction"

    staff_id: str


@dataclass(frozen=True)
class SalaryPayout:
    """Net payroll payout for one cycle."""

    kind: ClassVar[str] = "salary_payout"

    staff_id: str
    cycle: PayrollCycle
    loan_deduction: Decimal = Decimal("0")
    advance_deduction: Decimal = Decimal("0")


@dataclass(frozen=True)
class CreditBill:
    """Bill run on credit by a partner, settled later."""

    kind: ClassVar[str] = "credit_bill"

    partner: str


Purpose = Union[
    ExpensePurpose,
    LoanIssue,
    LoanDeduction,
    AdvanceIssue,
    AdvanceDeduction,
    SalaryPayout,
    CreditBill,
]

PURPOSE_TYPES: dict[str, type] = {
    cls.kind: cls
    for cls in (
        ExpensePurpose,
        LoanIssue,
        LoanDeduction,
        AdvanceIssue,
        AdvanceDeduction,
        SalaryPayout,
        CreditBill,
    )
}


@dataclass(frozen=True)
class Transaction:
    """One movement of money between two accounts."""

    id: str
    from_account_id: str
    to_account_id: str
    amount: Decimal
    note: str
    timestamp: datetime
    is_reconciled: bool = False
    purpose: Optional[Purpose] = None
    sequence: Optional[int] = None

    @property
    def staff_id(self) -> Optional[str]:
        """Staff member this transaction is tagged with, if any."""
        return getattr(self.purpose, "staff_id", None)


@dataclass(frozen=True)
class CreditBillLine:
    """Credit bill recorded at shift close."""

    partner: str
    amount: Decimal


@dataclass(frozen=True)
class DailyLog:
    """Shift record from open to close."""

    id: str
    date: date
    opening_float: Decimal
    total_sales: Decimal
    card_payments: Decimal
    credit_bills: Decimal
    hiking_bar_sales: Decimal
    foreign_currency: Decimal
    expenses_cash: Decimal
    expected_cash: Decimal
    is_closed: bool
    timestamp: datetime
    actual_cash: Optional[Decimal] = None
    foreign_currency_note: Optional[str] = None
    credit_bill_lines: tuple[CreditBillLine, ...] = ()

    @property
    def variance(self) -> Optional[Decimal]:
        """Counted cash minus expected cash; None until counted."""
        if self.actual_cash is None:
            return None
        return self.actual_cash - self.expected_cash


@dataclass(frozen=True)
class Staff:
    """Staff member with loan and advance running balances."""

    id: str
    name: str
    role: str
    base_salary: Decimal
    loan_balance: Decimal
    initial_loan_amount: Decimal
    monthly_loan_installment: Decimal
    advance_balance: Decimal
    joined_date: date
    phone: Optional[str] = None


@dataclass(frozen=True)
class StaffHoliday:
    """A day a staff member is off."""

    id: str
    staff_id: str
    date: date
    type: HolidayType


# Write-side values handed to Database.commit_batch.


@dataclass(frozen=True)
class NewTransfer:
    """Transfer to append to the log."""

    from_account_id: str
    to_account_id: str
    amount: Decimal
    note: str
    is_reconciled: bool = False
    purpose: Optional[Purpose] = None


@dataclass(frozen=True)
class StaffBalanceUpdate:
    """New sub-ledger balances for one staff member."""

    staff_id: str
    loan_balance: Optional[Decimal] = None
    advance_balance: Optional[Decimal] = None
    initial_loan_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class PostingBatch:
    """Everything one user action writes to the ledger.

    Applied by the database in a single commit: either all of it lands or
    none of it does.
    """

    transfers: tuple[NewTransfer, ...] = ()
    reconcile_ids: tuple[str, ...] = ()
    staff_updates: tuple[StaffBalanceUpdate, ...] = field(default_factory=tuple)

    def is_empty(self) -> bool:
        return not (self.transfers or self.reconcile_ids or self.staff_updates)
