"""Fixed chart of accounts and the seeded staff roster."""

from datetime import date
from decimal import Decimal

from tillbook.domain.entities import AccountType

TILL_FLOAT = "till_float"
BUSINESS_BANK = "business_bank"
OWNER_EQUITY = "owner_equity"
HIKING_BAR_RECEIVABLE = "hiking_bar_rec"
CARD_PAYMENTS = "mozzarella_card_payment"
HIKING_BAR_CARD_PAYMENTS = "hiking_bar_card_payment"
FOREIGN_CURRENCY = "foreign_currency"
PENDING_BILLS = "pending_bills"
STAFF_BANK_CARD = "staff_bank_card"
STAFF_OBLIGATIONS = "staff_loans"
VARIANCE_SHORTAGE = "variance_short"
VARIANCE_EXCESS = "variance_excess"
OPERATING_EXPENSES = "operating_expenses"
HIKING_BAR_EXPENSES = "hiking_bar_expenses"

# (id, name, type, starting balance)
INITIAL_ACCOUNTS: list[tuple[str, str, AccountType, Decimal]] = [
    (TILL_FLOAT, "Till Float", AccountType.ASSET, Decimal("500")),
    (BUSINESS_BANK, "Business Bank", AccountType.ASSET, Decimal("12000")),
    (OWNER_EQUITY, "Owner Equity", AccountType.EQUITY, Decimal("5000")),
    (HIKING_BAR_RECEIVABLE, "Hiking Bar Rec.", AccountType.RECEIVABLE, Decimal("0")),
    (CARD_PAYMENTS, "Card Payments", AccountType.RECEIVABLE, Decimal("0")),
    (HIKING_BAR_CARD_PAYMENTS, "Hiking Bar Card Payment", AccountType.RECEIVABLE, Decimal("0")),
    (FOREIGN_CURRENCY, "Foreign Currency Received", AccountType.ASSET, Decimal("0")),
    (PENDING_BILLS, "Credit Bills/Payables", AccountType.RECEIVABLE, Decimal("0")),
    (STAFF_BANK_CARD, "Staff Bank Card", AccountType.ASSET, Decimal("100")),
    (STAFF_OBLIGATIONS, "Staff Obligations", AccountType.ASSET, Decimal("0")),
    (VARIANCE_SHORTAGE, "Variance Shortage", AccountType.EXPENSE, Decimal("0")),
    (VARIANCE_EXCESS, "Variance Excess", AccountType.REVENUE, Decimal("0")),
    (OPERATING_EXPENSES, "Operating Expenses", AccountType.EXPENSE, Decimal("0")),
    (HIKING_BAR_EXPENSES, "Hiking Bar Expenses", AccountType.EXPENSE, Decimal("0")),
]

# (id, name, role, phone, base salary, monthly loan installment, joined)
INITIAL_STAFF: list[tuple[str, str, str, str, Decimal, Decimal, date]] = [
    ("s1", "Dinesh", "Head Chef", "+123456789", Decimal("1200"), Decimal("100"), date(2023, 1, 10)),
    ("s2", "Amara", "Server", "+123456789", Decimal("600"), Decimal("50"), date(2023, 5, 22)),
    ("s3", "Sohan", "Kitchen Asst", "+123456789", Decimal("550"), Decimal("50"), date(2023, 6, 15)),
    ("s4", "Leela", "Server", "+123456789", Decimal("600"), Decimal("50"), date(2023, 7, 1)),
    ("s5", "Nimal", "Bartender", "+123456789", Decimal("750"), Decimal("75"), date(2023, 8, 10)),
    ("s6", "Kavindu", "Manager", "+123456789", Decimal("1500"), Decimal("150"), date(2022, 12, 1)),
]

# Till outflows into these accounts count against the shift's expected cash.
SHIFT_EXPENSE_ACCOUNTS = frozenset({OPERATING_EXPENSES, HIKING_BAR_EXPENSES})

# Receivables that collect pending (unreconciled) inflows.
PENDING_TARGET_ACCOUNTS = (
    HIKING_BAR_RECEIVABLE,
    CARD_PAYMENTS,
    HIKING_BAR_CARD_PAYMENTS,
    PENDING_BILLS,
)


def seed_defaults(db) -> tuple[int, int]:
    """Seed the chart of accounts and the staff roster into an empty database.

    Accounts are only seeded when there are none, and staff only when the
    roster is empty, so this is safe to call on every start.

    Returns:
        Number of accounts and staff members created
    """
    accounts_created = 0
    if not db.list_accounts():
        for account_id, name, account_type, balance in INITIAL_ACCOUNTS:
            db.create_account(account_id, name, account_type, balance)
            accounts_created += 1

    staff_created = 0
    if not db.list_staff():
        for staff_id, name, role, phone, salary, installment, joined in INITIAL_STAFF:
            db.create_staff(
                staff_id=staff_id,
                name=name,
                role=role,
                base_salary=salary,
                monthly_loan_installment=installment,
                joined_date=joined,
                phone=phone,
            )
            staff_created += 1
    return accounts_created, staff_created
