"""SQLAlchemy models for tillbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    JSON,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, as SQLite hands datetimes back without tzinfo."""
    return datetime.now(UTC).replace(tzinfo=None)


class Account(Base):
    """Chart of accounts model."""

    __tablename__ = "accounts"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    opening_balance = Column(Numeric(12, 2), nullable=False, default=0)
    description = Column(String, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Transaction(Base):
    """Transaction log model.

    ``seq`` is the append order; ``id`` is the public transaction id.
    """

    __tablename__ = "transactions"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, nullable=False)
    from_account_id = Column(String, ForeignKey("accounts.id"), nullable=False)
    to_account_id = Column(String, ForeignKey("accounts.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    note = Column(String, nullable=False, default="")
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    is_reconciled = Column(Boolean, default=False, nullable=False)
    purpose_kind = Column(String, nullable=True)
    purpose_data = Column(JSON, nullable=True)

    from_account = relationship("Account", foreign_keys=[from_account_id])
    to_account = relationship("Account", foreign_keys=[to_account_id])


class DailyLog(Base):
    """Shift record model."""

    __tablename__ = "daily_logs"

    id = Column(String, primary_key=True)
    date = Column(Date, nullable=False)
    opening_float = Column(Numeric(12, 2), nullable=False)
    total_sales = Column(Numeric(12, 2), nullable=False, default=0)
    card_payments = Column(Numeric(12, 2), nullable=False, default=0)
    credit_bills = Column(Numeric(12, 2), nullable=False, default=0)
    hiking_bar_sales = Column(Numeric(12, 2), nullable=False, default=0)
    foreign_currency = Column(Numeric(12, 2), nullable=False, default=0)
    foreign_currency_note = Column(String, nullable=True)
    expenses_cash = Column(Numeric(12, 2), nullable=False, default=0)
    expected_cash = Column(Numeric(12, 2), nullable=False)
    actual_cash = Column(Numeric(12, 2), nullable=True)
    is_closed = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)

    credit_bill_lines = relationship(
        "ShiftCreditBill",
        back_populates="log",
        cascade="all, delete-orphan",
        order_by="ShiftCreditBill.id",
    )


class ShiftCreditBill(Base):
    """Credit bill line recorded at shift close."""

    __tablename__ = "shift_credit_bills"

    id = Column(Integer, primary_key=True)
    log_id = Column(String, ForeignKey("daily_logs.id"), nullable=False)
    partner = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)

    log = relationship("DailyLog", back_populates="credit_bill_lines")


class LedgerState(Base):
    """Key/value pointers kept beside the collections (current shift)."""

    __tablename__ = "ledger_state"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=True)


class Staff(Base):
    """Staff roster model."""

    __tablename__ = "staff"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    base_salary = Column(Numeric(12, 2), nullable=False, default=0)
    loan_balance = Column(Numeric(12, 2), nullable=False, default=0)
    initial_loan_amount = Column(Numeric(12, 2), nullable=False, default=0)
    monthly_loan_installment = Column(Numeric(12, 2), nullable=False, default=0)
    advance_balance = Column(Numeric(12, 2), nullable=False, default=0)
    joined_date = Column(Date, nullable=False)

    holidays = relationship("StaffHoliday", back_populates="staff", cascade="all, delete-orphan")


class StaffHoliday(Base):
    """Staff holiday model."""

    __tablename__ = "staff_holidays"

    id = Column(String, primary_key=True)
    staff_id = Column(String, ForeignKey("staff.id"), nullable=False)
    date = Column(Date, nullable=False)
    type = Column(String, nullable=False)

    __table_args__ = (UniqueConstraint("staff_id", "date", name="uq_staff_holiday_date"),)

    staff = relationship("Staff", back_populates="holidays")


class CreditPartner(Base):
    """Named partner allowed to run credit bills."""

    __tablename__ = "credit_partners"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
