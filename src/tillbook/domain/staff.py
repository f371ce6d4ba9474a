"""Staff roster, holiday calendar and credit partner services."""

import logging
from datetime import date
from typing import Optional

from tillbook.database.base import Database
from tillbook.domain.entities import HolidayType, Staff, StaffHoliday
from tillbook.domain.errors import ConflictError, NotFoundError, UnknownStaffError, ValidationError, staff_not_found
from tillbook.domain.ledger import require_amount

logger = logging.getLogger(__name__)

# Balances are owned by the payroll sub-ledger and only move with transactions.
LEDGER_FIELDS = frozenset({"loan_balance", "advance_balance", "initial_loan_amount"})
EDITABLE_FIELDS = frozenset({"name", "role", "phone", "base_salary", "monthly_loan_installment", "joined_date"})
MONEY_FIELDS = frozenset({"base_salary", "monthly_loan_installment"})


class StaffService:
    """Service for the staff roster and holidays."""

    def __init__(self, db: Database):
        """Initialize staff service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_staff(self) -> list[Staff]:
        return self.db.list_staff()

    def get_staff(self, staff_id: str) -> Optional[Staff]:
        return self.db.get_staff(staff_id)

    def require_staff(self, staff_id: str) -> Staff:
        """Get staff member by ID.

        Raises:
            UnknownStaffError: If the staff member is not on the roster
        """
        staff = self.db.get_staff(staff_id)
        if staff is None:
            raise UnknownStaffError(staff_not_found(staff_id))
        return staff

    def update_staff_installment(self, staff_id: str, amount) -> Staff:
        """Set the monthly loan installment for a staff member."""
        return self.update_staff_details(staff_id, monthly_loan_installment=amount)

    def update_staff_details(self, staff_id: str, **changes) -> Staff:
        """Edit profile fields of a staff member.

        No transactions are written. Loan and advance balances cannot be
        edited here.

        Args:
            staff_id: Staff member ID
            **changes: Field values keyed by field name

        Returns:
            The updated staff member

        Raises:
            UnknownStaffError: If the staff member is not on the roster
            ValidationError: If a field is unknown, ledger-owned or invalid
        """
        self.require_staff(staff_id)

        ledger_owned = set(changes) & LEDGER_FIELDS
        if ledger_owned:
            raise ValidationError(
                f"Cannot edit {', '.join(sorted(ledger_owned))} directly; "
                f"record a loan, advance or payroll instead"
            )
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown staff field(s): {', '.join(sorted(unknown))}")

        cleaned = {}
        for field, value in changes.items():
            if field in MONEY_FIELDS:
                value = require_amount(value, field.replace("_", " "))
            elif field == "name":
                if not value or not value.strip():
                    raise ValidationError("Staff name cannot be empty")
                value = value.strip()
            elif field == "joined_date" and not isinstance(value, date):
                raise ValidationError(f"Invalid joined date: {value!r}")
            cleaned[field] = value

        if cleaned:
            self.db.update_staff(staff_id, **cleaned)
            logger.info("Updated staff %s: %s", staff_id, ", ".join(sorted(cleaned)))
        return self.require_staff(staff_id)

    def toggle_staff_holiday(
        self,
        staff_id: str,
        holiday_date: date,
        holiday_type: HolidayType = HolidayType.FULL_DAY,
    ) -> Optional[StaffHoliday]:
        """Mark a day off, or clear it if one is already recorded.

        Returns:
            The new holiday, or None if an existing one was removed

        Raises:
            UnknownStaffError: If the staff member is not on the roster
        """
        staff = self.require_staff(staff_id)
        existing = self.db.get_staff_holiday(staff_id, holiday_date)
        if existing is not None:
            self.db.delete_staff_holiday(existing.id)
            logger.info("Cleared %s holiday for %s on %s", existing.type.value, staff.name, holiday_date)
            return None

        holiday = self.db.create_staff_holiday(staff_id, holiday_date, HolidayType(holiday_type))
        logger.info("Marked %s holiday for %s on %s", holiday.type.value, staff.name, holiday_date)
        return holiday

    def list_holidays(self, staff_id: Optional[str] = None) -> list[StaffHoliday]:
        """List holidays, optionally for one staff member."""
        if staff_id is not None:
            self.require_staff(staff_id)
        return self.db.list_staff_holidays(staff_id)


class CreditPartnerService:
    """Service for the names partners run credit bills under."""

    def __init__(self, db: Database):
        self.db = db

    def list_partners(self) -> list[str]:
        return self.db.list_credit_partners()

    def add_partner(self, name: str) -> str:
        """Add a credit partner.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If the partner already exists
        """
        if not name or not name.strip():
            raise ValidationError("Partner name cannot be empty")
        name = name.strip()
        if name in self.db.list_credit_partners():
            raise ConflictError(f"Credit partner '{name}' already exists")
        self.db.add_credit_partner(name)
        logger.info("Added credit partner %s", name)
        return name

    def remove_partner(self, name: str) -> None:
        """Remove a credit partner.

        Raises:
            NotFoundError: If the partner does not exist
        """
        if name not in self.db.list_credit_partners():
            raise NotFoundError(f"Credit partner '{name}' not found")
        self.db.delete_credit_partner(name)
        logger.info("Removed credit partner %s", name)
