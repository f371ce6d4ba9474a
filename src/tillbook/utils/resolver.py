"""Utilities for resolving account and staff references typed on the command line."""

from tillbook.domain.errors import UnknownAccountError, UnknownStaffError, account_not_found, staff_not_found
from tillbook.domain.ledger import LedgerService
from tillbook.domain.staff import StaffService


def resolve_account(ledger: LedgerService, account: str) -> str:
    """Resolve an account ID or display name to the account ID.

    Names match case-insensitively, so "till float" finds ``till_float``.

    Raises:
        UnknownAccountError: If no account matches
    """
    if ledger.get_account(account) is not None:
        return account

    wanted = account.strip().lower()
    for acc in ledger.list_accounts():
        if acc.name.lower() == wanted:
            return acc.id

    raise UnknownAccountError(account_not_found(account))


def resolve_staff(staff_service: StaffService, staff: str) -> str:
    """Resolve a staff ID or name to the staff ID.

    Raises:
        UnknownStaffError: If no staff member matches
    """
    if staff_service.get_staff(staff) is not None:
        return staff

    wanted = staff.strip().lower()
    for member in staff_service.list_staff():
        if member.name.lower() == wanted:
            return member.id

    raise UnknownStaffError(staff_not_found(staff))
