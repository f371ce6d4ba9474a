"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Operation conflicts with the current ledger state."""


class SplitMismatchError(ValidationError):
    """Settlement split does not add up to the transaction amount."""


class MissingJustificationError(ValidationError):
    """Shift close with foreign currency but no explanatory note."""


class UnknownAccountError(NotFoundError):
    """Reference to an account outside the chart of accounts."""


class UnknownStaffError(NotFoundError):
    """Reference to a staff member not on the roster."""


class UnknownTransactionError(NotFoundError):
    """Reference to a transaction not in the log."""


class AlreadyReconciledError(ConflictError):
    """Transaction was already settled."""


class ShiftStateError(ConflictError):
    """Shift operation not allowed in the current shift state."""


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account '{account_id}' not found"


def staff_not_found(staff_id: str) -> str:
    """Return message for missing staff member."""
    return f"Staff member '{staff_id}' not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction '{transaction_id}' not found"


def transaction_already_reconciled(transaction_id: str) -> str:
    """Return message for a transaction that is already settled."""
    return f"Transaction '{transaction_id}' is already reconciled"


def split_mismatch(split_total, target) -> str:
    """Return message when a settlement split does not match its target."""
    return (
        f"Split total {split_total:,.2f} must match transaction amount {target:,.2f}"
    )
