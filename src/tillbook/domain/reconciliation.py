"""Reconciliation domain service.

Settles pending inflows on receivable accounts. Every workflow validates the
whole selection first and then writes all of its transfers and
reconciliation flags in a single commit, so a rejected reconciliation leaves
the ledger untouched.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from tillbook.database.base import Database
from tillbook.domain import chart
from tillbook.domain.entities import CreditBill, PostingBatch, Transaction
from tillbook.domain.errors import (
    AlreadyReconciledError,
    SplitMismatchError,
    UnknownTransactionError,
    ValidationError,
    split_mismatch,
    transaction_already_reconciled,
    transaction_not_found,
)
from tillbook.domain.ledger import LedgerService, ZERO, require_amount
from tillbook.utils.amount_parser import to_decimal

logger = logging.getLogger(__name__)

SPLIT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class SettlementSplit:
    """How a pending order was actually paid."""

    cash: Decimal = ZERO
    card: Decimal = ZERO
    service_charge: Decimal = ZERO
    contra: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.cash + self.card + self.service_charge + self.contra

    @property
    def deductions(self) -> Decimal:
        return self.service_charge + self.contra


@dataclass(frozen=True)
class CardSettlementResult:
    """Outcome of a batch card settlement."""

    selected_total: Decimal
    net_amount: Decimal
    fee_amount: Decimal
    fee_transaction: Optional[Transaction]

    @property
    def fee_percentage(self) -> Decimal:
        if self.selected_total == ZERO:
            return ZERO
        return (self.fee_amount / self.selected_total * 100).quantize(Decimal("0.01"))


class ReconciliationService:
    """Service for settling pending receivable transactions."""

    def __init__(self, db: Database, ledger: Optional[LedgerService] = None):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            ledger: Ledger service to post through (created if omitted)
        """
        self.db = db
        self.ledger = ledger or LedgerService(db)

    def _require_pending(self, transaction_id: str) -> Transaction:
        """Get an unreconciled transaction by ID.

        Raises:
            UnknownTransactionError: If the transaction does not exist
            AlreadyReconciledError: If it was already settled
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise UnknownTransactionError(transaction_not_found(transaction_id))
        if txn.is_reconciled:
            raise AlreadyReconciledError(transaction_already_reconciled(transaction_id))
        return txn

    def _require_selection(self, transaction_ids: Iterable[str], target_account_id: str) -> list[Transaction]:
        """Resolve a batch selection of pending inflows to ``target_account_id``.

        Raises:
            ValidationError: If the selection is empty, repeats an ID or
                includes a transaction that does not flow into the target
        """
        ids = list(transaction_ids)
        if not ids:
            raise ValidationError("Select at least one transaction to reconcile")

        duplicates = [txn_id for txn_id, count in Counter(ids).items() if count > 1]
        if duplicates:
            raise ValidationError(f"Transaction selected more than once: {', '.join(duplicates)}")

        selected = [self._require_pending(txn_id) for txn_id in ids]
        for txn in selected:
            if txn.to_account_id != target_account_id:
                raise ValidationError(
                    f"Transaction '{txn.id}' is not pending on account '{target_account_id}'"
                )
        return selected

    def reconcile_split(
        self,
        transaction_id: str,
        split: SettlementSplit,
        receivable_id: str = chart.HIKING_BAR_RECEIVABLE,
        cash_account_id: str = chart.TILL_FLOAT,
        card_account_id: str = chart.HIKING_BAR_CARD_PAYMENTS,
        expense_account_id: str = chart.HIKING_BAR_EXPENSES,
    ) -> list[Transaction]:
        """Settle one pending order into cash, card and deductions.

        The split must add up to the order amount within one cent. Cash and
        card move out of the receivable into their accounts; service charge
        plus contra move into the expense account. The order is then marked
        reconciled.

        Args:
            transaction_id: Pending order to settle
            split: Cash, card, service charge and contra parts

        Returns:
            The settlement transfers that were posted

        Raises:
            UnknownTransactionError: If the order does not exist
            AlreadyReconciledError: If the order was already settled
            ValidationError: If a part is negative
            SplitMismatchError: If the parts do not add up to the order amount
        """
        txn = self._require_pending(transaction_id)
        if txn.to_account_id != receivable_id:
            raise ValidationError(
                f"Transaction '{txn.id}' is not pending on account '{receivable_id}'"
            )
        parts = SettlementSplit(
            cash=require_amount(split.cash, "cash"),
            card=require_amount(split.card, "card"),
            service_charge=require_amount(split.service_charge, "service charge"),
            contra=require_amount(split.contra, "contra"),
        )
        # Tolerance applies to the amounts as entered, before cent rounding.
        exact_total = sum(
            (to_decimal(v) for v in (split.cash, split.card, split.service_charge, split.contra)),
            ZERO,
        )
        if abs(exact_total - txn.amount) > SPLIT_TOLERANCE:
            raise SplitMismatchError(split_mismatch(exact_total, txn.amount))

        planned = [
            self.ledger.build_transfer(receivable_id, cash_account_id, parts.cash, f"HB Cash: {txn.id}"),
            self.ledger.build_transfer(receivable_id, card_account_id, parts.card, f"HB Card: {txn.id}"),
            self.ledger.build_transfer(
                receivable_id, expense_account_id, parts.deductions, f"HB Deduction: {txn.id}"
            ),
        ]
        transfers = tuple(t for t in planned if t is not None)

        posted = self.ledger.post(PostingBatch(transfers=transfers, reconcile_ids=(txn.id,)))
        logger.info("Settled order %s for %s", txn.id, parts.total)
        return posted

    def reconcile_card_settlement(
        self,
        transaction_ids: Iterable[str],
        source_account_id: str,
        net_amount,
        note: str = "",
    ) -> CardSettlementResult:
        """Settle a batch of card payments against what the bank paid out.

        The gross amounts were credited to the receivable when each sale was
        recorded, so only the bank's cut moves here: ``fee = max(0, total -
        net)`` goes from the receivable to operating expenses.

        Raises:
            ValidationError: If the selection is empty or invalid, or the net
                amount is not a non-negative number
            UnknownAccountError: If the source account is not in the chart
        """
        self.ledger.require_account(source_account_id)
        net = require_amount(net_amount, "net amount")
        selected = self._require_selection(transaction_ids, source_account_id)

        selected_total = sum((txn.amount for txn in selected), ZERO)
        fee = max(ZERO, selected_total - net)
        if not note:
            note = f"Reconciled batch of {len(selected)} transactions"

        fee_transfer = self.ledger.build_transfer(
            source_account_id,
            chart.OPERATING_EXPENSES,
            fee,
            f"Bank Fee: {note}",
            is_reconciled=True,
        )
        batch = PostingBatch(
            transfers=(fee_transfer,) if fee_transfer is not None else (),
            reconcile_ids=tuple(txn.id for txn in selected),
        )
        posted = self.ledger.post(batch)
        logger.info(
            "Card settlement on %s: gross %s, net %s, fee %s",
            source_account_id,
            selected_total,
            net,
            fee,
        )
        return CardSettlementResult(
            selected_total=selected_total,
            net_amount=net,
            fee_amount=fee,
            fee_transaction=posted[0] if posted else None,
        )

    def reconcile_credit_bills(
        self,
        transaction_ids: Iterable[str],
        destination_account_id: str,
        note: str = "",
    ) -> Optional[Transaction]:
        """Settle pending credit bills into ``destination_account_id``.

        Moves the sum of the selected bills out of pending bills in one
        transfer and marks every selected bill reconciled.

        Returns:
            The settlement transfer, or None when the bills sum to zero

        Raises:
            ValidationError: If the selection is empty or invalid
            UnknownAccountError: If the destination is not in the chart
        """
        selected = self._require_selection(transaction_ids, chart.PENDING_BILLS)
        total = sum((txn.amount for txn in selected), ZERO)

        settlement = self.ledger.build_transfer(
            chart.PENDING_BILLS,
            destination_account_id,
            total,
            f"Bill Settle: {note or destination_account_id}",
        )
        batch = PostingBatch(
            transfers=(settlement,) if settlement is not None else (),
            reconcile_ids=tuple(txn.id for txn in selected),
        )
        posted = self.ledger.post(batch)
        logger.info("Settled %d credit bill(s) totalling %s", len(selected), total)
        return posted[0] if posted else None

    def record_credit_bill(self, partner: str, amount, source_id: str) -> Optional[Transaction]:
        """Record a bill a partner ran on credit as pending on pending bills.

        Raises:
            ValidationError: If the partner is unknown or the amount invalid
        """
        if partner not in self.db.list_credit_partners():
            raise ValidationError(f"Unknown credit partner '{partner}'")
        return self.ledger.transfer(
            source_id,
            chart.PENDING_BILLS,
            amount,
            f"Credit Bill: {partner}",
            purpose=CreditBill(partner=partner),
        )

    def pending_transactions(self, account_id: str, partner: Optional[str] = None) -> list[Transaction]:
        """Unreconciled inflows on an account, newest first.

        Args:
            account_id: Receivable account
            partner: Only credit bills run by this partner
        """
        self.ledger.require_account(account_id)
        pending = self.db.list_transactions(to_account_id=account_id, reconciled=False)
        if partner is not None:
            pending = [
                txn for txn in pending
                if isinstance(txn.purpose, CreditBill) and txn.purpose.partner == partner
            ]
        return pending

    def pending_counts(self) -> dict[str, int]:
        """Number of unreconciled inflows per receivable account."""
        return {
            account_id: len(self.db.list_transactions(to_account_id=account_id, reconciled=False))
            for account_id in chart.PENDING_TARGET_ACCOUNTS
        }
