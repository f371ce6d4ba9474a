"""Tests for the Database interface returning domain models."""

import pytest
from datetime import date
from decimal import Decimal

from tillbook.database.factories import DEFAULT_DB_PATH, create_sqlite_database, resolve_database_path
from tillbook.domain import entities
from tillbook.domain.entities import (
    AccountType,
    CreditBillLine,
    HolidayType,
    NewTransfer,
    PostingBatch,
    StaffBalanceUpdate,
)


@pytest.fixture
def two_accounts(temp_db):
    temp_db.create_account("cash", "Cash", AccountType.ASSET, Decimal("100"))
    temp_db.create_account("bank", "Bank", AccountType.ASSET, Decimal("0"))
    return temp_db


class TestAccounts:
    def test_create_and_get(self, temp_db):
        temp_db.create_account("cash", "Cash", AccountType.ASSET, Decimal("100"), description="Drawer")

        account = temp_db.get_account("cash")

        assert isinstance(account, entities.Account)
        assert account.balance == Decimal("100")
        assert account.opening_balance == Decimal("100")
        assert account.description == "Drawer"

    def test_missing_account(self, temp_db):
        assert temp_db.get_account("nope") is None

    def test_duplicate_account(self, two_accounts):
        with pytest.raises(ValueError, match="already exists"):
            two_accounts.create_account("cash", "Cash again", AccountType.ASSET, Decimal("0"))

    def test_list_keeps_creation_order(self, temp_db):
        temp_db.create_account("zeta", "Zeta", AccountType.ASSET, Decimal("0"))
        temp_db.create_account("alpha", "Alpha", AccountType.EXPENSE, Decimal("0"))

        assert [a.id for a in temp_db.list_accounts()] == ["zeta", "alpha"]
        assert [a.id for a in temp_db.list_accounts(AccountType.EXPENSE)] == ["alpha"]


class TestCommitBatch:
    def test_applies_transfers(self, two_accounts):
        batch = PostingBatch(
            transfers=(
                NewTransfer("cash", "bank", Decimal("30"), "first"),
                NewTransfer("cash", "bank", Decimal("20"), "second", is_reconciled=True),
            )
        )

        posted = two_accounts.commit_batch(batch)

        assert [t.note for t in posted] == ["first", "second"]
        assert posted[1].is_reconciled is True
        assert two_accounts.get_account("cash").balance == Decimal("50")
        assert two_accounts.get_account("bank").balance == Decimal("50")
        assert two_accounts.count_transactions() == 2

    def test_failed_batch_rolls_back(self, two_accounts):
        batch = PostingBatch(
            transfers=(NewTransfer("cash", "bank", Decimal("30"), "ok"),),
            reconcile_ids=("txn_missing",),
        )

        with pytest.raises(ValueError, match="txn_missing"):
            two_accounts.commit_batch(batch)

        assert two_accounts.get_account("cash").balance == Decimal("100")
        assert two_accounts.count_transactions() == 0

    def test_reconcile_flag(self, two_accounts):
        [txn] = two_accounts.commit_batch(PostingBatch(transfers=(NewTransfer("cash", "bank", Decimal("5"), "x"),)))

        two_accounts.commit_batch(PostingBatch(reconcile_ids=(txn.id,)))

        assert two_accounts.get_transaction(txn.id).is_reconciled is True
        with pytest.raises(ValueError, match="already reconciled"):
            two_accounts.commit_batch(PostingBatch(reconcile_ids=(txn.id,)))

    def test_staff_update(self, two_accounts):
        two_accounts.create_staff("s1", "Dinesh", "Head Chef", Decimal("1200"), Decimal("100"), date(2023, 1, 10))

        two_accounts.commit_batch(
            PostingBatch(staff_updates=(StaffBalanceUpdate("s1", loan_balance=Decimal("250")),))
        )

        staff = two_accounts.get_staff("s1")
        assert staff.loan_balance == Decimal("250")
        assert staff.advance_balance == Decimal("0")


class TestTransactionQueries:
    def test_filters(self, two_accounts):
        two_accounts.create_account("till", "Till", AccountType.ASSET, Decimal("0"))
        posted = two_accounts.commit_batch(
            PostingBatch(
                transfers=(
                    NewTransfer("cash", "bank", Decimal("1"), "a"),
                    NewTransfer("bank", "till", Decimal("1"), "b"),
                    NewTransfer("cash", "till", Decimal("1"), "c", is_reconciled=True),
                )
            )
        )
        a, b, c = (t.id for t in posted)

        assert [t.id for t in two_accounts.list_transactions()] == [c, b, a]
        assert [t.id for t in two_accounts.list_transactions(newest_first=False)] == [a, b, c]
        assert [t.id for t in two_accounts.list_transactions(account_id="bank")] == [b, a]
        assert [t.id for t in two_accounts.list_transactions(to_account_id="till")] == [c, b]
        assert [t.id for t in two_accounts.list_transactions(from_account_id="cash", reconciled=False)] == [a]


class TestShiftRecords:
    def test_open_and_close(self, temp_db):
        log = temp_db.open_daily_log(Decimal("500"), date(2024, 3, 1))
        assert temp_db.get_current_shift_id() == log.id

        closed = temp_db.close_daily_log(
            log_id=log.id,
            total_sales=Decimal("100"),
            card_payments=Decimal("0"),
            credit_bills=Decimal("40"),
            hiking_bar_sales=Decimal("0"),
            foreign_currency=Decimal("0"),
            foreign_currency_note=None,
            expenses_cash=Decimal("0"),
            expected_cash=Decimal("560"),
            actual_cash=Decimal("560"),
            credit_bill_lines=(CreditBillLine("Trek Co", Decimal("40")),),
        )

        assert closed.is_closed is True
        assert closed.variance == Decimal("0")
        assert closed.credit_bill_lines == (CreditBillLine("Trek Co", Decimal("40")),)
        assert temp_db.get_current_shift_id() is None

    def test_cannot_open_twice(self, temp_db):
        temp_db.open_daily_log(Decimal("500"), date(2024, 3, 1))

        with pytest.raises(ValueError, match="still open"):
            temp_db.open_daily_log(Decimal("500"), date(2024, 3, 2))


class TestStaffRecords:
    def test_profile_update_only(self, temp_db):
        temp_db.create_staff("s1", "Dinesh", "Head Chef", Decimal("1200"), Decimal("100"), date(2023, 1, 10))

        temp_db.update_staff("s1", role="Chef")
        assert temp_db.get_staff("s1").role == "Chef"

        with pytest.raises(ValueError, match="loan_balance"):
            temp_db.update_staff("s1", loan_balance=Decimal("0"))

    def test_holidays(self, temp_db):
        temp_db.create_staff("s1", "Dinesh", "Head Chef", Decimal("1200"), Decimal("100"), date(2023, 1, 10))

        holiday = temp_db.create_staff_holiday("s1", date(2024, 3, 8), HolidayType.HALF_DAY)

        assert temp_db.get_staff_holiday("s1", date(2024, 3, 8)) == holiday
        temp_db.delete_staff_holiday(holiday.id)
        assert temp_db.list_staff_holidays() == []


class TestCreditPartners:
    def test_add_and_delete(self, temp_db):
        temp_db.add_credit_partner("Trek Co")
        assert temp_db.list_credit_partners() == ["Trek Co"]

        with pytest.raises(ValueError):
            temp_db.add_credit_partner("Trek Co")

        temp_db.delete_credit_partner("Trek Co")
        assert temp_db.list_credit_partners() == []


class TestDatabasePath:
    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TILLBOOK_DB_PATH", str(tmp_path / "env.db"))

        assert resolve_database_path(str(tmp_path / "cli.db")) == tmp_path / "cli.db"

    def test_environment_fallback(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TILLBOOK_DB_PATH", str(tmp_path / "env.db"))

        assert resolve_database_path() == tmp_path / "env.db"

    def test_default_location(self, monkeypatch):
        monkeypatch.delenv("TILLBOOK_DB_PATH", raising=False)

        assert resolve_database_path() == DEFAULT_DB_PATH

    def test_parent_directory_created(self, tmp_path):
        path = tmp_path / "nested" / "books" / "tillbook.db"

        db = create_sqlite_database(str(path))
        db.connect()
        db.initialize_schema()
        db.disconnect()

        assert path.exists()
