"""Ledger store query tests"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from simple_bank.db.store import Store
from simple_bank.errors import ConstraintViolationError, NotFoundError
from simple_bank.schemas import AccountCreate, UserCreate


class TestUsers:
    @pytest.mark.asyncio
    async def test_create_and_get_user(self, store: Store, create_random_user) -> None:
        user = await create_random_user(full_name="Jane Smith")

        fetched = await store.exec_tx(lambda q: q.get_user(user.username))

        assert fetched == user
        assert fetched.full_name == "Jane Smith"
        assert isinstance(fetched.created_at, datetime)

    @pytest.mark.asyncio
    async def test_duplicate_username_is_constraint_violation(self, store: Store, create_random_user) -> None:
        user = await create_random_user()
        dup = UserCreate(
            username=user.username,
            hashed_password="x",
            full_name="Someone Else",
            email="other@example.com",
        )

        with pytest.raises(ConstraintViolationError):
            await store.exec_tx(lambda q: q.create_user(dup))

    @pytest.mark.asyncio
    async def test_missing_user(self, store: Store) -> None:
        with pytest.raises(NotFoundError):
            await store.exec_tx(lambda q: q.get_user("nobody"))


class TestAccounts:
    @pytest.mark.asyncio
    async def test_create_account(self, create_random_user, create_random_account) -> None:
        user = await create_random_user()

        account = await create_random_account(balance=250, currency="EUR", owner=user.username)

        assert account.id > 0
        assert account.owner == user.username
        assert account.balance == 250
        assert account.currency == "EUR"
        assert account.created_at is not None

    @pytest.mark.asyncio
    async def test_get_account(self, store: Store, create_random_account) -> None:
        account = await create_random_account()

        fetched = await store.exec_tx(lambda q: q.get_account(account.id))
        locked = await store.exec_tx(lambda q: q.get_account_for_update(account.id))

        assert fetched == account
        assert locked == account

    @pytest.mark.asyncio
    async def test_get_missing_account(self, store: Store) -> None:
        with pytest.raises(NotFoundError):
            await store.exec_tx(lambda q: q.get_account(999_999))

    @pytest.mark.asyncio
    async def test_unknown_owner_is_constraint_violation(self, store: Store) -> None:
        params = AccountCreate(owner="ghost", currency="USD", balance=0)

        with pytest.raises(ConstraintViolationError):
            await store.exec_tx(lambda q: q.create_account(params))

    @pytest.mark.asyncio
    async def test_one_account_per_owner_and_currency(self, store: Store, create_random_account) -> None:
        account = await create_random_account(currency="CAD")
        params = AccountCreate(owner=account.owner, currency="CAD", balance=0)

        with pytest.raises(ConstraintViolationError):
            await store.exec_tx(lambda q: q.create_account(params))

    def test_unsupported_currency_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AccountCreate(owner="someone", currency="GBP", balance=0)

    def test_balance_must_fit_bigint(self) -> None:
        with pytest.raises(ValidationError):
            AccountCreate(owner="someone", currency="USD", balance=2**63)

    @pytest.mark.asyncio
    async def test_update_account(self, store: Store, create_random_account) -> None:
        account = await create_random_account(balance=10)

        updated = await store.exec_tx(lambda q: q.update_account(account.id, 500))

        assert updated.id == account.id
        assert updated.owner == account.owner
        assert updated.currency == account.currency
        assert updated.balance == 500

    @pytest.mark.asyncio
    async def test_add_account_balance(self, store: Store, create_random_account) -> None:
        account = await create_random_account(balance=100)

        credited = await store.exec_tx(lambda q: q.add_account_balance(account.id, 25))
        debited = await store.exec_tx(lambda q: q.add_account_balance(account.id, -40))

        assert credited.balance == 125
        assert debited.balance == 85

    @pytest.mark.asyncio
    async def test_add_balance_missing_account(self, store: Store) -> None:
        with pytest.raises(NotFoundError):
            await store.exec_tx(lambda q: q.add_account_balance(424242, 10))

    @pytest.mark.asyncio
    async def test_delete_account(self, store: Store, create_random_account) -> None:
        account = await create_random_account()

        await store.exec_tx(lambda q: q.delete_account(account.id))

        with pytest.raises(NotFoundError):
            await store.exec_tx(lambda q: q.get_account(account.id))
        with pytest.raises(NotFoundError):
            await store.exec_tx(lambda q: q.delete_account(account.id))

    @pytest.mark.asyncio
    async def test_list_accounts_by_owner(self, store: Store, create_random_user, create_random_account) -> None:
        user = await create_random_user()
        created = [
            await create_random_account(owner=user.username, currency=currency)
            for currency in ("CAD", "EUR", "USD")
        ]
        await create_random_account()  # someone else's

        first_page = await store.exec_tx(lambda q: q.list_accounts(user.username, limit=2, offset=0))
        second_page = await store.exec_tx(lambda q: q.list_accounts(user.username, limit=2, offset=2))

        assert [a.id for a in first_page + second_page] == [a.id for a in created]
        assert all(a.owner == user.username for a in first_page + second_page)


class TestEntriesAndTransfers:
    @pytest.mark.asyncio
    async def test_create_and_list_entries(self, store: Store, create_random_account) -> None:
        account = await create_random_account()

        debit = await store.exec_tx(lambda q: q.create_entry(account.id, -15))
        credit = await store.exec_tx(lambda q: q.create_entry(account.id, 40))

        assert debit.amount == -15
        assert credit.amount == 40
        assert await store.exec_tx(lambda q: q.get_entry(debit.id)) == debit
        entries = await store.exec_tx(lambda q: q.list_entries(account.id))
        assert [e.id for e in entries] == [debit.id, credit.id]

    @pytest.mark.asyncio
    async def test_entry_for_missing_account(self, store: Store) -> None:
        with pytest.raises(ConstraintViolationError):
            await store.exec_tx(lambda q: q.create_entry(31337, 10))

    @pytest.mark.asyncio
    async def test_create_and_list_transfers(self, store: Store, create_random_account) -> None:
        a = await create_random_account()
        b = await create_random_account()
        c = await create_random_account()

        ab = await store.exec_tx(lambda q: q.create_transfer(a.id, b.id, 10))
        ba = await store.exec_tx(lambda q: q.create_transfer(b.id, a.id, 5))
        await store.exec_tx(lambda q: q.create_transfer(b.id, c.id, 7))

        assert await store.exec_tx(lambda q: q.get_transfer(ab.id)) == ab
        touching_a = await store.exec_tx(lambda q: q.list_transfers(from_account_id=a.id, to_account_id=a.id))
        assert [t.id for t in touching_a] == [ab.id, ba.id]
        everything = await store.exec_tx(lambda q: q.list_transfers())
        assert len(everything) == 3

    @pytest.mark.asyncio
    async def test_non_positive_transfer_amount_rejected(self, store: Store, create_random_account) -> None:
        a = await create_random_account()
        b = await create_random_account()

        with pytest.raises(ConstraintViolationError):
            await store.exec_tx(lambda q: q.create_transfer(a.id, b.id, 0))

    @pytest.mark.asyncio
    async def test_missing_transfer(self, store: Store) -> None:
        with pytest.raises(NotFoundError):
            await store.exec_tx(lambda q: q.get_transfer(1))
