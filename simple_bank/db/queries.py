"""
Ledger store queries bound to one session.

A ``Queries`` instance never commits or rolls back; the transaction boundary
belongs to whoever created the session (see ``Store.exec_tx``). Every method
returns pydantic read models and raises ``simple_bank.errors`` kinds only.
"""

from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from simple_bank.db.models import Account, Entry, Transfer, User
from simple_bank.errors import NotFoundError, translate_error
from simple_bank.schemas import (
    AccountCreate,
    AccountOut,
    EntryOut,
    TransferOut,
    UserCreate,
    UserOut,
)

_USER_COLUMNS = tuple(User.__table__.c)
_ACCOUNT_COLUMNS = tuple(Account.__table__.c)
_ENTRY_COLUMNS = tuple(Entry.__table__.c)
_TRANSFER_COLUMNS = tuple(Transfer.__table__.c)


@contextmanager
def _store_errors():
    try:
        yield
    except SQLAlchemyError as exc:
        raise translate_error(exc) from exc


class Queries:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _one(self, stmt, what: str):
        with _store_errors():
            res = await self.session.execute(stmt)
            row = res.mappings().first()
        if row is None:
            raise NotFoundError(f"{what} not found")
        return dict(row)

    async def _all(self, stmt) -> list:
        with _store_errors():
            res = await self.session.execute(stmt)
            return [dict(r) for r in res.mappings()]

    # -- users ---------------------------------------------------------------

    async def create_user(self, params: UserCreate) -> UserOut:
        stmt = insert(User).values(**params.model_dump()).returning(*_USER_COLUMNS)
        row = await self._one(stmt, "inserted user")
        return UserOut.model_validate(row)

    async def get_user(self, username: str) -> UserOut:
        stmt = select(*_USER_COLUMNS).where(User.username == username)
        row = await self._one(stmt, f"user {username!r}")
        return UserOut.model_validate(row)

    # -- accounts ------------------------------------------------------------

    async def create_account(self, params: AccountCreate) -> AccountOut:
        stmt = insert(Account).values(**params.model_dump()).returning(*_ACCOUNT_COLUMNS)
        row = await self._one(stmt, "inserted account")
        return AccountOut.model_validate(row)

    async def get_account(self, account_id: int) -> AccountOut:
        stmt = select(*_ACCOUNT_COLUMNS).where(Account.id == account_id)
        row = await self._one(stmt, f"account {account_id}")
        return AccountOut.model_validate(row)

    async def get_account_for_update(self, account_id: int) -> AccountOut:
        """
        Read an account and hold its row lock until the transaction ends.
        """
        stmt = select(*_ACCOUNT_COLUMNS).where(Account.id == account_id).with_for_update()
        row = await self._one(stmt, f"account {account_id}")
        return AccountOut.model_validate(row)

    async def list_accounts(self, owner: str, limit: int = 10, offset: int = 0) -> List[AccountOut]:
        stmt = (
            select(*_ACCOUNT_COLUMNS)
            .where(Account.owner == owner)
            .order_by(Account.id)
            .limit(limit)
            .offset(offset)
        )
        return [AccountOut.model_validate(r) for r in await self._all(stmt)]

    async def update_account(self, account_id: int, balance: int) -> AccountOut:
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(balance=balance)
            .returning(*_ACCOUNT_COLUMNS)
        )
        row = await self._one(stmt, f"account {account_id}")
        return AccountOut.model_validate(row)

    async def add_account_balance(self, account_id: int, amount: int) -> AccountOut:
        """
        Apply a signed delta in a single UPDATE; the row lock is taken by the
        UPDATE itself and held until the enclosing transaction ends.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(balance=Account.balance + amount)
            .returning(*_ACCOUNT_COLUMNS)
        )
        row = await self._one(stmt, f"account {account_id}")
        return AccountOut.model_validate(row)

    async def delete_account(self, account_id: int) -> None:
        stmt = delete(Account).where(Account.id == account_id).returning(Account.id)
        await self._one(stmt, f"account {account_id}")

    # -- entries -------------------------------------------------------------

    async def create_entry(self, account_id: int, amount: int) -> EntryOut:
        stmt = (
            insert(Entry)
            .values(account_id=account_id, amount=amount)
            .returning(*_ENTRY_COLUMNS)
        )
        row = await self._one(stmt, "inserted entry")
        return EntryOut.model_validate(row)

    async def get_entry(self, entry_id: int) -> EntryOut:
        stmt = select(*_ENTRY_COLUMNS).where(Entry.id == entry_id)
        row = await self._one(stmt, f"entry {entry_id}")
        return EntryOut.model_validate(row)

    async def list_entries(self, account_id: int, limit: int = 10, offset: int = 0) -> List[EntryOut]:
        stmt = (
            select(*_ENTRY_COLUMNS)
            .where(Entry.account_id == account_id)
            .order_by(Entry.id)
            .limit(limit)
            .offset(offset)
        )
        return [EntryOut.model_validate(r) for r in await self._all(stmt)]

    # -- transfers -----------------------------------------------------------

    async def create_transfer(self, from_account_id: int, to_account_id: int, amount: int) -> TransferOut:
        stmt = (
            insert(Transfer)
            .values(from_account_id=from_account_id, to_account_id=to_account_id, amount=amount)
            .returning(*_TRANSFER_COLUMNS)
        )
        row = await self._one(stmt, "inserted transfer")
        return TransferOut.model_validate(row)

    async def get_transfer(self, transfer_id: int) -> TransferOut:
        stmt = select(*_TRANSFER_COLUMNS).where(Transfer.id == transfer_id)
        row = await self._one(stmt, f"transfer {transfer_id}")
        return TransferOut.model_validate(row)

    async def list_transfers(
        self,
        from_account_id: Optional[int] = None,
        to_account_id: Optional[int] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[TransferOut]:
        """
        Transfers where either side matches; with no filter, all transfers.
        """
        stmt = select(*_TRANSFER_COLUMNS)
        clauses = []
        if from_account_id is not None:
            clauses.append(Transfer.from_account_id == from_account_id)
        if to_account_id is not None:
            clauses.append(Transfer.to_account_id == to_account_id)
        if clauses:
            stmt = stmt.where(or_(*clauses))
        stmt = stmt.order_by(Transfer.id).limit(limit).offset(offset)
        return [TransferOut.model_validate(r) for r in await self._all(stmt)]
