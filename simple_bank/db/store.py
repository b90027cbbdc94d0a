"""
Transactional executor and money-transfer engine.

``Store.exec_tx`` runs a unit of work inside one database transaction;
``Store.transfer_tx`` is the transfer engine built on top of it.
"""

from typing import Awaitable, Callable, Optional, Tuple, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from simple_bank.db.queries import Queries
from simple_bank.db.session import create_engine, create_session_factory
from simple_bank.errors import BankError, InsufficientFundsError, TransactionError
from simple_bank.logging_config import get_logger
from simple_bank.schemas import AccountOut, TransferIn, TransferResult

logger = get_logger("simple_bank.db.store")

T = TypeVar("T")


async def _step(name: str, awaitable: Awaitable[T]) -> T:
    try:
        return await awaitable
    except BankError as err:
        raise err.during(name) from err


class Store:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def exec_tx(self, fn: Callable[[Queries], Awaitable[T]]) -> T:
        """
        Run ``fn`` inside a single transaction.

        Commits when ``fn`` returns, rolls back on any exception (cancellation
        included) and re-raises it. A failed rollback is reported together with
        the original error as one ``TransactionError``; cancellation and other
        non-``Exception`` interrupts are always re-raised unchanged.
        """
        async with self.session_factory() as session:
            await session.begin()
            try:
                result = await fn(Queries(session))
            except BaseException as exc:
                logger.warning("Rolling back transaction: %r", exc)
                try:
                    await session.rollback()
                except Exception as rb_exc:
                    logger.exception("Rollback failed")
                    if not isinstance(exc, Exception):
                        raise exc
                    raise TransactionError(
                        f"tx err: {exc}, rb err: {rb_exc}",
                        error=exc,
                        rollback_error=rb_exc,
                    ) from exc
                raise

            try:
                await session.commit()
            except SQLAlchemyError as exc:
                logger.exception("Commit failed")
                raise TransactionError(f"commit transaction: {exc}", error=exc) from exc
            return result

    async def transfer_tx(self, params: TransferIn) -> TransferResult:
        """
        Move ``params.amount`` from one account to another as one atomic unit.

        Creates the transfer record and both entries, then applies the balance
        deltas. Balance rows are always updated lower id first so that two
        transfers over the same pair of accounts lock them in the same order,
        whichever direction they go.
        """
        from_id, to_id, amount = params.from_account_id, params.to_account_id, params.amount

        async def _unit(q: Queries) -> TransferResult:
            transfer = await _step("create transfer", q.create_transfer(from_id, to_id, amount))
            from_entry = await _step("create from entry", q.create_entry(from_id, -amount))
            to_entry = await _step("create to entry", q.create_entry(to_id, amount))

            if from_id < to_id:
                from_account, to_account = await _add_money(q, from_id, -amount, to_id, amount)
            else:
                to_account, from_account = await _add_money(q, to_id, amount, from_id, -amount)

            if from_account.balance < 0:
                raise InsufficientFundsError(from_id, from_account.balance).during("debit from account")

            return TransferResult(
                transfer=transfer,
                from_account=from_account,
                to_account=to_account,
                from_entry=from_entry,
                to_entry=to_entry,
            )

        result = await self.exec_tx(_unit)
        logger.info(
            "Transfer success id=%s from=%s to=%s amount=%s",
            result.transfer.id,
            from_id,
            to_id,
            amount,
        )
        return result


async def _add_money(
    q: Queries,
    account_id1: int,
    amount1: int,
    account_id2: int,
    amount2: int,
) -> Tuple[AccountOut, AccountOut]:
    account1 = await _step(f"update account {account_id1} balance", q.add_account_balance(account_id1, amount1))
    account2 = await _step(f"update account {account_id2} balance", q.add_account_balance(account_id2, amount2))
    return account1, account2


def create_store(url: Optional[str] = None, engine: Optional[AsyncEngine] = None) -> Store:
    """
    Build a ``Store`` from an engine, an explicit url or DATABASE_URL.
    """
    engine = engine or create_engine(url)
    return Store(create_session_factory(engine))
