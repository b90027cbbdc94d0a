"""
pytest fixtures shared by the simple-bank test suite.

Every test gets its own file-backed SQLite database (aiosqlite, WAL journal)
so concurrent transactions use separate connections.
"""

import random
from uuid import uuid4

import pytest
import pytest_asyncio

from simple_bank.currency import SUPPORTED_CURRENCIES
from simple_bank.db import models  # noqa: F401  (registers tables on Base.metadata)
from simple_bank.db.session import Base, create_engine, create_session_factory
from simple_bank.db.store import Store
from simple_bank.schemas import AccountCreate, AccountOut, UserCreate, UserOut


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Temporary SQLite database with the schema created"""
    db_path = tmp_path / "simple_bank.db"
    engine = create_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=False,
        connect_args={"timeout": 30},
    )
    async with engine.connect() as conn:
        await conn.exec_driver_sql("PRAGMA journal_mode=WAL")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def store(engine) -> Store:
    return Store(create_session_factory(engine))


def random_owner() -> str:
    return f"owner_{uuid4().hex[:8]}"


def random_amount() -> int:
    return random.randint(0, 1000)


def random_currency() -> str:
    return random.choice(sorted(SUPPORTED_CURRENCIES))


@pytest.fixture
def create_random_user(store: Store):
    async def _create(**overrides) -> UserOut:
        username = overrides.pop("username", random_owner())
        params = UserCreate(
            username=username,
            hashed_password=overrides.pop("hashed_password", "not-a-real-hash"),
            full_name=overrides.pop("full_name", username.title()),
            email=overrides.pop("email", f"{username}@example.com"),
        )
        return await store.exec_tx(lambda q: q.create_user(params))

    return _create


@pytest.fixture
def create_random_account(store: Store, create_random_user):
    async def _create(balance=None, currency=None, owner=None) -> AccountOut:
        if owner is None:
            owner = (await create_random_user()).username
        params = AccountCreate(
            owner=owner,
            currency=currency or random_currency(),
            balance=random_amount() if balance is None else balance,
        )
        return await store.exec_tx(lambda q: q.create_account(params))

    return _create
