"""
simple-bank: ledger store and atomic money-transfer engine.
"""

from simple_bank.db.store import Store, create_store
from simple_bank.errors import (
    BankError,
    ConstraintViolationError,
    InsufficientFundsError,
    NotFoundError,
    StoreUnavailableError,
    TransactionError,
)
from simple_bank.schemas import TransferIn, TransferResult

__all__ = [
    "BankError",
    "ConstraintViolationError",
    "InsufficientFundsError",
    "NotFoundError",
    "Store",
    "StoreUnavailableError",
    "TransactionError",
    "TransferIn",
    "TransferResult",
    "create_store",
]
