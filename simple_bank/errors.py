"""
Error kinds raised by the ledger store and the transfer engine.

Driver errors are translated once, in ``translate_error``; everything above the
store only adds context with ``BankError.during``.
"""

from typing import Optional

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    NoResultFound,
    OperationalError,
    SQLAlchemyError,
)


class BankError(Exception):
    """Base class for every error surfaced by simple-bank."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.step = step

    def during(self, step: str) -> "BankError":
        """
        Return a copy of this error with the failing step prepended.
        """
        err = _copy_error(self)
        err.message = f"{step}: {self.message}"
        err.args = (err.message,)
        err.step = step
        return err


class NotFoundError(BankError):
    pass


class ConstraintViolationError(BankError):
    """A write was rejected by a uniqueness, foreign-key, check or not-null rule."""

    def __init__(self, message: str, code: Optional[str] = None, step: Optional[str] = None):
        super().__init__(message, step=step)
        self.code = code


class InsufficientFundsError(ConstraintViolationError):
    def __init__(self, account_id: int, balance: int, step: Optional[str] = None):
        super().__init__(
            f"account {account_id} has insufficient funds (balance would be {balance})",
            code="insufficient_funds",
            step=step,
        )
        self.account_id = account_id
        self.balance = balance


class TransactionError(BankError):
    """Commit failed, or a rollback failed on top of the original error."""

    def __init__(
        self,
        message: str,
        error: Optional[BaseException] = None,
        rollback_error: Optional[BaseException] = None,
        step: Optional[str] = None,
    ):
        super().__init__(message, step=step)
        self.error = error
        self.rollback_error = rollback_error


class StoreUnavailableError(BankError):
    pass


def _copy_error(err: BankError) -> BankError:
    clone = err.__class__.__new__(err.__class__)
    clone.__dict__.update(err.__dict__)
    return clone


# SQLSTATE class 23 codes (PostgreSQL) and SQLite extended result names
_CONSTRAINT_CODES = {
    "23502": "not_null_violation",
    "23503": "foreign_key_violation",
    "23505": "unique_violation",
    "23514": "check_violation",
    "SQLITE_CONSTRAINT_NOTNULL": "not_null_violation",
    "SQLITE_CONSTRAINT_FOREIGNKEY": "foreign_key_violation",
    "SQLITE_CONSTRAINT_UNIQUE": "unique_violation",
    "SQLITE_CONSTRAINT_PRIMARYKEY": "unique_violation",
    "SQLITE_CONSTRAINT_CHECK": "check_violation",
}


def constraint_code(exc: IntegrityError) -> Optional[str]:
    """
    Resolve a PostgreSQL-style constraint name from the driver error.
    """
    orig = exc.orig
    raw = (
        getattr(orig, "sqlstate", None)
        or getattr(orig, "pgcode", None)
        or getattr(orig, "sqlite_errorname", None)
    )
    if raw is None:
        return None
    return _CONSTRAINT_CODES.get(raw, raw)


def translate_error(exc: SQLAlchemyError) -> BankError:
    """
    Map a SQLAlchemy error onto one of the simple-bank error kinds.
    """
    if isinstance(exc, NoResultFound):
        return NotFoundError(str(exc))
    if isinstance(exc, IntegrityError):
        return ConstraintViolationError(str(exc.orig), code=constraint_code(exc))
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError)):
        return StoreUnavailableError(str(exc))
    if getattr(exc, "connection_invalidated", False):
        return StoreUnavailableError(str(exc))
    return BankError(str(exc))
