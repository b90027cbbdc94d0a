from sqlalchemy import (
    TIMESTAMP,
    BigInteger,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
import sqlalchemy as sa

from simple_bank.db.session import Base

# BIGSERIAL on postgres; sqlite only autoincrements INTEGER primary keys
BigId = BigInteger().with_variant(Integer, "sqlite")

EPOCH = sa.text("'0001-01-01 00:00:00+00:00'")


class User(Base):
    __tablename__ = "users"

    username = Column(String(64), primary_key=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_changed_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=EPOCH)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now())


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("owner", "currency", name="owner_currency_key"),)

    id = Column(BigId, primary_key=True, autoincrement=True)
    owner = Column(String(64), ForeignKey("users.username"), nullable=False, index=True)
    balance = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now())


class Entry(Base):
    __tablename__ = "entries"

    id = Column(BigId, primary_key=True, autoincrement=True)
    account_id = Column(BigInteger, ForeignKey("accounts.id"), nullable=False, index=True)
    # can be negative or positive
    amount = Column(BigInteger, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now())


class Transfer(Base):
    __tablename__ = "transfers"
    __table_args__ = (CheckConstraint("amount > 0", name="transfers_amount_positive"),)

    id = Column(BigId, primary_key=True, autoincrement=True)
    from_account_id = Column(BigInteger, ForeignKey("accounts.id"), nullable=False, index=True)
    to_account_id = Column(BigInteger, ForeignKey("accounts.id"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now())
