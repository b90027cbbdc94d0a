from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from simple_bank.currency import SUPPORTED_CURRENCIES, is_currency_supported

# BIGINT columns
MAX_AMOUNT = 2**63 - 1


class UserOut(BaseModel):
    username: str
    full_name: str
    email: str
    password_changed_at: datetime
    created_at: datetime


class AccountOut(BaseModel):
    id: int
    owner: str
    balance: int
    currency: str
    created_at: datetime


class EntryOut(BaseModel):
    id: int
    account_id: int
    # positive for credit, negative for debit
    amount: int
    created_at: datetime


class TransferOut(BaseModel):
    id: int
    from_account_id: int
    to_account_id: int
    amount: int
    created_at: datetime


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1)
    hashed_password: str
    full_name: str
    email: str


class AccountCreate(BaseModel):
    owner: str
    currency: str
    balance: int = Field(0, ge=-MAX_AMOUNT, le=MAX_AMOUNT)

    @field_validator("currency")
    @classmethod
    def _supported_currency(cls, value: str) -> str:
        if not is_currency_supported(value):
            raise ValueError(f"currency must be one of {sorted(SUPPORTED_CURRENCIES)}")
        return value


class TransferIn(BaseModel):
    from_account_id: int = Field(..., gt=0)
    to_account_id: int = Field(..., gt=0)
    amount: int = Field(..., gt=0, le=MAX_AMOUNT)

    @model_validator(mode="after")
    def _distinct_accounts(self) -> "TransferIn":
        if self.from_account_id == self.to_account_id:
            raise ValueError("from_account_id and to_account_id must differ")
        return self


class TransferResult(BaseModel):
    """
    Everything a single transfer produced: the transfer record, both entries
    and both accounts as they stand after the balance updates.
    """

    transfer: TransferOut
    from_account: AccountOut
    to_account: AccountOut
    from_entry: EntryOut
    to_entry: EntryOut
