import datetime as dt
import enum
from decimal import Decimal

from pydantic import BaseModel, Field


class TransactionType(str, enum.Enum):
    expense = "expense"
    income = "income"


class TransactionCreate(BaseModel):
    type: TransactionType = TransactionType.expense
    amount: Decimal = Field(gt=0, decimal_places=2)  # sign comes from `type`
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    category_id: int | None = None
    description: str | None = Field(default=None, max_length=500)
    merchant: str | None = Field(default=None, max_length=255)
    notes: str | None = None
    date: dt.date


class TransactionUpdate(BaseModel):
    type: TransactionType | None = None
    amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")
    category_id: int | None = None
    description: str | None = Field(default=None, max_length=500)
    merchant: str | None = Field(default=None, max_length=255)
    notes: str | None = None
    date: dt.date | None = None


class TransactionBudgetLink(BaseModel):
    budget_id: int | None  # None unlinks


class TransactionResponse(BaseModel):
    id: int
    category_id: int | None
    budget_id: int | None
    type: str
    amount: Decimal
    currency: str
    description: str | None
    merchant: str | None
    notes: str | None
    date: dt.date
    created_at: dt.datetime

    model_config = {"from_attributes": True}
