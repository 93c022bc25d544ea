from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from finboard.services.budget_period import BudgetPeriod
from finboard.schemas.transaction import TransactionResponse


class BudgetCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category_id: int | None = None  # None → tracks uncategorized spending
    amount: Decimal = Field(gt=0, decimal_places=2)
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    period: BudgetPeriod = BudgetPeriod.monthly
    start_date: date
    end_date: date | None = None
    rollover: bool = False
    alert_threshold: int = Field(default=80, ge=0, le=100)

    @model_validator(mode="after")
    def validate_range(self) -> "BudgetCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class BudgetUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    category_id: int | None = None
    amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")
    period: BudgetPeriod | None = None
    start_date: date | None = None
    end_date: date | None = None
    rollover: bool | None = None
    alert_threshold: int | None = Field(default=None, ge=0, le=100)


class BudgetToggle(BaseModel):
    is_active: bool


class CategoryInBudget(BaseModel):
    id: int
    name: str
    icon: str | None
    color: str | None
    type: str

    model_config = {"from_attributes": True}


class BudgetResponse(BaseModel):
    id: int
    user_id: int
    name: str
    category_id: int | None
    category: CategoryInBudget | None = None
    amount: Decimal
    currency: str
    period: str
    start_date: date
    end_date: date | None
    is_active: bool
    rollover: bool
    alert_threshold: int
    created_at: datetime

    model_config = {"from_attributes": True}


class BudgetWithProgressResponse(BudgetResponse):
    spent: Decimal
    remaining: Decimal        # never negative
    # Clamped to 0-100 and rounded to cents for display. is_near_threshold is
    # decided on the unrounded value, so 79.996% shows as 80.00 without alerting.
    percent_used: Decimal
    is_over_budget: bool      # raw spent > amount
    is_near_threshold: bool


class BudgetDetailResponse(BudgetWithProgressResponse):
    period_start: date
    period_end: date
    transactions: list[TransactionResponse]
    daily_spending: dict[date, Decimal]
