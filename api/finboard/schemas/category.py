from datetime import datetime

from pydantic import BaseModel, Field

from finboard.schemas.transaction import TransactionType


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=101)
    type: TransactionType = TransactionType.expense
    parent_id: int | None = None
    icon: str | None = None
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=101)
    parent_id: int | None = None
    icon: str | None = None
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    is_active: bool | None = None
    sort_order: int | None = None


class CategoryResponse(BaseModel):
    id: int
    user_id: int | None
    parent_id: int | None
    name: str
    type: str
    icon: str | None
    color: str | None
    is_system: bool
    is_active: bool
    sort_order: int
    created_at: datetime

    model_config = {"from_attributes": True}


class CategoryTreeResponse(CategoryResponse):
    subcategories: list[CategoryResponse] = []
