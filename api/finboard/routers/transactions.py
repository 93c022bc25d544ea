from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.database import get_db
from finboard.core.deps import get_current_user
from finboard.models.budget import Budget
from finboard.models.category import Category
from finboard.models.transaction import Transaction
from finboard.models.user import User
from finboard.schemas.transaction import (
    TransactionBudgetLink,
    TransactionCreate,
    TransactionResponse,
    TransactionType,
    TransactionUpdate,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])

# PATCH may clear these with an explicit null; other fields ignore null
_NULLABLE_FIELDS = ("category_id", "description", "merchant", "notes")


async def _owned_transaction(db: AsyncSession, user: User, transaction_id: int) -> Transaction:
    result = await db.execute(
        select(Transaction).where(
            Transaction.id == transaction_id,
            Transaction.user_id == user.id,
        )
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return txn


async def _check_category(db: AsyncSession, user: User, category_id: int | None) -> None:
    if category_id is None:
        return
    result = await db.execute(
        select(Category.id).where(
            Category.id == category_id,
            or_(Category.user_id == user.id, Category.user_id.is_(None)),
        )
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="Category not found")


@router.get("/", response_model=list[TransactionResponse])
async def list_transactions(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    category_id: int | None = Query(default=None),
    type: TransactionType | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Transaction).where(Transaction.user_id == user.id)
    if start is not None:
        query = query.where(Transaction.date >= start)
    if end is not None:
        query = query.where(Transaction.date <= end)
    if category_id is not None:
        query = query.where(Transaction.category_id == category_id)
    if type is not None:
        query = query.where(Transaction.type == type.value)

    result = await db.execute(
        query.order_by(Transaction.date.desc(), Transaction.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()


@router.post("/", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    payload: TransactionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _check_category(db, user, payload.category_id)

    txn = Transaction(
        user_id=user.id,
        category_id=payload.category_id,
        type=payload.type.value,
        amount=payload.amount,
        currency=payload.currency,
        description=payload.description,
        merchant=payload.merchant,
        notes=payload.notes,
        date=payload.date,
    )
    db.add(txn)
    await db.flush()
    await db.refresh(txn)
    return txn


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    payload: TransactionUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    txn = await _owned_transaction(db, user, transaction_id)
    data = payload.model_dump(exclude_unset=True)

    if "category_id" in data:
        await _check_category(db, user, data["category_id"])
    if data.get("type") is not None:
        data["type"] = data["type"].value

    for field, value in data.items():
        if value is None and field not in _NULLABLE_FIELDS:
            continue
        setattr(txn, field, value)

    await db.flush()
    await db.refresh(txn)
    return txn


@router.put("/{transaction_id}/budget", response_model=TransactionResponse)
async def link_transaction_to_budget(
    transaction_id: int,
    payload: TransactionBudgetLink,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Attach a transaction to one of the user's budgets, or detach it with budget_id=null."""
    txn = await _owned_transaction(db, user, transaction_id)

    if payload.budget_id is not None:
        result = await db.execute(
            select(Budget.id).where(
                Budget.id == payload.budget_id,
                Budget.user_id == user.id,
            )
        )
        if result.scalar_one_or_none() is None:
            raise HTTPException(status_code=404, detail="Budget not found")

    txn.budget_id = payload.budget_id
    await db.flush()
    await db.refresh(txn)
    return txn


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    txn = await _owned_transaction(db, user, transaction_id)
    await db.delete(txn)
