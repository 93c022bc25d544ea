from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.config import settings
from finboard.core.database import get_db
from finboard.core.deps import get_budget_store, get_current_user, get_optional_user
from finboard.models.budget import Budget
from finboard.models.category import Category
from finboard.models.user import User
from finboard.schemas.budget import (
    BudgetCreate,
    BudgetDetailResponse,
    BudgetResponse,
    BudgetToggle,
    BudgetUpdate,
    BudgetWithProgressResponse,
)
from finboard.schemas.transaction import TransactionResponse
from finboard.services.budget_period import today_for
from finboard.services.budget_progress import BudgetProgress
from finboard.services.budget_store import BudgetStore
from finboard.services.budget_tracker import (
    resolve_active_budgets,
    resolve_budget_detail,
    resolve_budgets_with_progress,
)

router = APIRouter(prefix="/budgets", tags=["budgets"])


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _today(user: User | None, as_of: date | None) -> date:
    if as_of is not None:
        return as_of
    return today_for(user.timezone if user else None)


def _to_response(progress: BudgetProgress) -> BudgetWithProgressResponse:
    base = BudgetResponse.model_validate(progress.budget).model_dump()
    return BudgetWithProgressResponse(
        **base,
        spent=progress.spent,
        remaining=progress.remaining,
        percent_used=progress.percent_used,
        is_over_budget=progress.is_over_budget,
        is_near_threshold=progress.is_near_threshold,
    )


async def _check_category(db: AsyncSession, user: User, category_id: int | None) -> None:
    """A budget may only target one of the user's (or a system) expense categories."""
    if category_id is None:
        return
    result = await db.execute(
        select(Category).where(
            Category.id == category_id,
            or_(Category.user_id == user.id, Category.user_id.is_(None)),
        )
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    if category.type != "expense":
        raise HTTPException(status_code=422, detail="Budgets can only track expense categories")


async def _owned_budget(db: AsyncSession, user: User, budget_id: int) -> Budget:
    result = await db.execute(
        select(Budget).where(Budget.id == budget_id, Budget.user_id == user.id)
    )
    budget = result.scalar_one_or_none()
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    return budget


async def _with_progress(store: BudgetStore, user: User, budget: Budget) -> BudgetWithProgressResponse:
    detail = await resolve_budget_detail(
        store, user.id, budget.id, _today(user, None), settings.budget_week_start
    )
    return _to_response(detail.progress)


# ─── GET /budgets/ ────────────────────────────────────────────────────────────

@router.get("/", response_model=list[BudgetWithProgressResponse])
async def list_budgets(
    as_of: date | None = Query(default=None),
    user: User | None = Depends(get_optional_user),
    store: BudgetStore = Depends(get_budget_store),
):
    """All budgets with progress, newest first. Anonymous callers get an empty list."""
    progress = await resolve_budgets_with_progress(
        store, user.id if user else None, _today(user, as_of), settings.budget_week_start
    )
    return [_to_response(p) for p in progress]


@router.get("/active", response_model=list[BudgetWithProgressResponse])
async def list_active_budgets(
    as_of: date | None = Query(default=None),
    user: User | None = Depends(get_optional_user),
    store: BudgetStore = Depends(get_budget_store),
):
    progress = await resolve_active_budgets(
        store, user.id if user else None, _today(user, as_of), settings.budget_week_start
    )
    return [_to_response(p) for p in progress]


@router.get("/{budget_id}", response_model=BudgetDetailResponse)
async def get_budget_detail(
    budget_id: int,
    as_of: date | None = Query(default=None),
    user: User | None = Depends(get_optional_user),
    store: BudgetStore = Depends(get_budget_store),
):
    """Progress plus the transactions and per-day totals behind it."""
    detail = await resolve_budget_detail(
        store, user.id if user else None, budget_id, _today(user, as_of), settings.budget_week_start
    )
    if detail is None:
        raise HTTPException(status_code=404, detail="Budget not found")

    return BudgetDetailResponse(
        **_to_response(detail.progress).model_dump(),
        period_start=detail.period_start,
        period_end=detail.period_end,
        transactions=[TransactionResponse.model_validate(t) for t in detail.transactions],
        daily_spending=detail.daily_spending,
    )


# ─── POST /budgets/ ───────────────────────────────────────────────────────────

@router.post("/", response_model=BudgetWithProgressResponse, status_code=201)
async def create_budget(
    payload: BudgetCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    store: BudgetStore = Depends(get_budget_store),
):
    await _check_category(db, user, payload.category_id)

    budget = Budget(
        user_id=user.id,
        name=payload.name,
        category_id=payload.category_id,
        amount=payload.amount,
        currency=payload.currency,
        period=payload.period.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        rollover=payload.rollover,
        alert_threshold=payload.alert_threshold,
        is_active=True,
    )
    db.add(budget)
    await db.flush()
    await db.refresh(budget, attribute_names=["category", "created_at"])
    return await _with_progress(store, user, budget)


# ─── PATCH /budgets/{id} ──────────────────────────────────────────────────────

@router.patch("/{budget_id}", response_model=BudgetWithProgressResponse)
async def update_budget(
    budget_id: int,
    payload: BudgetUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    store: BudgetStore = Depends(get_budget_store),
):
    budget = await _owned_budget(db, user, budget_id)
    data = payload.model_dump(exclude_unset=True)

    if "category_id" in data:
        await _check_category(db, user, data["category_id"])
    if "period" in data and data["period"] is not None:
        data["period"] = data["period"].value

    start = data.get("start_date") or budget.start_date
    end = data["end_date"] if "end_date" in data else budget.end_date
    if end is not None and end < start:
        raise HTTPException(status_code=422, detail="end_date must be on or after start_date")

    for field, value in data.items():
        if value is None and field not in ("category_id", "end_date"):
            continue
        setattr(budget, field, value)

    await db.flush()
    await db.refresh(budget, attribute_names=["category"])
    return await _with_progress(store, user, budget)


@router.post("/{budget_id}/toggle", response_model=BudgetWithProgressResponse)
async def toggle_budget(
    budget_id: int,
    payload: BudgetToggle,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    store: BudgetStore = Depends(get_budget_store),
):
    budget = await _owned_budget(db, user, budget_id)
    budget.is_active = payload.is_active
    await db.flush()
    return await _with_progress(store, user, budget)


# ─── DELETE /budgets/{id} ─────────────────────────────────────────────────────

@router.delete("/{budget_id}", status_code=204)
async def delete_budget(
    budget_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    budget = await _owned_budget(db, user, budget_id)
    await db.delete(budget)
