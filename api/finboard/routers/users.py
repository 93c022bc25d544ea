from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.database import get_db
from finboard.core.deps import get_budget_store, get_current_user, get_optional_user
from finboard.models.user import User
from finboard.schemas.user import CurrencyResponse, UserResponse, UserSettingsUpdate
from finboard.services.budget_store import BudgetStore
from finboard.services.budget_tracker import resolve_default_currency

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=UserResponse)
async def update_settings(
    payload: UserSettingsUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, field, value)

    await db.flush()
    await db.refresh(user)
    return user


@router.get("/me/currency", response_model=CurrencyResponse)
async def get_default_currency(
    user: User | None = Depends(get_optional_user),
    store: BudgetStore = Depends(get_budget_store),
):
    """The caller's default currency; USD for anonymous callers."""
    return CurrencyResponse(
        currency=await resolve_default_currency(store, user.id if user else None)
    )
