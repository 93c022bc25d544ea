from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.database import get_db
from finboard.core.security import ACCESS, decode_token, token_user_id
from finboard.models.user import User
from finboard.services.budget_store import BudgetStore


def _access_token(request: Request) -> str | None:
    """Cookie first (browser sessions), then an Authorization: Bearer header."""
    token = request.cookies.get("access_token")
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    scheme, _, credentials = auth.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the caller, or None when anonymous, the token is bad, or the account is gone."""
    token = _access_token(request)
    if not token:
        return None
    claims = decode_token(token, expected_type=ACCESS)
    if claims is None:
        return None
    user_id = token_user_id(claims)
    if user_id is None:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_budget_store(db: AsyncSession = Depends(get_db)) -> BudgetStore:
    return BudgetStore(db)
