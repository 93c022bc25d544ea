"""Read side of the budget engine: every query it needs, over one AsyncSession."""
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.models.budget import Budget
from finboard.models.category import Category
from finboard.models.transaction import Transaction
from finboard.models.user import User
from finboard.services.budget_period import PeriodDates
from finboard.services.category_scope import CategoryScope
from finboard.services.spend import spend_lines_stmt, spend_total_stmt, to_decimal


def visible_categories_stmt(user_id: int):
    """The user's own categories plus the system defaults."""
    return select(Category).where(
        or_(Category.user_id == user_id, Category.user_id.is_(None))
    )


def direct_subcategories_stmt(user_id: int, category_id: int):
    """Ids of the direct children of a category, among those the user can see."""
    return (
        visible_categories_stmt(user_id)
        .where(Category.parent_id == category_id)
        .with_only_columns(Category.id)
    )


def user_budgets_stmt(user_id: int):
    return (
        select(Budget)
        .where(Budget.user_id == user_id)
        .order_by(Budget.created_at.desc(), Budget.id.desc())
    )


class BudgetStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_budgets(self, user_id: int) -> Sequence[Budget]:
        """All of a user's budgets, newest first."""
        result = await self.session.execute(user_budgets_stmt(user_id))
        return result.scalars().all()

    async def get_budget(self, user_id: int, budget_id: int) -> Budget | None:
        """A budget only if it belongs to the user; foreign budgets look absent."""
        result = await self.session.execute(
            select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_categories(self, user_id: int) -> Sequence[Category]:
        result = await self.session.execute(visible_categories_stmt(user_id))
        return result.scalars().all()

    async def list_direct_subcategories(self, user_id: int, category_id: int) -> list[int]:
        result = await self.session.execute(direct_subcategories_stmt(user_id, category_id))
        return list(result.scalars().all())

    async def sum_expenses(self, user_id: int, scope: CategoryScope, window: PeriodDates) -> Decimal:
        result = await self.session.execute(spend_total_stmt(user_id, window, scope))
        return to_decimal(result.scalar())

    async def list_expenses(
        self, user_id: int, scope: CategoryScope, window: PeriodDates
    ) -> Sequence[Transaction]:
        result = await self.session.execute(spend_lines_stmt(user_id, window, scope))
        return result.scalars().all()

    async def get_default_currency(self, user_id: int) -> str | None:
        result = await self.session.execute(
            select(User.default_currency).where(User.id == user_id)
        )
        return result.scalar_one_or_none()
