"""
Budget tracking orchestration.

Per budget: resolve the period window and the category scope, aggregate the
matching spend, then compose progress. Budgets are independent of each other.
Active budgets sharing an identical (window, scope) pair share one aggregate
query; inactive budgets never touch the store.
"""
import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from finboard.services.budget_period import PeriodDates, compute_period
from finboard.services.budget_progress import BudgetProgress, compose_progress
from finboard.services.category_scope import CategoryScope, CategoryTree, resolve_scope
from finboard.services.spend import daily_spending, total_amount

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class BudgetPlan:
    budget: object
    window: PeriodDates
    scope: CategoryScope

    @property
    def key(self) -> tuple[PeriodDates, CategoryScope]:
        return self.window, self.scope


@dataclass
class BudgetDetail:
    progress: BudgetProgress
    period_start: date
    period_end: date
    transactions: list = field(default_factory=list)
    daily_spending: dict[date, Decimal] = field(default_factory=dict)


def plan_budget(budget, tree: CategoryTree, today: date, week_start: int = calendar.SUNDAY) -> BudgetPlan:
    window = compute_period(budget.period, budget.start_date, budget.end_date, today, week_start)
    return BudgetPlan(budget, window, tree.scope_for(budget.category_id))


def plan_budgets(
    budgets, tree: CategoryTree, today: date, week_start: int = calendar.SUNDAY
) -> dict[object, BudgetPlan]:
    """Plans for the active budgets only, keyed by budget id."""
    return {
        b.id: plan_budget(b, tree, today, week_start)
        for b in budgets
        if b.is_active
    }


def compose_all(budgets, plans: dict, totals: dict) -> list[BudgetProgress]:
    results = []
    for b in budgets:
        plan = plans.get(b.id)
        spent = totals.get(plan.key, Decimal(0)) if plan else Decimal(0)
        results.append(compose_progress(b, spent))
    return results


# ─── Store-backed operations ─────────────────────────────────────────────────

async def resolve_budgets_with_progress(
    store, user_id: int | None, today: date, week_start: int = calendar.SUNDAY
) -> list[BudgetProgress]:
    if user_id is None:
        return []

    budgets = await store.list_budgets(user_id)
    if not budgets:
        return []

    tree = CategoryTree.from_categories(await store.list_categories(user_id))
    plans = plan_budgets(budgets, tree, today, week_start)

    totals: dict = {}
    for plan in plans.values():
        if plan.key not in totals:
            totals[plan.key] = await store.sum_expenses(user_id, plan.scope, plan.window)

    logger.debug(
        "Resolved %d budgets for user %s with %d aggregate queries",
        len(budgets), user_id, len(totals),
    )
    return compose_all(budgets, plans, totals)


async def resolve_active_budgets(
    store, user_id: int | None, today: date, week_start: int = calendar.SUNDAY
) -> list[BudgetProgress]:
    progress = await resolve_budgets_with_progress(store, user_id, today, week_start)
    return [p for p in progress if p.budget.is_active]


async def resolve_budget_detail(
    store, user_id: int | None, budget_id: int, today: date, week_start: int = calendar.SUNDAY
) -> BudgetDetail | None:
    if user_id is None:
        return None

    budget = await store.get_budget(user_id, budget_id)
    if budget is None:
        return None

    # Period dates are reported for inactive budgets too
    window = compute_period(budget.period, budget.start_date, budget.end_date, today, week_start)

    if not budget.is_active:
        return BudgetDetail(
            progress=compose_progress(budget),
            period_start=window.period_start,
            period_end=window.period_end,
        )

    if budget.category_id is None:
        scope = resolve_scope(None)
    else:
        scope = resolve_scope(
            budget.category_id,
            await store.list_direct_subcategories(user_id, budget.category_id),
        )

    transactions = list(await store.list_expenses(user_id, scope, window))
    return BudgetDetail(
        progress=compose_progress(budget, total_amount(transactions)),
        period_start=window.period_start,
        period_end=window.period_end,
        transactions=transactions,
        daily_spending=daily_spending(transactions),
    )


async def resolve_default_currency(store, user_id: int | None) -> str:
    if user_id is None:
        return DEFAULT_CURRENCY
    return await store.get_default_currency(user_id) or DEFAULT_CURRENCY
