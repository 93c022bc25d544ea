"""
Spend aggregation for budgets.

The SQL is built here once and executed by whichever session the caller
holds: the API's AsyncSession or the Celery worker's sync Session.
"""
from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from sqlalchemy import Select, func, select

from finboard.models.transaction import Transaction
from finboard.services.budget_period import PeriodDates
from finboard.services.category_scope import CategoryScope

EXPENSE = "expense"


def expense_filters(user_id: int, window: PeriodDates, scope: CategoryScope) -> list:
    """WHERE clauses selecting a user's expenses inside an inclusive window and category scope."""
    conditions = [
        Transaction.user_id == user_id,
        Transaction.type == EXPENSE,
        Transaction.date >= window.period_start,
        Transaction.date <= window.period_end,
    ]
    if scope.is_uncategorized:
        conditions.append(Transaction.category_id.is_(None))
    else:
        conditions.append(Transaction.category_id.in_(sorted(scope.category_ids)))
    return conditions


def spend_total_stmt(user_id: int, window: PeriodDates, scope: CategoryScope) -> Select:
    return select(func.coalesce(func.sum(Transaction.amount), 0)).where(
        *expense_filters(user_id, window, scope)
    )


def spend_lines_stmt(user_id: int, window: PeriodDates, scope: CategoryScope) -> Select:
    return (
        select(Transaction)
        .where(*expense_filters(user_id, window, scope))
        .order_by(Transaction.date, Transaction.id)
    )


def to_decimal(value) -> Decimal:
    return Decimal(str(value or 0))


# ─── In-memory helpers (detail view) ─────────────────────────────────────────

def total_amount(transactions: Iterable) -> Decimal:
    return sum((to_decimal(t.amount) for t in transactions), Decimal(0))


def daily_spending(transactions: Iterable) -> dict[date, Decimal]:
    """Sum amounts per calendar day, keyed in date order."""
    buckets: dict[date, Decimal] = defaultdict(Decimal)
    for t in transactions:
        buckets[t.date] += to_decimal(t.amount)
    return dict(sorted(buckets.items()))
