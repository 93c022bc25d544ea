"""
Budget threshold alerts.

`check_budget_alerts` runs from celery beat (09:00 UTC daily). For every
active user it evaluates all budgets as of the user's local date with the
same engine the API uses, and posts one message listing the budgets that
reached their alert threshold or went over.

Runs on a sync SQLAlchemy session; the SQL comes from the shared statement
builders, so alert numbers match what the dashboard shows.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import Engine, create_engine, select
from sqlalchemy.orm import Session

from finboard.core.config import settings
from finboard.models.user import User
from finboard.services.budget_period import today_for
from finboard.services.budget_progress import BudgetProgress
from finboard.services.budget_store import user_budgets_stmt, visible_categories_stmt
from finboard.services.budget_tracker import compose_all, plan_budgets
from finboard.services.category_scope import CategoryTree
from finboard.services.spend import spend_total_stmt, to_decimal
from finboard.services.webhook import post_alert
from finboard.worker import celery_app

logger = logging.getLogger(__name__)

_engine: Engine | None = None


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(settings.database_url_sync, pool_pre_ping=True)
    return _engine


# ── Helpers ───────────────────────────────────────────────────────────────────

def _fmt_money(value: Decimal, currency: str) -> str:
    return f"{value:,.2f} {currency}"


def evaluate_user_budgets(db: Session, user_id: int, today: date) -> list[BudgetProgress]:
    """Sync twin of resolve_budgets_with_progress for the worker."""
    budgets = db.execute(user_budgets_stmt(user_id)).scalars().all()
    if not budgets:
        return []

    categories = db.execute(visible_categories_stmt(user_id)).scalars().all()
    plans = plan_budgets(
        budgets, CategoryTree.from_categories(categories), today, settings.budget_week_start
    )

    totals: dict = {}
    for plan in plans.values():
        if plan.key not in totals:
            totals[plan.key] = to_decimal(
                db.execute(spend_total_stmt(user_id, plan.window, plan.scope)).scalar()
            )
    return compose_all(budgets, plans, totals)


def alert_lines(progress: list[BudgetProgress]) -> list[str]:
    """One line per budget that is over its limit or at/above its alert threshold."""
    lines = []
    for p in progress:
        if not (p.is_over_budget or p.is_near_threshold):
            continue
        b = p.budget
        marker = "OVER" if p.is_over_budget else "NEAR"
        lines.append(
            f"[{marker}] {b.name}: {p.percent_used}% used "
            f"({_fmt_money(p.spent, b.currency)} of {_fmt_money(Decimal(b.amount), b.currency)})"
        )
    return lines


# ── Celery task ───────────────────────────────────────────────────────────────

@celery_app.task(name="finboard.services.notifications.check_budget_alerts")
def check_budget_alerts():
    """Alert each user whose budgets hit their threshold or went over."""
    logger.info("Checking budget alert thresholds")

    sent = skipped = 0
    with Session(_get_engine()) as db:
        users = db.execute(
            select(User).where(User.is_active == True)  # noqa: E712
        ).scalars().all()

        for user in users:
            progress = evaluate_user_budgets(db, user.id, today_for(user.timezone))
            lines = alert_lines(progress)
            if not lines:
                continue

            msg = f"Budget alert for {user.full_name or user.email}\n" + "\n".join(lines)
            if post_alert(msg, {"user_id": user.id, "count": len(lines)}):
                sent += 1
            else:
                skipped += 1

    logger.info("Budget alerts done: %d sent, %d not delivered", sent, skipped)
    return {"sent": sent, "skipped": skipped}
