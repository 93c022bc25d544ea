"""Tests for the daily budget alert scan, on SQLite with the webhook stubbed."""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from finboard.models.budget import Budget
from finboard.models.category import Category
from finboard.models.transaction import Transaction
from finboard.models.user import User
from finboard.services import notifications
from finboard.services.budget_period import today_for


@pytest.fixture
def today():
    return today_for("UTC")


@pytest.fixture
def household(db, today):
    db.add_all([
        User(id=1, email="ana@example.com", hashed_password="x", full_name="Ana"),
        User(id=2, email="ben@example.com", hashed_password="x", is_active=False),
        Category(id=1, user_id=1, name="Groceries"),
        Category(id=2, user_id=1, parent_id=1, name="Snacks"),
        Category(id=3, user_id=1, name="Fun"),
    ])
    db.flush()
    start = date(today.year, 1, 1)
    db.add_all([
        Budget(id=1, user_id=1, category_id=1, name="Food", amount=Decimal("100"), start_date=start),
        Budget(id=2, user_id=1, category_id=3, name="Fun", amount=Decimal("100"), start_date=start),
        Budget(id=3, user_id=1, category_id=None, name="Misc", amount=Decimal("50"), start_date=start),
        Budget(id=4, user_id=1, category_id=3, name="Paused", amount=Decimal("10"), start_date=start, is_active=False),
        Budget(id=5, user_id=2, category_id=None, name="Theirs", amount=Decimal("1"), start_date=start),
    ])
    db.add_all([
        Transaction(id=1, user_id=1, category_id=2, amount=Decimal("85.00"), date=today),
        Transaction(id=2, user_id=1, category_id=3, amount=Decimal("10.00"), date=today),
        Transaction(id=3, user_id=1, category_id=None, amount=Decimal("60.00"), date=today),
        Transaction(id=4, user_id=2, category_id=None, amount=Decimal("5.00"), date=today),
    ])
    db.commit()
    return db


class TestEvaluate:
    def test_progress_per_budget(self, household, today):
        progress = notifications.evaluate_user_budgets(household, 1, today)
        by_name = {p.budget.name: p for p in progress}
        assert by_name["Food"].spent == Decimal("85.00")
        assert by_name["Fun"].spent == Decimal("10.00")
        assert by_name["Misc"].spent == Decimal("60.00")
        assert by_name["Paused"].spent == Decimal("0")

    def test_user_without_budgets(self, db, today):
        assert notifications.evaluate_user_budgets(db, 99, today) == []


class TestAlertLines:
    def test_only_flagged_budgets(self, household, today):
        lines = notifications.alert_lines(notifications.evaluate_user_budgets(household, 1, today))
        assert len(lines) == 2
        [near] = [line for line in lines if line.startswith("[NEAR]")]
        [over] = [line for line in lines if line.startswith("[OVER]")]
        assert near.startswith("[NEAR] Food: 85.00% used")
        assert over == "[OVER] Misc: 100.00% used (60.00 USD of 50.00 USD)"


class TestCheckBudgetAlerts:
    def test_posts_for_active_users_with_flags(self, household, sqlite_engine, monkeypatch):
        posted = []
        monkeypatch.setattr(notifications, "_get_engine", lambda: sqlite_engine)
        monkeypatch.setattr(
            notifications, "post_alert", lambda text, payload=None: posted.append((text, payload)) or True
        )

        result = notifications.check_budget_alerts()

        assert result == {"sent": 1, "skipped": 0}
        [(text, payload)] = posted
        assert text.startswith("Budget alert for Ana")
        assert payload == {"user_id": 1, "count": 2}

    def test_undelivered_alerts_counted(self, household, sqlite_engine, monkeypatch):
        monkeypatch.setattr(notifications, "_get_engine", lambda: sqlite_engine)
        monkeypatch.setattr(notifications, "post_alert", lambda text, payload=None: False)
        assert notifications.check_budget_alerts() == {"sent": 0, "skipped": 1}
