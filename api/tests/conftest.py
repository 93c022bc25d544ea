"""
Shared fixtures. Settings are read at import time, so the environment is
pinned here before anything from finboard is imported.
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("API_SECRET_KEY", "test-secret-key-that-is-long-enough-0123456789")
os.environ.setdefault("RATELIMIT_ENABLED", "false")
os.environ.setdefault("ALERT_WEBHOOK_URL", "")

from datetime import date, datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402


class FakeStore:
    """In-memory stand-in for BudgetStore; records every aggregate request."""

    def __init__(self, budgets=(), categories=(), transactions=(), currencies=None):
        self.budgets = list(budgets)
        self.categories = list(categories)
        self.transactions = list(transactions)
        self.currencies = currencies or {}
        self.sum_calls = []

    def _expenses(self, user_id, scope, window):
        return [
            t for t in self.transactions
            if t.user_id == user_id
            and t.type == "expense"
            and scope.matches(t.category_id)
            and t.date in window
        ]

    async def list_budgets(self, user_id):
        return [b for b in self.budgets if b.user_id == user_id]

    async def get_budget(self, user_id, budget_id):
        for b in self.budgets:
            if b.id == budget_id and b.user_id == user_id:
                return b
        return None

    async def list_categories(self, user_id):
        return [c for c in self.categories if c.user_id in (user_id, None)]

    async def list_direct_subcategories(self, user_id, category_id):
        return [
            c.id for c in self.categories
            if c.parent_id == category_id and c.user_id in (user_id, None)
        ]

    async def sum_expenses(self, user_id, scope, window):
        self.sum_calls.append((scope, window))
        return sum((t.amount for t in self._expenses(user_id, scope, window)), Decimal(0))

    async def list_expenses(self, user_id, scope, window):
        return sorted(self._expenses(user_id, scope, window), key=lambda t: (t.date, t.id))

    async def get_default_currency(self, user_id):
        return self.currencies.get(user_id)


@pytest.fixture
def make_budget():
    counter = iter(range(1, 1000))

    def _make(**overrides):
        values = dict(
            id=next(counter),
            user_id=1,
            name="Groceries",
            category_id=1,
            category=None,
            amount=Decimal("500.00"),
            currency="USD",
            period="monthly",
            start_date=date(2024, 1, 1),
            end_date=None,
            is_active=True,
            rollover=False,
            alert_threshold=80,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        values.update(overrides)
        return SimpleNamespace(**values)

    return _make


@pytest.fixture
def make_txn():
    counter = iter(range(1, 1000))

    def _make(day, amount, category_id=None, **overrides):
        values = dict(
            id=next(counter),
            user_id=1,
            category_id=category_id,
            budget_id=None,
            type="expense",
            amount=Decimal(amount),
            currency="USD",
            description=None,
            merchant=None,
            notes=None,
            date=day,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        values.update(overrides)
        return SimpleNamespace(**values)

    return _make


@pytest.fixture
def grocery_categories():
    """Groceries(1) > Produce(2), Snacks(3); Transport(4) stands alone."""
    return [
        SimpleNamespace(id=1, user_id=1, parent_id=None, name="Groceries"),
        SimpleNamespace(id=2, user_id=1, parent_id=1, name="Produce"),
        SimpleNamespace(id=3, user_id=1, parent_id=1, name="Snacks"),
        SimpleNamespace(id=4, user_id=None, parent_id=None, name="Transport"),
    ]


@pytest.fixture
def fake_store():
    return FakeStore


# ── SQLite-backed session for statement tests ────────────────────────────────

@pytest.fixture
def sqlite_engine():
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool

    from finboard.core.database import Base
    from finboard.models import budget, category, transaction, user  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(sqlite_engine):
    from sqlalchemy.orm import Session

    with Session(sqlite_engine) as session:
        yield session


# ── HTTP client over the SQLite session ──────────────────────────────────────

class AsyncSessionAdapter:
    """Awaitable facade over a sync Session, for routers that expect an AsyncSession."""

    def __init__(self, session):
        self._session = session

    def add(self, obj):
        self._session.add(obj)

    async def execute(self, statement):
        return self._session.execute(statement)

    async def flush(self):
        self._session.flush()

    async def refresh(self, obj, attribute_names=None):
        self._session.refresh(obj, attribute_names=attribute_names)

    async def delete(self, obj):
        self._session.delete(obj)

    async def commit(self):
        self._session.commit()

    async def rollback(self):
        self._session.rollback()


@pytest.fixture
def db_client(db):
    """TestClient acting as the given user (default: user 1) against the SQLite session."""
    from fastapi.testclient import TestClient

    from finboard.core.database import get_db
    from finboard.core.deps import get_optional_user
    from finboard.main import app

    session = AsyncSessionAdapter(db)

    async def _db():
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    def _client(user_id=1):
        user = SimpleNamespace(id=user_id, timezone="UTC", is_active=True)
        app.dependency_overrides[get_optional_user] = lambda: user
        app.dependency_overrides[get_db] = _db
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


@pytest.fixture
def ledger(db):
    """Two users, a Groceries tree, an income category, budgets and transactions for both."""
    from finboard.models.budget import Budget
    from finboard.models.category import Category
    from finboard.models.transaction import Transaction
    from finboard.models.user import User

    db.add_all([
        User(id=1, email="ana@example.com", hashed_password="x"),
        User(id=2, email="ben@example.com", hashed_password="x"),
        Category(id=1, user_id=1, name="Groceries"),
        Category(id=2, user_id=1, parent_id=1, name="Produce"),
        Category(id=3, user_id=1, parent_id=1, name="Snacks"),
        Category(id=4, user_id=None, name="Transport", is_system=True),
        Category(id=5, user_id=1, name="Salary", type="income"),
        Category(id=6, user_id=2, name="Hobbies"),
    ])
    db.flush()
    db.add_all([
        Budget(id=1, user_id=1, category_id=1, name="Food", amount=Decimal("500"), start_date=date(2024, 1, 1)),
        Budget(id=2, user_id=2, category_id=6, name="Theirs", amount=Decimal("50"), start_date=date(2024, 1, 1)),
        Transaction(
            id=1, user_id=1, category_id=3, amount=Decimal("12.50"), date=date(2024, 3, 2),
            description="corner shop", merchant="Kiosk", notes="chips",
        ),
        Transaction(id=2, user_id=2, category_id=6, amount=Decimal("9.00"), date=date(2024, 3, 2)),
    ])
    db.commit()
    return db
