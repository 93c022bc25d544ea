"""Unit tests for budget_progress: spend vs. limit arithmetic."""
from decimal import Decimal
from types import SimpleNamespace

from finboard.services.budget_progress import compose_progress


def _budget(amount="500", is_active=True, alert_threshold=80):
    return SimpleNamespace(
        amount=Decimal(amount), is_active=is_active, alert_threshold=alert_threshold
    )


# ── active budgets ───────────────────────────────────────────────────────────

class TestProgress:
    def test_near_threshold(self):
        p = compose_progress(_budget(), Decimal("450"))
        assert p.remaining == Decimal("50")
        assert p.percent_used == Decimal("90.00")
        assert p.is_over_budget is False
        assert p.is_near_threshold is True

    def test_over_budget_clamps_display(self):
        p = compose_progress(_budget(), Decimal("620"))
        assert p.remaining == Decimal("0")
        assert p.percent_used == Decimal("100.00")
        assert p.is_over_budget is True
        assert p.is_near_threshold is True

    def test_exactly_at_limit_is_not_over(self):
        p = compose_progress(_budget(), Decimal("500"))
        assert p.percent_used == Decimal("100.00")
        assert p.is_over_budget is False

    def test_below_threshold(self):
        p = compose_progress(_budget(), Decimal("100"))
        assert p.percent_used == Decimal("20.00")
        assert p.is_near_threshold is False

    def test_nothing_spent(self):
        p = compose_progress(_budget())
        assert p.spent == Decimal("0")
        assert p.remaining == Decimal("500")
        assert p.percent_used == Decimal("0.00")


# ── rounding ─────────────────────────────────────────────────────────────────

class TestRounding:
    def test_percent_rounded_to_cents(self):
        assert compose_progress(_budget("300"), Decimal("100")).percent_used == Decimal("33.33")

    def test_half_rounds_up(self):
        assert compose_progress(_budget("3"), Decimal("2")).percent_used == Decimal("66.67")

    def test_threshold_uses_unrounded_percent(self):
        # 79.9966...% displays as 80.00 but has not reached the threshold
        p = compose_progress(_budget("3000"), Decimal("2399.90"))
        assert p.percent_used == Decimal("80.00")
        assert p.is_near_threshold is False


# ── edge cases ───────────────────────────────────────────────────────────────

class TestEdgeCases:
    def test_zero_amount_reports_zero_percent(self):
        p = compose_progress(_budget("0"), Decimal("10"))
        assert p.percent_used == Decimal("0.00")
        assert p.remaining == Decimal("0")
        assert p.is_over_budget is True
        assert p.is_near_threshold is False

    def test_zero_amount_nothing_spent(self):
        assert compose_progress(_budget("0")).is_over_budget is False

    def test_missing_threshold_defaults_to_80(self):
        p = compose_progress(_budget(alert_threshold=None), Decimal("400"))
        assert p.is_near_threshold is True

    def test_custom_threshold(self):
        p = compose_progress(_budget(alert_threshold=50), Decimal("260"))
        assert p.is_near_threshold is True

    def test_zero_threshold_always_near(self):
        assert compose_progress(_budget(alert_threshold=0)).is_near_threshold is True

    def test_inactive_budget_ignores_spend(self):
        p = compose_progress(_budget(is_active=False), Decimal("620"))
        assert p.spent == Decimal("0")
        assert p.remaining == Decimal("500")
        assert p.percent_used == Decimal("0.00")
        assert p.is_over_budget is False
        assert p.is_near_threshold is False

    def test_float_and_int_spend_accepted(self):
        assert compose_progress(_budget(), 125).percent_used == Decimal("25.00")
        assert compose_progress(_budget(), 12.5).spent == Decimal("12.5")
