"""
Budget progress composition.

Display and alerting use different numbers: `percent_used` is
clamped to 100 for progress bars, while `is_over_budget` compares the raw
spend against the limit. A budget can therefore be "100% used" and over
budget at the same time.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from finboard.services.spend import to_decimal

DEFAULT_ALERT_THRESHOLD = 80
_HUNDRED = Decimal(100)
_CENT = Decimal("0.01")


@dataclass(frozen=True)
class BudgetProgress:
    budget: object
    spent: Decimal
    remaining: Decimal
    percent_used: Decimal
    is_over_budget: bool
    is_near_threshold: bool


def compose_progress(budget, spent: Decimal | int | float = 0) -> BudgetProgress:
    amount = to_decimal(budget.amount)
    spent = to_decimal(spent) if budget.is_active else Decimal(0)

    remaining = max(Decimal(0), amount - spent)
    if amount > 0:
        percent = min(_HUNDRED, spent / amount * _HUNDRED)
    else:
        percent = Decimal(0)

    threshold = budget.alert_threshold
    if threshold is None:
        threshold = DEFAULT_ALERT_THRESHOLD

    return BudgetProgress(
        budget=budget,
        spent=spent,
        remaining=remaining,
        percent_used=percent.quantize(_CENT, rounding=ROUND_HALF_UP),
        is_over_budget=spent > amount,
        is_near_threshold=budget.is_active and percent >= threshold,
    )
