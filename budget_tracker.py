# bucketlist_advisor/budget_tracker.py
"""
Budget Tracker
--------------
Pure aggregation over the authoritative accepted list:

    total_cost   = sum of every accepted suggestion's line items
    percent_raw  = 100 * total_cost / capital        (unclamped)
    percent_used = percent_raw clamped to [0, 100]   (display)
    over_budget  = total_cost > capital

Nothing is cached between calls; feed it a fresh accepted list each time.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Tuple

from .models import Suggestion, to_money

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class BudgetState:
    capital: Decimal
    total_cost: Decimal
    percent_raw: Decimal
    percent_used: Decimal
    is_over_budget: bool
    remaining: Decimal
    item_count: int
    mismatched_ids: Tuple[str, ...] = ()

    def to_dict(self):
        return {
            "capital": float(self.capital),
            "totalCost": float(self.total_cost),
            "percentRaw": float(self.percent_raw),
            "percentUsed": float(self.percent_used),
            "isOverBudget": self.is_over_budget,
            "remaining": float(self.remaining),
            "itemCount": self.item_count,
        }


def clamp(value: Decimal, min_val: Decimal, max_val: Decimal) -> Decimal:
    return max(min_val, min(value, max_val))


def percent_of(total: Decimal, capital: Decimal) -> Decimal:
    # zero capital: anything spent is "infinitely" over
    if capital <= 0:
        return Decimal("0") if total <= 0 else Decimal("Infinity")
    return HUNDRED * total / capital


def compute_budget(accepted: Iterable[Suggestion], capital) -> BudgetState:
    capital = to_money(capital)
    accepted: List[Suggestion] = list(accepted)

    total = Decimal("0")
    mismatched = []

    for s in accepted:
        total += s.price.total_cost
        if not s.price.is_consistent:
            mismatched.append(s.id)
            logger.warning(
                "Suggestion %s declares total %s but line items sum to %s",
                s.id,
                s.price.declared_total,
                s.price.total_cost,
            )

    raw = percent_of(total, capital)

    return BudgetState(
        capital=capital,
        total_cost=total,
        percent_raw=raw,
        percent_used=clamp(raw, Decimal("0"), HUNDRED),
        is_over_budget=total > capital,
        remaining=capital - total,
        item_count=len(accepted),
        mismatched_ids=tuple(mismatched),
    )
