"""Interval rules: recommended service gaps per maintenance category."""

from typing import Iterable, List, Optional, Tuple

from .category import Category


class IntervalRule:
    """Maximum mileage and/or elapsed-day gap between services."""

    def __init__(self, miles: Optional[int] = None, days: Optional[int] = None):
        self.miles = miles
        self.days = days

    def __eq__(self, other):
        if not isinstance(other, IntervalRule):
            return NotImplemented
        return (self.miles, self.days) == (other.miles, other.days)

    def __repr__(self):
        return f"IntervalRule(miles={self.miles!r}, days={self.days!r})"


# Ordered (category, rule) pairs. Evaluation iterates in this order.
IntervalTable = List[Tuple[Category, IntervalRule]]

DEFAULT_INTERVALS: IntervalTable = [
    (Category.OIL_CHANGE, IntervalRule(miles=5000, days=90)),
    (Category.TIRES, IntervalRule(miles=50000, days=365)),
    (Category.BRAKES, IntervalRule(miles=30000, days=365)),
    (Category.FILTERS, IntervalRule(miles=15000, days=180)),
    (Category.FLUIDS, IntervalRule(miles=30000, days=365)),
    (Category.INSPECTION, IntervalRule(miles=None, days=365)),
]


def get_interval(
    category: Category, intervals: Iterable[Tuple[Category, IntervalRule]] = DEFAULT_INTERVALS
) -> Optional[IntervalRule]:
    """Look up the rule for a category. None if the category is not tracked."""
    for cat, rule in intervals:
        if cat == category:
            return rule
    return None


def merge_intervals(
    overrides: Iterable[Tuple[Category, IntervalRule]],
    base: Iterable[Tuple[Category, IntervalRule]] = DEFAULT_INTERVALS,
) -> IntervalTable:
    """
    Apply per-category overrides on top of a base table.

    Overridden categories keep their position in the base table;
    categories new to the table are appended in override order.
    """
    overrides = list(overrides)
    override_map = dict(overrides)
    merged = [(cat, override_map.get(cat, rule)) for cat, rule in base]
    known = {cat for cat, _ in merged}
    merged.extend((cat, rule) for cat, rule in overrides if cat not in known)
    return merged
