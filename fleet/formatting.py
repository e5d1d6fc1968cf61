"""Display formatting helpers shared by the CLI and web app."""

from typing import Optional

from .category import Category
from .maintenance_record import parse_service_date


def format_miles(miles: Optional[float]) -> str:
    """Format mileage for display."""
    return f"{miles:,.0f}" if miles is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"${cost:,.2f}" if cost is not None else "-"


def format_date(value) -> str:
    """Format a service date as 'Jan 15, 2025'."""
    if value is None:
        return "-"
    d = parse_service_date(value)
    return f"{d:%b} {d.day}, {d.year}"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def format_category(value) -> str:
    """Display label for a category id; unknown ids show as 'Other'."""
    return Category.lookup(value).label
