# bucketlist_advisor/utils.py

from decimal import Decimal, InvalidOperation

from .config import CATEGORIES, MODES, DEFAULT_CURRENCY


def format_money(amount, currency: str = DEFAULT_CURRENCY) -> str:
    """12345.6 -> '12,346 SEK'"""
    try:
        return f"{Decimal(str(amount)):,.0f} {currency}"
    except (InvalidOperation, ValueError):
        return f"{amount} {currency}"


def category_name(key) -> str:
    if key in CATEGORIES:
        return CATEGORIES[key]["display_name"]
    # servers may already send the display name
    return key or "Uncategorized"


def mode_name(key) -> str:
    if key in MODES:
        return MODES[key]["display_name"]
    return key or ""
