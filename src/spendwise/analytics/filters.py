"""Filtering, sorting and display formatting for expense listings."""

from collections.abc import Sequence
from datetime import date

from ..core.models import Expense, ExpenseFilters

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}


def amount_text(amount: float) -> str:
    """Plain textual form of an amount, without a trailing ``.0`` for whole values."""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


def _matches_search(expense: Expense, query: str) -> bool:
    query = query.lower()
    return (
        query in expense.description.lower()
        or query in expense.category.value.lower()
        or query in amount_text(expense.amount)
    )


def filter_expenses(expenses: Sequence[Expense], filters: ExpenseFilters) -> list[Expense]:
    """Apply category, date range and search filters.

    The date range only applies when both bounds are given; both are inclusive.
    """
    result = []
    for expense in expenses:
        if filters.category and expense.category != filters.category:
            continue

        if filters.start_date and filters.end_date:
            if not filters.start_date <= expense.date <= filters.end_date:
                continue

        if filters.search_query and not _matches_search(expense, filters.search_query):
            continue

        result.append(expense)

    return result


def sort_expenses_newest_first(expenses: Sequence[Expense]) -> list[Expense]:
    return sorted(expenses, key=lambda e: e.date, reverse=True)


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format an amount like ``$1,234.56``."""
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_date(value: date) -> str:
    """Format a date like ``Oct 05, 2026``."""
    return value.strftime("%b %d, %Y")
