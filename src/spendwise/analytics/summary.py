"""Aggregate spending summaries for dashboards."""

from collections.abc import Sequence
from datetime import date

from dateutil.relativedelta import relativedelta

from ..core.models import EXPENSE_CATEGORIES, CategoryStats, Expense, ExpenseCategory, ExpenseSummary


def current_month_bounds(today: date) -> tuple[date, date]:
    """First and last calendar day of the month containing ``today``."""
    month_start = today.replace(day=1)
    month_end = month_start + relativedelta(months=1, days=-1)
    return month_start, month_end


def category_breakdown(expenses: Sequence[Expense]) -> dict[ExpenseCategory, float]:
    """Summed amounts for every category; categories without expenses map to 0."""
    breakdown = {category: 0.0 for category in EXPENSE_CATEGORIES}
    for expense in expenses:
        breakdown[expense.category] += expense.amount
    return breakdown


def calculate_expense_summary(expenses: Sequence[Expense], today: date | None = None) -> ExpenseSummary:
    """Compute totals, this month's spending and the category breakdown."""
    today = today or date.today()
    month_start, month_end = current_month_bounds(today)

    total_spending = sum(expense.amount for expense in expenses)
    monthly_spending = sum(expense.amount for expense in expenses if month_start <= expense.date <= month_end)

    breakdown = category_breakdown(expenses)

    # max() keeps the first maximal key, i.e. enumeration order breaks ties
    top_category = max(breakdown, key=lambda category: breakdown[category])
    if breakdown[top_category] <= 0:
        top_category = None

    return ExpenseSummary(
        total_spending=total_spending,
        monthly_spending=monthly_spending,
        category_breakdown=breakdown,
        top_category=top_category,
        expense_count=len(expenses),
    )


def calculate_top_categories(expenses: Sequence[Expense]) -> list[CategoryStats]:
    """Categories with spending, ranked by total amount."""
    breakdown = category_breakdown(expenses)
    total = sum(breakdown.values())

    counts = {category: 0 for category in EXPENSE_CATEGORIES}
    for expense in expenses:
        counts[expense.category] += 1

    stats = [
        CategoryStats(
            category=category,
            total_amount=amount,
            count=counts[category],
            percentage=(amount / total) * 100 if total > 0 else 0.0,
            average_amount=amount / counts[category],
        )
        for category, amount in breakdown.items()
        if amount > 0
    ]
    return sorted(stats, key=lambda s: s.total_amount, reverse=True)
