"""Vendor extraction and per-vendor spending statistics."""

from collections.abc import Sequence

from ..core.models import Expense, ExpenseCategory, VendorStats

# Checked in this order; the first one present wins, not the leftmost one
VENDOR_SEPARATORS = (",", "-", ":", "|", "(")
MAX_VENDOR_LENGTH = 50
FALLBACK_VENDOR_LENGTH = 20


def extract_vendor_name(expense: Expense) -> str:
    """Extract a vendor name from an expense description.

    "Starbucks - Coffee" and "Amazon, Books" yield "Starbucks" and "Amazon".
    Names are not normalized, so "starbucks" and "Starbucks" are different vendors.
    """
    description = expense.description.strip()
    vendor_name = description

    for separator in VENDOR_SEPARATORS:
        if separator in description:
            vendor_name = description.split(separator)[0].strip()
            break

    vendor_name = vendor_name[:MAX_VENDOR_LENGTH]
    return vendor_name or description[:FALLBACK_VENDOR_LENGTH]


class _VendorAccumulator:
    """Running totals for one vendor."""

    def __init__(self, name: str, expense: Expense):
        self.name = name
        self.total_spent = 0.0
        self.transaction_count = 0
        self.categories: dict[ExpenseCategory, float] = {}
        self.last_transaction = expense.date

    def add(self, expense: Expense) -> None:
        self.total_spent += expense.amount
        self.transaction_count += 1
        self.categories[expense.category] = self.categories.get(expense.category, 0.0) + expense.amount
        if expense.date > self.last_transaction:
            self.last_transaction = expense.date

    def to_stats(self, grand_total: float) -> VendorStats:
        return VendorStats(
            name=self.name,
            total_spent=self.total_spent,
            transaction_count=self.transaction_count,
            percentage=(self.total_spent / grand_total) * 100 if grand_total > 0 else 0.0,
            average_transaction=self.total_spent / self.transaction_count,
            categories=self.categories,
            last_transaction=self.last_transaction,
        )


def calculate_top_vendors(expenses: Sequence[Expense], limit: int | None = 10) -> list[VendorStats]:
    """Rank vendors by total spending.

    Vendors with equal totals keep their first-seen order. ``limit=None``
    returns every vendor.
    """
    if not expenses:
        return []

    vendors: dict[str, _VendorAccumulator] = {}
    grand_total = 0.0

    for expense in expenses:
        name = extract_vendor_name(expense)
        grand_total += expense.amount
        if name not in vendors:
            vendors[name] = _VendorAccumulator(name, expense)
        vendors[name].add(expense)

    ranked = sorted(
        (vendor.to_stats(grand_total) for vendor in vendors.values()),
        key=lambda stats: stats.total_spent,
        reverse=True,
    )
    return ranked if limit is None else ranked[:limit]


def get_vendor_stats(expenses: Sequence[Expense], vendor_name: str) -> VendorStats | None:
    """Statistics for one vendor, matched exactly and case-sensitively."""
    vendor_expenses = [e for e in expenses if extract_vendor_name(e) == vendor_name]
    if not vendor_expenses:
        return None

    accumulator = _VendorAccumulator(vendor_name, vendor_expenses[0])
    for expense in vendor_expenses:
        accumulator.add(expense)

    grand_total = sum(e.amount for e in expenses)
    return accumulator.to_stats(grand_total)
