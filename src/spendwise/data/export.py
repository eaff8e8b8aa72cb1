"""CSV and JSON export of expense lists."""

import json
import logging
import math
from collections.abc import Sequence
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import BaseModel, Field

from ..analytics.filters import format_date
from ..core.models import EXPENSE_CATEGORIES, Expense, ExpenseCategory

logger = logging.getLogger(__name__)

EXPORT_VERSION = "2.0"
CSV_COLUMNS = ["Date", "Amount", "Category", "Description", "Created At", "Updated At"]


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class ExportOptions(BaseModel):
    """What to export and how."""

    format: ExportFormat = ExportFormat.CSV
    start_date: date | None = None
    end_date: date | None = None
    categories: list[ExpenseCategory] = Field(default_factory=lambda: list(EXPENSE_CATEGORIES))
    filename: str | None = None
    include_metadata: bool = True

    def resolved_filename(self, today: date | None = None) -> str:
        """Filename to write, defaulting to ``expenses-YYYY-MM-DD.<ext>``."""
        if self.filename:
            return self.filename
        today = today or date.today()
        return f"expenses-{today.isoformat()}.{self.format.value}"


class ExportSummary(BaseModel):
    """Preview of an export before it is written."""

    total_records: int
    filtered_records: int
    date_range: str
    categories: list[ExpenseCategory]
    estimated_file_size: str


def filter_for_export(expenses: Sequence[Expense], options: ExportOptions) -> list[Expense]:
    """Keep expenses inside the date range (when both bounds are set) and selected categories."""
    selected = set(options.categories)
    result = []
    for expense in expenses:
        if options.start_date and options.end_date:
            if not options.start_date <= expense.date <= options.end_date:
                continue
        if expense.category in selected:
            result.append(expense)
    return result


def _category_totals(expenses: Sequence[Expense]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for expense in expenses:
        totals[expense.category.value] = totals.get(expense.category.value, 0.0) + expense.amount
    return totals


def _date_span(expenses: Sequence[Expense]) -> tuple[date, date] | None:
    if not expenses:
        return None
    dates = [e.date for e in expenses]
    return min(dates), max(dates)


def _to_dataframe(expenses: Sequence[Expense]) -> pd.DataFrame:
    rows = [
        {
            "Date": e.date.isoformat(),
            "Amount": e.amount,
            "Category": e.category.value,
            "Description": e.description,
            "Created At": e.created_at.isoformat(),
            "Updated At": e.updated_at.isoformat(),
        }
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def export_to_csv(
    expenses: Sequence[Expense], include_metadata: bool = True, generated_at: datetime | None = None
) -> str:
    """Render expenses as CSV, optionally framed by ``#`` metadata lines."""
    generated_at = generated_at or datetime.now()
    lines: list[str] = []

    if include_metadata:
        span = _date_span(expenses)
        date_range = f"{format_date(span[0])} to {format_date(span[1])}" if span else "No data"
        lines += [
            "# Expense Report Export",
            f"# Generated on: {generated_at.isoformat(sep=' ', timespec='seconds')}",
            f"# Total records: {len(expenses)}",
            f"# Date range: {date_range}",
            "#",
        ]

    table = _to_dataframe(expenses).to_csv(index=False, lineterminator="\n")
    content = "\n".join(lines) + ("\n" if lines else "") + table

    if include_metadata and expenses:
        total = sum(e.amount for e in expenses)
        footer = [
            "",
            "# Summary Statistics",
            f"# Total Amount: {total:.2f}",
            f"# Average Amount: {total / len(expenses):.2f}",
            "# Category Breakdown:",
        ]
        footer += [f"# {category}: {amount:.2f}" for category, amount in _category_totals(expenses).items()]
        content += "\n".join(footer) + "\n"

    return content


def build_json_payload(
    expenses: Sequence[Expense], include_metadata: bool = True, generated_at: datetime | None = None
) -> dict[str, Any]:
    data: dict[str, Any] = {"expenses": [e.model_dump(mode="json") for e in expenses]}

    if include_metadata:
        generated_at = generated_at or datetime.now()
        total = sum(e.amount for e in expenses)
        span = _date_span(expenses)
        data["metadata"] = {
            "exportDate": generated_at.isoformat(),
            "totalRecords": len(expenses),
            "totalAmount": total,
            "averageAmount": total / len(expenses) if expenses else 0,
            "dateRange": {"earliest": span[0].isoformat(), "latest": span[1].isoformat()} if span else None,
            "categoryBreakdown": _category_totals(expenses),
            "uniqueCategories": list(dict.fromkeys(e.category.value for e in expenses)),
            "exportVersion": EXPORT_VERSION,
        }

    return data


def export_to_json(
    expenses: Sequence[Expense], include_metadata: bool = True, generated_at: datetime | None = None
) -> str:
    return json.dumps(build_json_payload(expenses, include_metadata, generated_at), indent=2)


def estimate_file_size(expenses: Sequence[Expense], fmt: ExportFormat, include_metadata: bool = True) -> str:
    """Rough, human readable size of an export."""
    if fmt == ExportFormat.CSV:
        estimated_bytes = 100 + len(expenses) * 80 + (500 if include_metadata else 0)
    else:
        estimated_bytes = 200 + len(expenses) * 150 + (300 if include_metadata else 0)

    if estimated_bytes < 1024:
        return f"{estimated_bytes}B"
    # Halves round up
    if estimated_bytes < 1048576:
        return f"{math.floor(estimated_bytes / 1024 + 0.5)}KB"
    return f"{math.floor(estimated_bytes / 1048576 + 0.5)}MB"


def describe_date_range(start_date: date | None, end_date: date | None) -> str:
    if start_date and end_date:
        return f"{format_date(start_date)} - {format_date(end_date)}"
    if start_date:
        return f"From {format_date(start_date)}"
    if end_date:
        return f"Until {format_date(end_date)}"
    return "All time"


def build_export_summary(
    all_expenses: Sequence[Expense], filtered: Sequence[Expense], options: ExportOptions
) -> ExportSummary:
    return ExportSummary(
        total_records=len(all_expenses),
        filtered_records=len(filtered),
        date_range=describe_date_range(options.start_date, options.end_date),
        categories=options.categories,
        estimated_file_size=estimate_file_size(filtered, options.format, options.include_metadata),
    )


def write_export(expenses: Sequence[Expense], options: ExportOptions, export_dir: Path) -> Path:
    """Filter, render and write an export file. Returns the written path."""
    filtered = filter_for_export(expenses, options)

    if options.format == ExportFormat.CSV:
        content = export_to_csv(filtered, options.include_metadata)
    else:
        content = export_to_json(filtered, options.include_metadata)

    export_dir.mkdir(parents=True, exist_ok=True)
    path = export_dir / options.resolved_filename()
    path.write_text(content, encoding="utf-8")
    logger.info("Exported %d of %d expenses to %s", len(filtered), len(expenses), path)
    return path
