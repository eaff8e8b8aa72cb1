"""Command line entry point for SpendWise."""

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from .analytics.filters import filter_expenses, format_currency, format_date, sort_expenses_newest_first
from .analytics.summary import calculate_expense_summary, calculate_top_categories
from .core.config import AppConfig, configure_logging
from .core.database import DatabaseManager
from .core.models import EXPENSE_CATEGORIES, ExpenseFilters, ExpenseInput, ExpenseUpdate
from .core.storage import ExpenseStore
from .data.export import ExportFormat, ExportOptions, build_export_summary, filter_for_export, write_export
from .ml.category_classifier import suggest_category
from .ml.prediction_engine import analyze_spending_behavior, generate_smart_suggestions, predict_upcoming_expenses
from .ml.vendor_aggregator import calculate_top_vendors

logger = logging.getLogger(__name__)

CATEGORY_CHOICES = [c.value for c in EXPENSE_CATEGORIES]


def _open_store(config: AppConfig) -> ExpenseStore:
    config.ensure_dirs()
    db_manager = DatabaseManager(config)
    db_manager.create_tables()
    return ExpenseStore(db_manager)


def cmd_add(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    category = args.category
    if category is None:
        suggestion = suggest_category(args.description)
        category = suggestion.category
        print(f"Category inferred as {category.value} ({suggestion.confidence:.0%} confidence)")

    expense = store.add_expense(
        ExpenseInput(date=args.date or date.today(), amount=args.amount, category=category, description=args.description)
    )
    print(f"Added {expense.id}: {format_currency(expense.amount, config.default_currency)} {expense.description}")
    return 0


def cmd_list(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    filters = ExpenseFilters(
        category=args.category, start_date=args.start_date, end_date=args.end_date, search_query=args.search
    )
    expenses = sort_expenses_newest_first(filter_expenses(store.get_expenses(), filters))
    if args.limit:
        expenses = expenses[: args.limit]

    if not expenses:
        print("No expenses found.")
        return 0

    for e in expenses:
        amount = format_currency(e.amount, config.default_currency)
        print(f"{format_date(e.date)}  {amount:>12}  {e.category.value:<15} {e.description}  [{e.id}]")
    return 0


def cmd_edit(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    fields = {"date": args.date, "amount": args.amount, "category": args.category, "description": args.description}
    update = ExpenseUpdate(**{name: value for name, value in fields.items() if value is not None})

    expense = store.update_expense(args.id, update)
    if expense is None:
        print(f"Expense {args.id} not found.")
        return 1

    amount = format_currency(expense.amount, config.default_currency)
    print(f"Updated {expense.id}: {format_date(expense.date)} {amount} {expense.category.value} {expense.description}")
    return 0


def cmd_delete(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    if not store.delete_expense(args.id):
        print(f"Expense {args.id} not found.")
        return 1
    print(f"Deleted {args.id}.")
    return 0


def cmd_summary(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    summary = calculate_expense_summary(store.get_expenses())
    currency = config.default_currency

    print(f"Total spending:  {format_currency(summary.total_spending, currency)}")
    print(f"This month:      {format_currency(summary.monthly_spending, currency)}")
    print(f"Expenses:        {summary.expense_count}")
    print(f"Top category:    {summary.top_category.value if summary.top_category else '-'}")
    print("\nCategory breakdown:")
    for category, amount in summary.category_breakdown.items():
        print(f"  {category.value:<15} {format_currency(amount, currency):>12}")
    return 0


def cmd_top_categories(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    stats = calculate_top_categories(store.get_expenses())
    if not stats:
        print("No spending data yet.")
        return 0

    for rank, s in enumerate(stats, start=1):
        total = format_currency(s.total_amount, config.default_currency)
        print(f"{rank}. {s.category.value:<15} {total:>12}  {s.percentage:5.1f}%  ({s.count} expenses)")
    return 0


def cmd_vendors(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    vendors = calculate_top_vendors(store.get_expenses(), limit=args.limit or config.vendor_limit)
    if not vendors:
        print("No vendors yet.")
        return 0

    for rank, v in enumerate(vendors, start=1):
        total = format_currency(v.total_spent, config.default_currency)
        print(
            f"{rank}. {v.name:<30} {total:>12}  {v.percentage:5.1f}%  "
            f"{v.transaction_count} txns, last {format_date(v.last_transaction)}"
        )
    return 0


def cmd_predict(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    for p in predict_upcoming_expenses(store.get_expenses()):
        amount = format_currency(p.estimated_amount, config.default_currency)
        print(f"[{p.confidence:.0%}] {p.description} ({p.timeframe}): ~{amount} - {p.reasoning}")
    return 0


def cmd_insights(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    for insight in analyze_spending_behavior(store.get_expenses()):
        marker = "!" if insight.actionable else " "
        print(f"{marker} [{insight.type.value}] {insight.title}: {insight.message}")
    return 0


def cmd_suggest(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    suggestions = generate_smart_suggestions(store.get_expenses())
    if not suggestions:
        print("Nothing to suggest right now.")
        return 0

    for s in suggestions:
        print(f"[{s.confidence:.0%}] {s.description}: ~{format_currency(s.estimated_amount, config.default_currency)}")
    return 0


def cmd_categorize(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    suggestion = suggest_category(args.description)
    alternatives = ", ".join(c.value for c in suggestion.alternatives)
    print(f"{suggestion.category.value} ({suggestion.confidence:.0%} confidence); alternatives: {alternatives}")
    return 0


def cmd_export(args: argparse.Namespace, store: ExpenseStore, config: AppConfig) -> int:
    options = ExportOptions(
        format=args.format,
        start_date=args.start_date,
        end_date=args.end_date,
        categories=args.categories or list(EXPENSE_CATEGORIES),
        filename=args.filename,
        include_metadata=not args.no_metadata,
    )
    expenses = store.get_expenses()
    summary = build_export_summary(expenses, filter_for_export(expenses, options), options)
    print(f"Exporting {summary.filtered_records} of {summary.total_records} expenses ({summary.date_range})")

    path = write_export(expenses, options, args.output_dir or config.export_dir)
    print(f"Export written to: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spendwise", description="Personal expense tracker with spending insights")
    parser.add_argument("--log-level", default=None, help="Logging level (default: SPENDWISE_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Record a new expense")
    add.add_argument("amount", type=float)
    add.add_argument("description")
    add.add_argument("--category", choices=CATEGORY_CHOICES, help="Inferred from the description when omitted")
    add.add_argument("--date", type=date.fromisoformat, help="Expense date (YYYY-MM-DD, default: today)")
    add.set_defaults(handler=cmd_add)

    list_cmd = subparsers.add_parser("list", help="List expenses, newest first")
    list_cmd.add_argument("--category", choices=["All", *CATEGORY_CHOICES])
    list_cmd.add_argument("--start-date", type=date.fromisoformat)
    list_cmd.add_argument("--end-date", type=date.fromisoformat)
    list_cmd.add_argument("--search")
    list_cmd.add_argument("--limit", type=int)
    list_cmd.set_defaults(handler=cmd_list)

    edit = subparsers.add_parser("edit", help="Change fields of an existing expense")
    edit.add_argument("id")
    edit.add_argument("--amount", type=float)
    edit.add_argument("--description")
    edit.add_argument("--category", choices=CATEGORY_CHOICES)
    edit.add_argument("--date", type=date.fromisoformat, help="Expense date (YYYY-MM-DD)")
    edit.set_defaults(handler=cmd_edit)

    delete = subparsers.add_parser("delete", help="Delete an expense")
    delete.add_argument("id")
    delete.set_defaults(handler=cmd_delete)

    subparsers.add_parser("summary", help="Show spending summary").set_defaults(handler=cmd_summary)
    subparsers.add_parser("top-categories", help="Rank categories by spending").set_defaults(
        handler=cmd_top_categories
    )

    vendors = subparsers.add_parser("vendors", help="Rank vendors by spending")
    vendors.add_argument("--limit", type=int)
    vendors.set_defaults(handler=cmd_vendors)

    subparsers.add_parser("predict", help="Predict upcoming expenses").set_defaults(handler=cmd_predict)
    subparsers.add_parser("insights", help="Analyze spending behavior").set_defaults(handler=cmd_insights)
    subparsers.add_parser("suggest", help="Suggest expenses for the current time").set_defaults(handler=cmd_suggest)

    categorize = subparsers.add_parser("categorize", help="Suggest a category for a description")
    categorize.add_argument("description")
    categorize.set_defaults(handler=cmd_categorize)

    export = subparsers.add_parser("export", help="Export expenses to CSV or JSON")
    export.add_argument("--format", choices=[f.value for f in ExportFormat], default=ExportFormat.CSV.value)
    export.add_argument("--start-date", type=date.fromisoformat)
    export.add_argument("--end-date", type=date.fromisoformat)
    export.add_argument("--categories", nargs="+", choices=CATEGORY_CHOICES)
    export.add_argument("--filename")
    export.add_argument("--output-dir", type=Path)
    export.add_argument("--no-metadata", action="store_true", help="Omit metadata header and summary")
    export.set_defaults(handler=cmd_export)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = AppConfig()
    configure_logging(args.log_level or config.log_level)

    try:
        store = _open_store(config)
        return args.handler(args, store, config)
    except ValidationError as e:
        logger.debug("Validation failed", exc_info=True)
        print(f"Invalid expense data: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
