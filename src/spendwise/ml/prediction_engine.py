"""Heuristic expense predictions, behavior insights and smart suggestions.

Every entry point is a pure function of the expense list it is given and the
current time. Nothing is cached between calls; callers pass the fresh list
after each mutation.

Expense dates carry no time of day, so hour-of-day rules evaluate every
expense at midnight. The morning-routine predictor and the time-of-day insight
therefore only see hour 0 for historical data.
"""

import logging
import math
from collections.abc import Sequence
from datetime import datetime, time

import numpy as np

from ..core.models import (
    BehaviorInsight,
    Expense,
    ExpenseCategory,
    InsightType,
    PredictedExpense,
    PredictionType,
    SmartSuggestion,
    SuggestionType,
)

logger = logging.getLogger(__name__)

MAX_PREDICTIONS = 8
MAX_INSIGHTS = 6
MAX_SUGGESTIONS = 4

MIN_EXPENSES_FOR_PREDICTIONS = 5
MIN_EXPENSES_FOR_INSIGHTS = 3
MIN_EXPENSES_FOR_VELOCITY = 7
MIN_EXPENSES_FOR_ANOMALIES = 10

VELOCITY_WINDOW = 7
VELOCITY_THRESHOLD_PCT = 20
ANOMALY_WINDOW = 5
ANOMALY_STD_DEVS = 2

DEFAULT_TRANSPORT_INTERVAL_DAYS = 7.0
TRANSPORT_CYCLE_RATIO = 0.8

BILL_KEYWORDS = ("rent", "insurance", "subscription", "bill", "utility")

# date.weekday(): Monday is 0
FRIDAY, SATURDAY, SUNDAY = 4, 5, 6
WEEKEND_PREDICTION_DAYS = (FRIDAY, SATURDAY)
WEEKEND_HISTORY_DAYS = (FRIDAY, SATURDAY, SUNDAY)
WEEKEND_DAYS = (SATURDAY, SUNDAY)

MORNING_ROUTINE_HOURS = range(6, 11)


def _now(now: datetime | None) -> datetime:
    """Naive local wall-clock time, matching the naive expense timestamps."""
    if now is None:
        return datetime.now()
    return now.replace(tzinfo=None)


def _expense_timestamp(expense: Expense) -> datetime:
    """Timestamp of an expense; always midnight since dates have no time part."""
    return datetime.combine(expense.date, time.min)


def _days_between(later: datetime, earlier: datetime) -> int:
    """Whole days between two instants, truncated toward zero."""
    return int((later - earlier).total_seconds() / 86400)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_average_amount(expenses: Sequence[Expense]) -> float:
    if not expenses:
        return 0.0
    return sum(e.amount for e in expenses) / len(expenses)


def calculate_average_interval(expenses: Sequence[Expense]) -> float:
    """Mean gap in days between consecutive expenses in date order."""
    if len(expenses) < 2:
        return DEFAULT_TRANSPORT_INTERVAL_DAYS

    ordered = sorted(expenses, key=lambda e: e.date)
    total_days = sum((ordered[i].date - ordered[i - 1].date).days for i in range(1, len(ordered)))
    return total_days / (len(ordered) - 1)


def get_category_average(expenses: Sequence[Expense], category: ExpenseCategory) -> float | None:
    """Mean amount for a category, or None when it has no expenses."""
    matching = [e for e in expenses if e.category == category]
    if not matching:
        return None
    return calculate_average_amount(matching)


# --- Predictions ---------------------------------------------------------------


def get_default_predictions() -> list[PredictedExpense]:
    """Cold-start predictions used until enough history exists."""
    return [
        PredictedExpense(
            description="Morning coffee",
            estimated_amount=5,
            category=ExpenseCategory.FOOD,
            confidence=0.5,
            reasoning="Common daily expense",
            timeframe="today",
            type=PredictionType.DEFAULT,
        ),
        PredictedExpense(
            description="Lunch",
            estimated_amount=12,
            category=ExpenseCategory.FOOD,
            confidence=0.6,
            reasoning="Typical midday expense",
            timeframe="today",
            type=PredictionType.DEFAULT,
        ),
        PredictedExpense(
            description="Gas/Transportation",
            estimated_amount=35,
            category=ExpenseCategory.TRANSPORTATION,
            confidence=0.4,
            reasoning="Weekly transportation need",
            timeframe="this week",
            type=PredictionType.DEFAULT,
        ),
    ]


def predict_daily_routine(expenses: Sequence[Expense], now: datetime) -> list[PredictedExpense]:
    if now.hour not in MORNING_ROUTINE_HOURS:
        return []

    morning_expenses = [e for e in expenses if _expense_timestamp(e).hour in MORNING_ROUTINE_HOURS]
    if not morning_expenses:
        return []

    return [
        PredictedExpense(
            description="Morning coffee/breakfast",
            estimated_amount=calculate_average_amount(morning_expenses),
            category=ExpenseCategory.FOOD,
            confidence=0.8,
            reasoning="Based on your morning routine pattern",
            timeframe="today",
            type=PredictionType.ROUTINE,
        )
    ]


def predict_weekly_patterns(expenses: Sequence[Expense], now: datetime) -> list[PredictedExpense]:
    if now.weekday() not in WEEKEND_PREDICTION_DAYS:
        return []

    weekend_expenses = [e for e in expenses if e.date.weekday() in WEEKEND_HISTORY_DAYS]
    if not weekend_expenses:
        return []

    return [
        PredictedExpense(
            description="Weekend entertainment or dining",
            estimated_amount=calculate_average_amount(weekend_expenses),
            category=ExpenseCategory.ENTERTAINMENT,
            confidence=0.6,
            reasoning="Weekend spending pattern detected",
            timeframe="this weekend",
            type=PredictionType.WEEKLY,
        )
    ]


def predict_monthly_recurring(expenses: Sequence[Expense]) -> list[PredictedExpense]:
    recurring = [e for e in expenses if any(keyword in e.description.lower() for keyword in BILL_KEYWORDS)]
    if not recurring:
        return []

    return [
        PredictedExpense(
            description="Monthly bills and subscriptions",
            estimated_amount=calculate_average_amount(recurring),
            category=ExpenseCategory.BILLS,
            confidence=0.9,
            reasoning="Recurring monthly expense pattern",
            timeframe="this month",
            type=PredictionType.RECURRING,
        )
    ]


def predict_contextual_expenses(expenses: Sequence[Expense], now: datetime) -> list[PredictedExpense]:
    """Predict the next transportation expense from its usual cycle."""
    transport = [e for e in expenses if e.category == ExpenseCategory.TRANSPORTATION]
    if not transport:
        return []

    avg_days_between = calculate_average_interval(transport)
    last_transport = max(transport, key=lambda e: e.date)
    days_since_last = _days_between(now, _expense_timestamp(last_transport))

    if days_since_last < avg_days_between * TRANSPORT_CYCLE_RATIO:
        return []

    return [
        PredictedExpense(
            description="Fuel or transportation expense",
            estimated_amount=calculate_average_amount(transport),
            category=ExpenseCategory.TRANSPORTATION,
            confidence=0.7,
            reasoning="Based on your transportation expense cycle",
            timeframe="soon",
            type=PredictionType.CONTEXTUAL,
        )
    ]


def predict_upcoming_expenses(expenses: Sequence[Expense], now: datetime | None = None) -> list[PredictedExpense]:
    """Predict likely upcoming expenses, highest confidence first."""
    if len(expenses) < MIN_EXPENSES_FOR_PREDICTIONS:
        return get_default_predictions()

    now = _now(now)
    predictions = [
        *predict_daily_routine(expenses, now),
        *predict_weekly_patterns(expenses, now),
        *predict_monthly_recurring(expenses),
        *predict_contextual_expenses(expenses, now),
    ]
    logger.debug("Generated %d predictions from %d expenses", len(predictions), len(expenses))

    predictions.sort(key=lambda p: p.confidence, reverse=True)
    return predictions[:MAX_PREDICTIONS]


# --- Behavior insights ---------------------------------------------------------


def _time_period(hour: int) -> str:
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


def analyze_time_patterns(expenses: Sequence[Expense]) -> list[BehaviorInsight]:
    """Report the part of the day with the highest summed spending.

    The figure shown as a percentage is the summed amount itself.
    """
    distribution: dict[str, float] = {}
    for expense in expenses:
        period = _time_period(_expense_timestamp(expense).hour)
        distribution[period] = distribution.get(period, 0.0) + expense.amount

    if not distribution:
        return []

    top_period = max(distribution, key=lambda period: distribution[period])
    return [
        BehaviorInsight(
            type=InsightType.INSIGHT,
            title="Peak Spending Time",
            message=f"You spend most during the {top_period} ({_round_half_up(distribution[top_period])}% of total)",
            confidence=0.8,
            actionable=True,
        )
    ]


def analyze_category_distribution(expenses: Sequence[Expense]) -> list[BehaviorInsight]:
    totals: dict[ExpenseCategory, float] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, 0.0) + expense.amount

    if not totals:
        return []

    total = sum(totals.values())
    if total <= 0:
        return []

    top_category = max(totals, key=lambda category: totals[category])
    percentage = _round_half_up(totals[top_category] / total * 100)

    return [
        BehaviorInsight(
            type=InsightType.WARNING,
            title="Top Spending Category",
            message=f"{percentage}% of your spending goes to {top_category.value}",
            confidence=0.9,
            actionable=percentage > 50,
        )
    ]


def analyze_spending_velocity(expenses: Sequence[Expense]) -> list[BehaviorInsight]:
    """Compare the last seven expenses against the seven before them, in list order."""
    if len(expenses) < MIN_EXPENSES_FOR_VELOCITY:
        return []

    recent = expenses[-VELOCITY_WINDOW:]
    older = expenses[-2 * VELOCITY_WINDOW : -VELOCITY_WINDOW]

    recent_total = sum(e.amount for e in recent)
    older_total = sum(e.amount for e in older)

    # No baseline to compare against
    if older_total <= 0:
        return []

    change = (recent_total - older_total) / older_total * 100
    if abs(change) <= VELOCITY_THRESHOLD_PCT:
        return []

    increased = change > 0
    return [
        BehaviorInsight(
            type=InsightType.WARNING if increased else InsightType.SUCCESS,
            title="Spending Trend",
            message=(
                f"Your spending {'increased' if increased else 'decreased'} by "
                f"{_round_half_up(abs(change))}% this week"
            ),
            confidence=0.7,
            actionable=increased,
        )
    ]


def detect_spending_anomalies(expenses: Sequence[Expense]) -> list[BehaviorInsight]:
    """Flag recent expenses more than two standard deviations from the mean."""
    if len(expenses) < MIN_EXPENSES_FOR_ANOMALIES:
        return []

    amounts = np.array([e.amount for e in expenses], dtype=float)
    mean = amounts.mean()
    std_dev = amounts.std()  # population standard deviation

    recent_anomalies = [
        e for e in expenses[-ANOMALY_WINDOW:] if abs(e.amount - mean) > std_dev * ANOMALY_STD_DEVS
    ]
    if not recent_anomalies:
        return []

    return [
        BehaviorInsight(
            type=InsightType.INFO,
            title="Unusual Spending Detected",
            message=f"{len(recent_anomalies)} recent expense(s) significantly differ from your usual pattern",
            confidence=0.8,
            actionable=False,
        )
    ]


def analyze_spending_behavior(expenses: Sequence[Expense]) -> list[BehaviorInsight]:
    """Behavior insights, highest confidence first."""
    if len(expenses) < MIN_EXPENSES_FOR_INSIGHTS:
        return [
            BehaviorInsight(
                type=InsightType.INFO,
                title="Building Your Profile",
                message="Add more expenses to unlock AI-powered insights and predictions!",
                confidence=1.0,
                actionable=True,
            )
        ]

    insights = [
        *analyze_time_patterns(expenses),
        *analyze_category_distribution(expenses),
        *analyze_spending_velocity(expenses),
        *detect_spending_anomalies(expenses),
    ]
    insights.sort(key=lambda i: i.confidence, reverse=True)
    return insights[:MAX_INSIGHTS]


# --- Smart suggestions ---------------------------------------------------------


def generate_smart_suggestions(expenses: Sequence[Expense], now: datetime | None = None) -> list[SmartSuggestion]:
    """Suggest expenses that typically happen at the current time of day."""
    now = _now(now)
    hour = now.hour
    suggestions = []

    if 7 <= hour <= 10:
        suggestions.append(
            SmartSuggestion(
                type=SuggestionType.TIME_BASED,
                description="Morning coffee or breakfast",
                estimated_amount=get_category_average(expenses, ExpenseCategory.FOOD) or 8,
                category=ExpenseCategory.FOOD,
                confidence=0.7,
                reasoning="Common morning expense pattern detected",
            )
        )

    if 12 <= hour <= 14:
        suggestions.append(
            SmartSuggestion(
                type=SuggestionType.TIME_BASED,
                description="Lunch expense",
                estimated_amount=get_category_average(expenses, ExpenseCategory.FOOD) or 12,
                category=ExpenseCategory.FOOD,
                confidence=0.8,
                reasoning="Typical lunch time spending",
            )
        )

    if now.weekday() in WEEKEND_DAYS and hour >= 19:
        suggestions.append(
            SmartSuggestion(
                type=SuggestionType.CONTEXTUAL,
                description="Weekend dinner or entertainment",
                estimated_amount=get_category_average(expenses, ExpenseCategory.ENTERTAINMENT) or 25,
                category=ExpenseCategory.ENTERTAINMENT,
                confidence=0.6,
                reasoning="Weekend evening activity pattern",
            )
        )

    return suggestions[:MAX_SUGGESTIONS]
