"""Tests for predictions, behavior insights and smart suggestions."""

from datetime import date, datetime, time

import pytest

from spendwise.core.models import ExpenseCategory, InsightType, PredictionType, SuggestionType
from spendwise.ml import prediction_engine
from spendwise.ml.prediction_engine import (
    analyze_spending_behavior,
    calculate_average_interval,
    detect_spending_anomalies,
    generate_smart_suggestions,
    predict_upcoming_expenses,
)

# October 2026: the 14th is a Wednesday, the 16th a Friday, the 17th a Saturday
WEDNESDAY_AFTERNOON = datetime(2026, 10, 14, 15, 0)
FRIDAY_AFTERNOON = datetime(2026, 10, 16, 15, 0)
SATURDAY_NOON = datetime(2026, 10, 10, 12, 0)


def _by_title(insights, title):
    return [i for i in insights if i.title == title]


class TestPredictUpcomingExpenses:
    """Test the prediction pipeline."""

    @pytest.fixture
    def history(self, make_expense):
        return [
            make_expense(20.0, ExpenseCategory.TRANSPORTATION, "Uber ride", date(2026, 10, 1)),
            make_expense(40.0, ExpenseCategory.TRANSPORTATION, "Gas station", date(2026, 10, 8)),
            make_expense(30.0, ExpenseCategory.ENTERTAINMENT, "Cinema", date(2026, 10, 3)),
            make_expense(50.0, ExpenseCategory.FOOD, "Brunch", date(2026, 10, 4)),
            make_expense(1000.0, ExpenseCategory.BILLS, "Monthly rent", date(2026, 10, 5)),
            make_expense(16.0, ExpenseCategory.BILLS, "Netflix subscription", date(2026, 10, 6)),
        ]

    def test_cold_start_defaults(self, make_expense):
        """Fewer than five expenses return the fixed defaults in fixed order."""
        for count in range(5):
            predictions = predict_upcoming_expenses([make_expense() for _ in range(count)], now=FRIDAY_AFTERNOON)

            assert [p.description for p in predictions] == ["Morning coffee", "Lunch", "Gas/Transportation"]
            assert [p.confidence for p in predictions] == [0.5, 0.6, 0.4]
            assert all(p.type == PredictionType.DEFAULT for p in predictions)

    def test_all_predictors_ranked_by_confidence(self, history):
        predictions = predict_upcoming_expenses(history, now=FRIDAY_AFTERNOON)

        assert [p.type for p in predictions] == [
            PredictionType.RECURRING,
            PredictionType.CONTEXTUAL,
            PredictionType.WEEKLY,
        ]
        assert [p.confidence for p in predictions] == [0.9, 0.7, 0.6]

    def test_recurring_bills_average(self, history):
        recurring = predict_upcoming_expenses(history, now=FRIDAY_AFTERNOON)[0]

        assert recurring.category == ExpenseCategory.BILLS
        assert recurring.estimated_amount == pytest.approx(508.0)
        assert recurring.timeframe == "this month"

    def test_weekend_prediction_averages_fri_sat_sun(self, history):
        weekly = [p for p in predict_upcoming_expenses(history, now=FRIDAY_AFTERNOON) if p.type == PredictionType.WEEKLY]

        # Cinema on Saturday the 3rd and brunch on Sunday the 4th
        assert weekly[0].estimated_amount == pytest.approx(40.0)

    def test_no_weekend_prediction_midweek(self, history):
        predictions = predict_upcoming_expenses(history, now=WEDNESDAY_AFTERNOON)

        assert PredictionType.WEEKLY not in [p.type for p in predictions]

    def test_transportation_cycle(self, history):
        contextual = [
            p for p in predict_upcoming_expenses(history, now=WEDNESDAY_AFTERNOON) if p.type == PredictionType.CONTEXTUAL
        ]

        assert len(contextual) == 1
        assert contextual[0].estimated_amount == pytest.approx(30.0)

    def test_transportation_cycle_not_due(self, history):
        """Two days after a fuel stop with a seven day cycle is too early."""
        predictions = predict_upcoming_expenses(history, now=SATURDAY_NOON)

        assert PredictionType.CONTEXTUAL not in [p.type for p in predictions]

    def test_single_transport_expense_uses_weekly_default(self, make_expense):
        history = [make_expense(25.0, ExpenseCategory.TRANSPORTATION, "Taxi", date(2026, 10, 1))]
        history += [make_expense(5.0, ExpenseCategory.SHOPPING, "Pens", date(2026, 10, 1)) for _ in range(4)]

        due = predict_upcoming_expenses(history, now=datetime(2026, 10, 7, 12, 0))
        not_due = predict_upcoming_expenses(history, now=datetime(2026, 10, 5, 12, 0))

        assert PredictionType.CONTEXTUAL in [p.type for p in due]
        assert PredictionType.CONTEXTUAL not in [p.type for p in not_due]

    def test_morning_routine_never_matches_date_only_history(self, history):
        """Expense dates have no time of day, so history never falls in the morning window."""
        predictions = predict_upcoming_expenses(history, now=datetime(2026, 10, 14, 8, 0))

        assert PredictionType.ROUTINE not in [p.type for p in predictions]

    def test_at_most_eight(self, history):
        assert len(predict_upcoming_expenses(history * 3, now=FRIDAY_AFTERNOON)) <= 8

    @pytest.mark.parametrize(
        "now, expected",
        [
            (datetime(2026, 10, 15, 15, 0), False),  # Thursday
            (datetime(2026, 10, 16, 15, 0), True),  # Friday
            (datetime(2026, 10, 17, 15, 0), True),  # Saturday
            (datetime(2026, 10, 18, 15, 0), False),  # Sunday
        ],
    )
    def test_weekend_prediction_days(self, history, now, expected):
        types = [p.type for p in predict_upcoming_expenses(history, now=now)]
        assert (PredictionType.WEEKLY in types) is expected

    def test_weekend_history_includes_friday_not_monday(self, make_expense):
        expenses = [make_expense(10.0, ExpenseCategory.FOOD, "Snack", date(2026, 10, 9))]  # Friday
        expenses += [make_expense(100.0, ExpenseCategory.FOOD, "Groceries", date(2026, 10, 12))]  # Monday
        expenses += [make_expense(100.0, ExpenseCategory.FOOD, "Groceries", date(2026, 10, 13)) for _ in range(3)]

        predictions = predict_upcoming_expenses(expenses, now=datetime(2026, 10, 17, 15, 0))

        assert [p.type for p in predictions] == [PredictionType.WEEKLY]
        assert predictions[0].estimated_amount == pytest.approx(10.0)


class TestMorningRoutineWindow:
    """Exercise the 6 to 10 o'clock window with timestamps that carry a time of day."""

    @pytest.fixture
    def history(self, make_expense):
        return [make_expense(6.0, ExpenseCategory.FOOD, "Croissant", date(2026, 10, 13)) for _ in range(5)]

    def _set_expense_hour(self, monkeypatch, hour):
        monkeypatch.setattr(
            prediction_engine, "_expense_timestamp", lambda e: datetime.combine(e.date, time(hour, 0))
        )

    @pytest.mark.parametrize("hour, expected", [(5, False), (6, True), (10, True), (11, False)])
    def test_current_hour_bounds(self, history, monkeypatch, hour, expected):
        self._set_expense_hour(monkeypatch, 8)

        predictions = predict_upcoming_expenses(history, now=datetime(2026, 10, 14, hour, 0))

        assert (PredictionType.ROUTINE in [p.type for p in predictions]) is expected

    @pytest.mark.parametrize("expense_hour, expected", [(6, True), (10, True), (11, False)])
    def test_history_hour_bounds(self, history, monkeypatch, expense_hour, expected):
        self._set_expense_hour(monkeypatch, expense_hour)

        predictions = predict_upcoming_expenses(history, now=datetime(2026, 10, 14, 8, 0))

        assert (PredictionType.ROUTINE in [p.type for p in predictions]) is expected


class TestAverageInterval:
    def test_default_for_short_lists(self, make_expense):
        assert calculate_average_interval([]) == 7
        assert calculate_average_interval([make_expense()]) == 7

    def test_mean_gap_in_date_order(self, make_expense):
        expenses = [
            make_expense(expense_date=date(2026, 10, 10)),
            make_expense(expense_date=date(2026, 10, 1)),
            make_expense(expense_date=date(2026, 10, 4)),
        ]
        assert calculate_average_interval(expenses) == pytest.approx(4.5)


class TestAnalyzeSpendingBehavior:
    """Test the insight pipeline."""

    def test_cold_start(self, make_expense):
        for count in range(3):
            insights = analyze_spending_behavior([make_expense() for _ in range(count)])

            assert len(insights) == 1
            assert insights[0].title == "Building Your Profile"
            assert insights[0].confidence == 1.0

    def test_time_and_category_insights(self, make_expense):
        expenses = [make_expense(10.0), make_expense(20.0), make_expense(30.0)]

        insights = analyze_spending_behavior(expenses)

        assert [i.title for i in insights] == ["Top Spending Category", "Peak Spending Time"]
        category, peak = insights
        assert category.type == InsightType.WARNING
        assert category.message == "100% of your spending goes to Food"
        assert category.actionable is True
        # The summed amount is reported where a percentage is expected
        assert peak.message == "You spend most during the morning (60% of total)"
        assert peak.type == InsightType.INSIGHT

    def test_category_concentration_not_actionable_when_spread(self, make_expense):
        expenses = [
            make_expense(10.0, ExpenseCategory.FOOD),
            make_expense(10.0, ExpenseCategory.BILLS),
            make_expense(10.0, ExpenseCategory.SHOPPING),
        ]

        concentration = _by_title(analyze_spending_behavior(expenses), "Top Spending Category")[0]

        assert concentration.message == "33% of your spending goes to Food"
        assert concentration.actionable is False

    def test_spending_increase(self, make_expense):
        expenses = [make_expense(10.0) for _ in range(7)] + [make_expense(20.0) for _ in range(7)]

        trend = _by_title(analyze_spending_behavior(expenses), "Spending Trend")

        assert len(trend) == 1
        assert trend[0].type == InsightType.WARNING
        assert trend[0].actionable is True
        assert trend[0].message == "Your spending increased by 100% this week"

    def test_spending_decrease(self, make_expense):
        expenses = [make_expense(20.0) for _ in range(7)] + [make_expense(10.0) for _ in range(7)]

        trend = _by_title(analyze_spending_behavior(expenses), "Spending Trend")

        assert trend[0].type == InsightType.SUCCESS
        assert trend[0].actionable is False
        assert trend[0].message == "Your spending decreased by 50% this week"

    def test_small_change_is_not_reported(self, make_expense):
        expenses = [make_expense(10.0) for _ in range(7)] + [make_expense(11.0) for _ in range(7)]

        assert _by_title(analyze_spending_behavior(expenses), "Spending Trend") == []

    def test_no_trend_without_baseline(self, make_expense):
        """Exactly seven expenses leave nothing to compare against."""
        expenses = [make_expense(10.0) for _ in range(7)]

        assert _by_title(analyze_spending_behavior(expenses), "Spending Trend") == []

    def test_single_record_baseline(self, make_expense):
        """With eight expenses the older window holds just the first one."""
        expenses = [make_expense(10.0)] + [make_expense(5.0) for _ in range(7)]

        trend = _by_title(analyze_spending_behavior(expenses), "Spending Trend")

        assert trend[0].message == "Your spending increased by 250% this week"

    def test_partial_baseline(self, make_expense):
        expenses = [make_expense(50.0) for _ in range(3)] + [make_expense(10.0) for _ in range(7)]

        trend = _by_title(analyze_spending_behavior(expenses), "Spending Trend")

        assert trend[0].message == "Your spending decreased by 53% this week"

    def test_six_record_baseline_below_threshold(self, make_expense):
        expenses = [make_expense(10.0) for _ in range(13)]

        # 70 against 60 is under the 20% threshold
        assert _by_title(analyze_spending_behavior(expenses), "Spending Trend") == []

    def test_windows_follow_list_order_not_dates(self, make_expense):
        expenses = [make_expense(100.0, expense_date=date(2026, 10, 20))]
        expenses += [make_expense(10.0, expense_date=date(2026, 10, 1)) for _ in range(7)]

        trend = _by_title(analyze_spending_behavior(expenses), "Spending Trend")

        assert trend[0].message == "Your spending decreased by 30% this week"

    def test_ranked_and_capped(self, make_expense):
        expenses = [make_expense(10.0) for _ in range(9)] + [make_expense(100.0)]

        insights = analyze_spending_behavior(expenses)
        confidences = [i.confidence for i in insights]

        assert len(insights) <= 6
        assert confidences == sorted(confidences, reverse=True)


class TestDetectSpendingAnomalies:
    def test_identical_amounts_have_no_anomaly(self, make_expense):
        assert detect_spending_anomalies([make_expense(25.0) for _ in range(10)]) == []

    def test_needs_ten_expenses(self, make_expense):
        expenses = [make_expense(10.0) for _ in range(8)] + [make_expense(500.0)]
        assert detect_spending_anomalies(expenses) == []

    def test_recent_outlier(self, make_expense):
        # mean 19, population std dev 27; 100 is 81 away
        expenses = [make_expense(10.0) for _ in range(9)] + [make_expense(100.0)]

        anomalies = detect_spending_anomalies(expenses)

        assert len(anomalies) == 1
        assert anomalies[0].type == InsightType.INFO
        assert anomalies[0].actionable is False
        assert anomalies[0].message.startswith("1 recent expense(s)")

    def test_old_outliers_are_ignored(self, make_expense):
        expenses = [make_expense(100.0)] + [make_expense(10.0) for _ in range(9)]
        assert detect_spending_anomalies(expenses) == []


class TestGenerateSmartSuggestions:
    """Test time-of-day suggestions."""

    def test_morning_uses_food_average(self, make_expense):
        expenses = [make_expense(10.0, ExpenseCategory.FOOD), make_expense(20.0, ExpenseCategory.FOOD)]

        suggestions = generate_smart_suggestions(expenses, now=datetime(2026, 10, 13, 8, 0))

        assert len(suggestions) == 1
        assert suggestions[0].type == SuggestionType.TIME_BASED
        assert suggestions[0].estimated_amount == pytest.approx(15.0)
        assert suggestions[0].confidence == 0.7

    def test_fallback_amounts(self):
        morning = generate_smart_suggestions([], now=datetime(2026, 10, 13, 8, 0))
        lunch = generate_smart_suggestions([], now=datetime(2026, 10, 13, 13, 0))
        weekend = generate_smart_suggestions([], now=datetime(2026, 10, 17, 20, 0))

        assert morning[0].estimated_amount == 8
        assert lunch[0].estimated_amount == 12
        assert lunch[0].confidence == 0.8
        assert weekend[0].estimated_amount == 25
        assert weekend[0].type == SuggestionType.CONTEXTUAL

    def test_weekend_evening_uses_entertainment_average(self, make_expense):
        expenses = [make_expense(40.0, ExpenseCategory.ENTERTAINMENT), make_expense(5.0, ExpenseCategory.FOOD)]

        suggestions = generate_smart_suggestions(expenses, now=datetime(2026, 10, 18, 19, 30))

        assert [s.category for s in suggestions] == [ExpenseCategory.ENTERTAINMENT]
        assert suggestions[0].estimated_amount == pytest.approx(40.0)

    def test_nothing_in_the_afternoon(self, make_expense):
        assert generate_smart_suggestions([make_expense()], now=WEDNESDAY_AFTERNOON) == []

    @pytest.mark.parametrize(
        "hour, expected",
        [
            (6, []),
            (7, ["Morning coffee or breakfast"]),
            (10, ["Morning coffee or breakfast"]),
            (11, []),
            (12, ["Lunch expense"]),
            (14, ["Lunch expense"]),
            (15, []),
        ],
    )
    def test_weekday_hour_bounds(self, hour, expected):
        suggestions = generate_smart_suggestions([], now=datetime(2026, 10, 13, hour, 0))
        assert [s.description for s in suggestions] == expected

    @pytest.mark.parametrize("now, expected", [(datetime(2026, 10, 17, 18, 59), 0), (datetime(2026, 10, 17, 19, 0), 1)])
    def test_weekend_evening_starts_at_seven(self, now, expected):
        assert len(generate_smart_suggestions([], now=now)) == expected

    def test_friday_evening_is_not_weekend(self):
        assert generate_smart_suggestions([], now=datetime(2026, 10, 16, 20, 0)) == []
