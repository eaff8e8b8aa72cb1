"""Rule-based category inference from free-text descriptions."""

import re
from dataclasses import dataclass

from ..core.models import EXPENSE_CATEGORIES, CategorySuggestion, ExpenseCategory

PATTERN_SCORE = 0.3
MAX_CONFIDENCE = 0.95
FLOOR_CONFIDENCE = 0.1


@dataclass(frozen=True)
class CategoryRules:
    """Keywords and patterns that vote for one category."""

    keywords: tuple[str, ...]
    patterns: tuple[re.Pattern, ...]


def _word_pattern(*words: str) -> re.Pattern:
    return re.compile(r"\b(" + "|".join(words) + r")\b", re.IGNORECASE)


CATEGORY_RULES: dict[ExpenseCategory, CategoryRules] = {
    ExpenseCategory.FOOD: CategoryRules(
        keywords=(
            "restaurant",
            "cafe",
            "pizza",
            "burger",
            "lunch",
            "dinner",
            "breakfast",
            "grocery",
            "starbucks",
            "mcdonalds",
            "food",
            "eat",
            "meal",
            "snack",
            "coffee",
        ),
        patterns=(
            _word_pattern(
                "eat", "food", "meal", "restaurant", "cafe", "pizza", "burger", "lunch", "dinner", "breakfast",
                "grocery", "coffee",
            ),
        ),
    ),
    ExpenseCategory.TRANSPORTATION: CategoryRules(
        keywords=(
            "gas",
            "fuel",
            "uber",
            "lyft",
            "taxi",
            "bus",
            "train",
            "parking",
            "metro",
            "transit",
            "car",
            "vehicle",
            "transport",
        ),
        patterns=(_word_pattern("gas", "fuel", "uber", "lyft", "taxi", "bus", "train", "parking", "metro", "transit"),),
    ),
    ExpenseCategory.ENTERTAINMENT: CategoryRules(
        keywords=(
            "movie",
            "cinema",
            "netflix",
            "spotify",
            "game",
            "concert",
            "show",
            "theater",
            "entertainment",
            "fun",
            "hobby",
        ),
        patterns=(
            _word_pattern(
                "movie", "cinema", "netflix", "spotify", "game", "concert", "show", "theater", "entertainment"
            ),
        ),
    ),
    ExpenseCategory.SHOPPING: CategoryRules(
        keywords=(
            "amazon",
            "store",
            "shop",
            "buy",
            "purchase",
            "retail",
            "clothing",
            "shoes",
            "electronics",
            "book",
        ),
        patterns=(
            _word_pattern(
                "amazon", "store", "shop", "buy", "purchase", "retail", "clothing", "shoes", "electronics", "book"
            ),
        ),
    ),
    ExpenseCategory.BILLS: CategoryRules(
        keywords=(
            "electric",
            "water",
            "internet",
            "phone",
            "rent",
            "insurance",
            "bill",
            "utility",
            "subscription",
            "payment",
        ),
        patterns=(
            _word_pattern(
                "electric", "water", "internet", "phone", "rent", "insurance", "bill", "utility", "subscription",
                "payment",
            ),
        ),
    ),
    ExpenseCategory.OTHER: CategoryRules(
        keywords=("misc", "other", "various", "unknown"),
        patterns=(_word_pattern("misc", "other", "various", "unknown"),),
    ),
}


def score_category(description: str, rules: CategoryRules) -> float:
    """Score a normalized description against one category's rules.

    Each contained keyword adds its length relative to the description length,
    so longer, more specific hits weigh more. Each matching pattern adds a flat
    ``PATTERN_SCORE``.
    """
    if not description:
        return 0.0

    score = 0.0
    for keyword in rules.keywords:
        if keyword in description:
            score += len(keyword) / len(description)

    for pattern in rules.patterns:
        if pattern.search(description):
            score += PATTERN_SCORE

    return score


def get_alternative_categories(primary: ExpenseCategory) -> list[ExpenseCategory]:
    """First two categories in enumeration order, excluding the primary one."""
    return [category for category in EXPENSE_CATEGORIES if category != primary][:2]


def suggest_category(description: str) -> CategorySuggestion:
    """Infer the most likely category for an expense description.

    Categories are evaluated in ``EXPENSE_CATEGORIES`` order. A category only
    takes over when its raw score beats the current (capped) best confidence,
    so earlier categories win ties. Falls back to ``Other`` at the floor
    confidence when nothing scores above it.
    """
    desc = (description or "").lower().strip()

    best_category = ExpenseCategory.OTHER
    best_confidence = FLOOR_CONFIDENCE

    for category in EXPENSE_CATEGORIES:
        score = score_category(desc, CATEGORY_RULES[category])
        if score > best_confidence:
            best_category = category
            best_confidence = min(score, MAX_CONFIDENCE)

    return CategorySuggestion(
        category=best_category,
        confidence=best_confidence,
        alternatives=get_alternative_categories(best_category),
    )
