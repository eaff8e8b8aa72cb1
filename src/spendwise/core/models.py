"""Core data models for SpendWise."""

import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ExpenseCategory(str, Enum):
    """Fixed set of expense categories."""

    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    OTHER = "Other"


# Iteration order used for tie-breaks everywhere
EXPENSE_CATEGORIES: tuple[ExpenseCategory, ...] = (
    ExpenseCategory.FOOD,
    ExpenseCategory.TRANSPORTATION,
    ExpenseCategory.ENTERTAINMENT,
    ExpenseCategory.SHOPPING,
    ExpenseCategory.BILLS,
    ExpenseCategory.OTHER,
)

CATEGORY_COLORS: dict[ExpenseCategory, str] = {
    ExpenseCategory.FOOD: "#ef4444",
    ExpenseCategory.TRANSPORTATION: "#3b82f6",
    ExpenseCategory.ENTERTAINMENT: "#8b5cf6",
    ExpenseCategory.SHOPPING: "#f59e0b",
    ExpenseCategory.BILLS: "#10b981",
    ExpenseCategory.OTHER: "#6b7280",
}

CATEGORY_ICONS: dict[ExpenseCategory, str] = {
    ExpenseCategory.FOOD: "🍽️",
    ExpenseCategory.TRANSPORTATION: "🚗",
    ExpenseCategory.ENTERTAINMENT: "🎬",
    ExpenseCategory.SHOPPING: "🛍️",
    ExpenseCategory.BILLS: "📄",
    ExpenseCategory.OTHER: "📝",
}


def generate_expense_id() -> str:
    """Generate an opaque, never reused expense ID."""
    return uuid.uuid4().hex


class ExpenseInput(BaseModel):
    """Expense as entered by the user."""

    date: date
    amount: float = Field(..., gt=0.0)
    category: ExpenseCategory
    description: str = Field(..., min_length=1, max_length=500)

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v: str) -> str:
        """Trim surrounding whitespace before length checks."""
        return v.strip() if isinstance(v, str) else v


# Alias keeps the `date` field name from shadowing the type in class bodies
OptionalDate = date | None


class ExpenseUpdate(BaseModel):
    """Partial expense update."""

    date: OptionalDate = None
    amount: float | None = Field(None, gt=0.0)
    category: ExpenseCategory | None = None
    description: str | None = Field(None, min_length=1, max_length=500)

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v


class Expense(BaseModel):
    """Stored expense record."""

    id: str = Field(..., min_length=1)
    date: date
    # Positivity is enforced on entry only
    amount: float
    category: ExpenseCategory
    description: str
    created_at: datetime
    updated_at: datetime


class ExpenseFilters(BaseModel):
    """Filters for expense listings."""

    category: ExpenseCategory | None = None
    start_date: date | None = None
    end_date: date | None = None
    search_query: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def all_means_no_filter(cls, v):
        """Treat the "All" pseudo-category as no category filter."""
        if isinstance(v, str) and v.strip().lower() in ("", "all"):
            return None
        return v


class CategorySuggestion(BaseModel):
    """Best-guess category for a free-text description."""

    category: ExpenseCategory
    confidence: float = Field(ge=0.0, le=1.0)
    alternatives: list[ExpenseCategory]


class VendorStats(BaseModel):
    """Aggregated spending for one vendor."""

    name: str
    total_spent: float
    transaction_count: int
    percentage: float
    average_transaction: float
    categories: dict[ExpenseCategory, float]
    last_transaction: date


class ExpenseSummary(BaseModel):
    """Dashboard summary figures."""

    total_spending: float
    monthly_spending: float
    category_breakdown: dict[ExpenseCategory, float]
    top_category: ExpenseCategory | None
    expense_count: int


class CategoryStats(BaseModel):
    """Spending totals for one category."""

    category: ExpenseCategory
    total_amount: float
    count: int
    percentage: float
    average_amount: float


class PredictionType(str, Enum):
    """Source of a predicted expense."""

    ROUTINE = "routine"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    RECURRING = "recurring"
    CONTEXTUAL = "contextual"
    DEFAULT = "default"


class PredictedExpense(BaseModel):
    """Expense expected in the near future."""

    description: str
    estimated_amount: float
    category: ExpenseCategory
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    timeframe: str
    type: PredictionType


class InsightType(str, Enum):
    """Display tone of a behavior insight."""

    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    INSIGHT = "insight"


class BehaviorInsight(BaseModel):
    """Observation about spending behavior."""

    type: InsightType
    title: str
    message: str
    confidence: float = Field(ge=0.0, le=1.0)
    actionable: bool


class SuggestionType(str, Enum):
    """Trigger of a smart suggestion."""

    TIME_BASED = "time-based"
    PATTERN_BASED = "pattern-based"
    CONTEXTUAL = "contextual"
    PREDICTIVE = "predictive"


class SmartSuggestion(BaseModel):
    """Context-dependent expense the user may want to record now."""

    type: SuggestionType
    description: str
    estimated_amount: float
    category: ExpenseCategory
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
