"""Domain records shared by the analytics engine and the application shell."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

import numpy as np
import pandas as pd

from .categories import normalize_category

PREDICTION_SOURCE_PATTERN = 'pattern_analysis'
PREDICTION_SOURCE_HISTORICAL = 'historical_average'


class InvalidExpenseError(ValueError):
    """Raised when an expense cannot be created from user input."""


def new_id(prefix: str = '') -> str:
    token = uuid4().hex
    return f"{prefix}-{token}" if prefix else token


def to_month(value: Any = None) -> pd.Period:
    """Normalise a month reference to a monthly :class:`pandas.Period`.

    Accepts a ``Period``, ``"YYYY-MM"``/``"YYYY-MM-DD"`` strings, ``date``,
    ``datetime`` or ``Timestamp``.  ``None`` means the current month.
    """
    if value is None:
        return pd.Period(pd.Timestamp.now().date(), freq='M')
    if isinstance(value, pd.Period):
        return value.asfreq('M')
    return pd.Period(value, freq='M')


def month_key(value: Any = None) -> str:
    """Return the ``YYYY-MM`` key used to index monthly budgets."""
    return str(to_month(value))


def next_month(value: Any = None) -> pd.Period:
    return to_month(value) + 1


def parse_expense_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = pd.to_datetime(value, format='%Y-%m-%d', errors='coerce')
    if pd.isna(parsed):
        raise InvalidExpenseError(f"Invalid expense date: {value!r}")
    return parsed.date()


@dataclass(frozen=True)
class Expense:
    id: str
    name: str
    amount: float
    category: str
    date: date

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'amount': self.amount,
            'category': self.category,
            'date': self.date.isoformat(),
        }


def create_expense(name: str, amount: Any, category: str, expense_date: Any) -> Expense:
    """Validate user input and build a new :class:`Expense`.

    Raises:
        InvalidExpenseError: if any field is missing or invalid.
    """
    clean_name = name.strip() if isinstance(name, str) else ''
    if not clean_name:
        raise InvalidExpenseError("Expense name cannot be empty")

    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise InvalidExpenseError(f"Invalid expense amount: {amount!r}") from None
    if not np.isfinite(value) or value <= 0:
        raise InvalidExpenseError("Expense amount must be greater than zero")

    key = normalize_category(category)
    if key is None:
        raise InvalidExpenseError(f"Unknown expense category: {category!r}")

    return Expense(
        id=new_id(),
        name=clean_name,
        amount=value,
        category=key,
        date=parse_expense_date(expense_date),
    )


@dataclass
class CategoryAnalysis:
    category: str
    current_count: int
    current_total: float
    current_average: float
    previous_count: int
    previous_total: float
    previous_average: float
    frequency: float
    is_recurrent: bool
    is_important: bool
    confidence: float

    @property
    def total_count(self) -> int:
        return self.current_count + self.previous_count

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Prediction:
    id: str
    category: str
    name: str
    amount: int
    icon: str
    estimated_date: date
    confidence: float
    is_recurrent: bool
    is_important: bool
    frequency: float
    source: str = PREDICTION_SOURCE_PATTERN

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['estimated_date'] = self.estimated_date.isoformat()
        return data


@dataclass
class Suggestion:
    id: str
    type: str
    category: str
    title: str
    description: str
    action_items: List[str]
    potential_savings: float
    priority: str
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PredictionResult:
    predictions: List[Prediction] = field(default_factory=list)
    total_predicted: float = 0.0
    confidence: float = 0.0
    category_analysis: Dict[str, CategoryAnalysis] = field(default_factory=dict)
    skipped_records: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'predictions': [p.to_dict() for p in self.predictions],
            'total_predicted': self.total_predicted,
            'confidence': self.confidence,
            'category_analysis': {k: v.to_dict() for k, v in self.category_analysis.items()},
            'skipped_records': self.skipped_records,
        }


@dataclass
class SavingsResult:
    suggestions: List[Suggestion] = field(default_factory=list)
    total_potential_savings: float = 0.0
    analysis_data: Dict[str, Any] = field(default_factory=dict)
    skipped_records: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'suggestions': [s.to_dict() for s in self.suggestions],
            'total_potential_savings': self.total_potential_savings,
            'analysis_data': self.analysis_data,
            'skipped_records': self.skipped_records,
        }


def optional_budget(value: Optional[Any]) -> float:
    """Coerce a possibly-missing budget to a float, treating junk as 0."""
    if value is None:
        return 0.0
    try:
        budget = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if pd.isna(budget) else budget
