"""Expense ingestion and aggregation helpers.

This module turns raw expense records (``Expense`` objects or plain
mappings loaded from the state file) into a validated pandas DataFrame
and provides the month partitioning and per-category aggregations shared
by the prediction engine, the savings advisor and the dashboard.  These
functions are designed to operate independently of any user interface
so that they can be unit tested and reused from command-line scripts.

Malformed records (blank name, unknown category, non-numeric or
non-positive amount, unparseable date) are dropped during ingestion and
counted rather than aborting the whole batch.
"""

from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from numbers import Number
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .categories import normalize_category
from .models import optional_budget, to_month

logger = logging.getLogger(__name__)

EXPENSE_COLUMNS = ['Id', 'Name', 'Amount', 'Category', 'Date']
_RECORD_KEYS = {'Id': 'id', 'Name': 'name', 'Amount': 'amount', 'Category': 'category', 'Date': 'date'}

# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


def _record_to_row(record: Any) -> Dict[str, Any]:
    if is_dataclass(record) and not isinstance(record, type):
        source = {f.name: getattr(record, f.name) for f in fields(record)}
    elif isinstance(record, Mapping):
        source = record
    else:
        source = {}
    return {column: source.get(key) for column, key in _RECORD_KEYS.items()}


def _clean_name(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else pd.NA
    return pd.NA


def _scalar_or_nan(value: Any) -> Any:
    if isinstance(value, bool):
        return np.nan
    if isinstance(value, (str, Number)):
        return value
    return np.nan


def _coerce_date(value: Any) -> pd.Timestamp:
    if isinstance(value, datetime):
        return pd.Timestamp(value.date())
    if isinstance(value, date):
        return pd.Timestamp(value)
    if isinstance(value, str):
        return pd.to_datetime(value.strip(), format='%Y-%m-%d', errors='coerce')
    return pd.NaT


def empty_expense_frame() -> pd.DataFrame:
    frame = pd.DataFrame(columns=EXPENSE_COLUMNS)
    frame['Amount'] = frame['Amount'].astype(float)
    frame['Date'] = pd.to_datetime(frame['Date'])
    return frame


def expenses_to_frame(expenses: Optional[Iterable[Any]]) -> Tuple[pd.DataFrame, int]:
    """Convert expense records into a clean DataFrame.

    Returns:
        A ``(frame, skipped)`` tuple where ``frame`` has the columns in
        :data:`EXPENSE_COLUMNS` and ``skipped`` is the number of records
        that were dropped as malformed.
    """
    rows = [_record_to_row(record) for record in (expenses or [])]
    if not rows:
        return empty_expense_frame(), 0

    df = pd.DataFrame(rows, columns=EXPENSE_COLUMNS)
    df['Name'] = df['Name'].apply(_clean_name)
    df['Category'] = df['Category'].apply(normalize_category)
    df['Amount'] = pd.to_numeric(df['Amount'].apply(_scalar_or_nan), errors='coerce').astype(float)
    df['Date'] = pd.to_datetime(df['Date'].apply(_coerce_date))

    valid = (
        df['Name'].notna()
        & df['Category'].notna()
        & np.isfinite(df['Amount'])
        & (df['Amount'] > 0)
        & df['Date'].notna()
    )
    skipped = int((~valid).sum())
    if skipped:
        logger.warning("Skipped %d malformed expense record(s)", skipped)

    clean = df[valid].copy()
    clean['Amount'] = clean['Amount'].astype(float)
    clean['Name'] = clean['Name'].astype(str)
    clean['Category'] = clean['Category'].astype(str)
    clean = clean.reset_index(drop=True)
    return clean, skipped


# ---------------------------------------------------------------------------
# Month partitioning
# ---------------------------------------------------------------------------


def split_by_month(df: pd.DataFrame, reference_month: Any) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split expenses into the reference month and everything before it.

    Expenses dated after the reference month belong to neither partition.
    """
    month = to_month(reference_month)
    if df.empty:
        return df.copy(), df.copy()
    periods = df['Date'].dt.to_period('M')
    current = df[periods == month].copy()
    prior = df[df['Date'] < month.start_time].copy()
    return current, prior


def current_month_expenses(df: pd.DataFrame, reference_month: Any) -> pd.DataFrame:
    current, _ = split_by_month(df, reference_month)
    return current


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------


def aggregate_by_category(df: pd.DataFrame) -> pd.DataFrame:
    """Total, count, average and share of spending per category.

    The result is indexed by category and sorted by total, descending.
    """
    columns = ['Total', 'Count', 'Average', 'Percentage']
    if df.empty:
        return pd.DataFrame(columns=columns)

    grouped = df.groupby('Category')['Amount'].agg(['sum', 'count', 'mean'])
    grouped.columns = ['Total', 'Count', 'Average']
    total_spent = grouped['Total'].sum()
    grouped['Percentage'] = grouped['Total'] / total_spent * 100 if total_spent > 0 else 0.0
    grouped['Count'] = grouped['Count'].astype(int)
    return grouped.sort_values('Total', ascending=False)


def monthly_totals(df: pd.DataFrame) -> pd.Series:
    """Total spending per month, indexed by ``YYYY-MM`` strings."""
    if df.empty:
        return pd.Series(dtype=float)
    totals = df.groupby(df['Date'].dt.to_period('M'))['Amount'].sum().sort_index()
    totals.index = totals.index.astype(str)
    return totals


def month_summary(expenses: Optional[Iterable[Any]], budget: Any, reference_month: Any) -> Dict[str, float]:
    """Spent/remaining overview of a single month against its budget."""
    df, _ = expenses_to_frame(expenses)
    current = current_month_expenses(df, reference_month)
    budget_value = optional_budget(budget)
    spent = float(current['Amount'].sum()) if not current.empty else 0.0
    return {
        'budget': budget_value,
        'spent': spent,
        'remaining': max(0.0, budget_value - spent),
        'percentage_spent': (spent / budget_value * 100) if budget_value > 0 else 0.0,
        'expense_count': int(len(current)),
    }


def expense_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Render a frame back into JSON-friendly expense dicts, newest first."""
    if df.empty:
        return []
    ordered = df.sort_values(['Date', 'Amount'], ascending=[False, False])
    return [
        {
            'id': row['Id'],
            'name': row['Name'],
            'amount': float(row['Amount']),
            'category': row['Category'],
            'date': row['Date'].date().isoformat(),
        }
        for _, row in ordered.iterrows()
    ]
