"""Persistence helpers for monthly budgets and logged expenses.

State lives in a single JSON document::

    {"budgets": {"2025-03": 1500.0}, "expenses": [{...}, ...]}

Loading never raises: a missing or malformed file yields empty defaults.
Files written by older versions that kept one global ``"budget"`` value
are migrated into the per-month map on load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .config import STATE_PATH
from .models import Expense, month_key, optional_budget

logger = logging.getLogger(__name__)

LEGACY_BUDGET_KEY = 'budget'


def _default_state() -> Dict[str, Any]:
    return {'budgets': {}, 'expenses': []}


def load_state(path: Path | None = None, today: Any = None) -> Dict[str, Any]:
    """Load budgets and expenses, falling back to empty defaults.

    Args:
        path: State file; defaults to the configured ``STATE_PATH``.
        today: Reference date for migrating a legacy global budget into
            the per-month map.  Defaults to the current month.
    """
    target = path or STATE_PATH
    if not target.exists():
        return _default_state()
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read state file %s, starting empty: %s", target, exc)
        return _default_state()
    if not isinstance(data, dict):
        return _default_state()

    budgets = _clean_budgets(data.get('budgets'))
    if 'budgets' not in data and LEGACY_BUDGET_KEY in data:
        legacy = optional_budget(data.get(LEGACY_BUDGET_KEY))
        if legacy > 0:
            budgets[month_key(today)] = legacy
            logger.info("Migrated legacy budget %.2f into %s", legacy, month_key(today))

    expenses = data.get('expenses')
    if not isinstance(expenses, list):
        expenses = []

    return {
        'budgets': budgets,
        'expenses': expenses,
    }


def _clean_budgets(raw: Any) -> Dict[str, float]:
    if not isinstance(raw, dict):
        return {}
    budgets: Dict[str, float] = {}
    for key, value in raw.items():
        amount = optional_budget(value)
        if amount > 0:
            budgets[str(key)] = amount
    return budgets


def save_state(state: Dict[str, Any], path: Path | None = None) -> None:
    target = path or STATE_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        'budgets': dict(state.get('budgets') or {}),
        'expenses': [_serialize_expense(e) for e in state.get('expenses') or []],
    }
    with target.open('w', encoding='utf-8') as handle:
        json.dump(payload, handle, indent=2, sort_keys=True, ensure_ascii=False)


def _serialize_expense(expense: Any) -> Any:
    if isinstance(expense, Expense):
        return expense.to_dict()
    return expense


def get_month_budget(budgets: Dict[str, float], month: Any) -> float:
    return optional_budget(budgets.get(month_key(month)))


def set_month_budget(budgets: Dict[str, float], month: Any, amount: float) -> Dict[str, float]:
    """Return a copy of ``budgets`` with ``month`` set to ``amount``.

    Raises:
        ValueError: If the amount is not a positive number.
    """
    value = optional_budget(amount)
    if value <= 0:
        raise ValueError("Budget must be greater than zero")
    updated = dict(budgets)
    updated[month_key(month)] = value
    return updated


def add_expense(expenses: List[Any], expense: Expense) -> List[Any]:
    """Return a copy of ``expenses`` with ``expense`` appended."""
    return list(expenses) + [expense.to_dict()]
