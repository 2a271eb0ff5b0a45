"""Formatting utilities for currency, dates and percentages."""

from __future__ import annotations

import calendar
from datetime import date
from typing import Any, Optional, Union

from .config import CURRENCY_SYMBOL
from .models import to_month


def format_currency(amount: Union[float, int], symbol: Optional[str] = None, decimals: int = 0) -> str:
    """Format a currency amount with thousands separators.

    Args:
        amount: The amount to format
        symbol: Currency symbol; defaults to the configured one
        decimals: Number of decimal places

    Example:
        >>> format_currency(1234.56, symbol='S/')
        'S/1,235'
        >>> format_currency(1234.56, symbol='S/', decimals=2)
        'S/1,234.56'
    """
    prefix = CURRENCY_SYMBOL if symbol is None else symbol
    formatted = f"{abs(amount):,.{decimals}f}"
    sign = '-' if amount < 0 else ''
    return f"{sign}{prefix}{formatted}"


def format_prediction_date(value: date) -> str:
    """Render a date as ``'15 Mar 2025'``."""
    return f"{value.day} {calendar.month_abbr[value.month]} {value.year}"


def format_month_label(month: Any) -> str:
    """Render a month reference as ``'March 2025'``."""
    period = to_month(month)
    return f"{calendar.month_name[period.month]} {period.year}"


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"
