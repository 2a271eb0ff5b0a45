"""Streamlit app for the Budget Planner.

This module defines the user interface and orchestrates storage, the
prediction engine, the savings advisor and the chart helpers.  The page
shows one month at a time: its budget, the expenses logged against it,
a category breakdown, next month's predicted expenses and personalised
savings suggestions.

To run the dashboard from the command line::

    streamlit run budget_planner/dashboard.py

or use ``run_dashboard.py`` at the project root.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Optional, Tuple

import pandas as pd
import streamlit as st

# Conditional imports to support execution both as part of a package
# and directly as a script via ``streamlit run budget_planner/dashboard.py``.
if __package__:
    from . import data_processing as dp
    from . import storage
    from . import visualization as viz
    from .categories import CATEGORY_KEYS, get_category_icon, get_category_label
    from .formatting import format_currency, format_month_label, format_prediction_date
    from .models import Expense, InvalidExpenseError, create_expense, to_month
    from .predictions import get_prediction_summary, predict
    from .savings import advise, get_savings_summary
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from budget_planner import data_processing as dp  # type: ignore
    from budget_planner import storage  # type: ignore
    from budget_planner import visualization as viz  # type: ignore
    from budget_planner.categories import CATEGORY_KEYS, get_category_icon, get_category_label  # type: ignore
    from budget_planner.formatting import format_currency, format_month_label, format_prediction_date  # type: ignore
    from budget_planner.models import Expense, InvalidExpenseError, create_expense, to_month  # type: ignore
    from budget_planner.predictions import get_prediction_summary, predict  # type: ignore
    from budget_planner.savings import advise, get_savings_summary  # type: ignore


def shift_month(month: Any, delta: int) -> pd.Period:
    """Move a month reference forwards or backwards by ``delta`` months."""
    return to_month(month) + delta


def validate_expense_form(
    name: str,
    amount: Any,
    category: str,
    expense_date: Any,
    spent: float,
    budget: float,
) -> Tuple[Optional[Expense], Optional[str]]:
    """Build an expense from form input.

    Returns ``(expense, None)`` on success or ``(None, message)`` when the
    input is invalid or the expense would exceed a budget that is set.
    """
    try:
        expense = create_expense(name, amount, category, expense_date)
    except InvalidExpenseError as exc:
        return None, f"Please fill in every field correctly: {exc}"
    if budget > 0 and spent + expense.amount > budget:
        return None, "This expense exceeds the remaining budget and cannot be logged."
    return expense, None


def _ensure_state() -> None:
    if 'planner_state' not in st.session_state:
        st.session_state['planner_state'] = storage.load_state()
    if 'current_month' not in st.session_state:
        st.session_state['current_month'] = to_month()


def _persist() -> None:
    storage.save_state(st.session_state['planner_state'])


def render_header() -> None:
    month = st.session_state['current_month']
    col_prev, col_title, col_next = st.columns([1, 4, 1])
    with col_prev:
        if st.button("◀", help="Previous month"):
            st.session_state['current_month'] = shift_month(month, -1)
            st.rerun()
    with col_title:
        st.title(format_month_label(month))
    with col_next:
        if st.button("▶", help="Next month"):
            st.session_state['current_month'] = shift_month(month, 1)
            st.rerun()


def render_budget(month: pd.Period, budget: float, summary: dict) -> None:
    st.subheader("Month summary")
    col1, col2, col3 = st.columns(3)
    col1.metric("Budget", format_currency(budget))
    col2.metric("Spent", format_currency(summary['spent']))
    col3.metric("Remaining", format_currency(summary['remaining']))
    st.plotly_chart(viz.create_budget_usage_chart(budget, summary['spent']), use_container_width=True)

    with st.form("budget_form"):
        new_budget = st.number_input(
            "Monthly budget",
            min_value=0.0,
            step=50.0,
            value=float(budget),
        )
        if st.form_submit_button("Save budget"):
            state = st.session_state['planner_state']
            try:
                state['budgets'] = storage.set_month_budget(state['budgets'], month, new_budget)
            except ValueError as exc:
                st.error(str(exc))
            else:
                _persist()
                st.rerun()


def render_add_expense(month: pd.Period, budget: float, spent: float) -> None:
    st.subheader("➕ Add expense")
    with st.form("add_expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Name")
            category = st.selectbox(
                "Category",
                options=list(CATEGORY_KEYS),
                format_func=lambda key: f"{get_category_icon(key)} {get_category_label(key)}",
            )
        with col2:
            amount = st.number_input("Amount", min_value=0.0, step=1.0)
            expense_date = st.date_input("Date", value=month.start_time.date())
        if st.form_submit_button("Add expense"):
            expense, error = validate_expense_form(name, amount, category, expense_date, spent, budget)
            if error:
                st.error(error)
            else:
                state = st.session_state['planner_state']
                state['expenses'] = storage.add_expense(state['expenses'], expense)
                _persist()
                st.rerun()


def render_expense_list(current: pd.DataFrame) -> None:
    st.subheader("Expenses")
    if current.empty:
        st.info("No expenses logged for this month yet.")
        return
    options = ["All"] + sorted(current['Category'].unique())
    selected = st.selectbox("Filter by category", options=options, format_func=lambda key: key if key == "All" else get_category_label(key))
    rows = current if selected == "All" else current[current['Category'] == selected]
    table = rows.sort_values('Date', ascending=False)[['Date', 'Name', 'Category', 'Amount']].copy()
    table['Date'] = table['Date'].dt.date
    table['Category'] = table['Category'].map(lambda key: f"{get_category_icon(key)} {get_category_label(key)}")
    st.dataframe(table, hide_index=True, use_container_width=True)


def render_category_distribution(current: pd.DataFrame) -> None:
    st.subheader("Spending by category")
    totals = dp.aggregate_by_category(current)
    if totals.empty:
        st.info("Add some expenses to see the category distribution.")
        return
    st.plotly_chart(viz.create_category_distribution_chart(totals), use_container_width=True)


def render_predictions(expenses: list, month: pd.Period) -> None:
    next_month = shift_month(month, 1)
    st.subheader(f"🔮 Predictions for {format_month_label(next_month)}")
    result = predict(expenses, month)
    if not result.predictions:
        st.info("Not enough history to predict next month's expenses.")
        return

    summary = get_prediction_summary(result.predictions)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total predicted", format_currency(result.total_predicted))
    col2.metric("Categories", summary['category_count'])
    col3.metric("High confidence", summary['high_confidence_count'])
    col4.metric("Recurring", summary['recurring_count'])
    st.caption(f"Overall confidence: {result.confidence * 100:.0f}%")

    chart_col, bar_col = st.columns(2)
    with chart_col:
        st.plotly_chart(viz.create_predicted_category_chart(result.predictions), use_container_width=True)
    with bar_col:
        st.plotly_chart(viz.create_top_predictions_chart(result.predictions), use_container_width=True)

    for prediction in result.predictions:
        st.markdown(
            f"{prediction.icon} **{prediction.name}** · {format_currency(prediction.amount)} · "
            f"{format_prediction_date(prediction.estimated_date)} · "
            f"confidence {prediction.confidence * 100:.0f}%"
        )


def render_suggestions(expenses: list, budget: float, month: pd.Period) -> None:
    st.subheader("💡 Savings suggestions")
    result = advise(expenses, budget, month)
    summary = get_savings_summary(result.suggestions)
    col1, col2, col3 = st.columns(3)
    col1.metric("Potential savings", format_currency(result.total_potential_savings))
    col2.metric("Suggestions", summary['total_suggestions'])
    col3.metric("High priority", summary['high_priority_suggestions'])
    st.plotly_chart(viz.create_savings_chart(result.suggestions), use_container_width=True)

    for suggestion in result.suggestions:
        with st.expander(f"{suggestion.title} ({suggestion.priority})"):
            st.write(suggestion.description)
            for item in suggestion.action_items:
                st.markdown(f"- {item}")
            if suggestion.potential_savings > 0:
                st.caption(f"Potential savings: {format_currency(suggestion.potential_savings)}")


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(
        page_title="Budget Planner",
        page_icon="💰",
        layout="wide",
    )
    _ensure_state()
    render_header()

    month = st.session_state['current_month']
    state = st.session_state['planner_state']
    expenses = state['expenses']
    budget = storage.get_month_budget(state['budgets'], month)

    df, skipped = dp.expenses_to_frame(expenses)
    if skipped:
        st.warning(f"{skipped} stored expense(s) could not be read and were ignored.")
    current = dp.current_month_expenses(df, month)
    summary = dp.month_summary(expenses, budget, month)

    left, right = st.columns(2)
    with left:
        render_budget(month, budget, summary)
    with right:
        render_add_expense(month, budget, summary['spent'])
        render_expense_list(current)

    render_category_distribution(current)
    st.plotly_chart(viz.create_monthly_spending_chart(dp.monthly_totals(df)), use_container_width=True)
    render_predictions(expenses, month)
    render_suggestions(expenses, budget, month)


if __name__ == "__main__":  # pragma: no cover
    main()
