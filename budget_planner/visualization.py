"""Plotly visualisation helpers for the budget planner.

Each function accepts the output of :mod:`data_processing`,
:mod:`predictions` or :mod:`savings` and produces an interactive Plotly
figure that Streamlit can render via ``st.plotly_chart``.  Empty inputs
produce an empty figure with an explanatory title rather than raising.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .categories import get_category_color, get_category_label
from .models import Prediction, Suggestion
from .savings import get_priority_color

CONFIDENCE_COLORS = {
    'high': '#10b981',
    'medium': '#f59e0b',
    'low': '#ef4444',
}
SPENT_COLOR = '#ef4444'
REMAINING_COLOR = '#10b981'
TOP_PREDICTIONS = 8
MAX_LABEL_LENGTH = 15


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def confidence_color(confidence: float) -> str:
    if confidence >= 0.7:
        return CONFIDENCE_COLORS['high']
    if confidence >= 0.5:
        return CONFIDENCE_COLORS['medium']
    return CONFIDENCE_COLORS['low']


def create_budget_usage_chart(budget: float, spent: float, title: str | None = None) -> go.Figure:
    """Donut showing spent vs remaining budget for the month.

    The percentage spent is shown in the hole of the donut.
    """
    if budget <= 0 and spent <= 0:
        return _empty_figure("No budget set")
    remaining = max(0.0, budget - spent)
    percentage = (spent / budget * 100) if budget > 0 else 0.0
    fig = go.Figure(
        go.Pie(
            labels=["Spent", "Remaining"],
            values=[spent, remaining],
            hole=0.7,
            marker=dict(colors=[SPENT_COLOR, REMAINING_COLOR]),
            sort=False,
        )
    )
    fig.update_layout(
        title=title or "Month summary",
        annotations=[dict(text=f"{percentage:.1f}%", x=0.5, y=0.5, showarrow=False, font_size=22)],
        showlegend=True,
    )
    return fig


def create_category_distribution_chart(category_totals: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Donut of spending per category.

    Parameters
    ----------
    category_totals : pandas.DataFrame
        Output of :func:`data_processing.aggregate_by_category`.
    """
    if category_totals.empty:
        return _empty_figure()
    df = category_totals.reset_index().rename(columns={'index': 'Category'})
    df['Label'] = df['Category'].map(get_category_label)
    colors = [get_category_color(c) for c in df['Category']]
    fig = go.Figure(
        go.Pie(
            labels=df['Label'],
            values=df['Total'],
            hole=0.5,
            marker=dict(colors=colors),
        )
    )
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_monthly_spending_chart(totals: pd.Series, title: str | None = None) -> go.Figure:
    """Bar chart of total spending per month from :func:`data_processing.monthly_totals`."""
    if totals.empty:
        return _empty_figure()
    df = totals.reset_index()
    df.columns = ["Month", "Spent"]
    fig = px.bar(df, x="Month", y="Spent")
    fig.update_layout(
        title=title or "Spending per month",
        xaxis_title="Month",
        yaxis_title="Spent",
    )
    return fig


def create_predicted_category_chart(predictions: Sequence[Prediction], title: str | None = None) -> go.Figure:
    """Donut of predicted next-month spending grouped by category."""
    if not predictions:
        return _empty_figure("No predictions available")
    df = pd.DataFrame([{'Category': p.category, 'Amount': p.amount} for p in predictions])
    totals = df.groupby('Category', sort=False)['Amount'].sum()
    fig = go.Figure(
        go.Pie(
            labels=[get_category_label(c) for c in totals.index],
            values=totals.values,
            hole=0.5,
            marker=dict(colors=[get_category_color(c) for c in totals.index]),
        )
    )
    fig.update_layout(title=title or "Predicted spending by category")
    return fig


def create_top_predictions_chart(predictions: Sequence[Prediction], title: str | None = None) -> go.Figure:
    """Bar chart of the largest predicted expenses colored by confidence."""
    if not predictions:
        return _empty_figure("No predictions available")
    top = sorted(predictions, key=lambda p: p.amount, reverse=True)[:TOP_PREDICTIONS]
    labels = [
        p.name if len(p.name) <= MAX_LABEL_LENGTH else p.name[:MAX_LABEL_LENGTH] + '...'
        for p in top
    ]
    fig = go.Figure(
        go.Bar(
            x=labels,
            y=[p.amount for p in top],
            marker_color=[confidence_color(p.confidence) for p in top],
            name="Estimated amount",
        )
    )
    fig.update_layout(
        title=title or "Largest predicted expenses",
        xaxis_title="Expense",
        yaxis_title="Estimated amount",
    )
    return fig


def create_savings_chart(suggestions: Sequence[Suggestion], title: str | None = None) -> go.Figure:
    """Horizontal bar chart of potential savings per suggestion."""
    with_savings = [s for s in suggestions if s.potential_savings > 0]
    if not with_savings:
        return _empty_figure("No savings estimates")
    fig = go.Figure(
        go.Bar(
            x=[s.potential_savings for s in with_savings],
            y=[s.title for s in with_savings],
            orientation='h',
            marker_color=[get_priority_color(s.priority) for s in with_savings],
        )
    )
    fig.update_layout(
        title=title or "Potential monthly savings",
        xaxis_title="Potential savings",
        yaxis=dict(autorange='reversed'),
    )
    return fig
