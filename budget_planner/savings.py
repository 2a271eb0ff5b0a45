"""Personalised savings suggestions from the current month's spending.

The advisor looks only at the reference month: budget usage, the heaviest
categories, frequent small purchases, savings and subscription levels.
Each rule independently contributes a :class:`Suggestion` with a rough
monthly savings estimate.  Estimates are summed as-is; overlapping
suggestions are not reconciled.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .categories import get_category_icon, get_category_label, get_savings_template
from .data_processing import aggregate_by_category, current_month_expenses, expenses_to_frame
from .formatting import format_currency
from .models import SavingsResult, Suggestion, optional_budget, to_month

logger = logging.getLogger(__name__)

URGENT_USAGE_THRESHOLD = 90
WARNING_USAGE_THRESHOLD = 75
URGENT_SAVINGS_RATE = 0.10
WARNING_SAVINGS_RATE = 0.05

HIGH_SPENDING_SHARE = 15
HIGH_PRIORITY_SHARE = 25
MAX_CATEGORY_SUGGESTIONS = 2

SMALL_EXPENSE_MIN = 5
SMALL_EXPENSE_MAX = 50
SMALL_EXPENSE_MIN_COUNT = 3
SMALL_EXPENSE_SAVINGS_RATE = 0.30

SAVINGS_CATEGORY = 'SAVINGS'
MIN_SAVINGS_SHARE = 0.10
EMERGENCY_FUND_RATE = 0.10

SUBSCRIPTIONS_CATEGORY = 'SUBSCRIPTIONS'
SUBSCRIPTION_AUDIT_THRESHOLD = 100
SUBSCRIPTION_SAVINGS_RATE = 0.25

MIN_PERSONALISED_SUGGESTIONS = 3
PRICE_COMPARISON_RATE = 0.05
BULK_BUYING_RATE = 0.03

PRIORITY_ORDER = {'high': 3, 'medium': 2, 'low': 1}
PRIORITY_COLORS = {
    'high': '#ef4444',
    'medium': '#f59e0b',
    'low': '#10b981',
}
SUGGESTION_TYPE_COLORS = {
    'urgent': '#dc2626',
    'warning': '#d97706',
    'optimization': '#059669',
    'habit': '#7c3aed',
    'financial-health': '#0891b2',
    'getting-started': '#4f46e5',
    'general': '#6b7280',
}
DEFAULT_COLOR = '#6b7280'


def advise(expenses: Optional[Iterable[Any]], budget: Any = 0, reference_month: Any = None) -> SavingsResult:
    """Generate ranked savings suggestions for the reference month.

    Args:
        expenses: Full expense history; only the reference month is used.
        budget: The month's budget.  ``None`` or ``0`` means no budget set.
        reference_month: The month being viewed.

    Returns:
        A :class:`SavingsResult`.  With no expenses in the month the result
        holds the two getting-started suggestions and no analysis data.
    """
    df, skipped = expenses_to_frame(expenses)
    current = current_month_expenses(df, to_month(reference_month))
    if current.empty:
        return SavingsResult(suggestions=basic_savings_suggestions(), skipped_records=skipped)

    analysis_data = analyze_spending_patterns(current, optional_budget(budget))
    suggestions = generate_personalized_suggestions(analysis_data)
    total = float(sum(s.potential_savings for s in suggestions))

    logger.debug("Generated %d savings suggestion(s) worth %.2f", len(suggestions), total)
    return SavingsResult(
        suggestions=suggestions,
        total_potential_savings=total,
        analysis_data=analysis_data,
        skipped_records=skipped,
    )


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def analyze_spending_patterns(current: pd.DataFrame, budget: float) -> Dict[str, Any]:
    """Summarise a month of expenses for the suggestion rules."""
    total_spent = float(current['Amount'].sum())
    budget_usage = (total_spent / budget * 100) if budget > 0 else 0.0

    by_category = aggregate_by_category(current)
    category_spending = {
        category: {
            'total': float(row['Total']),
            'count': int(row['Count']),
            'percentage': float(row['Percentage']),
            'average_amount': float(row['Average']),
        }
        for category, row in by_category.iterrows()
    }
    high_spending = [
        (category, data)
        for category, data in category_spending.items()
        if data['percentage'] > HIGH_SPENDING_SHARE
    ]
    high_spending.sort(key=lambda item: item[1]['total'], reverse=True)

    expense_count = int(len(current))
    return {
        'total_spent': total_spent,
        'budget_usage_percentage': budget_usage,
        'category_spending': category_spending,
        'high_spending_categories': high_spending,
        'frequent_small_expenses': find_frequent_small_expenses(current),
        'expense_count': expense_count,
        'average_expense_amount': total_spent / expense_count if expense_count else 0.0,
    }


def find_frequent_small_expenses(current: pd.DataFrame) -> List[Dict[str, Any]]:
    """Small purchases repeated at least three times, largest total first."""
    small = current[(current['Amount'] > SMALL_EXPENSE_MIN) & (current['Amount'] < SMALL_EXPENSE_MAX)]
    if small.empty:
        return []

    grouped = small.groupby(['Category', 'Name'], sort=False)['Amount'].agg(['count', 'sum'])
    grouped = grouped[grouped['count'] >= SMALL_EXPENSE_MIN_COUNT]
    grouped = grouped.sort_values('sum', ascending=False, kind='stable')
    return [
        {
            'name': name,
            'category': category,
            'count': int(row['count']),
            'total_amount': float(row['sum']),
            'average_amount': float(row['sum'] / row['count']),
        }
        for (category, name), row in grouped.iterrows()
    ]


# ---------------------------------------------------------------------------
# Suggestion rules
# ---------------------------------------------------------------------------


def generate_personalized_suggestions(analysis_data: Dict[str, Any]) -> List[Suggestion]:
    """Apply every suggestion rule in order and rank the results."""
    suggestions: List[Suggestion] = []
    rules: Sequence[Callable[[Dict[str, Any]], List[Suggestion]]] = (
        budget_usage_suggestions,
        high_spending_suggestions,
        frequent_small_expense_suggestions,
        emergency_fund_suggestions,
        subscription_suggestions,
    )
    for rule in rules:
        suggestions.extend(rule(analysis_data))

    if len(suggestions) < MIN_PERSONALISED_SUGGESTIONS:
        suggestions.extend(general_savings_tips(analysis_data['total_spent']))

    return sort_suggestions(suggestions)


def sort_suggestions(suggestions: List[Suggestion]) -> List[Suggestion]:
    return sorted(
        suggestions,
        key=lambda s: (-PRIORITY_ORDER.get(s.priority, 0), -(s.potential_savings or 0)),
    )


def budget_usage_suggestions(analysis_data: Dict[str, Any]) -> List[Suggestion]:
    usage = analysis_data['budget_usage_percentage']
    total_spent = analysis_data['total_spent']

    if usage > URGENT_USAGE_THRESHOLD:
        return [Suggestion(
            id='budget-overspending',
            type='urgent',
            category='Budget',
            title='🚨 Risk of Exceeding Your Budget',
            description=(
                f"You have spent {usage:.1f}% of your monthly budget. "
                "It is time to cut non-essential expenses."
            ),
            action_items=[
                'Review pending expenses and postpone the non-urgent ones',
                'Set a daily spending limit for the rest of the month',
                'Consider raising your budget if that is realistic',
            ],
            potential_savings=total_spent * URGENT_SAVINGS_RATE,
            priority='high',
            icon='🚨',
        )]
    if usage > WARNING_USAGE_THRESHOLD:
        return [Suggestion(
            id='budget-warning',
            type='warning',
            category='Budget',
            title='⚠️ Approaching Your Budget Limit',
            description=(
                f"You have used {usage:.1f}% of your budget. "
                "Keep an eye on your next expenses."
            ),
            action_items=[
                'Track daily expenses more closely',
                'Prioritise essential expenses',
                'Look for cheaper alternatives',
            ],
            potential_savings=total_spent * WARNING_SAVINGS_RATE,
            priority='medium',
            icon='⚠️',
        )]
    return []


def high_spending_suggestions(analysis_data: Dict[str, Any]) -> List[Suggestion]:
    suggestions: List[Suggestion] = []
    for category, data in analysis_data['high_spending_categories'][:MAX_CATEGORY_SUGGESTIONS]:
        template = get_savings_template(category)
        if template is None:
            continue
        label = get_category_label(category)
        suggestions.append(Suggestion(
            id=f"category-{category.lower()}",
            type='optimization',
            category=category,
            title=f"💡 Optimise Your {label} Spending",
            description=(
                f"{label} accounts for {data['percentage']:.1f}% of your spending "
                f"({format_currency(data['total'], decimals=2)}). Here are ways to save:"
            ),
            action_items=list(template.action_items),
            potential_savings=data['total'] * template.savings_rate,
            priority='high' if data['percentage'] > HIGH_PRIORITY_SHARE else 'medium',
            icon=get_category_icon(category, default='💡'),
        ))
    return suggestions


def frequent_small_expense_suggestions(analysis_data: Dict[str, Any]) -> List[Suggestion]:
    frequent = analysis_data['frequent_small_expenses']
    if not frequent:
        return []
    top = frequent[0]
    return [Suggestion(
        id='frequent-small-expenses',
        type='habit',
        category='Spending Habits',
        title='🔄 Keep Frequent Small Expenses in Check',
        description=(
            f"You often spend on \"{top['name']}\" ({top['count']} times, "
            f"{format_currency(top['total_amount'], decimals=2)} in total). "
            "Small changes can add up to big savings."
        ),
        action_items=[
            f"Cut the frequency of \"{top['name']}\" in half",
            'Look for cheaper or home-made alternatives',
            'Set a weekly limit for small expenses',
            'Consider buying in larger quantities to get discounts',
        ],
        potential_savings=top['total_amount'] * SMALL_EXPENSE_SAVINGS_RATE,
        priority='medium',
        icon='🔄',
    )]


def emergency_fund_suggestions(analysis_data: Dict[str, Any]) -> List[Suggestion]:
    total_spent = analysis_data['total_spent']
    if total_spent <= 0:
        return []
    savings = analysis_data['category_spending'].get(SAVINGS_CATEGORY)
    if savings is not None and savings['total'] >= total_spent * MIN_SAVINGS_SHARE:
        return []
    return [Suggestion(
        id='emergency-fund',
        type='financial-health',
        category=SAVINGS_CATEGORY,
        title='💰 Build Your Emergency Fund',
        description=(
            'You do not have enough savings recorded. '
            'An emergency fund is essential for financial stability.'
        ),
        action_items=[
            'Set aside at least 10% of your income for savings',
            'Automate transfers to a savings account',
            'Start with small amounts if necessary',
            'Treat savings as a mandatory "expense"',
        ],
        potential_savings=total_spent * EMERGENCY_FUND_RATE,
        priority='high',
        icon=get_category_icon(SAVINGS_CATEGORY),
    )]


def subscription_suggestions(analysis_data: Dict[str, Any]) -> List[Suggestion]:
    subscriptions = analysis_data['category_spending'].get(SUBSCRIPTIONS_CATEGORY)
    if subscriptions is None or subscriptions['total'] <= SUBSCRIPTION_AUDIT_THRESHOLD:
        return []
    return [Suggestion(
        id='subscription-audit',
        type='optimization',
        category=SUBSCRIPTIONS_CATEGORY,
        title='📺 Audit Your Subscriptions',
        description=(
            f"You spend {format_currency(subscriptions['total'], decimals=2)} on subscriptions. "
            'Check which ones you actually use.'
        ),
        action_items=[
            'List all your active subscriptions',
            'Cancel the ones you rarely use',
            'Consider family plans to share costs',
            'Look for promotions or annual discounts',
        ],
        potential_savings=subscriptions['total'] * SUBSCRIPTION_SAVINGS_RATE,
        priority='medium',
        icon=get_category_icon(SUBSCRIPTIONS_CATEGORY),
    )]


def general_savings_tips(total_spent: float) -> List[Suggestion]:
    return [
        Suggestion(
            id='price-comparison',
            type='general',
            category='Smart Shopping',
            title='🔍 Compare Prices Before Buying',
            description='Make a habit of comparing prices to get the best deals.',
            action_items=[
                'Use price comparison apps',
                'Check offers in different stores',
                'Compare online and in-store prices',
                'Use coupons and discount codes',
            ],
            potential_savings=total_spent * PRICE_COMPARISON_RATE,
            priority='low',
            icon='🔍',
        ),
        Suggestion(
            id='bulk-buying',
            type='general',
            category='Buying Strategies',
            title='📦 Buy Non-Perishables in Bulk',
            description='Buying in quantity can lower the unit cost of products you use regularly.',
            action_items=[
                'Identify the products you use most often',
                'Compare the unit cost across package sizes',
                'Make sure you have storage space',
                'Split large purchases with family or friends',
            ],
            potential_savings=total_spent * BULK_BUYING_RATE,
            priority='low',
            icon='📦',
        ),
    ]


def basic_savings_suggestions() -> List[Suggestion]:
    """Getting-started advice shown before any expense is logged for the month."""
    return [
        Suggestion(
            id='start-tracking',
            type='getting-started',
            category='Getting Started',
            title='📊 Start Logging Your Expenses',
            description='To receive personalised suggestions, log your daily expenses.',
            action_items=[
                'Log every expense, even the small ones',
                'Pick the right category for each expense',
                'Keep a consistent record for at least a week',
                'Review your spending patterns regularly',
            ],
            potential_savings=0.0,
            priority='high',
            icon='📊',
        ),
        Suggestion(
            id='set-budget',
            type='getting-started',
            category='Budget',
            title='🎯 Set a Monthly Budget',
            description='A budget helps you control spending and reach your financial goals.',
            action_items=[
                'Work out your net monthly income',
                'List all fixed expenses (rent, services, etc.)',
                'Assign amounts to variable expenses',
                'Include a savings category (at least 10%)',
            ],
            potential_savings=0.0,
            priority='high',
            icon='🎯',
        ),
    ]


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


def get_savings_summary(suggestions: Optional[Sequence[Suggestion]]) -> Dict[str, Any]:
    if not suggestions:
        return {
            'total_suggestions': 0,
            'total_potential_savings': 0.0,
            'high_priority_suggestions': 0,
            'categories_affected': 0,
        }
    return {
        'total_suggestions': len(suggestions),
        'total_potential_savings': float(sum(s.potential_savings or 0 for s in suggestions)),
        'high_priority_suggestions': sum(1 for s in suggestions if s.priority == 'high'),
        'categories_affected': len({s.category for s in suggestions}),
    }


def get_priority_color(priority: str) -> str:
    return PRIORITY_COLORS.get(priority, DEFAULT_COLOR)


def get_suggestion_type_color(suggestion_type: str) -> str:
    return SUGGESTION_TYPE_COLORS.get(suggestion_type, DEFAULT_COLOR)
