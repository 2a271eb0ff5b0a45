"""Unit tests for budget_planner.savings."""

from __future__ import annotations

import pytest

from budget_planner import savings as sv


def _expense(name, amount, category, when='2025-03-10'):
    return {'id': name, 'name': name, 'amount': amount, 'category': category, 'date': when}


def _by_id(result):
    return {s.id: s for s in result.suggestions}


def test_getting_started_when_month_is_empty() -> None:
    result = sv.advise([_expense('Old rent', 800, 'HOUSING', '2025-01-01')], 500, '2025-03')
    assert [s.id for s in result.suggestions] == ['start-tracking', 'set-budget']
    assert all(s.priority == 'high' for s in result.suggestions)
    assert result.total_potential_savings == 0
    assert result.analysis_data == {}


def test_urgent_suggestion_over_ninety_percent() -> None:
    result = sv.advise([_expense('Rent', 950, 'HOUSING')], 1000, '2025-03')
    suggestions = _by_id(result)
    assert 'budget-overspending' in suggestions
    urgent = suggestions['budget-overspending']
    assert urgent.type == 'urgent'
    assert urgent.priority == 'high'
    assert urgent.potential_savings == pytest.approx(95)
    assert result.analysis_data['budget_usage_percentage'] == pytest.approx(95)


def test_warning_suggestion_between_thresholds() -> None:
    result = sv.advise([_expense('Rent', 800, 'HOUSING')], 1000, '2025-03')
    suggestions = _by_id(result)
    assert 'budget-overspending' not in suggestions
    assert suggestions['budget-warning'].potential_savings == pytest.approx(40)
    assert suggestions['budget-warning'].priority == 'medium'


def test_frequent_small_expenses_detected() -> None:
    expenses = [
        _expense('Coffee', 10, 'FOOD', '2025-03-01'),
        _expense('Coffee', 12, 'FOOD', '2025-03-02'),
        _expense('Coffee', 11, 'FOOD', '2025-03-03'),
    ]
    result = sv.advise(expenses, 0, '2025-03')
    frequent = result.analysis_data['frequent_small_expenses']
    assert len(frequent) == 1
    assert frequent[0]['name'] == 'Coffee'
    assert frequent[0]['count'] == 3
    assert frequent[0]['total_amount'] == pytest.approx(33)
    assert frequent[0]['average_amount'] == pytest.approx(11)
    habit = _by_id(result)['frequent-small-expenses']
    assert habit.potential_savings == pytest.approx(9.9)


def test_small_expense_bounds_are_exclusive() -> None:
    expenses = [_expense('Parking', 5, 'TRANSPORT', f'2025-03-0{day}') for day in range(1, 5)]
    expenses += [_expense('Dinner', 50, 'FOOD', f'2025-03-0{day}') for day in range(1, 5)]
    result = sv.advise(expenses, 0, '2025-03')
    assert result.analysis_data['frequent_small_expenses'] == []


def test_subscription_audit() -> None:
    result = sv.advise([_expense('Streaming', 150, 'SUBSCRIPTIONS')], 0, '2025-03')
    audit = _by_id(result)['subscription-audit']
    assert audit.potential_savings == pytest.approx(37.5)
    assert audit.category == 'SUBSCRIPTIONS'


def test_no_budget_means_zero_usage() -> None:
    result = sv.advise([_expense('Groceries', 300, 'FOOD')], None, '2025-03')
    assert result.analysis_data['budget_usage_percentage'] == 0
    ids = _by_id(result)
    assert 'budget-overspending' not in ids
    assert 'budget-warning' not in ids


def test_high_spending_categories_and_ordering() -> None:
    expenses = [
        _expense('Groceries', 300, 'FOOD'),
        _expense('Fuel', 100, 'TRANSPORT'),
    ]
    result = sv.advise(expenses, 0, '2025-03')
    assert [s.id for s in result.suggestions] == ['category-food', 'emergency-fund', 'category-transport']
    suggestions = _by_id(result)
    assert suggestions['category-food'].priority == 'high'
    assert suggestions['category-food'].potential_savings == pytest.approx(60)
    assert suggestions['category-transport'].priority == 'medium'
    assert suggestions['category-transport'].potential_savings == pytest.approx(15)
    assert suggestions['emergency-fund'].potential_savings == pytest.approx(40)
    assert result.total_potential_savings == pytest.approx(115)

    high = result.analysis_data['high_spending_categories']
    assert [category for category, _ in high] == ['FOOD', 'TRANSPORT']


def test_suggestions_sorted_by_priority_then_savings() -> None:
    expenses = [
        _expense('Groceries', 400, 'FOOD'),
        _expense('Streaming', 120, 'SUBSCRIPTIONS'),
        _expense('Coffee', 8, 'FOOD', '2025-03-01'),
        _expense('Coffee', 8, 'FOOD', '2025-03-02'),
        _expense('Coffee', 8, 'FOOD', '2025-03-03'),
    ]
    result = sv.advise(expenses, 600, '2025-03')
    keys = [(-sv.PRIORITY_ORDER[s.priority], -s.potential_savings) for s in result.suggestions]
    assert keys == sorted(keys)


def test_enough_savings_skip_emergency_fund() -> None:
    expenses = [
        _expense('Groceries', 200, 'FOOD'),
        _expense('Deposit', 50, 'SAVINGS'),
    ]
    result = sv.advise(expenses, 0, '2025-03')
    assert 'emergency-fund' not in _by_id(result)


def test_general_tips_fill_short_lists() -> None:
    result = sv.advise([_expense('Deposit', 100, 'SAVINGS')], 0, '2025-03')
    assert [s.id for s in result.suggestions] == ['price-comparison', 'bulk-buying']
    assert result.total_potential_savings == pytest.approx(8)
    assert all(s.priority == 'low' for s in result.suggestions)


def test_skipped_records_reported() -> None:
    expenses = [_expense('Groceries', 20, 'FOOD'), {'name': 'no amount', 'category': 'FOOD'}]
    result = sv.advise(expenses, 0, '2025-03')
    assert result.skipped_records == 1


def test_savings_summary_and_colors() -> None:
    result = sv.advise([_expense('Rent', 950, 'HOUSING')], 1000, '2025-03')
    summary = sv.get_savings_summary(result.suggestions)
    assert summary['total_suggestions'] == len(result.suggestions)
    assert summary['total_potential_savings'] == pytest.approx(result.total_potential_savings)
    assert summary['high_priority_suggestions'] >= 1
    assert sv.get_savings_summary([])['total_suggestions'] == 0

    assert sv.get_priority_color('high') == '#ef4444'
    assert sv.get_priority_color('unknown') == sv.DEFAULT_COLOR
    assert sv.get_suggestion_type_color('habit') == '#7c3aed'
    assert sv.get_suggestion_type_color('other') == sv.DEFAULT_COLOR


def test_advise_is_repeatable() -> None:
    expenses = [
        _expense('Groceries', 300, 'FOOD'),
        _expense('Streaming', 120, 'SUBSCRIPTIONS'),
        _expense('Coffee', 8, 'FOOD', '2025-03-01'),
        _expense('Coffee', 9, 'FOOD', '2025-03-02'),
        _expense('Coffee', 10, 'FOOD', '2025-03-03'),
        _expense('Rent', 700, 'HOUSING', '2025-02-01'),
    ]
    first = sv.advise(expenses, 800, '2025-03')
    second = sv.advise(expenses, 800, '2025-03')
    assert first.suggestions
    assert first.to_dict() == second.to_dict()
