"""Unit tests for budget_planner.predictions."""

from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from budget_planner import predictions as pr
from budget_planner.models import PREDICTION_SOURCE_HISTORICAL, PREDICTION_SOURCE_PATTERN


def _expense(name, amount, category, when, expense_id=None):
    return {
        'id': expense_id or f"{name}-{when}",
        'name': name,
        'amount': amount,
        'category': category,
        'date': when,
    }


def test_predict_empty_history() -> None:
    result = pr.predict([], '2025-03')
    assert result.predictions == []
    assert result.total_predicted == 0
    assert result.confidence == 0
    assert result.category_analysis == {}
    assert result.skipped_records == 0


def test_category_analysis_for_recurring_food() -> None:
    expenses = [
        _expense('Groceries', 50, 'FOOD', '2025-03-05'),
        _expense('Groceries', 60, 'FOOD', '2025-03-10'),
        _expense('Groceries', 55, 'FOOD', '2025-02-20'),
    ]
    result = pr.predict(expenses, '2025-03')
    food = result.category_analysis['FOOD']
    assert food.is_important is True
    assert food.is_recurrent is True
    assert food.current_average == pytest.approx(55)
    assert food.previous_average == pytest.approx(55)
    assert food.total_count == 3
    assert food.frequency == pytest.approx(0.3)
    # base + important + three occurrences + consistent amounts
    assert food.confidence == pytest.approx(0.9)


def test_pattern_prediction_amount_and_date() -> None:
    expenses = [
        _expense('Groceries', 50, 'FOOD', '2025-03-05'),
        _expense('Groceries', 60, 'FOOD', '2025-03-10'),
        _expense('Groceries', 55, 'FOOD', '2025-02-20'),
    ]
    result = pr.predict(expenses, '2025-03')
    assert len(result.predictions) == 1
    prediction = result.predictions[0]
    assert prediction.name == 'Groceries'
    assert prediction.amount == 55
    assert prediction.estimated_date == date(2025, 4, 8)
    assert prediction.source == PREDICTION_SOURCE_PATTERN
    assert result.total_predicted == pytest.approx(55)
    # fewer than five current expenses damp the overall confidence
    assert result.confidence == pytest.approx(0.9 * 0.8)


def test_one_prediction_per_distinct_name() -> None:
    expenses = [
        _expense('Bus', 2, 'TRANSPORT', '2025-03-01'),
        _expense('Bus', 3, 'TRANSPORT', '2025-03-02'),
        _expense('Taxi', 15, 'TRANSPORT', '2025-03-03'),
    ]
    result = pr.predict(expenses, '2025-03')
    names = sorted(p.name for p in result.predictions)
    assert names == ['Bus', 'Taxi']
    bus = next(p for p in result.predictions if p.name == 'Bus')
    # 2.5 rounds half up
    assert bus.amount == 3


def test_historical_fallback_for_important_category() -> None:
    expenses = [
        _expense('Rent', 800, 'HOUSING', '2025-01-01'),
        _expense('Rent', 820, 'HOUSING', '2025-02-01'),
    ]
    result = pr.predict(expenses, '2025-03')
    assert len(result.predictions) == 1
    prediction = result.predictions[0]
    assert prediction.source == PREDICTION_SOURCE_HISTORICAL
    assert prediction.name == 'Rent'
    assert prediction.amount == 810
    assert prediction.estimated_date == date(2025, 4, 15)
    assert prediction.confidence >= 0.6
    assert prediction.is_recurrent is True
    # nothing logged in the reference month
    assert result.confidence == 0


def test_historical_fallback_confidence_floor() -> None:
    result = pr.predict([_expense('Doctor', 90, 'HEALTH', '2024-12-10')], '2025-03')
    assert result.predictions[0].confidence == pytest.approx(0.6)


def test_non_important_category_without_current_expenses_is_not_predicted() -> None:
    expenses = [
        _expense('Cinema', 20, 'ENTERTAINMENT', '2025-01-05'),
        _expense('Cinema', 20, 'ENTERTAINMENT', '2025-02-05'),
        _expense('Cinema', 20, 'ENTERTAINMENT', '2025-02-15'),
    ]
    result = pr.predict(expenses, '2025-03')
    assert 'ENTERTAINMENT' in result.category_analysis
    assert result.predictions == []


def test_single_non_important_expense_is_not_predicted() -> None:
    result = pr.predict([_expense('Gym day pass', 10, 'SPORTS', '2025-03-03')], '2025-03')
    assert result.category_analysis['SPORTS'].is_recurrent is False
    assert result.predictions == []


def test_future_expenses_are_ignored() -> None:
    expenses = [
        _expense('Groceries', 40, 'FOOD', '2025-03-01'),
        _expense('Groceries', 400, 'FOOD', '2025-05-01'),
    ]
    result = pr.predict(expenses, '2025-03')
    food = result.category_analysis['FOOD']
    assert food.current_count == 1
    assert food.previous_count == 0


def test_confidence_and_frequency_are_clamped() -> None:
    expenses = [_expense('Lunch', 10, 'FOOD', f'2025-03-{day:02d}') for day in range(1, 21)]
    expenses += [_expense('Lunch', 10, 'FOOD', f'2025-02-{day:02d}') for day in range(1, 6)]
    result = pr.predict(expenses, '2025-03')
    food = result.category_analysis['FOOD']
    assert food.confidence == pytest.approx(1.0)
    assert food.frequency == pytest.approx(1.0)
    assert result.confidence == pytest.approx(1.0)
    assert all(0 <= p.confidence <= 1 for p in result.predictions)


def test_predictions_sorted_by_confidence_then_amount() -> None:
    expenses = [
        _expense('Groceries', 50, 'FOOD', '2025-03-05'),
        _expense('Snacks', 80, 'FOOD', '2025-03-06'),
        _expense('Concert', 100, 'ENTERTAINMENT', '2025-03-07'),
        _expense('Cinema', 20, 'ENTERTAINMENT', '2025-03-08'),
        _expense('Bowling', 30, 'ENTERTAINMENT', '2025-03-09'),
    ]
    result = pr.predict(expenses, '2025-03')
    keys = [(-p.confidence, -p.amount) for p in result.predictions]
    assert keys == sorted(keys)
    assert [p.name for p in result.predictions][:2] == ['Snacks', 'Groceries']


def test_predict_is_idempotent_apart_from_ids() -> None:
    expenses = [
        _expense('Groceries', 50, 'FOOD', '2025-03-05'),
        _expense('Rent', 900, 'HOUSING', '2025-02-01'),
        _expense('Bus', 3, 'TRANSPORT', '2025-03-02'),
    ]

    def _strip_ids(result):
        data = result.to_dict()
        for prediction in data['predictions']:
            prediction.pop('id')
        return data

    first = pr.predict(expenses, '2025-03')
    second = pr.predict(expenses, '2025-03')
    assert _strip_ids(first) == _strip_ids(second)
    assert {p.id for p in first.predictions}.isdisjoint({p.id for p in second.predictions})


def test_malformed_records_are_skipped() -> None:
    expenses = [
        _expense('Groceries', 50, 'FOOD', '2025-03-05'),
        _expense('Mystery', 10, 'UNKNOWN', '2025-03-05'),
        _expense('Broken', 'abc', 'FOOD', '2025-03-05'),
        _expense('Refund', -5, 'FOOD', '2025-03-05'),
        _expense('Bad date', 5, 'FOOD', '05/03/2025'),
    ]
    result = pr.predict(expenses, '2025-03')
    assert result.skipped_records == 4
    assert result.category_analysis['FOOD'].current_count == 1


def test_estimate_next_date_rules() -> None:
    assert pr.estimate_next_date([], '2025-04') == date(2025, 4, 15)
    assert pr.estimate_next_date([date(2025, 3, 31)], '2025-04') == date(2025, 4, 28)
    assert pr.estimate_next_date([date(2025, 1, 29), date(2025, 1, 31)], '2025-02') == date(2025, 2, 28)
    assert pr.estimate_next_date([date(2025, 3, 1), date(2025, 3, 4)], '2025-04') == date(2025, 4, 3)


def test_calculate_overall_confidence_volume_multipliers() -> None:
    analysis = {
        'FOOD': pr.CategoryAnalysis(
            category='FOOD', current_count=1, current_total=1, current_average=1,
            previous_count=0, previous_total=0, previous_average=0,
            frequency=0.1, is_recurrent=True, is_important=True, confidence=0.5,
        )
    }
    assert pr.calculate_overall_confidence(analysis, 0) == 0
    assert pr.calculate_overall_confidence(analysis, 3) == pytest.approx(0.4)
    assert pr.calculate_overall_confidence(analysis, 7) == pytest.approx(0.5)
    assert pr.calculate_overall_confidence(analysis, 10) == pytest.approx(0.525)
    assert pr.calculate_overall_confidence(analysis, 25) == pytest.approx(0.55)


def test_prediction_summary_and_frame() -> None:
    expenses = [
        _expense('Groceries', 50, 'FOOD', '2025-03-05'),
        _expense('Groceries', 60, 'FOOD', '2025-03-10'),
        _expense('Rent', 900, 'HOUSING', '2025-02-01'),
    ]
    result = pr.predict(expenses, '2025-03')
    summary = pr.get_prediction_summary(result.predictions)
    assert summary['total_amount'] == 955
    assert summary['category_count'] == 2
    assert summary['important_count'] == 2
    assert pr.get_prediction_summary([])['total_amount'] == 0

    frame = pr.predictions_to_frame(result.predictions)
    assert list(frame.columns) == ['Category', 'Name', 'Amount', 'Estimated Date', 'Confidence', 'Source']
    assert len(frame) == 2
    assert pr.predictions_to_frame([]).empty


def test_round_half_up() -> None:
    assert pr.round_half_up(2.5) == 3
    assert pr.round_half_up(3.5) == 4
    assert pr.round_half_up(2.49) == 2
    assert isinstance(pr.round_half_up(pd.Series([1.5]).mean()), int)
