#!/usr/bin/env python3
"""Print the spending breakdown, predictions and savings advice for a month."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_planner import config, storage
from budget_planner import data_processing as dp
from budget_planner.categories import get_category_label
from budget_planner.formatting import format_currency, format_month_label, format_prediction_date
from budget_planner.models import month_key, to_month
from budget_planner.predictions import predict, predictions_to_frame
from budget_planner.savings import advise


def main(month: Optional[str] = None, state_path: Optional[Path] = None, export: bool = False) -> None:
    period = to_month(month)
    state = storage.load_state(state_path)
    expenses = state['expenses']
    budget = storage.get_month_budget(state['budgets'], period)

    summary = dp.month_summary(expenses, budget, period)
    print(f"Report for {format_month_label(period)}")
    print(f"Budget:    {format_currency(summary['budget'], decimals=2)}")
    print(f"Spent:     {format_currency(summary['spent'], decimals=2)} ({summary['percentage_spent']:.1f}%)")
    print(f"Remaining: {format_currency(summary['remaining'], decimals=2)}")

    df, skipped = dp.expenses_to_frame(expenses)
    if skipped:
        print(f"Ignored {skipped} malformed record(s).")
    by_category = dp.aggregate_by_category(dp.current_month_expenses(df, period))
    if by_category.empty:
        print("\nNo expenses logged for this month.")
    else:
        table = by_category.copy()
        table.index = [get_category_label(key) for key in table.index]
        print("\nBy category:")
        print(table.round(2).to_string())

    result = predict(expenses, period)
    print(f"\nPredictions for {format_month_label(period + 1)} "
          f"(total {format_currency(result.total_predicted)}, confidence {result.confidence * 100:.0f}%):")
    if not result.predictions:
        print("  none")
    for prediction in result.predictions:
        print(f"  {prediction.icon} {prediction.name}: {format_currency(prediction.amount)} "
              f"on {format_prediction_date(prediction.estimated_date)} "
              f"({prediction.confidence * 100:.0f}%)")

    advice = advise(expenses, budget, period)
    print(f"\nSavings suggestions (potential {format_currency(advice.total_potential_savings, decimals=2)}):")
    for suggestion in advice.suggestions:
        print(f"  [{suggestion.priority}] {suggestion.title}")

    if export:
        config.ensure_data_directories()
        target = config.REPORTS_DIR / f"predictions_{month_key(period)}.csv"
        predictions_to_frame(result.predictions).to_csv(target, index=False)
        print(f"\nPredictions written to {target}")


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show the budget report for a month.')
    parser.add_argument('--month', help='Month to report on as YYYY-MM (default: current month)')
    parser.add_argument('--state', type=Path, help='Path to the state JSON file')
    parser.add_argument('--export', action='store_true', help='Write predictions to a CSV in the reports directory')
    parser.add_argument('--verbose', action='store_true', help='Log engine diagnostics')
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    main(month=args.month, state_path=args.state, export=args.export)
