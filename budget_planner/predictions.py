"""Next-month expense predictions from per-category spending patterns.

The engine compares the reference month against all prior history for
each category, scores how predictable the category is and projects one
expected expense per distinct expense name for the following month.  It
is a heuristic pattern matcher, not a statistical forecast.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .categories import CATEGORY_KEYS, get_category_icon, get_category_label, is_important_category
from .data_processing import expenses_to_frame, split_by_month
from .models import (
    PREDICTION_SOURCE_HISTORICAL,
    PREDICTION_SOURCE_PATTERN,
    CategoryAnalysis,
    Prediction,
    PredictionResult,
    new_id,
    to_month,
)

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.3
IMPORTANT_CONFIDENCE_BONUS = 0.3
# (minimum total occurrences, bonus), checked in order
OCCURRENCE_CONFIDENCE_BONUSES = ((5, 0.3), (3, 0.2), (2, 0.1))
CONSISTENCY_CONFIDENCE_BONUS = 0.1
CONSISTENT_MAX_VARIATION = 0.3

RECURRENT_MIN_OCCURRENCES = 3
FREQUENCY_SATURATION = 10

HISTORICAL_MIN_CONFIDENCE = 0.6
DEFAULT_PREDICTION_DAY = 15
MAX_PREDICTION_DAY = 28

# (minimum current-month expenses, multiplier), checked in order
VOLUME_MULTIPLIERS = ((20, 1.1), (10, 1.05))
LOW_VOLUME_THRESHOLD = 5
LOW_VOLUME_MULTIPLIER = 0.8

HIGH_CONFIDENCE_THRESHOLD = 0.7


def round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def predict(expenses: Optional[Iterable[Any]], reference_month: Any = None) -> PredictionResult:
    """Predict next month's expenses from the spending history.

    Args:
        expenses: ``Expense`` objects or mappings with ``id``, ``name``,
            ``amount``, ``category`` and ``date`` (``YYYY-MM-DD``).
        reference_month: The month being viewed; anything accepted by
            :func:`budget_planner.models.to_month`.

    Returns:
        A :class:`PredictionResult`.  Malformed records are skipped and
        counted in ``skipped_records``.
    """
    df, skipped = expenses_to_frame(expenses)
    month = to_month(reference_month)
    if df.empty:
        return PredictionResult(skipped_records=skipped)

    current, prior = split_by_month(df, month)
    category_analysis = analyze_category_patterns(current, prior)
    predictions = generate_category_predictions(category_analysis, current, prior, month)
    total_predicted = float(sum(prediction.amount for prediction in predictions))
    confidence = calculate_overall_confidence(category_analysis, len(current))

    logger.debug(
        "Predicted %d expense(s) for %s from %d current and %d prior record(s)",
        len(predictions), month + 1, len(current), len(prior),
    )
    return PredictionResult(
        predictions=predictions,
        total_predicted=total_predicted,
        confidence=confidence,
        category_analysis=category_analysis,
        skipped_records=skipped,
    )


# ---------------------------------------------------------------------------
# Category analysis
# ---------------------------------------------------------------------------


def analyze_category_patterns(current: pd.DataFrame, prior: pd.DataFrame) -> Dict[str, CategoryAnalysis]:
    """Build a :class:`CategoryAnalysis` for every category seen in either period."""
    present = set(current['Category']) | set(prior['Category'])
    analysis: Dict[str, CategoryAnalysis] = {}
    for category in CATEGORY_KEYS:
        if category not in present:
            continue
        current_amounts = current.loc[current['Category'] == category, 'Amount']
        prior_amounts = prior.loc[prior['Category'] == category, 'Amount']
        analysis[category] = _analyze_category(category, current_amounts, prior_amounts)
    return analysis


def _analyze_category(category: str, current_amounts: pd.Series, prior_amounts: pd.Series) -> CategoryAnalysis:
    current_count = int(len(current_amounts))
    previous_count = int(len(prior_amounts))
    total_count = current_count + previous_count
    previous_average = float(prior_amounts.mean()) if previous_count else 0.0
    if current_count:
        current_average = float(current_amounts.mean())
    else:
        # Categories only seen historically keep their past average.
        current_average = previous_average

    return CategoryAnalysis(
        category=category,
        current_count=current_count,
        current_total=float(current_amounts.sum()),
        current_average=current_average,
        previous_count=previous_count,
        previous_total=float(prior_amounts.sum()),
        previous_average=previous_average,
        frequency=calculate_frequency(total_count),
        is_recurrent=is_recurrent_category(category, total_count),
        is_important=is_important_category(category),
        confidence=calculate_category_confidence(category, current_amounts, total_count),
    )


def calculate_frequency(total_count: int) -> float:
    if total_count <= 0:
        return 0.0
    return min(total_count / FREQUENCY_SATURATION, 1.0)


def is_recurrent_category(category: str, total_count: int) -> bool:
    if total_count >= RECURRENT_MIN_OCCURRENCES:
        return True
    return is_important_category(category) and total_count >= 1


def amount_variation(amounts: pd.Series) -> float:
    """Coefficient of variation (population std / mean) of a set of amounts."""
    mean = amounts.mean()
    if len(amounts) == 0 or not mean:
        return float('inf')
    return float(amounts.std(ddof=0) / mean)


def calculate_category_confidence(category: str, current_amounts: pd.Series, total_count: int) -> float:
    confidence = BASE_CONFIDENCE
    if is_important_category(category):
        confidence += IMPORTANT_CONFIDENCE_BONUS

    for minimum, bonus in OCCURRENCE_CONFIDENCE_BONUSES:
        if total_count >= minimum:
            confidence += bonus
            break

    if len(current_amounts) > 1 and amount_variation(current_amounts) < CONSISTENT_MAX_VARIATION:
        confidence += CONSISTENCY_CONFIDENCE_BONUS

    return min(confidence, 1.0)


def calculate_overall_confidence(category_analysis: Dict[str, CategoryAnalysis], current_count: int) -> float:
    if current_count == 0 or not category_analysis:
        return 0.0

    average = float(np.mean([analysis.confidence for analysis in category_analysis.values()]))
    multiplier = 1.0
    for minimum, factor in VOLUME_MULTIPLIERS:
        if current_count >= minimum:
            multiplier = factor
            break
    else:
        if current_count < LOW_VOLUME_THRESHOLD:
            multiplier = LOW_VOLUME_MULTIPLIER
    return min(average * multiplier, 1.0)


# ---------------------------------------------------------------------------
# Prediction strategies
# ---------------------------------------------------------------------------


def generate_category_predictions(
    category_analysis: Dict[str, CategoryAnalysis],
    current: pd.DataFrame,
    prior: pd.DataFrame,
    reference_month: Any,
) -> List[Prediction]:
    """Project next-month expenses for every recurrent or important category.

    Results are ordered by confidence, then amount, both descending.
    """
    target_month = to_month(reference_month) + 1
    predictions: List[Prediction] = []

    for category, analysis in category_analysis.items():
        if not (analysis.is_recurrent or analysis.is_important):
            continue
        if needs_historical_fallback(analysis):
            category_prior = prior[prior['Category'] == category]
            predictions.append(historical_fallback_prediction(analysis, category_prior, target_month))
        elif analysis.current_count:
            category_current = current[current['Category'] == category]
            predictions.extend(pattern_predictions(analysis, category_current, target_month))

    predictions.sort(key=lambda p: (-p.confidence, -p.amount))
    return predictions


def needs_historical_fallback(analysis: CategoryAnalysis) -> bool:
    """Essential categories not logged yet this month still get projected."""
    return analysis.is_important and analysis.previous_count > 0 and analysis.current_count == 0


def historical_fallback_prediction(
    analysis: CategoryAnalysis,
    category_prior: pd.DataFrame,
    target_month: pd.Period,
) -> Prediction:
    """Single prediction from the prior-month average of an essential category.

    Used when an important category (rent, utilities, ...) has history but
    nothing logged in the reference month, so it does not silently drop
    out of next month's projection.
    """
    category = analysis.category
    return Prediction(
        id=new_id(f"pred-{category.lower()}"),
        category=category,
        name=_mode(category_prior['Name'], get_category_label(category)),
        amount=round_half_up(analysis.previous_average),
        icon=get_category_icon(category),
        estimated_date=date(target_month.year, target_month.month, DEFAULT_PREDICTION_DAY),
        confidence=max(analysis.confidence, HISTORICAL_MIN_CONFIDENCE),
        is_recurrent=True,
        is_important=analysis.is_important,
        frequency=analysis.frequency,
        source=PREDICTION_SOURCE_HISTORICAL,
    )


def pattern_predictions(
    analysis: CategoryAnalysis,
    category_current: pd.DataFrame,
    target_month: pd.Period,
) -> List[Prediction]:
    """One prediction per distinct expense name logged in the reference month."""
    category = analysis.category
    predictions: List[Prediction] = []
    for name, group in category_current.groupby('Name', sort=False):
        predictions.append(Prediction(
            id=new_id(f"pred-{category.lower()}"),
            category=category,
            name=str(name),
            amount=round_half_up(float(group['Amount'].mean())),
            icon=get_category_icon(category),
            estimated_date=estimate_next_date([d.date() for d in group['Date']], target_month),
            confidence=analysis.confidence,
            is_recurrent=analysis.is_recurrent,
            is_important=analysis.is_important,
            frequency=analysis.frequency,
            source=PREDICTION_SOURCE_PATTERN,
        ))
    return predictions


def estimate_next_date(previous_dates: Sequence[date], target_month: Any) -> date:
    """Estimate the day an expense recurs in ``target_month``.

    Days are capped at 28 so the result is valid in every month.
    """
    month = to_month(target_month)
    if len(previous_dates) == 0:
        day = DEFAULT_PREDICTION_DAY
    elif len(previous_dates) == 1:
        day = min(previous_dates[0].day, MAX_PREDICTION_DAY)
    else:
        average_day = float(np.mean([d.day for d in previous_dates]))
        day = min(round_half_up(average_day), MAX_PREDICTION_DAY)
    return date(month.year, month.month, day)


def _mode(series: pd.Series, default: str) -> str:
    clean = series.dropna()
    if clean.empty:
        return default
    return str(clean.mode().iloc[0])


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


def get_prediction_summary(predictions: Optional[Sequence[Prediction]]) -> Dict[str, Any]:
    if not predictions:
        return {
            'total_amount': 0,
            'category_count': 0,
            'high_confidence_count': 0,
            'recurring_count': 0,
            'important_count': 0,
        }

    return {
        'total_amount': sum(p.amount for p in predictions),
        'category_count': len({p.category for p in predictions}),
        'high_confidence_count': sum(1 for p in predictions if p.confidence >= HIGH_CONFIDENCE_THRESHOLD),
        'recurring_count': sum(1 for p in predictions if p.is_recurrent),
        'important_count': sum(1 for p in predictions if p.is_important),
    }


def predictions_to_frame(predictions: Sequence[Prediction]) -> pd.DataFrame:
    columns = ['Category', 'Name', 'Amount', 'Estimated Date', 'Confidence', 'Source']
    if not predictions:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([
        {
            'Category': p.category,
            'Name': p.name,
            'Amount': p.amount,
            'Estimated Date': p.estimated_date,
            'Confidence': round(p.confidence, 2),
            'Source': p.source,
        }
        for p in predictions
    ], columns=columns)
