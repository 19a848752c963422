"""Aggregation of food entries into daily totals."""

import math
from collections.abc import Iterable

from calovate.domain.entries import MACRO_FIELDS, FoodEntry, MacroTotals
from calovate.domain.profiles import NutritionGoals
from calovate.domain.stats import DailyProgress, MacroProgress


def aggregate(entries: Iterable[FoodEntry]) -> MacroTotals:
    """Sum each macro independently; an empty input gives all zeros.

    Columns use `math.fsum`, so the totals are the same in any entry order.
    """
    rows = [entry.macros for entry in entries]
    sums = {
        name: math.fsum(getattr(row, name) for row in rows) for name in MACRO_FIELDS
    }
    return MacroTotals(**sums)


def daily_progress(totals: MacroTotals, goals: NutritionGoals) -> DailyProgress:
    """Compare consumed totals with the user's goals."""
    return DailyProgress(
        calories=_progress(totals.calories, goals.calories),
        protein=_progress(totals.protein, goals.protein),
        carbs=_progress(totals.carbs, goals.carbs),
        sugar=_progress(totals.sugar, goals.sugar),
        fat=_progress(totals.fat, goals.fat),
    )


def _progress(consumed: float, target: float) -> MacroProgress:
    percent = (consumed / target) * 100 if target > 0 else 0.0
    return MacroProgress(
        consumed=consumed,
        target=target,
        remaining=max(target - consumed, 0.0),
        percent=percent,
    )
