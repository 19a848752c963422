"""Domain models for daily totals."""

from dataclasses import dataclass
from datetime import date

from calovate.domain.entries import FoodEntry, MacroTotals


@dataclass(frozen=True)
class MacroProgress:
    """Progress of one macro against its goal."""

    consumed: float
    target: float
    remaining: float
    percent: float


@dataclass(frozen=True)
class DailyProgress:
    """Per-macro progress for a day."""

    calories: MacroProgress
    protein: MacroProgress
    carbs: MacroProgress
    sugar: MacroProgress
    fat: MacroProgress


@dataclass(frozen=True)
class DailySummary:
    """Entries, totals and goal progress for one day."""

    day: date
    entries: list[FoodEntry]
    totals: MacroTotals
    progress: DailyProgress
