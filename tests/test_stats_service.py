"""Tests for aggregation and goal progress."""

import itertools
import random

import pytest

from calovate.domain.entries import MacroTotals
from calovate.domain.profiles import DEFAULT_GOALS, NutritionGoals
from calovate.services.stats import aggregate, daily_progress
from tests.conftest import make_entry

ENTRIES = [
    make_entry("e1", calories=150, protein=5, carbs=27, sugar=1, fat=2.5),
    make_entry("e2", calories=420, protein=35, carbs=20, sugar=5, fat=22),
    make_entry("e3", calories=350, protein=12, carbs=60, sugar=15, fat=6),
    make_entry("e4", calories=95.5, protein=0.5, carbs=25, sugar=19, fat=0.25),
]

EXPECTED = MacroTotals(calories=1015.5, protein=52.5, carbs=132, sugar=40, fat=30.75)


def test_aggregate_empty_is_zero() -> None:
    assert aggregate([]) == MacroTotals(0, 0, 0, 0, 0)


def test_aggregate_sums_each_macro() -> None:
    assert aggregate(ENTRIES) == EXPECTED


@pytest.mark.parametrize("order", list(itertools.permutations(range(len(ENTRIES)))))
def test_aggregate_ignores_order(order: tuple[int, ...]) -> None:
    assert aggregate(ENTRIES[index] for index in order) == EXPECTED


DECIMAL_ENTRIES = [
    make_entry(
        f"d{index}",
        calories=value,
        protein=value,
        carbs=value,
        sugar=value,
        fat=value,
    )
    for index, value in enumerate([0.1, 0.2, 0.3, 0.7, 1.1])
]


def test_aggregate_of_decimal_amounts_ignores_order() -> None:
    totals = {
        aggregate(DECIMAL_ENTRIES[index] for index in order)
        for order in itertools.permutations(range(len(DECIMAL_ENTRIES)))
    }

    assert totals == {MacroTotals(2.4, 2.4, 2.4, 2.4, 2.4)}


@pytest.mark.parametrize("seed", range(20))
def test_aggregate_is_associative_over_splits(seed: int) -> None:
    rng = random.Random(seed)
    entries = [
        make_entry(
            f"r{index}",
            calories=rng.randint(0, 800),
            protein=rng.randint(0, 80) / 2,
            carbs=rng.randint(0, 120) / 4,
            sugar=rng.randint(0, 40),
            fat=rng.randint(0, 60) / 2,
        )
        for index in range(rng.randint(0, 12))
    ]
    shuffled = entries[:]
    rng.shuffle(shuffled)
    cut = rng.randint(0, len(shuffled))

    combined = aggregate(shuffled[:cut]) + aggregate(shuffled[cut:])

    assert combined == aggregate(entries)


def test_daily_progress_clamps_remaining_and_handles_zero_goal() -> None:
    goals = NutritionGoals(calories=2000, protein=100, carbs=250, sugar=0, fat=70)
    totals = MacroTotals(calories=2500, protein=25, carbs=0, sugar=10, fat=35)

    progress = daily_progress(totals, goals)

    assert progress.calories.remaining == 0
    assert progress.calories.percent == 125
    assert progress.protein.remaining == 75
    assert progress.sugar.percent == 0
    assert progress.fat.percent == 50


def test_daily_progress_against_default_goals() -> None:
    progress = daily_progress(EXPECTED, DEFAULT_GOALS)
    assert progress.carbs.target == 250
    assert progress.carbs.remaining == 118
