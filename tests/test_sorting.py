"""Tests for habit classification and ordering."""

from __future__ import annotations

from datetime import timedelta

import pytest

from trackhabit.domain.milestones import DEFAULT_TABLE
from trackhabit.domain.sort_order import SortKey, SortOrder
from trackhabit.services.streaks import (
    CENSORED_LENGTH,
    censor_name,
    habits_with_milestones,
    highest_ongoing,
    sort_habits,
)

from tests.conftest import NOW


def _names(items):
    return [item.habit.name for item in items]


@pytest.fixture
def habits(make_habit):
    return [
        make_habit(1, "Sugar", streak_days=45, created_days_ago=300),
        make_habit(2, "Alcohol", streak_days=3, created_days_ago=10),
        make_habit(3, "Smoking", streak_days=120, created_days_ago=500),
        make_habit(4, "Coffee", streak_days=45, created_days_ago=50),
    ]


class TestOrdering:
    def test_sort_by_name(self, habits):
        items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder.by_name(), NOW)
        assert _names(items) == ["Alcohol", "Coffee", "Smoking", "Sugar"]

    def test_sort_by_name_descending(self, habits):
        items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder.by_name(ascending=False), NOW)
        assert _names(items) == ["Sugar", "Smoking", "Coffee", "Alcohol"]

    def test_sort_by_creation(self, habits):
        items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder.by_creation(), NOW)
        assert _names(items) == ["Smoking", "Sugar", "Coffee", "Alcohol"]

    def test_sort_by_streak_ascending_breaks_ties_by_name(self, habits):
        items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder.by_streak(), NOW)
        assert _names(items) == ["Alcohol", "Coffee", "Sugar", "Smoking"]

    def test_sort_by_streak_descending_keeps_name_tie_break(self, habits):
        items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder.by_streak(ascending=False), NOW)
        # Coffee and Sugar tie at 45 days; name order holds in both directions.
        assert _names(items) == ["Smoking", "Coffee", "Sugar", "Alcohol"]

    def test_equal_names_fall_back_to_id(self, make_habit):
        # Names are unique in the store, but the engine must not depend on it.
        items = habits_with_milestones(
            [make_habit(9, "Same", streak_days=5), make_habit(2, "Same", streak_days=5)],
            DEFAULT_TABLE,
            SortOrder.by_streak(ascending=False),
            NOW,
        )
        assert [item.habit.id for item in items] == [2, 9]

    def test_sorting_is_a_permutation(self, habits):
        for key in SortKey:
            for ascending in (True, False):
                items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder(key, ascending), NOW)
                assert sorted(item.habit.id for item in items) == [1, 2, 3, 4]

    def test_sorting_is_deterministic_for_any_input_order(self, habits):
        order = SortOrder.by_streak(ascending=False)
        forward = habits_with_milestones(habits, DEFAULT_TABLE, order, NOW)
        backward = habits_with_milestones(list(reversed(habits)), DEFAULT_TABLE, order, NOW)
        assert _names(forward) == _names(backward)

    def test_streak_sort_is_recomputed_at_now(self, habits):
        items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder.by_streak(), NOW)
        # Reset "Smoking" after the items were built; sorting sees the new anchor.
        items[-1].habit.last_reset_at = NOW - timedelta(hours=1)
        resorted = sort_habits(items, SortOrder.by_streak(), NOW)
        assert _names(resorted)[0] == "Smoking"

    def test_empty_input(self):
        assert habits_with_milestones([], DEFAULT_TABLE, SortOrder(), NOW) == []


class TestClassification:
    def test_items_carry_their_milestone(self, habits):
        items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder.by_name(), NOW)
        by_name = {item.habit.name: item.milestone.title for item in items}
        assert by_name == {
            "Alcohol": "First Step",
            "Coffee": "Monthly Master",
            "Smoking": "Centennial Gemstone",
            "Sugar": "Monthly Master",
        }

    def test_highest_ongoing_skips_inactive(self, make_habit):
        habits = [
            make_habit(1, "Paused", streak_days=400, is_active=False),
            make_habit(2, "Running", streak_days=12),
        ]
        best = highest_ongoing(habits, DEFAULT_TABLE, NOW)
        assert best is not None
        assert best.habit.name == "Running"

    def test_highest_ongoing_none_without_habits(self):
        assert highest_ongoing([], DEFAULT_TABLE, NOW) is None


class TestCensoring:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Smoking", "Sm******"),
            ("abc", "ab******"),
            ("Al", "Al******"),
            ("a", "ad******"),
            ("Z", "ZC******"),
            ("7", "7A******"),
        ],
    )
    def test_censor_name(self, name, expected):
        assert censor_name(name) == expected
        assert len(censor_name(name)) == CENSORED_LENGTH

    def test_display_name_is_censored_on_request(self, habits):
        items = habits_with_milestones(habits, DEFAULT_TABLE, SortOrder.by_name(), NOW, censor=True)
        assert [item.display_name for item in items] == ["Al******", "Co******", "Sm******", "Su******"]
        # Ordering still uses the real names.
        assert _names(items) == ["Alcohol", "Coffee", "Smoking", "Sugar"]
