"""
Tests for the Goal value type and its key-value encoding.
"""

from datetime import date

from goal_tracker.goals.models import Goal, RECORD, encode_goal, decode_goal, decode_marked_dates


TODAY = date(2026, 1, 18)


# ============================================================================
# DERIVED PROGRESS
# ============================================================================

class TestGoalProgress:
    """Test derived progress values."""

    def test_progress_percent_floors(self):
        """1 of 30 days is 3%, not 3.33%."""
        goal = Goal("Read", 30, TODAY, frozenset({TODAY}))

        assert goal.days_completed == 1
        assert goal.progress_percent == 3

    def test_progress_not_clamped(self):
        """Marking more days than the target goes past 100%."""
        days = frozenset(date(2026, 1, d) for d in range(1, 6))
        goal = Goal("Short", 4, date(2026, 1, 1), days)

        assert goal.progress == 1.25
        assert goal.progress_percent == 125

    def test_zero_total_days_has_zero_progress(self):
        """A corrupted zero target does not divide by zero."""
        goal = Goal("Broken", 0, TODAY, frozenset({TODAY}))

        assert goal.progress == 0.0
        assert goal.progress_percent == 0

    def test_with_marked_adds_date(self):
        goal = Goal("Read", 30, TODAY)
        updated = goal.with_marked(TODAY)

        assert goal.marked_dates == frozenset()
        assert updated.is_marked(TODAY)
        assert updated.days_completed == 1


# ============================================================================
# ENCODE / DECODE
# ============================================================================

class TestGoalEncoding:
    """Test the four-key string mapping."""

    def test_encode_uses_four_keys(self):
        goal = Goal("Read", 30, TODAY, frozenset({date(2026, 1, 19), TODAY}))

        encoded = encode_goal(goal)

        assert encoded == {
            "goal_name": "Read",
            "total_days": "30",
            "start_date": "2026-01-18",
            "marked_dates": "2026-01-18,2026-01-19",
        }

    def test_decode_restores_goal(self):
        goal = Goal("Read", 30, date(2026, 1, 10), frozenset({date(2026, 1, 11), date(2026, 1, 15)}))

        assert decode_goal(encode_goal(goal), TODAY) == goal

    def test_missing_total_days_is_no_goal(self):
        """goal_name alone does not make a goal."""
        assert decode_goal({"goal_name": "Read"}, TODAY) is None

    def test_missing_name_is_no_goal(self):
        assert decode_goal({"total_days": "30"}, TODAY) is None

    def test_empty_mapping_is_no_goal(self):
        assert decode_goal({}, TODAY) is None

    def test_non_numeric_total_days_is_no_goal(self):
        assert decode_goal({"goal_name": "Read", "total_days": "thirty"}, TODAY) is None

    def test_missing_start_date_defaults_to_today(self):
        goal = decode_goal({"goal_name": "Read", "total_days": "30"}, TODAY)

        assert goal.start_date == TODAY
        assert goal.marked_dates == frozenset()

    def test_start_date_default_follows_decode_day(self):
        """The default is recomputed on every decode, never stored."""
        mapping = {"goal_name": "Read", "total_days": "30"}

        assert decode_goal(mapping, TODAY).start_date == TODAY
        assert decode_goal(mapping, date(2026, 2, 1)).start_date == date(2026, 2, 1)

    def test_unreadable_start_date_defaults_to_today(self):
        mapping = {"goal_name": "Read", "total_days": "30", "start_date": "yesterday"}

        assert decode_goal(mapping, TODAY).start_date == TODAY

    def test_corrupt_marked_dates_are_dropped(self):
        mapping = {
            "goal_name": "Read",
            "total_days": "30",
            "start_date": "2024-01-01",
            "marked_dates": "2024-01-01,not-a-date,2024-01-03",
        }

        goal = decode_goal(mapping, TODAY)

        assert goal.marked_dates == frozenset({date(2024, 1, 1), date(2024, 1, 3)})

    def test_marked_dates_are_trimmed(self):
        assert decode_marked_dates(" 2024-01-01 , 2024-01-02") == frozenset({date(2024, 1, 1), date(2024, 1, 2)})

    def test_duplicate_marked_dates_collapse(self):
        assert decode_marked_dates("2024-01-01,2024-01-01") == frozenset({date(2024, 1, 1)})

    def test_empty_marked_dates(self):
        assert decode_marked_dates("") == frozenset()

    def test_record_keys(self):
        assert RECORD.keys == ("goal_name", "total_days", "start_date", "marked_dates")
