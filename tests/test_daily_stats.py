"""Tests for the daily learning goal and streak."""

from datetime import date, timedelta

import pytest

from vocab_quiz.daily_stats import DEFAULT_DAILY_GOAL, DailyStatsStore
from vocab_quiz.learning import LearningSession
from vocab_quiz.word_store import WordStore


class Clock:
    def __init__(self, day):
        self.day = day

    def __call__(self):
        return self.day

    def advance(self, days=1):
        self.day += timedelta(days=days)


@pytest.fixture
def clock():
    return Clock(date(2024, 3, 1))


@pytest.fixture
def stats(tmp_path, clock):
    return DailyStatsStore(directory=tmp_path, today=clock)


def reach_goal(stats):
    for _ in range(stats.load().daily_goal):
        result = stats.record_learned()
    return result


class TestDailyStatsStore:
    def test_fresh_stats(self, stats, clock):
        s = stats.load()
        assert s.today_count == 0
        assert s.daily_goal == DEFAULT_DAILY_GOAL
        assert s.streak_days == 0
        assert s.record_date == clock.day
        assert s.last_streak_date is None

    def test_stats_file_kept_out_of_book_listing(self, tmp_path, stats):
        stats.record_learned()
        assert WordStore(directory=tmp_path).list_books() == []

    def test_count_persists(self, tmp_path, stats, clock):
        stats.record_learned()
        stats.record_learned()
        reopened = DailyStatsStore(directory=tmp_path, today=clock)
        assert reopened.load().today_count == 2

    def test_new_day_resets_count(self, stats, clock):
        stats.record_learned()
        clock.advance()
        s = stats.load()
        assert s.today_count == 0
        assert s.record_date == clock.day

    def test_goal_met_starts_streak(self, stats, clock):
        stats.set_goal(3)
        s = stats.record_learned()
        assert s.streak_days == 0
        s = reach_goal(stats)
        assert s.streak_days == 1
        assert s.last_streak_date == clock.day

    def test_streak_unchanged_past_goal(self, stats):
        stats.set_goal(2)
        reach_goal(stats)
        for _ in range(5):
            s = stats.record_learned()
        assert s.today_count == 7
        assert s.streak_days == 1

    def test_raised_goal_met_again_same_day(self, stats):
        stats.set_goal(1)
        stats.record_learned()
        stats.set_goal(3)
        s = stats.record_learned()
        s = stats.record_learned()
        assert s.today_count == 3
        assert s.streak_days == 1

    def test_consecutive_days_extend_streak(self, stats, clock):
        stats.set_goal(2)
        reach_goal(stats)
        clock.advance()
        reach_goal(stats)
        clock.advance()
        s = reach_goal(stats)
        assert s.streak_days == 3
        assert s.last_streak_date == clock.day

    def test_gap_resets_streak(self, stats, clock):
        stats.set_goal(2)
        reach_goal(stats)
        clock.advance()
        reach_goal(stats)
        clock.advance(3)
        s = reach_goal(stats)
        assert s.streak_days == 1

    def test_missed_day_alone_keeps_streak_until_next_goal(self, stats, clock):
        stats.set_goal(2)
        reach_goal(stats)
        clock.advance(2)
        assert stats.load().streak_days == 1

    @pytest.mark.parametrize("goal", [0, -5])
    def test_invalid_goal(self, stats, goal):
        with pytest.raises(ValueError):
            stats.set_goal(goal)
        assert stats.load().daily_goal == DEFAULT_DAILY_GOAL

    def test_unreadable_file_starts_fresh(self, stats):
        stats.path.write_text("not json", encoding="utf-8")
        assert stats.load().today_count == 0
        assert stats.record_learned().today_count == 1


class TestLearningCountsToday:
    def test_mark_known_counts(self, tmp_path, stats):
        store = WordStore(directory=tmp_path)
        store.import_book(
            "fruit",
            [
                {"id": 1, "word": "apple", "cn": "苹果"},
                {"id": 2, "word": "banana", "cn": "香蕉"},
            ],
        )
        session = LearningSession(store, "fruit", stats=stats)
        session.mark_known()
        session.mark_unknown()
        assert stats.load().today_count == 1
