"""Daily learning goal and streak, persisted next to the word books."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import date
from pathlib import Path

from pydantic import BaseModel, ValidationError

from vocab_quiz.word_store import WORDS_DIR

logger = logging.getLogger(__name__)

DEFAULT_DAILY_GOAL = 20


class DailyStats(BaseModel):
    record_date: date | None = None  # Day today_count belongs to
    today_count: int = 0
    daily_goal: int = DEFAULT_DAILY_GOAL
    streak_days: int = 0
    last_streak_date: date | None = None  # Last day the goal was met


class DailyStatsStore:
    """Counts words learned per day and the streak of days the goal was met.

    Lives in a ``stats/`` sub-directory so book listings never see it.
    """

    def __init__(
        self,
        directory: Path = WORDS_DIR,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.path = directory / "stats" / "daily.json"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.today = today

    def _save(self, stats: DailyStats) -> DailyStats:
        self.path.write_text(stats.model_dump_json(indent=2), encoding="utf-8")
        return stats

    def load(self) -> DailyStats:
        """Current stats, with the daily count reset on a new day."""
        stats = DailyStats()
        if self.path.exists():
            try:
                stats = DailyStats.model_validate(
                    json.loads(self.path.read_text(encoding="utf-8"))
                )
            except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
                logger.warning("Unreadable stats file %s, starting fresh", self.path)

        today = self.today()
        if stats.record_date != today:
            stats.record_date = today
            stats.today_count = 0
            self._save(stats)
        return stats

    def record_learned(self) -> DailyStats:
        """Count one more learned word; reaching the goal extends the streak."""
        stats = self.load()
        stats.today_count += 1
        if stats.today_count == stats.daily_goal:
            self._update_streak(stats)
        return self._save(stats)

    def set_goal(self, goal: int) -> DailyStats:
        if goal < 1:
            raise ValueError(f"Daily goal must be at least 1, got {goal}")
        stats = self.load()
        stats.daily_goal = goal
        return self._save(stats)

    def _update_streak(self, stats: DailyStats) -> None:
        today = self.today()
        last = stats.last_streak_date
        if last == today:
            return
        if last is None:
            stats.streak_days = 1
        else:
            gap = (today - last).days
            if gap == 1:
                stats.streak_days += 1
            elif gap > 1:
                stats.streak_days = 1
        stats.last_streak_date = today
        logger.info("Daily goal reached, streak is %d days", stats.streak_days)
