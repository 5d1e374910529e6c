"""Flashcard learning loop over a book, the favorites or the mistakes."""

from __future__ import annotations

import logging

from vocab_quiz.daily_stats import DailyStatsStore
from vocab_quiz.models import WordItem
from vocab_quiz.word_store import WordStore

logger = logging.getLogger(__name__)

FAVORITES = "favorite"
MISTAKES = "mistake"


class EmptyWordListError(ValueError):
    """There is nothing to learn in the requested list."""


class LearningSession:
    """Walks through a word list one card at a time.

    For a regular book the unlearned words come first; once everything is
    learned the session reviews the whole book instead.
    """

    def __init__(
        self,
        store: WordStore,
        book_id: str,
        stats: DailyStatsStore | None = None,
    ) -> None:
        self.store = store
        self.stats = stats
        self.book_id = book_id
        self.review = False
        self.words = self._load()
        self.position = 0

    def _load(self) -> list[WordItem]:
        if self.book_id == FAVORITES:
            words = self.store.favorite_words()
            if not words:
                raise EmptyWordListError("No favorite words yet")
            return words
        if self.book_id == MISTAKES:
            words = self.store.mistake_words()
            if not words:
                raise EmptyWordListError("No mistake words yet")
            return words

        words = self.store.unlearned_words(self.book_id)
        if words:
            return words
        words = self.store.load_words(self.book_id)
        if not words:
            raise EmptyWordListError(f"Book {self.book_id} has no words")
        logger.info("All words in %s learned, entering review mode", self.book_id)
        self.review = True
        return words

    @property
    def current(self) -> WordItem | None:
        if self.position < len(self.words):
            return self.words[self.position]
        return None

    @property
    def finished(self) -> bool:
        return self.current is None

    @property
    def progress(self) -> tuple[int, int]:
        return min(self.position, len(self.words)), len(self.words)

    def mark_known(self) -> WordItem | None:
        """Mark the current card learned, count it for today and move on."""
        word = self.current
        if word is None:
            return None
        self.store.mark_learned(word.book_id, word.id)
        if self.stats is not None:
            self.stats.record_learned()
        return self._advance()

    def mark_unknown(self) -> WordItem | None:
        """Record the current card as a mistake and move on."""
        word = self.current
        if word is None:
            return None
        self.store.mark_wrong(word.book_id, word.id)
        return self._advance()

    def toggle_favorite(self) -> WordItem | None:
        word = self.current
        if word is None:
            return None
        updated = self.store.set_favorite(word.book_id, word.id, not word.is_favorite)
        self.words[self.position] = word.model_copy(
            update={"is_favorite": updated.is_favorite}
        )
        return self.words[self.position]

    def quit(self) -> None:
        self.position = len(self.words)

    def _advance(self) -> WordItem | None:
        self.position += 1
        if self.finished:
            logger.info("Finished learning list %s", self.book_id)
        return self.current

    def to_dict(self) -> dict:
        done, total = self.progress
        return {
            "book_id": self.book_id,
            "review": self.review,
            "current": self.current.model_dump() if self.current else None,
            "position": done,
            "total": total,
            "finished": self.finished,
        }
