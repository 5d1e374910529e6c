"""Word store — JSON file per downloaded book, plus learning progress."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vocab_quiz.models import BookFile, BookInfo, WordItem

logger = logging.getLogger(__name__)

# Default book storage directory (override with WORDS_DIR env var)
WORDS_DIR = Path(
    os.environ.get("WORDS_DIR", Path(__file__).parent.parent.parent / "books")
)


def parse_word_record(record: dict[str, Any], book_id: str) -> WordItem:
    """Build a WordItem from either supported word-list record format.

    Simple records look like ``{"id": 1, "word": "apple", "cn": "苹果",
    "audio": "..."}``. Rich records carry ``wordRank``/``headWord`` at the top
    and the translations under ``content.word.content``.
    """
    if "headWord" in record:
        details = record.get("content", {}).get("word", {}).get("content", {})
        translations = details.get("trans") or []
        gloss = translations[0].get("tranCn", "") if translations else ""
        return WordItem(
            id=record["wordRank"],
            word=record["headWord"],
            gloss=gloss or "",
            audio=details.get("usspeech") or "",
            book_id=book_id,
        )
    return WordItem(
        id=record["id"],
        word=record["word"],
        gloss=record.get("cn", record.get("gloss", "")),
        audio=record.get("audio") or "",
        book_id=book_id,
    )


class WordStore:
    """JSON file-based word book storage."""

    def __init__(self, directory: Path = WORDS_DIR) -> None:
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, book_id: str) -> Path:
        return self.directory / f"{book_id}.json"

    def _read(self, book_id: str) -> BookFile:
        path = self._path(book_id)
        if not path.exists():
            raise FileNotFoundError(f"Book not found: {book_id}")
        return BookFile.model_validate(json.loads(path.read_text(encoding="utf-8")))

    def _write(self, data: BookFile) -> None:
        data.book.word_count = len(data.words)
        path = self._path(data.book.book_id)
        path.write_text(
            json.dumps(data.model_dump(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    # --- Books ---

    def import_book(
        self,
        book_id: str,
        records: list[dict[str, Any]] | dict[str, Any],
        name: str = "",
        category: str = "",
        version: int = 1,
    ) -> BookInfo:
        """Store a word list as a book, replacing any earlier copy."""
        if isinstance(records, dict):
            records = [records]
        try:
            words = [parse_word_record(r, book_id) for r in records]
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed word record in {book_id}: {e}") from e

        book = BookInfo(
            book_id=book_id, name=name or book_id, category=category, version=version
        )
        data = BookFile(book=book, words=words)
        self._write(data)
        logger.info("Imported %d words into book %s", len(words), book_id)
        return data.book

    def get_book(self, book_id: str) -> BookInfo:
        return self._read(book_id).book

    def list_books(self) -> list[BookInfo]:
        books = []
        for p in sorted(self.directory.glob("*.json")):
            try:
                data = json.loads(p.read_text(encoding="utf-8"))
                books.append(BookFile.model_validate(data).book)
            except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
                logger.warning("Skipping unreadable book file %s", p)
                continue
        return books

    def delete_book(self, book_id: str) -> None:
        path = self._path(book_id)
        if path.exists():
            path.unlink()
            logger.info("Deleted book %s", book_id)

    # --- Word queries ---

    def load_words(self, book_id: str) -> list[WordItem]:
        """All words of a book — the word pool for quizzes."""
        return self._read(book_id).words

    def unlearned_words(self, book_id: str) -> list[WordItem]:
        return [w for w in self.load_words(book_id) if not w.is_learned]

    def learned_words(self, book_id: str) -> list[WordItem]:
        learned = [w for w in self.load_words(book_id) if w.is_learned]
        return sorted(learned, key=lambda w: w.id, reverse=True)

    def favorite_words(self) -> list[WordItem]:
        return [w for w in self._all_words() if w.is_favorite]

    def mistake_words(self) -> list[WordItem]:
        return [w for w in self._all_words() if w.is_wrong]

    def _all_words(self) -> list[WordItem]:
        words: list[WordItem] = []
        for book in self.list_books():
            words.extend(self.load_words(book.book_id))
        return words

    # --- Progress ---

    def _update(
        self,
        book_id: str,
        word_id: int,
        changes: Callable[[WordItem], dict[str, Any]],
    ) -> WordItem:
        data = self._read(book_id)
        for i, w in enumerate(data.words):
            if w.id == word_id:
                data.words[i] = w.model_copy(update=changes(w))
                self._write(data)
                return data.words[i]
        raise KeyError(f"Word {word_id} not found in book {book_id}")

    def mark_learned(self, book_id: str, word_id: int) -> WordItem:
        return self._update(book_id, word_id, lambda w: {"is_learned": True})

    def mark_unlearned(self, book_id: str, word_id: int) -> WordItem:
        return self._update(book_id, word_id, lambda w: {"is_learned": False})

    def mark_wrong(self, book_id: str, word_id: int) -> WordItem:
        """Flag a word as a mistake and bump its wrong counter."""
        return self._update(
            book_id,
            word_id,
            lambda w: {"is_wrong": True, "wrong_count": w.wrong_count + 1},
        )

    def set_favorite(self, book_id: str, word_id: int, favorite: bool) -> WordItem:
        return self._update(book_id, word_id, lambda w: {"is_favorite": favorite})
