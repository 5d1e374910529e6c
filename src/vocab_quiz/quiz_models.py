"""Quiz data models — questions, outcomes and the observable session state."""

from __future__ import annotations

import random
from enum import Enum

from pydantic import BaseModel, computed_field

from vocab_quiz.models import WordItem

COMBO_STEP = 0.1


class QuizType(str, Enum):
    """What a single question asks for."""

    en_to_native = "en_to_native"  # Headword shown, pick the gloss
    native_to_en = "native_to_en"  # Gloss shown, pick the headword
    audio_to_native = "audio_to_native"  # Pronunciation played, pick the gloss
    spelling = "spelling"  # Gloss shown, type the headword


class QuizMode(str, Enum):
    """Quiz type chosen for a whole session."""

    mixed = "mixed"
    en_to_native = "en_to_native"
    native_to_en = "native_to_en"
    audio_to_native = "audio_to_native"
    spelling = "spelling"

    def pick_type(self, rng: random.Random) -> QuizType:
        if self is QuizMode.mixed:
            return rng.choice(list(QuizType))
        return QuizType(self.value)


class QuizPhase(str, Enum):
    selecting = "selecting"
    active = "active"
    finished = "finished"


class AnswerState(str, Enum):
    unanswered = "unanswered"
    correct = "correct"
    incorrect = "incorrect"


class Question(BaseModel):
    """A single generated quiz question."""

    index: int
    type: QuizType
    word: WordItem
    options: list[str] = []  # Empty for spelling

    @computed_field
    @property
    def expected_answer(self) -> str:
        if self.type in (QuizType.native_to_en, QuizType.spelling):
            return self.word.word
        return self.word.gloss

    @property
    def prompt(self) -> str:
        """What the player is shown or played for this question."""
        if self.type == QuizType.audio_to_native:
            return self.word.audio or self.word.word
        if self.type == QuizType.en_to_native:
            return self.word.word
        return self.word.gloss


class AnswerOutcome(BaseModel):
    """How one question was resolved."""

    index: int
    question: Question
    correct: bool
    answer: str | None = None  # None when the deadline elapsed
    timed_out: bool = False


class ComboState(BaseModel):
    count: int = 0

    @computed_field
    @property
    def multiplier(self) -> float:
        return round(1.0 + COMBO_STEP * self.count, 2)


class SpellingState(BaseModel):
    target: str
    input: str = ""
    hint_count: int = 0
    is_error: bool = False

    @computed_field
    @property
    def mask(self) -> str:
        return "-" * len(self.target)


class QuizState(BaseModel):
    """Snapshot of a quiz session, published to observers."""

    phase: QuizPhase = QuizPhase.selecting
    book_id: str = ""
    mode: QuizMode = QuizMode.mixed
    questions: list[Question] = []
    current_index: int = 0
    current_question: Question | None = None
    score: int = 0
    combo: ComboState = ComboState()
    answer_state: AnswerState = AnswerState.unanswered
    selected_option: str = ""
    time_left: float = 0.0
    spelling: SpellingState | None = None
    history: list[AnswerOutcome] = []
    correct_count: int = 0

    @computed_field
    @property
    def finished(self) -> bool:
        return self.phase == QuizPhase.finished

    def view(self) -> dict:
        """Client-facing snapshot with unanswered answers withheld.

        Drops the generated question list and the spelling target. The
        current question carries its prompt and options, and its expected
        answer only once it has been answered.
        """
        data = self.model_dump(
            mode="json", exclude={"questions", "current_question", "spelling"}
        )
        data["question_number"] = self.current_index + 1
        data["total_questions"] = len(self.questions)
        data["current_question"] = None
        data["spelling"] = None

        q = self.current_question
        if q is not None:
            current = {
                "index": q.index,
                "type": q.type.value,
                "options": q.options,
                "prompt": q.prompt,
            }
            if self.answer_state != AnswerState.unanswered:
                current["expected_answer"] = q.expected_answer
            data["current_question"] = current
        if self.spelling is not None:
            data["spelling"] = self.spelling.model_dump(exclude={"target"})
        return data
