"""Quiz engine — question generation and the quiz session controller."""

from __future__ import annotations

import asyncio
import logging
import os
import random
from collections.abc import Callable

from vocab_quiz.feedback import AudioService, Haptics
from vocab_quiz.models import WordItem
from vocab_quiz.quiz_models import (
    COMBO_STEP,
    AnswerOutcome,
    AnswerState,
    ComboState,
    Question,
    QuizMode,
    QuizPhase,
    QuizState,
    QuizType,
    SpellingState,
)

logger = logging.getLogger(__name__)

MIN_POOL_SIZE = 4
DISTRACTOR_COUNT = 3
QUESTIONS_PER_SESSION = 10
BASE_POINTS = 10

# Countdown: TIME_LIMIT units, TIME_STEP units per tick, one tick per TICK_INTERVAL s
TIME_LIMIT = float(os.environ.get("QUIZ_TIME_LIMIT", 15.0))
TIME_STEP = 0.1
TICK_INTERVAL = 0.1

WordProvider = Callable[[str], list[WordItem]]
StateListener = Callable[[QuizState], None]


class InsufficientWordsError(ValueError):
    """The word pool is too small to build multiple-choice questions."""

    def __init__(self, pool_size: int) -> None:
        self.pool_size = pool_size
        super().__init__(
            f"Not enough words to build a quiz: need at least {MIN_POOL_SIZE}, "
            f"found {pool_size}"
        )


def combo_points(combo: int) -> int:
    """Points for a correct answer that brings the combo to ``combo``."""
    return round(BASE_POINTS * (1 + COMBO_STEP * combo))


def _option_text(word: WordItem, qtype: QuizType) -> str:
    return word.word if qtype == QuizType.native_to_en else word.gloss


def generate_questions(
    words: list[WordItem],
    mode: QuizMode,
    count: int = QUESTIONS_PER_SESSION,
    rng: random.Random | None = None,
) -> list[Question]:
    """Sample quiz targets from a word pool and build their questions.

    Each multiple-choice question gets three distractors drawn from the rest
    of the pool; distractors whose option text repeats one already chosen are
    skipped so every option set holds distinct strings with exactly one
    correct entry.
    """
    if len(words) < MIN_POOL_SIZE:
        raise InsufficientWordsError(len(words))
    rng = rng or random.Random()

    targets = rng.sample(words, min(count, len(words)))
    questions: list[Question] = []
    for target in targets:
        qtype = mode.pick_type(rng)
        options: list[str] = []
        if qtype != QuizType.spelling:
            options = [_option_text(target, qtype)]
            others = [w for w in words if w.id != target.id]
            rng.shuffle(others)
            for w in others:
                if len(options) > DISTRACTOR_COUNT:
                    break
                text = _option_text(w, qtype)
                if text not in options:
                    options.append(text)
            rng.shuffle(options)
        questions.append(
            Question(index=len(questions), type=qtype, word=target, options=options)
        )

    logger.info(
        "Generated %d %s questions from a pool of %d words",
        len(questions),
        mode.value,
        len(words),
    )
    return questions


class QuizController:
    """Drives one quiz attempt from mode selection to finish or quit.

    All transitions run on one thread; the only concurrent activity is the
    per-question countdown, an asyncio task that answer/submit/next/quit
    cancel before touching state. With ``time_limit=0`` there is no
    countdown and no event loop is required.
    """

    def __init__(
        self,
        words: WordProvider,
        audio: AudioService | None = None,
        haptics: Haptics | None = None,
        time_limit: float = TIME_LIMIT,
        tick_interval: float = TICK_INTERVAL,
        question_count: int = QUESTIONS_PER_SESSION,
        rng: random.Random | None = None,
    ) -> None:
        self.words = words
        self.audio = audio or AudioService()
        self.haptics = haptics or Haptics()
        self.time_limit = time_limit
        self.tick_interval = tick_interval
        self.question_count = question_count
        self.rng = rng or random.Random()

        self._listeners: list[StateListener] = []
        self._timer: asyncio.Task | None = None
        self.phase = QuizPhase.selecting
        self.book_id = ""
        self.mode = QuizMode.mixed
        self._reset_session()

    def _reset_session(self) -> None:
        self.questions: list[Question] = []
        self.index = 0
        self.score = 0
        self.combo = ComboState()
        self.answer_state = AnswerState.unanswered
        self.selected_option = ""
        self.spelling: SpellingState | None = None
        self.history: list[AnswerOutcome] = []
        self._ticks_left = 0

    # --- Observation ---

    @property
    def current_question(self) -> Question | None:
        if self.phase != QuizPhase.active:
            return None
        return self.questions[self.index]

    @property
    def time_left(self) -> float:
        return round(self._ticks_left * TIME_STEP, 1)

    @property
    def wrong_words(self) -> list[WordItem]:
        return [o.question.word for o in self.history if not o.correct]

    @property
    def state(self) -> QuizState:
        return QuizState(
            phase=self.phase,
            book_id=self.book_id,
            mode=self.mode,
            questions=self.questions,
            current_index=self.index,
            current_question=self.current_question,
            score=self.score,
            combo=self.combo,
            answer_state=self.answer_state,
            selected_option=self.selected_option,
            time_left=self.time_left,
            spelling=self.spelling,
            history=self.history,
            correct_count=sum(1 for o in self.history if o.correct),
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Quiz state listener %r failed", listener)

    # --- Transitions ---

    def start(self, book_id: str, mode: QuizMode | str = QuizMode.mixed) -> QuizState:
        """Generate a session for ``book_id`` and make its first question active.

        Raises InsufficientWordsError (and leaves no session behind) when the
        book has fewer than four words.
        """
        mode = QuizMode(mode)
        if self.time_limit > 0:
            # The countdown needs a loop; fail before any state changes.
            asyncio.get_running_loop()
        pool = self.words(book_id)
        questions = generate_questions(pool, mode, self.question_count, self.rng)

        self._cancel_timer()
        self._reset_session()
        self.book_id = book_id
        self.mode = mode
        self.questions = questions
        self.phase = QuizPhase.active
        logger.info("Quiz started: book=%s mode=%s", book_id, mode.value)

        self._enter_question()
        return self.state

    def answer(self, option: str) -> AnswerOutcome | None:
        """Answer the active multiple-choice question.

        Returns the recorded outcome, or None if the call was ignored (no
        active question, already answered, or a spelling question).
        """
        q = self.current_question
        if q is None or self.answer_state != AnswerState.unanswered:
            logger.debug("Ignoring answer %r: question not open", option)
            return None
        if q.type == QuizType.spelling:
            logger.debug("Ignoring answer %r on a spelling question", option)
            return None

        self.selected_option = option
        return self._resolve(option == q.expected_answer, answer=option)

    def timeout(self) -> AnswerOutcome | None:
        """Resolve the active question as incorrect because time ran out."""
        if self.current_question is None or self.answer_state != AnswerState.unanswered:
            return None
        logger.info("Question %d timed out", self.index)
        return self._resolve(False, answer=None, timed_out=True)

    def next(self) -> bool:
        """Move past an answered question; finish after the last one."""
        if self.phase != QuizPhase.active or self.answer_state == AnswerState.unanswered:
            logger.debug("Ignoring next: current question not answered")
            return False

        self._cancel_timer()
        if self.index < len(self.questions) - 1:
            self.index += 1
            self.answer_state = AnswerState.unanswered
            self.selected_option = ""
            self._enter_question()
        else:
            self.phase = QuizPhase.finished
            self._ticks_left = 0
            self.spelling = None
            logger.info(
                "Quiz finished: score=%d correct=%d/%d",
                self.score,
                sum(1 for o in self.history if o.correct),
                len(self.questions),
            )
            self._notify()
        return True

    def quit(self) -> None:
        """Discard the session from any phase and return to selection."""
        self._cancel_timer()
        if self.phase != QuizPhase.selecting:
            logger.info("Quiz quit: book=%s index=%d", self.book_id, self.index)
        self.phase = QuizPhase.selecting
        self.book_id = ""
        self.mode = QuizMode.mixed
        self._reset_session()
        self._notify()

    # --- Spelling ---

    def update_input(self, text: str) -> bool:
        """Replace the spelling buffer; rejected if longer than the target.

        Editing stays possible after a wrong submit so the error flag can
        clear, but the question is not re-scored.
        """
        if self.spelling is None or self.phase != QuizPhase.active:
            return False
        if len(text) > len(self.spelling.target):
            return False
        self.spelling = self.spelling.model_copy(update={"input": text, "is_error": False})
        self._notify()
        return True

    def use_hint(self) -> bool:
        """Reveal the next letter of the target into the spelling buffer."""
        if self.spelling is None or self.answer_state != AnswerState.unanswered:
            return False
        current = self.spelling.input
        target = self.spelling.target
        if len(current) >= len(target):
            return False
        self.spelling = self.spelling.model_copy(
            update={
                "input": current + target[len(current)],
                "hint_count": self.spelling.hint_count + 1,
            }
        )
        self._notify()
        return True

    def submit(self) -> AnswerOutcome | None:
        """Check the spelling buffer against the target word."""
        if self.spelling is None or self.answer_state != AnswerState.unanswered:
            return None
        given = self.spelling.input.strip()
        correct = given.lower() == self.spelling.target.strip().lower()
        if not correct:
            self.spelling = self.spelling.model_copy(update={"is_error": True})
        return self._resolve(correct, answer=given)

    # --- Internals ---

    def _enter_question(self) -> None:
        q = self.questions[self.index]
        if q.type == QuizType.spelling:
            self.spelling = SpellingState(target=q.word.word)
        else:
            self.spelling = None
        self._start_timer()
        if q.type == QuizType.audio_to_native:
            self.audio.play(q.word.audio, q.word.word)
        self._notify()

    def _resolve(
        self, correct: bool, answer: str | None, timed_out: bool = False
    ) -> AnswerOutcome:
        self._cancel_timer()
        if correct:
            self.combo = ComboState(count=self.combo.count + 1)
            self.score += combo_points(self.combo.count)
            self.answer_state = AnswerState.correct
        else:
            self.combo = ComboState()
            self.answer_state = AnswerState.incorrect
        self.haptics.feedback(correct)

        outcome = self._record(correct, answer, timed_out)
        self._notify()
        return outcome

    def _record(self, correct: bool, answer: str | None, timed_out: bool) -> AnswerOutcome:
        for existing in self.history:
            if existing.index == self.index:
                return existing
        outcome = AnswerOutcome(
            index=self.index,
            question=self.questions[self.index],
            correct=correct,
            answer=answer,
            timed_out=timed_out,
        )
        self.history.append(outcome)
        return outcome

    def _start_timer(self) -> None:
        self._cancel_timer()
        self._ticks_left = round(self.time_limit / TIME_STEP)
        if self._ticks_left <= 0:
            self._ticks_left = 0
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.create_task(self._countdown(self.index))

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _countdown(self, index: int) -> None:
        while self._ticks_left > 0:
            await asyncio.sleep(self.tick_interval)
            self._ticks_left -= 1
            self._notify()
        if self.index == index and self.answer_state == AnswerState.unanswered:
            # Drop the handle first so timeout() does not cancel this task.
            self._timer = None
            self.timeout()
