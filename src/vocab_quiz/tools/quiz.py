"""MCP tools for playing a vocabulary quiz turn by turn."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from vocab_quiz.quiz_engine import QuizController
from vocab_quiz.quiz_models import QuizMode, QuizState
from vocab_quiz.sessions import SessionRegistry
from vocab_quiz.word_store import WordStore


def _view(session_id: str, state: QuizState) -> dict:
    """Compact state for the model: hides the answers of unanswered questions."""
    view = state.view()
    return {
        "session_id": session_id,
        "phase": view["phase"],
        "question": view["current_question"],
        "question_number": view["question_number"],
        "total_questions": view["total_questions"],
        "answer_state": view["answer_state"],
        "score": view["score"],
        "combo": state.combo.count,
        "spelling": view["spelling"],
        "correct_count": view["correct_count"],
    }


def register(
    mcp: FastMCP, store: WordStore, sessions: SessionRegistry[QuizController]
) -> None:
    # Quizzes played through MCP are turn-based, so they run without a deadline.

    @mcp.tool()
    async def start_quiz(book_id: str, mode: str = "mixed") -> dict:
        """Start a 10-question quiz over a downloaded book.

        Modes:
        - en_to_native: the headword is shown, pick its gloss
        - native_to_en: the gloss is shown, pick the headword
        - audio_to_native: the pronunciation is played, pick the gloss
        - spelling: the gloss is shown, spell the headword
        - mixed: a random type for every question

        Args:
            book_id: Book identifier as returned by list_books
            mode: One of the modes above (default "mixed")
        """
        quiz = QuizController(store.load_words, time_limit=0)
        quiz.start(book_id, QuizMode(mode))
        session_id = sessions.add(quiz)
        return _view(session_id, quiz.state)

    @mcp.tool()
    async def answer_question(session_id: str, option: str) -> dict:
        """Answer the current multiple-choice question with one of its options."""
        quiz = sessions.get(session_id)
        quiz.answer(option)
        return _view(session_id, quiz.state)

    @mcp.tool()
    async def spell(session_id: str, text: str) -> dict:
        """Type the spelling of the current spelling question (not yet submitted)."""
        quiz = sessions.get(session_id)
        quiz.update_input(text)
        return _view(session_id, quiz.state)

    @mcp.tool()
    async def use_hint(session_id: str) -> dict:
        """Reveal the next letter of the current spelling question."""
        quiz = sessions.get(session_id)
        quiz.use_hint()
        return _view(session_id, quiz.state)

    @mcp.tool()
    async def submit_spelling(session_id: str) -> dict:
        """Submit the typed spelling for checking."""
        quiz = sessions.get(session_id)
        quiz.submit()
        return _view(session_id, quiz.state)

    @mcp.tool()
    async def next_question(session_id: str) -> dict:
        """Move on after the current question has been answered."""
        quiz = sessions.get(session_id)
        quiz.next()
        return _view(session_id, quiz.state)

    @mcp.tool()
    async def quit_quiz(session_id: str) -> dict:
        """Quit a quiz and discard its session."""
        sessions.discard(session_id)
        return {"status": "quit"}
