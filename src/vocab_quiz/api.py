"""FastAPI HTTP layer over the word store, learning loop and quiz engine."""

from __future__ import annotations

import hmac
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Literal

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from vocab_quiz.daily_stats import DailyStatsStore
from vocab_quiz.learning import EmptyWordListError, LearningSession
from vocab_quiz.quiz_engine import TIME_LIMIT, InsufficientWordsError, QuizController
from vocab_quiz.quiz_models import QuizMode
from vocab_quiz.sessions import SessionNotFoundError, SessionRegistry
from vocab_quiz.word_store import WordStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

word_store = WordStore()
daily_stats = DailyStatsStore()
quiz_sessions: SessionRegistry[QuizController] = SessionRegistry("quiz")
learning_sessions: SessionRegistry[LearningSession] = SessionRegistry("learning session")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Cancel any countdown still pending on the loop
    quiz_sessions.close_all()
    learning_sessions.close_all()


app = FastAPI(
    title="Vocab Quiz API",
    description="Word books, flashcard learning and timed vocabulary quizzes",
    version="0.1.0",
    lifespan=lifespan,
)

API_KEY = os.getenv("API_KEY")
if not API_KEY:
    logger.warning("API_KEY not set. All requests will be allowed.")


@app.middleware("http")
async def verify_api_key(request: Request, call_next):
    if API_KEY and request.url.path != "/health":
        key = request.headers.get("x-api-key", "")
        if not hmac.compare_digest(key, API_KEY):
            return JSONResponse(status_code=401, content={"detail": "Invalid API key"})
    return await call_next(request)


@app.exception_handler(SessionNotFoundError)
async def session_not_found(request: Request, exc: SessionNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.args[0]})


@app.exception_handler(FileNotFoundError)
async def book_not_found(request: Request, exc: FileNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InsufficientWordsError)
@app.exception_handler(EmptyWordListError)
async def not_enough_words(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/health")
def health():
    """Unauthenticated health check."""
    return {"status": "ok"}


# --- Request models ---


class ImportBookRequest(BaseModel):
    name: str = ""
    category: str = ""
    version: int = 1
    words: list[dict[str, Any]]


class StartLearningRequest(BaseModel):
    book_id: str


class StartQuizRequest(BaseModel):
    book_id: str
    mode: QuizMode = QuizMode.mixed
    time_limit: float | None = None  # None = server default, 0 = untimed


class DailyGoalRequest(BaseModel):
    goal: int


class AnswerRequest(BaseModel):
    option: str


class SpellingRequest(BaseModel):
    input: str


# --- Books ---


@app.get("/api/books")
def list_books():
    """List downloaded word books."""
    return [b.model_dump() for b in word_store.list_books()]


@app.post("/api/books/{book_id}")
def import_book(book_id: str, req: ImportBookRequest):
    """Store a word list as a book, replacing any earlier copy."""
    try:
        book = word_store.import_book(
            book_id, req.words, name=req.name, category=req.category, version=req.version
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return book.model_dump()


@app.get("/api/books/{book_id}/words")
def list_words(
    book_id: str,
    status: Literal["all", "learned", "unlearned"] = "all",
):
    """Words of a book, optionally filtered by learning status."""
    if status == "learned":
        words = word_store.learned_words(book_id)
    elif status == "unlearned":
        words = word_store.unlearned_words(book_id)
    else:
        words = word_store.load_words(book_id)
    return [w.model_dump() for w in words]


@app.delete("/api/books/{book_id}")
def delete_book(book_id: str):
    """Delete a downloaded book."""
    word_store.delete_book(book_id)
    return {"status": "deleted"}


@app.get("/api/words/favorites")
def favorite_words():
    return [w.model_dump() for w in word_store.favorite_words()]


@app.get("/api/words/mistakes")
def mistake_words():
    return [w.model_dump() for w in word_store.mistake_words()]


@app.post("/api/books/{book_id}/words/{word_id}/favorite")
def toggle_favorite(book_id: str, word_id: int):
    """Flip a word's favorite flag."""
    word = next((w for w in word_store.load_words(book_id) if w.id == word_id), None)
    if word is None:
        raise HTTPException(status_code=404, detail=f"Word not found: {word_id}")
    return word_store.set_favorite(book_id, word_id, not word.is_favorite).model_dump()


@app.post("/api/books/{book_id}/words/{word_id}/unlearn")
def unlearn_word(book_id: str, word_id: int):
    """Put a learned word back into the learning queue."""
    try:
        return word_store.mark_unlearned(book_id, word_id).model_dump()
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Word not found: {word_id}")


# --- Learning ---


def _learning_response(session_id: str, session: LearningSession) -> dict:
    return {"session_id": session_id, **session.to_dict()}


@app.post("/api/learning")
def start_learning(req: StartLearningRequest):
    """Start a flashcard run over a book, 'favorite' or 'mistake'."""
    session = LearningSession(word_store, req.book_id, stats=daily_stats)
    session_id = learning_sessions.add(session)
    return _learning_response(session_id, session)


@app.get("/api/learning/{session_id}")
def get_learning(session_id: str):
    return _learning_response(session_id, learning_sessions.get(session_id))


@app.post("/api/learning/{session_id}/known")
def learning_known(session_id: str):
    session = learning_sessions.get(session_id)
    session.mark_known()
    return _learning_response(session_id, session)


@app.post("/api/learning/{session_id}/unknown")
def learning_unknown(session_id: str):
    session = learning_sessions.get(session_id)
    session.mark_unknown()
    return _learning_response(session_id, session)


@app.post("/api/learning/{session_id}/favorite")
def learning_favorite(session_id: str):
    session = learning_sessions.get(session_id)
    session.toggle_favorite()
    return _learning_response(session_id, session)


@app.delete("/api/learning/{session_id}")
def quit_learning(session_id: str):
    learning_sessions.discard(session_id)
    return {"status": "quit"}


# --- Daily progress ---


@app.get("/api/stats/daily")
def get_daily_stats():
    """Words learned today, the daily goal and the current streak."""
    return daily_stats.load().model_dump(mode="json")


@app.put("/api/stats/daily/goal")
def set_daily_goal(req: DailyGoalRequest):
    try:
        stats = daily_stats.set_goal(req.goal)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return stats.model_dump(mode="json")


# --- Quiz ---
# Quiz endpoints are async so transitions and countdowns share the event loop.


def _quiz_response(session_id: str, quiz: QuizController) -> dict:
    return {"session_id": session_id, "state": quiz.state.view()}


@app.post("/api/quizzes")
async def start_quiz(req: StartQuizRequest):
    """Start a quiz over a downloaded book."""
    quiz = QuizController(
        word_store.load_words,
        time_limit=TIME_LIMIT if req.time_limit is None else req.time_limit,
    )
    quiz.start(req.book_id, req.mode)
    session_id = quiz_sessions.add(quiz)
    return _quiz_response(session_id, quiz)


@app.get("/api/quizzes/{session_id}")
async def get_quiz(session_id: str):
    return _quiz_response(session_id, quiz_sessions.get(session_id))


@app.post("/api/quizzes/{session_id}/answer")
async def answer_question(session_id: str, req: AnswerRequest):
    """Pick an option for the current multiple-choice question."""
    quiz = quiz_sessions.get(session_id)
    quiz.answer(req.option)
    return _quiz_response(session_id, quiz)


@app.post("/api/quizzes/{session_id}/spelling")
async def update_spelling(session_id: str, req: SpellingRequest):
    """Replace the spelling buffer."""
    quiz = quiz_sessions.get(session_id)
    if not quiz.update_input(req.input):
        raise HTTPException(status_code=400, detail="Input rejected")
    return _quiz_response(session_id, quiz)


@app.post("/api/quizzes/{session_id}/hint")
async def use_hint(session_id: str):
    quiz = quiz_sessions.get(session_id)
    quiz.use_hint()
    return _quiz_response(session_id, quiz)


@app.post("/api/quizzes/{session_id}/submit")
async def submit_spelling(session_id: str):
    quiz = quiz_sessions.get(session_id)
    quiz.submit()
    return _quiz_response(session_id, quiz)


@app.post("/api/quizzes/{session_id}/next")
async def next_question(session_id: str):
    quiz = quiz_sessions.get(session_id)
    quiz.next()
    return _quiz_response(session_id, quiz)


@app.delete("/api/quizzes/{session_id}")
async def quit_quiz(session_id: str):
    """Quit a quiz and discard its session."""
    quiz_sessions.discard(session_id)
    return {"status": "quit"}


def main():
    """Run the API server."""
    import uvicorn

    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
