"""Tests for the session registry."""

import pytest

from vocab_quiz.sessions import SessionNotFoundError, SessionRegistry


class Quittable:
    def __init__(self):
        self.quit_called = False

    def quit(self):
        self.quit_called = True


class TestSessionRegistry:
    def test_add_and_get(self):
        registry = SessionRegistry("quiz")
        session = Quittable()
        session_id = registry.add(session)
        assert len(session_id) == 12
        assert session_id in registry
        assert registry.get(session_id) is session

    def test_unknown_id(self):
        registry = SessionRegistry("quiz")
        with pytest.raises(SessionNotFoundError, match="Quiz not found"):
            registry.get("nope")
        with pytest.raises(KeyError):
            registry.discard("nope")

    def test_discard_quits(self):
        registry = SessionRegistry()
        session = Quittable()
        session_id = registry.add(session)
        registry.discard(session_id)
        assert session.quit_called
        assert session_id not in registry

    def test_close_all(self):
        registry = SessionRegistry()
        sessions = [Quittable() for _ in range(3)]
        for s in sessions:
            registry.add(s)
        registry.close_all()
        assert len(registry) == 0
        assert all(s.quit_called for s in sessions)
