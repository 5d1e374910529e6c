"""MCP tools for browsing downloaded word books."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from vocab_quiz.word_store import WordStore


def register(mcp: FastMCP, store: WordStore) -> None:
    @mcp.tool()
    def list_books() -> list[dict]:
        """List the downloaded word books with their word counts."""
        return [b.model_dump() for b in store.list_books()]

    @mcp.tool()
    def get_words(
        book_id: str,
        status: str = "all",
        limit: int = 100,
    ) -> list[dict]:
        """Get the words of a book.

        Args:
            book_id: Book identifier as returned by list_books
            status: "all", "learned" or "unlearned"
            limit: Max words to return (default 100)
        """
        if status == "learned":
            words = store.learned_words(book_id)
        elif status == "unlearned":
            words = store.unlearned_words(book_id)
        else:
            words = store.load_words(book_id)
        return [w.model_dump() for w in words[:limit]]
