"""MCP Server — vocabulary books and quizzes as tools for an assistant.

Registers:
- list_books / get_words                    (word book browsing)
- start_quiz / answer_question / next_question / quit_quiz
- spell / use_hint / submit_spelling       (spelling questions)
"""

from __future__ import annotations

import argparse
import logging

from mcp.server.fastmcp import FastMCP

from vocab_quiz.quiz_engine import QuizController
from vocab_quiz.sessions import SessionRegistry
from vocab_quiz.tools import books, quiz
from vocab_quiz.word_store import WordStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_server(
    store: WordStore, sessions: SessionRegistry[QuizController]
) -> FastMCP:
    """Build an MCP server exposing the book and quiz tools over ``store``."""
    server = FastMCP("vocab-quiz")
    books.register(server, store)
    quiz.register(server, store, sessions)
    return server


store = WordStore()
quiz_sessions: SessionRegistry[QuizController] = SessionRegistry("quiz")
mcp = create_server(store, quiz_sessions)


# ============================================================================
# Entry point
# ============================================================================


def main():
    """Run the MCP server."""
    parser = argparse.ArgumentParser(
        description="Vocabulary quiz MCP server",
    )
    parser.add_argument(
        "--sse",
        type=int,
        metavar="PORT",
        help="Run with SSE transport on specified port",
    )
    parser.add_argument(
        "--http",
        type=int,
        metavar="PORT",
        help="Run with Streamable HTTP transport on specified port",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.sse:
        transport = "sse"
        port = args.sse
    elif args.http:
        transport = "http"
        port = args.http
    else:
        transport = "stdio"
        port = None

    logger.info(
        "Starting vocab-quiz MCP server (transport: %s, %d books)...",
        transport,
        len(store.list_books()),
    )

    if transport == "stdio":
        mcp.run(transport="stdio")
    elif transport == "sse":
        mcp.settings.host = "0.0.0.0"
        mcp.settings.port = port
        mcp.run(transport="sse")
    elif transport == "http":
        mcp.settings.host = "0.0.0.0"
        mcp.settings.port = port
        mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
