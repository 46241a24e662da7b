"""Command-line entry point for reading a phishing news digest.

Run with: python -m src.phishing_news [--latest | --date YYYY-MM-DD]
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from src.phishing_news.browsing import ALL_SOURCES, filter_articles, source_categories
from src.phishing_news.config import PROJECT_ROOT
from src.phishing_news.orchestrator import DigestOrchestrator
from src.phishing_news.state import DigestViewState, LoadPhase
from src.utils.logging import configure_logging

logger = logging.getLogger(__name__)

TODAY_PENDING_HINT = "Today's digest has not been published yet. Run with --latest to see the most recent one."


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show the daily phishing news digest")
    selection = parser.add_mutually_exclusive_group()
    selection.add_argument("--latest", action="store_true", help="Show the latest published digest")
    selection.add_argument("--date", help="Show the digest for a UTC day (YYYY-MM-DD)")
    parser.add_argument("--list", action="store_true", help="List days with a published digest")
    parser.add_argument("--source", default=ALL_SOURCES, help="Only show articles from this source")
    parser.add_argument("--search", default="", help="Only show articles matching this text")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def render_state(state: DigestViewState, *, source: str = ALL_SOURCES, search: str = "") -> str:
    """Render a view state as plain text.

    :param state: State after a load cycle.
    :param source: Source filter for the article list.
    :param search: Search filter for the article list.
    :returns: Text for the terminal.
    """
    lines: list[str] = []
    if state.today_pending:
        lines.extend([TODAY_PENDING_HINT, ""])
    if state.phase is LoadPhase.FAILED:
        lines.append(f"Error: {state.error_message}")
        return "\n".join(lines)

    digest = state.digest
    if digest is None:
        return "\n".join(lines).strip()

    title = f"# Phishing news digest: {digest.date}"
    if state.is_stale:
        title += " (cached, could not refresh)"
    lines.extend([title, "", digest.summary.strip(), ""])
    lines.extend([f"Filter with --source: {', '.join(source_categories(digest.articles))}", ""])

    for article in filter_articles(digest.articles, source=source, search_text=search):
        lines.append(f"## {article.title}")
        lines.append(f"*{article.source}* | {article.formatted_date}")
        if article.description:
            lines.extend(["", article.description.strip()])
        lines.extend(["", article.link, ""])

    if digest.sources:
        lines.append(f"Sources: {', '.join(digest.sources)}")
    return "\n".join(lines).strip()


async def run(args: argparse.Namespace, orchestrator: DigestOrchestrator | None = None) -> int:
    """Load the requested digest once and print it.

    :param args: Parsed command-line arguments.
    :param orchestrator: Orchestrator to drive. If not provided, one is created from env.
    :returns: Process exit code.
    """
    orchestrator = orchestrator or DigestOrchestrator()
    try:
        if args.date:
            outcome = await orchestrator.select_date(args.date)
        elif args.latest:
            outcome = await orchestrator.select_latest()
        else:
            outcome = await orchestrator.select_today()

        if args.list:
            dates = await orchestrator.load_available_dates()
            print("Available digests: " + (", ".join(dates) if dates else "none"))

        print(render_state(orchestrator.state, source=args.source, search=args.search))
        return 1 if outcome.error_message else 0
    finally:
        await orchestrator.aclose()


def main(argv: list[str] | None = None) -> None:
    """Entry point for the phishing news command."""
    args = parse_args(argv)
    load_dotenv(PROJECT_ROOT / ".env")
    configure_logging("DEBUG" if args.verbose else None)
    try:
        exit_code = asyncio.run(run(args))
    except ValueError as e:
        logger.error(f"Invalid arguments or configuration: {e}")
        exit_code = 2
    sys.exit(exit_code)
