"""Web grounding lookups using DuckDuckGo."""

import asyncio
import logging

from duckduckgo_search import DDGS

from aetheria.results import Result

logger = logging.getLogger(__name__)


def format_results(query: str, results: list[dict]) -> str:
    """Render search hits as a numbered plain-text block."""
    output = f"Search results for '{query}':\n\n"

    for i, result in enumerate(results, 1):
        title = result.get("title", "No title")
        url = result.get("href", "")
        snippet = result.get("body", "No description")

        output += f"{i}. {title}\n"
        output += f"   URL: {url}\n"
        output += f"   {snippet}\n\n"

    return output.strip()


async def search_grounding(query: str, max_results: int = 5) -> Result[str]:
    """Search the web for text to ground a chat turn.

    Never raises: any search failure yields an empty failed result.

    Args:
        query: Search query (usually the latest user message)
        max_results: Maximum number of results (clamped to 1-10)

    Returns:
        Formatted results, or "" with a failure reason
    """
    query = query.strip()
    if not query:
        return Result.failure("", "empty query")

    max_results = min(max(1, max_results), 10)

    def _search():
        with DDGS() as ddgs:
            return list(ddgs.text(query, max_results=max_results))

    try:
        results = await asyncio.to_thread(_search)
    except Exception as e:
        logger.warning("Web grounding failed for %r: %s", query[:100], e)
        return Result.failure("", str(e) or type(e).__name__)

    if not results:
        return Result.failure("", f"no results for {query!r}")
    return Result.success(format_results(query, results))
