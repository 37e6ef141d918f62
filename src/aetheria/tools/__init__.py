"""External lookups used to augment chat turns.

- **search_grounding** - DuckDuckGo search (no API key required), returned as
  a :class:`~aetheria.results.Result` so callers can degrade to no grounding.
"""
