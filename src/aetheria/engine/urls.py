"""URL normalization for OpenAI-compatible inference servers."""

import re

import httpx

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

LOOPBACK_ALIASES = {"localhost": "127.0.0.1"}


def normalize_base_url(url: str) -> str:
    """Guarantee a scheme and strip trailing slashes.

    Idempotent: normalizing an already normalized URL returns it unchanged.

    Args:
        url: User-entered base URL (e.g. "localhost:11434/v1/")

    Returns:
        Normalized URL (e.g. "http://localhost:11434/v1"), or "" for blank input
    """
    if not url:
        return ""
    normalized = url.strip()
    if not normalized:
        return ""
    if not _SCHEME_RE.match(normalized):
        normalized = f"http://{normalized}"
    return normalized.rstrip("/")


def _has_v1(base: str) -> bool:
    return base.lower().endswith("/v1")


def openai_base_url(base_url: str) -> str:
    """Return the base URL ending in ``/v1`` that OpenAI clients expect."""
    base = normalize_base_url(base_url)
    return base if _has_v1(base) else f"{base}/v1"


def models_url(base_url: str) -> str:
    """Model listing endpoint (``/models`` under the ``/v1`` base)."""
    return f"{openai_base_url(base_url)}/models"


def chat_completions_url(base_url: str) -> str:
    """Chat completions endpoint (``/chat/completions`` under the ``/v1`` base)."""
    return f"{openai_base_url(base_url)}/chat/completions"


def load_model_url(base_url: str) -> str:
    """LM Studio style "load model into memory" endpoint."""
    base = normalize_base_url(base_url)
    if _has_v1(base):
        base = base[: -len("/v1")]
    return f"{base}/api/v1/models/load"


def candidate_base_urls(base_url: str) -> list[str]:
    """Ordered base URLs to try for a self-hosted engine.

    A ``localhost`` host yields a second candidate using ``127.0.0.1``;
    every other host yields only itself.
    """
    base = normalize_base_url(base_url)
    if not base:
        return []

    candidates = [base]
    try:
        url = httpx.URL(base)
    except httpx.InvalidURL:
        return candidates

    alias = LOOPBACK_ALIASES.get((url.host or "").lower())
    if alias:
        candidates.append(str(url.copy_with(host=alias)).rstrip("/"))
    return candidates
