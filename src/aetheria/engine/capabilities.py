"""Heuristic capability tags derived from model names."""

# (tag, substrings) - a model gets the tag when its lowercased id contains any substring
CAPABILITY_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("vision", ("llava", "vision", "-vl", "pixtral", "moondream", "bakllava", "gemma3", "gemini")),
    ("code", ("coder", "codellama", "starcoder", "codestral", "codegemma", "devstral")),
    ("reasoning", ("r1", "qwq", "reason", "think", "o1-", "o3-", "magistral")),
    ("embedding", ("embed", "bge-", "nomic-embed", "e5-")),
    ("tools", ("qwen2.5", "qwen3", "llama3.1", "llama3.2", "mistral-nemo", "hermes", "gemini")),
]


def tag_model(model_id: str) -> list[str]:
    """Return capability tags for a model id.

    Args:
        model_id: Model identifier as reported by the engine (e.g. "qwen2.5-coder:7b")

    Returns:
        Sorted tags; every non-embedding model is also tagged "chat"
    """
    name = (model_id or "").lower()
    tags = {tag for tag, patterns in CAPABILITY_RULES if any(p in name for p in patterns)}
    if name and "embedding" not in tags:
        tags.add("chat")
    return sorted(tags)
