"""Short conversation titles from the first user message."""

import logging

from aetheria.llm.client import LLMClient, Message

logger = logging.getLogger(__name__)

TITLE_PROMPT = (
    "Create a concise, professional 3-4 word title for an AI chat session based on this "
    'first message: "{text}". Provide ONLY the title text, no quotes or periods.'
)


def fallback_title(text: str) -> str:
    return text[:20] + "..."


class TitleGenerator:
    """Asks an LLM for a title, falling back to a truncated message."""

    def __init__(self, llm: LLMClient | None):
        self.llm = llm

    async def generate(self, text: str) -> str:
        if self.llm is None:
            return fallback_title(text)
        prompt = Message(role="user", content=TITLE_PROMPT.format(text=text))
        try:
            response = await self.llm.complete([prompt])
        except Exception as e:
            logger.warning(f"Title generation failed: {e}")
            return fallback_title(text)

        title = response.content.strip().strip("\"'").rstrip(".").strip()
        return title or fallback_title(text)
