"""LLM client implementations."""

from .client import CompletionResponse, GenerationSettings, LLMClient, Message
from .gemini import GeminiClient
from .openai_compat import OpenAICompatibleClient

__all__ = [
    "CompletionResponse",
    "GeminiClient",
    "GenerationSettings",
    "LLMClient",
    "Message",
    "OpenAICompatibleClient",
]
