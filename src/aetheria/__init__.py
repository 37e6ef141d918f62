"""Aetheria - Chat client for self-hosted and cloud LLM backends.

Aetheria wraps locally running inference servers (Ollama, LM Studio, any
OpenAI-compatible endpoint) and a managed cloud model behind one streaming
chat pipeline with persona, framework, and linguistic presets.

Key modules:

- :mod:`aetheria.engine` - Connection probing, model listing, capability tags
- :mod:`aetheria.prompts` - Preset library and system prompt composition
- :mod:`aetheria.chat` - Dispatch routing, SSE stream consumption, turn orchestration
- :mod:`aetheria.store` - Session store with persistence and change notification
- :mod:`aetheria.llm` - Local (OpenAI-compatible) and cloud (Gemini) clients
- :mod:`aetheria.voice` - Text-to-speech for spoken responses
- :mod:`aetheria.tools` - Web search used for grounding
"""

__version__ = "0.1.0"
