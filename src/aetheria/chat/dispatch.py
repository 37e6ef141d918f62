"""Route a chat turn to a cloud or self-hosted backend as one fragment stream."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime

import httpx
import openai
from pydantic import BaseModel, ConfigDict, Field

from aetheria.chat.augment import augment_messages, latest_user_text
from aetheria.config.schema import AetheriaConfig
from aetheria.engine.urls import candidate_base_urls, normalize_base_url
from aetheria.errors import DispatchError
from aetheria.llm.client import GenerationSettings, Message
from aetheria.llm.gemini import GeminiClient, upstream_error_text
from aetheria.llm.openai_compat import OpenAICompatibleClient
from aetheria.results import Result
from aetheria.store.models import CLOUD_PROVIDER
from aetheria.tools.web_search import search_grounding

logger = logging.getLogger(__name__)

CLOUD_URL_MARKERS = ("genkit", "generativelanguage.googleapis.com")
CONNECT_TIMEOUT = 10.0

GroundingFn = Callable[..., Awaitable[Result[str]]]


class WireModel(BaseModel):
    """Base for camelCase request bodies."""

    model_config = ConfigDict(populate_by_name=True)


class WireMessage(WireModel):
    role: str
    content: str = ""


class WireSettings(WireModel):
    temperature: float = 0.7
    top_p: float = Field(default=0.9, alias="topP")
    max_tokens: int = Field(default=1024, alias="maxTokens")
    web_search_enabled: bool = Field(default=False, alias="webSearchEnabled")
    reasoning_enabled: bool = Field(default=False, alias="reasoningEnabled")


class ChatStreamRequest(WireModel):
    """Body of ``POST /api/chat/stream``."""

    base_url: str = Field(default="", alias="baseUrl")
    model_id: str = Field(default="", alias="modelId")
    messages: list[WireMessage] = Field(default_factory=list)
    settings: WireSettings = Field(default_factory=WireSettings)
    api_key: str | None = Field(default=None, alias="apiKey")
    provider: str | None = None


def is_cloud_request(request: ChatStreamRequest) -> bool:
    """Whether the request targets the managed cloud path."""
    if request.provider == CLOUD_PROVIDER:
        return True
    base = request.base_url.lower()
    return any(marker in base for marker in CLOUD_URL_MARKERS)


def cloud_model_name(model_id: str, default: str) -> str:
    """Strip provider prefixes such as "googleai/" or "models/" from a model id."""
    name = (model_id or "").strip() or default
    for prefix in ("googleai/", "models/"):
        if name.startswith(prefix):
            name = name[len(prefix) :]
    return name


class DispatchRouter:
    """Turns a chat request into a stream of text fragments.

    The upstream connection is fully established inside :meth:`open_stream`,
    so every dispatch failure raises :class:`DispatchError` before the
    caller has sent anything to its own client.
    """

    def __init__(
        self,
        config: AetheriaConfig | None = None,
        grounding: GroundingFn = search_grounding,
        now: Callable[[], datetime] = datetime.now,
    ):
        """Initialize router.

        Args:
            config: Aetheria configuration (defaults when None)
            grounding: Web search used for grounding; must return a Result
            now: Clock for the time marker
        """
        self.config = config or AetheriaConfig()
        self.grounding = grounding
        self.now = now

    async def _ground(self, messages: list[Message]) -> str | None:
        query = latest_user_text(messages)
        result = await self.grounding(query, max_results=self.config.grounding.max_results)
        if not result.ok:
            logger.info("Continuing without grounding: %s", result.reason)
            return None
        return result.value

    async def prepare_messages(self, request: ChatStreamRequest) -> list[Message]:
        """Convert wire messages and apply the turn augmentations."""
        messages = [Message(role=m.role, content=m.content) for m in request.messages]
        grounding = None
        if request.settings.web_search_enabled:
            grounding = await self._ground(messages)
        return augment_messages(
            messages,
            now=self.now(),
            grounding=grounding,
            reasoning=request.settings.reasoning_enabled,
        )

    async def open_stream(self, request: ChatStreamRequest) -> AsyncIterator[str]:
        """Establish the upstream stream for a chat request.

        Args:
            request: Parsed request body

        Returns:
            Iterator over content fragments

        Raises:
            DispatchError: 400 when no base URL is given, 500 for upstream
                error responses or when every candidate URL is unreachable
        """
        if not request.base_url.strip():
            raise DispatchError("No engine URL provided.", status_code=400)

        messages = await self.prepare_messages(request)
        settings = GenerationSettings(
            temperature=request.settings.temperature,
            top_p=request.settings.top_p,
            max_tokens=request.settings.max_tokens,
        )

        if is_cloud_request(request):
            return await self._open_cloud(request, messages, settings)
        return await self._open_local(request, messages, settings)

    async def _open_cloud(
        self,
        request: ChatStreamRequest,
        messages: list[Message],
        settings: GenerationSettings,
    ) -> AsyncIterator[str]:
        cloud = self.config.cloud
        client = GeminiClient(
            api_key=request.api_key or cloud.api_key,
            model=cloud_model_name(request.model_id, cloud.model),
            base_url=cloud.base_url,
            timeout=cloud.timeout,
        )
        logger.info("Dispatching to cloud model %s", client.model)

        try:
            stream = await client.open_stream(messages, settings)
        except httpx.HTTPStatusError as e:
            await client.close()
            raise DispatchError(f"Engine Node Error: {upstream_error_text(e.response)}") from e
        except httpx.HTTPError as e:
            await client.close()
            raise DispatchError(f"Cloud engine unreachable: {e}") from e

        return _closing(stream, client)

    async def _open_local(
        self,
        request: ChatStreamRequest,
        messages: list[Message],
        settings: GenerationSettings,
    ) -> AsyncIterator[str]:
        last_error: Exception | None = None
        model = request.model_id or "default"

        # Sequential: each candidate is tried to completion before the next
        for candidate in candidate_base_urls(request.base_url):
            client = OpenAICompatibleClient(
                model=model,
                base_url=candidate,
                api_key=request.api_key,
                connect_timeout=CONNECT_TIMEOUT,
            )
            try:
                stream = await client.open_stream(messages, settings)
            except openai.APIConnectionError as e:
                await client.close()
                logger.warning("Engine at %s unreachable: %s", candidate, e)
                last_error = e
                continue
            except openai.APIStatusError as e:
                await client.close()
                detail = e.response.text or e.message
                raise DispatchError(f"Engine Node Error: {detail}") from e

            logger.info("Streaming from %s (model %s)", client.base_url, model)
            return _closing(stream, client)

        target = normalize_base_url(request.base_url)
        reason = _describe(last_error) if last_error else "no candidate URL"
        raise DispatchError(f"Engine unreachable at {target}: {reason}") from last_error


def _describe(error: Exception) -> str:
    cause = error.__cause__
    if cause is not None and str(cause):
        return f"{error} ({cause})"
    return str(error) or type(error).__name__


async def _closing(
    stream: AsyncIterator[str], client: OpenAICompatibleClient | GeminiClient
) -> AsyncIterator[str]:
    try:
        async for fragment in stream:
            yield fragment
    finally:
        await client.close()
