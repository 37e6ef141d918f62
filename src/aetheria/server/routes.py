"""API routes for the Aetheria server."""

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError
from sse_starlette.sse import EventSourceResponse

from aetheria.chat.dispatch import ChatStreamRequest, DispatchRouter, WireModel
from aetheria.config.schema import AetheriaConfig
from aetheria.engine.capabilities import tag_model
from aetheria.engine.prober import ConnectionProber
from aetheria.errors import DispatchError

logger = logging.getLogger(__name__)


class EngineRequest(WireModel):
    """Request body for engine probe and model listing."""

    base_url: str = Field(default="", alias="baseUrl")
    api_key: str | None = Field(default=None, alias="apiKey")


class LoadModelRequest(WireModel):
    """Request body for model load."""

    base_url: str = Field(default="", alias="baseUrl")
    model_id: str = Field(default="", alias="modelId")


class ProbeResponse(BaseModel):
    online: bool


class ModelInfo(BaseModel):
    id: str
    capabilities: list[str]


class ModelsResponse(BaseModel):
    models: list[ModelInfo]


class LoadResponse(BaseModel):
    loaded: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


def _delta_event(content: str) -> dict[str, str]:
    return {"data": json.dumps({"choices": [{"delta": {"content": content}}]})}


def create_router(
    config: AetheriaConfig,
    dispatcher: DispatchRouter | None = None,
    prober: ConnectionProber | None = None,
) -> APIRouter:
    """Create API router.

    Args:
        config: Aetheria configuration
        dispatcher: Chat dispatcher (built from config when None)
        prober: Engine prober (built from config when None)

    Returns:
        Configured API router
    """
    router = APIRouter()

    dispatcher = dispatcher or DispatchRouter(config)
    prober = prober or ConnectionProber(
        probe_timeout=config.prober.probe_timeout,
        models_timeout=config.prober.models_timeout,
        load_timeout=config.prober.load_timeout,
    )

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint."""
        from aetheria import __version__

        return HealthResponse(status="healthy", version=__version__)

    @router.post("/api/chat/stream", response_model=None)
    async def chat_stream(request: Request) -> Any:
        """Stream a chat completion as OpenAI-style delta events.

        Failures before the upstream stream is established answer with a
        JSON ``{"error": ...}`` body; failures after that are sent in-band
        as an error event followed by ``[DONE]``.
        """
        try:
            body = ChatStreamRequest.model_validate(await request.json())
        except (ValueError, ValidationError) as e:
            return JSONResponse({"error": f"Invalid request: {e}"}, status_code=400)

        try:
            fragments = await dispatcher.open_stream(body)
        except DispatchError as e:
            logger.warning(f"Dispatch failed ({e.status_code}): {e}")
            return JSONResponse({"error": str(e)}, status_code=e.status_code)
        except Exception as e:
            logger.exception("Stream proxy error")
            return JSONResponse({"error": str(e)}, status_code=500)

        async def event_generator() -> Any:
            """Generate SSE events."""
            try:
                async for fragment in fragments:
                    yield _delta_event(fragment)
            except Exception as e:
                logger.error(f"Upstream stream failed: {e}")
                yield {"data": json.dumps({"error": str(e) or type(e).__name__})}
            yield {"data": "[DONE]"}

        return EventSourceResponse(
            event_generator(),
            sep="\n",
            headers={"Cache-Control": "no-cache"},
        )

    @router.post("/api/engine/probe", response_model=ProbeResponse)
    async def probe(request: EngineRequest) -> ProbeResponse:
        """Check whether an engine is reachable."""
        return ProbeResponse(online=await prober.probe(request.base_url, request.api_key))

    @router.post("/api/engine/models", response_model=ModelsResponse)
    async def models(request: EngineRequest) -> ModelsResponse:
        """List an engine's models with capability tags."""
        ids = await prober.list_models(request.base_url, request.api_key)
        return ModelsResponse(models=[ModelInfo(id=i, capabilities=tag_model(i)) for i in ids])

    @router.post("/api/engine/load", response_model=LoadResponse)
    async def load(request: LoadModelRequest) -> LoadResponse:
        """Ask an engine to load a model into memory."""
        loaded = await prober.request_model_load(request.base_url, request.model_id)
        return LoadResponse(loaded=loaded)

    return router
