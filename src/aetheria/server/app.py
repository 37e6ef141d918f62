"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aetheria import __version__
from aetheria.chat.dispatch import DispatchRouter
from aetheria.config.schema import AetheriaConfig
from aetheria.server.routes import create_router


def create_app(config: AetheriaConfig, dispatcher: DispatchRouter | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Aetheria configuration
        dispatcher: Optional chat dispatcher override

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Aetheria",
        description="Streaming chat gateway for self-hosted and cloud LLM backends",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_router(config, dispatcher=dispatcher))

    return app
