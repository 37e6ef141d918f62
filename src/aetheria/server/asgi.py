"""ASGI entry point for running the aetheria server via uvicorn CLI.

Used by `aetheria start --detach` to launch the server as a subprocess:
    python -m uvicorn aetheria.server.asgi:app --host ... --port ...
"""

from aetheria.config.loader import load_config
from aetheria.server.app import create_app

config = load_config()
app = create_app(config)
