"""Reachability checks and model discovery for inference endpoints.

Every public coroutine here is total: transport errors, timeouts, malformed
URLs and unparseable bodies all map to ``False`` or an empty list.
"""

import logging
from typing import Any

import httpx

from aetheria.engine.urls import load_model_url, models_url, normalize_base_url
from aetheria.results import Result
from aetheria.store.models import Connection, ConnectionStatus

logger = logging.getLogger(__name__)

MIN_URL_LENGTH = 5


def _headers(api_key: str | None) -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def parse_model_ids(data: Any) -> list[str]:
    """Extract model ids from a model-listing payload.

    Accepts ``{"data": [{"id": ...}]}`` (OpenAI style) and
    ``{"models": [{"name": ...}]}`` (Ollama style).
    """
    if not isinstance(data, dict):
        return []

    if isinstance(data.get("data"), list):
        entries, key = data["data"], "id"
    elif isinstance(data.get("models"), list):
        entries, key = data["models"], "name"
    else:
        return []

    ids = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        model_id = entry.get(key) or entry.get("id") or entry.get("name")
        if isinstance(model_id, str) and model_id:
            ids.append(model_id)
    return ids


class ConnectionProber:
    """Tests inference endpoints without ever raising."""

    def __init__(
        self,
        probe_timeout: float = 5.0,
        models_timeout: float = 8.0,
        load_timeout: float = 30.0,
    ):
        """Initialize prober.

        Args:
            probe_timeout: Seconds allowed for a reachability check
            models_timeout: Seconds allowed for a model listing
            load_timeout: Seconds allowed for a model load request
        """
        self.probe_timeout = probe_timeout
        self.models_timeout = models_timeout
        self.load_timeout = load_timeout

    async def _get_models(
        self, base_url: str, api_key: str | None, timeout: float
    ) -> Result[httpx.Response | None]:
        if not base_url or len(base_url.strip()) < MIN_URL_LENGTH:
            return Result.failure(None, "base URL missing or too short")

        url = models_url(base_url)
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(url, headers=_headers(api_key))
            return Result.success(response)
        except Exception as e:
            logger.debug("Engine request to %s failed: %s", url, e)
            return Result.failure(None, str(e) or type(e).__name__)

    async def probe(self, base_url: str, api_key: str | None = None) -> bool:
        """Check whether an engine answers its model-listing endpoint.

        Args:
            base_url: Engine base URL (scheme optional)
            api_key: Optional bearer token

        Returns:
            True iff the endpoint returned a 2xx response
        """
        result = await self._get_models(base_url, api_key, self.probe_timeout)
        if not result.ok or result.value is None:
            return False
        return result.value.is_success

    async def list_models(self, base_url: str, api_key: str | None = None) -> list[str]:
        """List model ids available on an engine.

        Args:
            base_url: Engine base URL (scheme optional)
            api_key: Optional bearer token

        Returns:
            Model ids, or an empty list on any failure
        """
        result = await self._get_models(base_url, api_key, self.models_timeout)
        response = result.value
        if not result.ok or response is None or not response.is_success:
            return []

        try:
            return parse_model_ids(response.json())
        except ValueError:
            logger.debug("Model listing from %s was not JSON", base_url)
            return []

    async def request_model_load(self, base_url: str, model_id: str) -> bool:
        """Ask the engine to load a model into memory.

        Args:
            base_url: Engine base URL
            model_id: Model to load

        Returns:
            True iff the engine accepted the request
        """
        if not base_url or not model_id:
            return False

        url = load_model_url(base_url)
        try:
            async with httpx.AsyncClient(timeout=self.load_timeout) as client:
                response = await client.post(url, json={"model_key": model_id})
            return response.is_success
        except Exception as e:
            logger.debug("Model load request to %s failed: %s", url, e)
            return False

    async def check(self, connection: Connection) -> ConnectionStatus:
        """Probe a configured connection and map the outcome to a status."""
        online = await self.probe(connection.base_url, connection.api_key)
        status = ConnectionStatus.ONLINE if online else ConnectionStatus.OFFLINE
        logger.info(
            "Connection %s (%s) is %s",
            connection.name,
            normalize_base_url(connection.base_url),
            status.value,
        )
        return status
