"""Inference engine discovery.

- :class:`ConnectionProber` - reachability, model listing, model loading
- :func:`tag_model` - capability tags from model names
- :mod:`aetheria.engine.urls` - base URL normalization and endpoint paths
"""

from aetheria.engine.capabilities import tag_model
from aetheria.engine.prober import ConnectionProber
from aetheria.engine.urls import candidate_base_urls, normalize_base_url

__all__ = [
    "ConnectionProber",
    "candidate_base_urls",
    "normalize_base_url",
    "tag_model",
]
