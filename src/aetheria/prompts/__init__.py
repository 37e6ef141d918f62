"""Prompt presets and system prompt composition."""

from aetheria.prompts.composer import compose
from aetheria.prompts.library import FRAMEWORKS, LINGUISTIC_CONTROLS, PERSONAS, find_preset

__all__ = ["FRAMEWORKS", "LINGUISTIC_CONTROLS", "PERSONAS", "compose", "find_preset"]
