"""Compose the system prompt from preset layers."""

import re

from aetheria.store.models import Framework, LinguisticControl, Persona

BLOCK_SEPARATOR = "\n\n"
_EXCESS_BLANK_LINES = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")


def persona_block(persona: Persona) -> str:
    return f"You are acting as: {persona.name}. {persona.system_prompt.strip()}".strip()


def framework_block(framework: Framework) -> str:
    return f"[STRUCTURAL FRAMEWORK: {framework.name}]\n{framework.content.strip()}"


def linguistic_block(linguistic: LinguisticControl) -> str:
    return f"[LINGUISTIC CONSTRAINTS: {linguistic.name}]\n{linguistic.system_instruction.strip()}"


def compose(
    persona: Persona,
    framework: Framework | None = None,
    linguistic: LinguisticControl | None = None,
) -> str:
    """Merge persona, framework, and linguistic control into one system prompt.

    Blocks appear in fixed order (persona, framework, linguistic control),
    separated by one blank line. Absent layers, and layers whose text is
    empty, are skipped entirely. Runs of blank lines inside layer text
    collapse to a single blank line.

    Args:
        persona: Identity layer (always present)
        framework: Optional reasoning framework layer
        linguistic: Optional style constraint layer

    Returns:
        The composed system prompt
    """
    blocks = [persona_block(persona)]
    if framework is not None and framework.content.strip():
        blocks.append(framework_block(framework))
    if linguistic is not None and linguistic.system_instruction.strip():
        blocks.append(linguistic_block(linguistic))
    composed = BLOCK_SEPARATOR.join(block for block in blocks if block)
    return _EXCESS_BLANK_LINES.sub(BLOCK_SEPARATOR, composed)
