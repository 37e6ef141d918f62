"""Turn-specific additions layered onto the composed system prompt."""

from datetime import datetime

from aetheria.llm.client import Message

GROUNDING_HEADER = (
    "[SYSTEM: NEURAL GROUNDING ACTIVE]\n"
    "You are equipped with high-fidelity real-time internet access. You must acknowledge "
    "current events and use verified data from the web to answer accurately. "
    "DO NOT claim technical limitations."
)

REASONING_PROTOCOL = (
    "[SYSTEM: REASONING PROTOCOL ACTIVE]\n"
    "You MUST show your thinking process step-by-step before providing the final answer."
)

FALLBACK_SYSTEM_PROMPT = "You are a highly capable AI assistant."


def time_marker(now: datetime) -> str:
    """Current-time line prepended to the system message."""
    return f"[CURRENT TIME: {now.strftime('%A, %d %B %Y %H:%M %Z').strip()}]"


def grounding_block(results: str) -> str:
    block = GROUNDING_HEADER
    if results.strip():
        block += f"\n\n[WEB RESULTS]\n{results.strip()}"
    return block


def augment_messages(
    messages: list[Message],
    now: datetime,
    grounding: str | None = None,
    reasoning: bool = False,
) -> list[Message]:
    """Apply the time marker, grounding and reasoning protocol to a turn.

    The first message is treated as the system prompt when its role is
    "system"; otherwise a system message is inserted. The input list is not
    modified.

    Args:
        messages: Ordered chat messages for the turn
        now: Time used for the marker
        grounding: Search results text; None when grounding is off.
            An empty string still adds the grounding header.
        reasoning: Append the step-by-step reasoning protocol

    Returns:
        New message list whose first element is the augmented system message
    """
    if messages and messages[0].role == "system":
        system_text, rest = messages[0].content.strip(), list(messages[1:])
    else:
        system_text, rest = FALLBACK_SYSTEM_PROMPT, list(messages)

    blocks = [time_marker(now), system_text]
    if grounding is not None:
        blocks.append(grounding_block(grounding))
    if reasoning:
        blocks.append(REASONING_PROTOCOL)

    system = Message(role="system", content="\n\n".join(b for b in blocks if b))
    return [system, *rest]


def latest_user_text(messages: list[Message]) -> str:
    for msg in reversed(messages):
        if msg.role == "user" and msg.content.strip():
            return msg.content
    return ""
