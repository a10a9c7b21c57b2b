"""Claude-powered extraction of topics, action items, decisions, and sentiment."""

from __future__ import annotations

from typing import Any

from anthropic import Anthropic
from anthropic.types import TextBlock

SYSTEM_PROMPT = (
    "You are a meeting intelligence assistant. Extract structured information "
    "from the meeting transcript provided.\n\n"
    "Return ONLY valid JSON with exactly these keys:\n"
    "{\n"
    '  "topics": [list of main discussion themes],\n'
    '  "action_items": [list of tasks or follow-ups],\n'
    '  "decisions": [list of key decisions],\n'
    '  "sentiment": "positive" | "neutral" | "negative"\n'
    "}\n\n"
    "Each list item is a short plain string. Only extract items clearly "
    "supported by the transcript."
)


def request_extraction(client: Anthropic, model: str, transcript: str, max_tokens: int) -> str:
    """Ask Claude for the extraction JSON and return its raw text.

    The text is returned undecoded; it may contain markdown fences or be
    malformed, which :func:`src.extraction.decoder.decode_extraction` handles.

    Args:
        client: Configured Anthropic client.
        model: Claude model name.
        transcript: The raw meeting transcript text.
        max_tokens: Response token budget.

    Returns:
        Concatenated text of the response's text blocks ("" if none).
    """
    response = client.messages.create(
        model=model,
        max_tokens=max_tokens,
        system=SYSTEM_PROMPT,
        messages=[
            {
                "role": "user",
                "content": f"Transcript:\n\n{transcript}",
            }
        ],
    )
    return response_text(response)


def response_text(response: Any) -> str:
    """Join the text blocks of a Claude response, skipping tool/other blocks."""
    parts = [block.text for block in response.content if isinstance(block, TextBlock)]
    return "".join(parts).strip()
