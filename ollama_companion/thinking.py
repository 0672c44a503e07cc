"""
Separates a model's <think>...</think> reasoning block from its visible answer.
"""

from dataclasses import dataclass
from typing import Optional

THINK_START = "<think>"
THINK_END = "</think>"


@dataclass(frozen=True)
class ThinkingSplit:
    """Visible content plus the optional reasoning segment."""
    content: str
    thinking: Optional[str] = None


def parse_thinking(text: str) -> ThinkingSplit:
    """
    Split the first complete <think>...</think> block out of ``text``.

    Only the first delimiter pair is honored. Anything after the first
    closing tag, including further think blocks, stays in the visible
    content. Without a complete pair the text is returned unchanged.
    """
    start = text.find(THINK_START)
    if start == -1:
        return ThinkingSplit(content=text)

    end = text.find(THINK_END, start + len(THINK_START))
    if end == -1:
        return ThinkingSplit(content=text)

    thinking = text[start + len(THINK_START):end].strip()
    content = text[end + len(THINK_END):].strip()
    return ThinkingSplit(content=content, thinking=thinking)
