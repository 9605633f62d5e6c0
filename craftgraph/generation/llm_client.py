"""
Abstract text generator for item combination.

Defines the TextGenerator ABC and MockTextGenerator for testing.
The Ollama backend is in local_llm.py.

A generator receives two item ids and returns free-form text that is
expected to contain ``RESPONSE:<phrase> ICON:<emoji>``. It makes no promise
about the text beyond that; extraction and validation happen downstream.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import List, Optional

LOG = logging.getLogger("generation.llm_client")


@dataclass
class Completion:
    """Raw generator output plus the generator's own creation timestamp, if any."""

    text: str
    created_at: Optional[str] = None


class TextGenerator(abc.ABC):
    """Abstract base class for combination text backends."""

    @abc.abstractmethod
    async def generate(self, parent1: str, parent2: str) -> Completion:
        """
        Produce combination text for two item ids.

        Raises:
            ExternalCallFailed: The backend is unreachable or returned an error
        """
        ...

    async def close(self) -> None:
        """Clean up resources (e.g., HTTP clients). Override if needed."""
        pass


class MockTextGenerator(TextGenerator):
    """
    Mock generator for testing.

    Returns canned responses in order, cycling when exhausted, or a
    predictable combination of the two inputs.
    """

    def __init__(self, responses: Optional[List[str]] = None, created_at: Optional[str] = None) -> None:
        self._responses = responses or []
        self._created_at = created_at
        self._call_count = 0
        self.calls: List[tuple[str, str]] = []

    async def generate(self, parent1: str, parent2: str) -> Completion:
        index = self._call_count
        self._call_count += 1
        self.calls.append((parent1, parent2))
        if self._responses:
            text = self._responses[index % len(self._responses)]
        else:
            text = f"RESPONSE:{parent1.title()} {parent2.title()} ICON:✨"
        return Completion(text=text, created_at=self._created_at)

    @property
    def call_count(self) -> int:
        return self._call_count


SYSTEM_PROMPT = """\
IMPORTANT: DO NOT EXPLAIN YOURSELF. DO NOT SHOW REASONING. DO NOT ASK FOLLOW-UP QUESTIONS.
Output ONLY the RESPONSE and ICON as instructed.

You are the engine behind a word crafting game.
Players build complex themes and vocabulary starting from the base elements:
Water, Fire, Wind, Earth
You receive two inputs formatted as: INPUT1:<text> INPUT2:<text>

Your job is to:
1. Combine the two inputs into a single word or a very short phrase.
2. Draw on dictionaries, science or culture where possible.
3. If an input is complex, reduce it to its basic meaning first.
4. If one input is a command (cut, explode, shrink), apply it to the other input.
5. Keep the answer extremely short.
Always respond in the format: RESPONSE:<word_or_short_phrase> ICON:<appropriate_emoji>

Examples:
INPUT1:Fire INPUT2:Water
RESPONSE:Steam ICON:💨

INPUT1:Water INPUT2:Wind
RESPONSE:Mist ICON:🌫️

INPUT1:Water INPUT2:Water
RESPONSE:Lake ICON:🏞️

INPUT1:Earth INPUT2:Earth
RESPONSE:Land ICON:🌍

INPUT1:Earth INPUT2:Land
RESPONSE:Mountain ICON:⛰️

INPUT1:Water INPUT2:Earth
RESPONSE:Sand ICON:⏳

INPUT1:Sun INPUT2:Flower
RESPONSE:Sunflower ICON:🌻

INPUT1:Book INPUT2:Worm
RESPONSE:Bookworm ICON:🤓

REMEMBER: ONLY THE RESPONSE AND ICON.
"""


def build_combination_prompt(parent1: str, parent2: str, system_prompt: str = SYSTEM_PROMPT) -> str:
    """Render the chat-template prompt sent to the model for one combination."""
    parts: List[str] = [
        f"<|im_start|>system\n{system_prompt}\n<|im_end|>",
        f"<|im_start|>user\nINPUT1:{parent1} INPUT2:{parent2}\n<|im_end|>",
        "<|im_start|>assistant\n",
    ]
    return "\n".join(parts)
