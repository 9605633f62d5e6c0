"""
Pulling a candidate item out of generated text, and deciding whether to keep it.

Models tend to wrap the answer in narration, so extraction looks for the
``RESPONSE:`` and ``ICON:`` markers anywhere in the text and takes what
follows each, up to a newline, a control character, a ``<`` (start of a
chat-template tag) or the next marker.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from craftgraph.config import GameRules
from craftgraph.errors import ExtractionFailed
from craftgraph.graph.models import derive_node_id

_STOP = r"(?:\s*(?:RESPONSE|ICON):|[\x00-\x1f<]|$)"
RESPONSE_RE = re.compile(r"RESPONSE:\s*([^\x00-\x1f<]*?)" + _STOP, re.IGNORECASE)
ICON_RE = re.compile(r"ICON:\s*([^\x00-\x1f<]*?)" + _STOP, re.IGNORECASE)

PUNCTUATION_RE = re.compile(r"[.,!?]")
WORD_SPLIT_RE = re.compile(r"[\s\-]+")


@dataclass(frozen=True)
class Candidate:
    phrase: str
    icon: str

    @property
    def node_id(self) -> str:
        return derive_node_id(self.phrase)


def extract_candidate(text: str) -> Candidate:
    """
    Find the phrase and icon in generated text.

    Raises:
        ExtractionFailed: Either field is missing or empty
    """
    response_match = RESPONSE_RE.search(text)
    icon_match = ICON_RE.search(text)
    phrase = response_match.group(1).strip() if response_match else ""
    icon = icon_match.group(1).strip() if icon_match else ""
    if not phrase:
        raise ExtractionFailed("Generated text has no RESPONSE phrase", raw=text)
    if not icon:
        raise ExtractionFailed("Generated text has no ICON", raw=text)
    return Candidate(phrase=phrase, icon=icon)


def rejection_reasons(phrase: str, rules: GameRules | None = None) -> list[str]:
    """Every rule the phrase breaks; empty means the phrase is admissible."""
    rules = rules or GameRules()
    reasons: list[str] = []

    if len(phrase) > rules.max_phrase_length:
        reasons.append(f"longer than {rules.max_phrase_length} characters")
    if PUNCTUATION_RE.search(phrase):
        reasons.append("contains sentence punctuation")

    # hyphens separate words too
    words = [word for word in WORD_SPLIT_RE.split(phrase.strip()) if word]
    if len(words) > rules.max_words:
        reasons.append(f"more than {rules.max_words} words")

    if phrase.count("-") > rules.max_hyphens:
        reasons.append(f"more than {rules.max_hyphens} hyphens")
    if "--" in phrase:
        reasons.append("contains a doubled hyphen")
    if phrase.startswith("-") or phrase.endswith("-"):
        reasons.append("starts or ends with a hyphen")

    return reasons
