"""
Splits a model reply into the story passage and the numbered choices.

Replies are free text: up to two paragraphs of prose, optionally followed by
a list of choices written as "1. ...", "2. ...", one per line. A reply with
no list is the end of the story.
"""

import logging
import re
from typing import List

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Everything up to the first line that opens with "1."
RESULT_PATTERN = re.compile(r"[\s\S]*?(?=(?:\A|\n)[ \t\r\f\v]*1\.)")
CHOICE_PATTERN = re.compile(r"^\s*\d+\.\s+(.+)$", re.MULTILINE)


class ParsedNarration(BaseModel):
    passage: str
    choices: List[str] = []

    @property
    def is_ending(self) -> bool:
        return not self.choices


def extract_result(text: str) -> str:
    """Return the passage before the choice list, or the whole text if there is none."""
    match = RESULT_PATTERN.match(text)
    if match is None:
        # No list: the story has ended
        return text
    return match.group(0).strip()


def extract_choices(text: str) -> List[str]:
    return [m.group(1).strip() for m in CHOICE_PATTERN.finditer(text)]


def parse_narration(text: str) -> ParsedNarration:
    choices = extract_choices(text)
    # A "1." line that is not a choice must not cut the ending short
    passage = extract_result(text) if choices else text
    parsed = ParsedNarration(passage=passage, choices=choices)
    logger.debug("Parsed narration: %d choice(s), ending=%s", len(parsed.choices), parsed.is_ending)
    return parsed
