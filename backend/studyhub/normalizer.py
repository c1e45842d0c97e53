"""Turns raw model text into typed generation results.

Flashcards go through two tiers. ``parse_flashcard_json`` looks for a JSON
array in the text and returns either ``Parsed`` or ``Unparsed``; an
``Unparsed`` attempt is handed to the line-based ``parse_text_to_flashcards``,
which always yields at least one card. Malformed model output is therefore
never an error.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Union

from .schemas import (
    Flashcard,
    FlashcardGenerationResult,
    FlashcardSet,
    GenerationKind,
    TextGenerationResult,
)

logger = logging.getLogger(__name__)

FALLBACK_FLASHCARD = Flashcard(
    question="What are the main topics covered in this material?",
    answer="Please review the original content for key concepts and themes.",
)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")
_QUESTION_START = re.compile(r"^\d+\.|^Q:|^Question:", re.IGNORECASE)
_QUESTION_PREFIX = re.compile(r"^\d+\.\s*|^Q:\s*|^Question:\s*", re.IGNORECASE)
_ANSWER_START = re.compile(r"^A:|^Answer:", re.IGNORECASE)
_ANSWER_PREFIX = re.compile(r"^A:\s*|^Answer:\s*", re.IGNORECASE)
_BOLD_MARKERS = re.compile(r"\*\*+")


@dataclass(frozen=True)
class Parsed:
    flashcards: List[Flashcard]


@dataclass(frozen=True)
class Unparsed:
    reason: str


ParseAttempt = Union[Parsed, Unparsed]


def sanitize_output(text: str) -> str:
    """Strip bold markers and carriage returns, trim, and turn newlines into ``<br>``.

    Applying it to already-sanitized text is a no-op. Carriage returns go
    first so that removing them cannot join two ``*`` into a new bold run.
    """
    if not text:
        return ""
    out = _BOLD_MARKERS.sub("", text.replace("\r", "")).strip()
    return out.replace("\n", "<br>")


def _field(item: dict, key: str) -> str:
    value = item.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_flashcard_json(text: str) -> ParseAttempt:
    match = _JSON_ARRAY.search(text or "")
    if match is None:
        return Unparsed("No JSON array found in response")
    try:
        data: Any = json.loads(match.group(0))
    except ValueError as exc:
        return Unparsed(f"Invalid JSON: {exc}")
    if not isinstance(data, list) or not data:
        return Unparsed("JSON array is empty")
    if not all(isinstance(item, dict) for item in data):
        return Unparsed("JSON array contains non-object items")
    return Parsed([Flashcard(question=_field(item, "question"), answer=_field(item, "answer")) for item in data])


def parse_text_to_flashcards(text: str) -> List[Flashcard]:
    flashcards: List[Flashcard] = []
    current_question: str | None = None
    current_answer: str | None = None

    def flush() -> None:
        if current_question is None or current_answer is None:
            return
        question = _QUESTION_PREFIX.sub("", current_question, count=1).strip()
        answer = _ANSWER_PREFIX.sub("", current_answer, count=1).strip()
        if question and answer:
            flashcards.append(Flashcard(question=question, answer=answer))

    for raw_line in (text or "").split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if _QUESTION_START.match(line) or line.endswith("?"):
            flush()
            current_question = line
            current_answer = None
        elif _ANSWER_START.match(line) or (current_question is not None and current_answer is None):
            current_answer = line
        elif current_answer is not None:
            current_answer += " " + line

    flush()

    if not flashcards:
        flashcards.append(FALLBACK_FLASHCARD.model_copy())
    return flashcards


def extract_flashcards(text: str) -> List[Flashcard]:
    attempt = parse_flashcard_json(text)
    if isinstance(attempt, Parsed):
        return attempt.flashcards
    logger.info("Flashcard JSON not usable (%s); falling back to text parsing", attempt.reason)
    return parse_text_to_flashcards(text)


def normalize(
    kind: Union[GenerationKind, str],
    raw_text: str,
    title: str = "",
) -> Union[TextGenerationResult, FlashcardGenerationResult]:
    kind = GenerationKind(kind)
    if kind is GenerationKind.FLASHCARDS:
        return FlashcardGenerationResult(
            title=title,
            content=FlashcardSet(flashcards=extract_flashcards(raw_text)),
        )
    if kind in (GenerationKind.SUMMARY, GenerationKind.STUDY_PLAN):
        return TextGenerationResult(type=kind.value, title=title, content=sanitize_output(raw_text))
    raise ValueError(f"Cannot normalize a single response for generation kind {kind.value!r}")
