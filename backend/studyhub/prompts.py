"""Prompt templates for each generation kind.

Summaries and study plans use numbered headings with ``-`` bullets; the
normalizer's sanitizer is written for that convention. Flashcards ask for a
bare JSON array.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .schemas import GenerationKind

SUMMARY_SYSTEM_PROMPT = """\
You are an expert educational assistant. Create clear, comprehensive summaries of academic content.

FORMATTING REQUIREMENTS:
- Use clear headings with numbers (1., 2., 3., etc.)
- Use bullet points (-) for key concepts
- Use line breaks to separate sections
- Keep sentences concise and readable
- Structure the content logically"""

STUDY_PLAN_SYSTEM_PROMPT = """\
You are an expert educational planner. Create structured, actionable study plans that help students learn effectively.

FORMATTING REQUIREMENTS:
- Use clear headings with numbers (1., 2., 3., etc.)
- Use bullet points (-) for activities and tasks
- Use line breaks to separate sections
- Include time estimates for each activity
- Structure the content logically"""

FLASHCARDS_SYSTEM_PROMPT = """\
You are an expert educational content creator. Create effective flashcards for active recall and spaced repetition learning.

Instructions:
- Create 10-15 flashcards that cover the most important concepts
- Questions should test understanding, not just memorization
- Include a mix of factual, conceptual, and application questions
- Keep questions concise but specific
- Provide clear, accurate answers
- Return ONLY a JSON array of objects with "question" and "answer" keys"""

SUMMARY_PROMPT = """\
Create a comprehensive summary of this educational content:

Title: {title}

Content:
{content}

Please provide:
1. Brief Overview (2-3 sentences)
2. Key Concepts (bullet points)
3. Important Details (bullet points)
4. Examples or Case Studies (if any)"""

STUDY_PLAN_PROMPT = """\
Create a detailed study plan for this educational content:

Title: {title}

Content:
{content}

Please provide:
1. Learning Objectives (what students should achieve)
2. Study Schedule Breakdown (sessions with time estimates)
3. Key Activities for Each Session (reading, practice, review)
4. Self-Assessment Methods
5. Review Schedule Recommendations
6. Additional Resources or Practice Suggestions"""

FLASHCARDS_PROMPT = """\
Create flashcards for this educational content:

Title: {title}

Content:
{content}

Please create 10-15 flashcards in JSON format like this:
[
  {{"question": "What is...", "answer": "..."}},
  {{"question": "How does...", "answer": "..."}}
]

Focus on:
- Key concepts and definitions
- Important processes or procedures
- Critical thinking applications
- Common misconceptions to address
- Practical examples and use cases"""

_TEMPLATES = {
    GenerationKind.SUMMARY: (SUMMARY_SYSTEM_PROMPT, SUMMARY_PROMPT),
    GenerationKind.STUDY_PLAN: (STUDY_PLAN_SYSTEM_PROMPT, STUDY_PLAN_PROMPT),
    GenerationKind.FLASHCARDS: (FLASHCARDS_SYSTEM_PROMPT, FLASHCARDS_PROMPT),
}


@dataclass(frozen=True)
class GenerationRequest:
    kind: GenerationKind
    title: str
    source_text: str


@dataclass(frozen=True)
class PromptPair:
    system_prompt: str
    prompt: str


def empty_source_placeholder(title: str, filename: Optional[str] = None) -> str:
    name = filename or title or "the uploaded resource"
    return (
        f"No text content could be extracted from {name}. "
        "Generate general study material based on the title."
    )


def build_request(
    kind: Union[GenerationKind, str],
    extracted_text: str,
    title: str = "",
    *,
    filename: Optional[str] = None,
) -> GenerationRequest:
    """Validate the kind and guarantee a non-empty source text."""
    kind = GenerationKind(kind)
    title = title or ""
    source_text = extracted_text if extracted_text and extracted_text.strip() else empty_source_placeholder(title, filename)
    return GenerationRequest(kind=kind, title=title, source_text=source_text)


def build_prompts(request: GenerationRequest) -> PromptPair:
    if request.kind not in _TEMPLATES:
        # comprehensive is a composition of the other three kinds
        raise ValueError(f"No single prompt for generation kind {request.kind.value!r}")
    system_prompt, template = _TEMPLATES[request.kind]
    return PromptPair(
        system_prompt=system_prompt,
        prompt=template.format(title=request.title, content=request.source_text),
    )
