from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GenerationKind(str, Enum):
	SUMMARY = "summary"
	STUDY_PLAN = "study_plan"
	FLASHCARDS = "flashcards"
	COMPREHENSIVE = "comprehensive"


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


# ---- Proxy wire contract ----

class ProxyRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	prompt: str
	system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")


class ProxyResponse(BaseModel):
	text: str
	raw: Any = None


class ProxyErrorResponse(BaseModel):
	error: str


# ---- Generation results ----

class Flashcard(BaseModel):
	question: str = ""
	answer: str = ""


class FlashcardSet(BaseModel):
	flashcards: List[Flashcard]
	total_count: int = 0

	@model_validator(mode="after")
	def _sync_total_count(self) -> "FlashcardSet":
		# total_count is always derived, never trusted from input
		self.total_count = len(self.flashcards)
		return self


class TextGenerationResult(BaseModel):
	type: Literal["summary", "study_plan"]
	title: str = ""
	content: str
	timestamp: datetime = Field(default_factory=utcnow)


class FlashcardGenerationResult(BaseModel):
	type: Literal["flashcards"] = "flashcards"
	title: str = ""
	content: FlashcardSet
	timestamp: datetime = Field(default_factory=utcnow)


class ComprehensiveResult(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	summary: str
	study_plan: str = Field(alias="studyPlan")
	flashcards: List[Flashcard]
	timestamp: datetime = Field(default_factory=utcnow)


GenerationResult = Union[TextGenerationResult, FlashcardGenerationResult, ComprehensiveResult]


class StoredGeneration(BaseModel):
	user_id: str
	resource_id: str
	kind: GenerationKind
	result: GenerationResult
	created_at: datetime
