from __future__ import annotations
from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..grading import check_answer_correctness, score_attempt


router = APIRouter(prefix="/flashcards", tags=["flashcards"])


class CheckAnswerRequest(BaseModel):
	student_answer: str
	correct_answer: str


class CheckAnswerResponse(BaseModel):
	correct: bool


class AttemptItem(BaseModel):
	question: str = ""
	answer: str
	student_answer: str = ""


class AttemptRequest(BaseModel):
	items: List[AttemptItem] = Field(default_factory=list)


class AttemptItemResult(BaseModel):
	question: str
	student_answer: str
	correct_answer: str
	correct: bool


class AttemptResponse(BaseModel):
	results: List[AttemptItemResult]
	correct_count: int
	total_count: int
	score: float


@router.post("/check", response_model=CheckAnswerResponse)
def check_answer(req: CheckAnswerRequest):
	if not req.student_answer.strip():
		raise HTTPException(status_code=400, detail="student_answer is required")
	return CheckAnswerResponse(correct=check_answer_correctness(req.student_answer, req.correct_answer))


@router.post("/attempt", response_model=AttemptResponse)
def grade_attempt(req: AttemptRequest):
	results: List[AttemptItemResult] = []
	for item in req.items:
		# A blank answer is graded as incorrect rather than rejected
		answer = item.student_answer.strip()
		correct = bool(answer) and check_answer_correctness(answer, item.answer)
		results.append(
			AttemptItemResult(
				question=item.question,
				student_answer=answer,
				correct_answer=item.answer,
				correct=correct,
			)
		)
	correct_count, total_count, score = score_attempt(r.correct for r in results)
	return AttemptResponse(results=results, correct_count=correct_count, total_count=total_count, score=score)
