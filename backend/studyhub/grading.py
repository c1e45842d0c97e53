from __future__ import annotations

import re
from typing import Iterable, List, Tuple

_PUNCTUATION = re.compile(r"[.,!?;:]")
_WHITESPACE = re.compile(r"\s+")

# Answers this short must match exactly (after punctuation normalization)
SHORT_ANSWER_LENGTH = 10
KEYWORD_OVERLAP = 0.7


def _normalize(text: str) -> str:
	return _WHITESPACE.sub(" ", _PUNCTUATION.sub("", text)).strip()


def check_answer_correctness(student_answer: str, correct_answer: str) -> bool:
	"""Lenient flashcard grading.

	Exact matches win, then matches ignoring case, punctuation and extra
	spaces. For longer reference answers the student must hit at least 70% of
	its words (only words longer than two characters can count, and partial
	word containment is accepted either way round).
	"""
	student_text = (student_answer or "").lower().strip()
	correct_text = (correct_answer or "").lower().strip()
	if student_text == correct_text:
		return True

	normalized_student = _normalize(student_text)
	normalized_correct = _normalize(correct_text)
	if normalized_student == normalized_correct:
		return True

	if len(correct_text) <= SHORT_ANSWER_LENGTH:
		return False

	student_words = [w for w in normalized_student.split(" ") if w]
	correct_words = normalized_correct.split(" ")
	matching = [
		word for word in correct_words
		if len(word) > 2 and any(sw in word or word in sw for sw in student_words)
	]
	return len(matching) >= max(1, len(correct_words) * KEYWORD_OVERLAP)


def score_attempt(outcomes: Iterable[bool]) -> Tuple[int, int, float]:
	"""Return (correct_count, total_count, score percentage)."""
	results: List[bool] = list(outcomes)
	correct = sum(1 for r in results if r)
	total = len(results)
	score = (correct / total) * 100 if total > 0 else 0.0
	return correct, total, score
