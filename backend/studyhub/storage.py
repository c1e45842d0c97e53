from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Protocol, Union

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from .models import AIGeneration
from .schemas import ComprehensiveResult, GenerationKind, GenerationResult, StoredGeneration

logger = logging.getLogger(__name__)

_result_adapter: TypeAdapter = TypeAdapter(GenerationResult)


class GenerationStore(Protocol):
	"""Storage port for generated study material.

	One generation is kept per (user, resource, kind); saving again replaces
	it. The caller always supplies the user id.
	"""

	def save(self, user_id: str, resource_id: str, result: GenerationResult) -> StoredGeneration:
		...

	def load(
		self,
		user_id: str,
		resource_id: str,
		kind: Optional[Union[GenerationKind, str]] = None,
	) -> List[StoredGeneration]:
		...


def result_kind(result: GenerationResult) -> GenerationKind:
	if isinstance(result, ComprehensiveResult):
		return GenerationKind.COMPREHENSIVE
	return GenerationKind(result.type)


class SqlGenerationStore:
	def __init__(self, db: Session) -> None:
		self.db = db

	def save(self, user_id: str, resource_id: str, result: GenerationResult) -> StoredGeneration:
		if not user_id:
			raise ValueError("User not authenticated")
		kind = result_kind(result)
		payload = _result_adapter.dump_json(result, by_alias=True).decode("utf-8")
		now = datetime.utcnow()
		row = (
			self.db.query(AIGeneration)
			.filter(
				AIGeneration.user_id == user_id,
				AIGeneration.resource_id == resource_id,
				AIGeneration.kind == kind.value,
			)
			.first()
		)
		if row is None:
			row = AIGeneration(user_id=user_id, resource_id=resource_id, kind=kind.value, result_json=payload, created_at=now)
		else:
			row.result_json = payload
			row.created_at = now
		self.db.add(row)
		self.db.commit()
		self.db.refresh(row)
		logger.info("Saved %s generation for resource %s", kind.value, resource_id)
		return StoredGeneration(
			user_id=row.user_id,
			resource_id=row.resource_id,
			kind=kind,
			result=result,
			created_at=row.created_at,
		)

	def load(
		self,
		user_id: str,
		resource_id: str,
		kind: Optional[Union[GenerationKind, str]] = None,
	) -> List[StoredGeneration]:
		if not user_id:
			raise ValueError("User not authenticated")
		query = self.db.query(AIGeneration).filter(
			AIGeneration.user_id == user_id,
			AIGeneration.resource_id == resource_id,
		)
		if kind is not None:
			query = query.filter(AIGeneration.kind == GenerationKind(kind).value)
		generations: List[StoredGeneration] = []
		for row in query.order_by(AIGeneration.created_at.desc(), AIGeneration.id.desc()).all():
			try:
				result = _result_adapter.validate_json(row.result_json)
			except ValidationError as e:
				logger.warning("Skipping unreadable stored generation %s: %s", row.id, e)
				continue
			generations.append(
				StoredGeneration(
					user_id=row.user_id,
					resource_id=row.resource_id,
					kind=GenerationKind(row.kind),
					result=result,
					created_at=row.created_at,
				)
			)
		return generations
