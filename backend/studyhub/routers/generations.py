from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import GenerationKind, GenerationResult, StoredGeneration
from ..storage import GenerationStore, SqlGenerationStore


router = APIRouter(prefix="/ai/generations", tags=["generations"])


def get_store(db: Session = Depends(get_db)) -> GenerationStore:
	return SqlGenerationStore(db)


def require_user_id(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
	user_id = (x_user_id or "").strip()
	if not user_id:
		raise HTTPException(status_code=401, detail="User not authenticated")
	return user_id


@router.put("/{resource_id}", response_model=StoredGeneration)
def save_generation(
	resource_id: str,
	result: GenerationResult,
	user_id: str = Depends(require_user_id),
	store: GenerationStore = Depends(get_store),
):
	return store.save(user_id, resource_id, result)


@router.get("/{resource_id}", response_model=List[StoredGeneration])
def load_generations(
	resource_id: str,
	kind: Optional[GenerationKind] = None,
	user_id: str = Depends(require_user_id),
	store: GenerationStore = Depends(get_store),
):
	return store.load(user_id, resource_id, kind)
