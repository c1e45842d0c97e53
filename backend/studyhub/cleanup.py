from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import AIGeneration
from .settings import settings


def purge_expired_generations(db: Session, *, days: Optional[int] = None, now: Optional[datetime] = None) -> int:
	"""Delete stored generations not re-saved within the retention window."""
	retention = settings.generation_retention_days if days is None else days
	threshold = (now or datetime.utcnow()) - timedelta(days=retention)
	res = db.execute(delete(AIGeneration).where(AIGeneration.created_at < threshold))
	db.commit()
	return res.rowcount or 0
