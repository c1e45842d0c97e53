from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, UniqueConstraint
from .db import Base


class AIGeneration(Base):
	__tablename__ = "ai_generations"
	__table_args__ = (UniqueConstraint("user_id", "resource_id", "kind", name="uq_generation_user_resource_kind"),)

	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(128), nullable=False, index=True)
	resource_id = Column(String(128), nullable=False, index=True)
	# summary | study_plan | flashcards | comprehensive
	kind = Column(String(32), nullable=False)
	result_json = Column(Text, nullable=False)
	# Refreshed on every save; retention is measured from it
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
