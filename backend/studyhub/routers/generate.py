from __future__ import annotations
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from ..documents import SourceDocument
from ..errors import GenerationError, ResourceFetchError
from ..extractor import ContentExtractor
from ..orchestrator import AIService
from ..schemas import GenerationKind, GenerationResult


router = APIRouter(prefix="/ai", tags=["ai"])

# Shared so optional PDF/DOCX libraries are imported once per process
_extractor = ContentExtractor()


async def get_ai_service():
	service = AIService(extractor=_extractor)
	try:
		yield service
	finally:
		await service.aclose()


class ProcessUrlRequest(BaseModel):
	url: str
	kind: str
	title: str = ""


def _parse_kind(kind: str) -> GenerationKind:
	try:
		return GenerationKind(kind)
	except ValueError:
		raise HTTPException(status_code=400, detail="Invalid generation type")


@router.post("/process", response_model=GenerationResult)
async def process_file(
	file: UploadFile = File(...),
	kind: str = Form(...),
	title: str = Form(""),
	service: AIService = Depends(get_ai_service),
):
	generation_kind = _parse_kind(kind)
	data = await file.read()
	document = SourceDocument(
		data=data,
		filename=file.filename or "upload",
		media_type=file.content_type or "",
	)
	try:
		return await service.process_resource(document, generation_kind, title)
	except GenerationError as e:
		raise HTTPException(status_code=502, detail=str(e))


@router.post("/process-url", response_model=GenerationResult)
async def process_url(req: ProcessUrlRequest, service: AIService = Depends(get_ai_service)):
	generation_kind = _parse_kind(req.kind)
	url = (req.url or "").strip()
	if not url:
		raise HTTPException(status_code=400, detail="url is required")
	try:
		return await service.process_resource_from_url(url, generation_kind, req.title)
	except (GenerationError, ResourceFetchError) as e:
		raise HTTPException(status_code=502, detail=str(e))
