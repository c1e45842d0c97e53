import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from ..errors import UpstreamCredentialMissing, UpstreamError
from ..gemini_client import GeminiClient
from ..schemas import ProxyErrorResponse, ProxyResponse

router = APIRouter(prefix="/api", tags=["gemini"])

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
	return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
	"/gemini",
	response_model=ProxyResponse,
	responses={400: {"model": ProxyErrorResponse}, 500: {"model": ProxyErrorResponse}},
)
async def generate(request: Request):
	# Both checks below answer before any upstream call is made
	try:
		client = GeminiClient()
	except UpstreamCredentialMissing as e:
		logger.error("AI proxy called without a configured provider key")
		return _error(500, str(e))
	try:
		try:
			body = await request.json()
		except ValueError:
			body = None
		prompt = body.get("prompt") if isinstance(body, dict) else None
		if not prompt or not isinstance(prompt, str):
			return _error(400, "Invalid prompt")
		system_prompt = body.get("systemPrompt")
		if not isinstance(system_prompt, str) or not system_prompt:
			system_prompt = None
		text, raw = await client.generate(prompt, system_prompt=system_prompt)
	except UpstreamError as e:
		return _error(e.status, str(e))
	except Exception:
		logger.exception("AI proxy failed")
		return _error(500, "Server error")
	finally:
		await client.aclose()
	return {"text": text, "raw": raw}
