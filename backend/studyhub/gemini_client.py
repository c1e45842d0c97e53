from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional, Tuple
from .errors import UpstreamCredentialMissing, UpstreamError
from .settings import settings

logger = logging.getLogger(__name__)


class GeminiClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		if not self.api_key:
			raise UpstreamCredentialMissing()
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
		self.generation_config: Dict[str, Any] = {
			"temperature": settings.gemini_temperature,
			"topK": settings.gemini_top_k,
			"topP": settings.gemini_top_p,
			"maxOutputTokens": settings.gemini_max_output_tokens,
		}
		self._client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds, transport=transport)

	async def generate(self, prompt: str, *, system_prompt: Optional[str] = None) -> Tuple[str, Any]:
		"""Run one generateContent call and return (text, raw provider JSON).

		The system prompt is prepended to the user prompt. Text is "" when the
		provider answered without a candidate.
		"""
		combined = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt
		payload: Dict[str, Any] = {
			"contents": [{"parts": [{"text": combined}]}],
			"generationConfig": self.generation_config,
		}
		# Key travels in a header so it never appears in a URL or an error message
		headers = {"x-goog-api-key": self.api_key}
		try:
			r = await self._client.post(self.base_url, headers=headers, json=payload)
		except httpx.RequestError as net_err:
			logger.error("Gemini request failed: %s", type(net_err).__name__)
			raise UpstreamError(502, "Upstream provider unreachable") from net_err
		try:
			data = r.json()
		except ValueError:
			data = {}
		if not r.is_success:
			msg = "Unknown error"
			if isinstance(data, dict) and isinstance(data.get("error"), dict):
				msg = data["error"].get("message") or msg
			logger.error("Gemini returned %s: %s", r.status_code, msg)
			raise UpstreamError(r.status_code, f"API Error: {r.status_code} - {msg}")
		return _candidate_text(data), data

	async def aclose(self) -> None:
		await self._client.aclose()


def _candidate_text(data: Any) -> str:
	try:
		return data["candidates"][0]["content"]["parts"][0]["text"] or ""
	except (KeyError, IndexError, TypeError):
		return ""
