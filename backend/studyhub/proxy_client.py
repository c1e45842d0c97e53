from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .errors import NoResponseGenerated, ProxyHTTPError, ProxyUnreachable
from .schemas import ProxyRequest
from .settings import settings

logger = logging.getLogger(__name__)


class ProxyClient:
	"""Client for the AI proxy's JSON contract.

	One POST per ``send`` call and no retries; callers decide what to do with a
	failure. The proxy holds the provider credential, so nothing here ever
	sends one.
	"""

	def __init__(
		self,
		url: Optional[str] = None,
		*,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.url = url or settings.proxy_url
		self._client = httpx.AsyncClient(
			timeout=timeout if timeout is not None else settings.proxy_timeout_seconds,
			transport=transport,
		)

	async def send(self, request: ProxyRequest) -> str:
		if not isinstance(request.prompt, str) or not request.prompt:
			raise ValueError("Prompt is required")
		payload: dict[str, Any] = {"prompt": request.prompt, "systemPrompt": request.system_prompt}
		try:
			r = await self._client.post(self.url, json=payload)
		except httpx.RequestError as net_err:
			logger.error("AI proxy request to %s failed: %s", self.url, net_err)
			raise ProxyUnreachable(f"AI proxy is unreachable: {net_err}") from net_err
		if not r.is_success:
			message = _error_message(r)
			logger.error("AI proxy returned %s: %s", r.status_code, message)
			raise ProxyHTTPError(r.status_code, message)
		try:
			data = r.json()
		except ValueError as parse_err:
			raise ProxyHTTPError(r.status_code, "Invalid response from proxy") from parse_err
		text = data.get("text") if isinstance(data, dict) else None
		if not isinstance(text, str) or not text:
			raise NoResponseGenerated(r.status_code)
		return text

	async def aclose(self) -> None:
		await self._client.aclose()


def _error_message(response: httpx.Response) -> Optional[str]:
	# ProxyHTTPError falls back to "Proxy error: <status>" when this returns None
	try:
		data = response.json()
	except ValueError:
		return None
	if isinstance(data, dict):
		error = data.get("error")
		if isinstance(error, str) and error:
			return error
	return None
