"""Domain exceptions for the AI generation pipeline and proxy.

Extraction errors never leave the extractor: it downgrades them to a
placeholder string. Proxy and fetch errors propagate to the orchestrator,
which re-raises them as a single stage-labelled ``GenerationError``. Each
exception carries a stable ``error_code`` for log tagging; ``str(exc)`` is the
human-readable message only.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class StudyHubError(Exception):
    """Base class for generation pipeline errors."""

    message: str
    error_code: str

    def __str__(self) -> str:
        return self.message


class ExtractionUnavailable(StudyHubError):
    def __init__(self, message: str = "No extraction backend could be loaded") -> None:
        super().__init__(message=message, error_code="extraction_unavailable")


class ExtractionFailed(StudyHubError):
    def __init__(self, message: str = "Failed to extract text from document") -> None:
        super().__init__(message=message, error_code="extraction_failed")


class ProxyError(StudyHubError):
    """The AI proxy could not produce generated text.

    ``status`` is the proxy's HTTP status, or ``None`` when no response was
    received at all.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        error_code: str = "proxy_error",
    ) -> None:
        super().__init__(message=message, error_code=error_code)
        self.status = status


class ProxyUnreachable(ProxyError):
    def __init__(self, message: str = "AI proxy is unreachable") -> None:
        super().__init__(message, status=None, error_code="proxy_unreachable")


class ProxyHTTPError(ProxyError):
    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__(
            message or f"Proxy error: {status}",
            status=status,
            error_code="proxy_http_error",
        )


class NoResponseGenerated(ProxyError):
    def __init__(self, status: int = 200) -> None:
        super().__init__("No response generated", status=status, error_code="no_response")


class UpstreamCredentialMissing(StudyHubError):
    def __init__(self, message: str = "Server API key not configured") -> None:
        super().__init__(message=message, error_code="credential_missing")


class UpstreamError(StudyHubError):
    """The generative-text provider rejected or failed a request."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message=message, error_code="upstream_error")
        self.status = status


class ResourceFetchError(StudyHubError):
    def __init__(self, message: str = "Failed to fetch resource content", status: int | None = None) -> None:
        super().__init__(message=message, error_code="fetch_failed")
        self.status = status


class GenerationError(StudyHubError):
    def __init__(self, message: str) -> None:
        super().__init__(message=message, error_code="generation_failed")
