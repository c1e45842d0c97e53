"""AI generation orchestrator: extract, build, send, normalize."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

from .documents import SourceDocument
from .errors import GenerationError, ProxyError
from .extractor import ContentExtractor
from .fetcher import ResourceFetcher
from .normalizer import normalize
from .prompts import build_prompts, build_request
from .proxy_client import ProxyClient
from .schemas import (
    ComprehensiveResult,
    FlashcardGenerationResult,
    GenerationKind,
    GenerationResult,
    ProxyRequest,
    TextGenerationResult,
    utcnow,
)

logger = logging.getLogger(__name__)

# Stage labels used in "Failed to generate <label>: <cause>"
STAGE_LABELS = {
    GenerationKind.SUMMARY: "summary",
    GenerationKind.STUDY_PLAN: "study plan",
    GenerationKind.FLASHCARDS: "flashcards",
    GenerationKind.COMPREHENSIVE: "comprehensive analysis",
}


class AIService:
    """Runs the generation pipeline for one resource at a time.

    Collaborators are passed in; the service keeps no per-request state, so a
    single instance can serve concurrent calls.
    """

    def __init__(
        self,
        proxy: Optional[ProxyClient] = None,
        extractor: Optional[ContentExtractor] = None,
        fetcher: Optional[ResourceFetcher] = None,
    ) -> None:
        self.proxy = proxy or ProxyClient()
        self.extractor = extractor or ContentExtractor()
        self.fetcher = fetcher or ResourceFetcher()

    async def process_resource(
        self,
        document: SourceDocument,
        kind: Union[GenerationKind, str],
        title: str = "",
    ) -> GenerationResult:
        """Extract text from ``document`` and generate ``kind`` from it."""
        try:
            kind = GenerationKind(kind)
        except ValueError:
            raise GenerationError("Invalid generation type") from None
        content = await self.extractor.extract(document)
        logger.info("Generating %s for %s (%d chars extracted)", kind.value, document.filename, len(content))
        return await self.generate(kind, content, title, filename=document.filename)

    async def process_resource_from_url(
        self,
        url: str,
        kind: Union[GenerationKind, str],
        title: str = "",
    ) -> GenerationResult:
        document = await self.fetcher.fetch(url, title)
        return await self.process_resource(document, kind, title or document.filename)

    async def generate(
        self,
        kind: GenerationKind,
        content: str,
        title: str = "",
        *,
        filename: Optional[str] = None,
    ) -> GenerationResult:
        if kind is GenerationKind.COMPREHENSIVE:
            return await self.generate_comprehensive_analysis(content, title, filename=filename)
        return await self._generate_single(kind, content, title, filename=filename)

    async def generate_summary(self, content: str, title: str = "") -> TextGenerationResult:
        return await self._generate_single(GenerationKind.SUMMARY, content, title)

    async def generate_study_plan(self, content: str, title: str = "") -> TextGenerationResult:
        return await self._generate_single(GenerationKind.STUDY_PLAN, content, title)

    async def generate_flashcards(self, content: str, title: str = "") -> FlashcardGenerationResult:
        return await self._generate_single(GenerationKind.FLASHCARDS, content, title)

    async def generate_comprehensive_analysis(
        self,
        content: str,
        title: str = "",
        *,
        filename: Optional[str] = None,
    ) -> ComprehensiveResult:
        """Generate summary, study plan and flashcards concurrently.

        All three must succeed. The first failure propagates and no partial
        result is returned.
        """
        try:
            summary, study_plan, flashcards = await asyncio.gather(
                self._generate_single(GenerationKind.SUMMARY, content, title, filename=filename),
                self._generate_single(GenerationKind.STUDY_PLAN, content, title, filename=filename),
                self._generate_single(GenerationKind.FLASHCARDS, content, title, filename=filename),
            )
        except GenerationError as e:
            logger.error("Comprehensive analysis failed: %s", e)
            raise GenerationError(f"Failed to generate {STAGE_LABELS[GenerationKind.COMPREHENSIVE]}: {e}") from e
        return ComprehensiveResult(
            summary=summary.content,
            study_plan=study_plan.content,
            flashcards=flashcards.content.flashcards,
        )

    async def _generate_single(
        self,
        kind: GenerationKind,
        content: str,
        title: str,
        *,
        filename: Optional[str] = None,
    ):
        label = STAGE_LABELS[kind]
        request = build_request(kind, content, title, filename=filename)
        prompts = build_prompts(request)
        try:
            raw_text = await self.proxy.send(
                ProxyRequest(prompt=prompts.prompt, system_prompt=prompts.system_prompt)
            )
        except (ProxyError, ValueError) as e:
            logger.error("Failed to generate %s: %s", label, e)
            raise GenerationError(f"Failed to generate {label}: {e}") from e
        return normalize(kind, raw_text, request.title)

    async def aclose(self) -> None:
        await self.proxy.aclose()
