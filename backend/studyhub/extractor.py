"""Plain-text extraction from uploaded documents.

Text-like files are decoded directly. PDF and DOCX support comes from optional
libraries that are imported on first use: each :class:`Capability` holds an
ordered list of candidate modules and keeps the first one that imports. When
no candidate loads, or the loaded library cannot read a document, extraction
returns a placeholder describing the file instead of raising. Imports and
document parsing run in a worker thread so the event loop stays responsive.
"""

from __future__ import annotations

import asyncio
import importlib
import io
import logging
from types import ModuleType
from typing import Awaitable, Callable, Dict, Iterable, Optional, Sequence

from .documents import DocumentClass, SourceDocument, classify, format_file_size
from .errors import ExtractionFailed, ExtractionUnavailable
from .settings import settings

logger = logging.getLogger(__name__)

Reader = Callable[[ModuleType, bytes], str]


def _join_pages(pages: Iterable[Optional[str]]) -> str:
    # Whitespace inside a page collapses to single spaces; pages are separated by a blank line
    return "\n\n".join(" ".join((text or "").split()) for text in pages).strip()


def _read_pypdf(module: ModuleType, data: bytes) -> str:
    reader = module.PdfReader(io.BytesIO(data))
    return _join_pages(page.extract_text() for page in reader.pages)


def _read_pdfplumber(module: ModuleType, data: bytes) -> str:
    with module.open(io.BytesIO(data)) as pdf:
        return _join_pages(page.extract_text() for page in pdf.pages)


def _read_pymupdf(module: ModuleType, data: bytes) -> str:
    with module.open(stream=data, filetype="pdf") as doc:
        return _join_pages(page.get_text("text") for page in doc)


def _read_mammoth(module: ModuleType, data: bytes) -> str:
    result = module.extract_raw_text(io.BytesIO(data))
    return result.value or ""


def _read_python_docx(module: ModuleType, data: bytes) -> str:
    document = module.Document(io.BytesIO(data))
    return "\n\n".join(paragraph.text for paragraph in document.paragraphs)


PDF_READERS: Dict[str, Reader] = {
    "pypdf": _read_pypdf,
    "pdfplumber": _read_pdfplumber,
    "fitz": _read_pymupdf,
}

DOCX_READERS: Dict[str, Reader] = {
    "mammoth": _read_mammoth,
    "docx": _read_python_docx,
}


class Capability:
    """An optional extraction library, loaded on demand from ordered sources.

    The first source that imports is kept for the lifetime of the object.
    ``ensure`` is safe to call concurrently: the lock makes later callers
    see the module loaded by the first one.
    """

    def __init__(
        self,
        name: str,
        readers: Dict[str, Reader],
        sources: Optional[Sequence[str]] = None,
        *,
        loader: Callable[[str], ModuleType] = importlib.import_module,
    ) -> None:
        self.name = name
        self.readers = readers
        self.sources = tuple(sources) if sources is not None else tuple(readers)
        self._loader = loader
        self._lock = asyncio.Lock()
        self.source: Optional[str] = None
        self._module: Optional[ModuleType] = None

    @property
    def available(self) -> bool:
        return self._module is not None

    def try_load(self, source: str) -> bool:
        if source not in self.readers:
            logger.warning("No %s reader registered for source %r", self.name, source)
            return False
        try:
            module = self._loader(source)
        except Exception as exc:
            logger.warning("Failed to load %s support from %s: %s", self.name, source, exc)
            return False
        self.source = source
        self._module = module
        return True

    async def ensure(self) -> None:
        if self.available:
            return
        async with self._lock:
            if self.available:
                return
            for source in self.sources:
                if await asyncio.to_thread(self.try_load, source):
                    logger.info("%s support loaded from %s", self.name, source)
                    return
        raise ExtractionUnavailable(f"All {self.name} sources failed to load: {', '.join(self.sources) or 'none configured'}")

    def read(self, data: bytes) -> str:
        if self._module is None or self.source is None:
            raise ExtractionUnavailable(f"{self.name} support is not loaded")
        try:
            return self.readers[self.source](self._module, data)
        except Exception as exc:
            raise ExtractionFailed(f"{self.source} could not read the document: {exc}") from exc


def pdf_capability(sources: Optional[Sequence[str]] = None) -> Capability:
    return Capability("PDF", PDF_READERS, sources if sources is not None else settings.pdf_backends)


def docx_capability(sources: Optional[Sequence[str]] = None) -> Capability:
    return Capability("DOCX", DOCX_READERS, sources)


class ContentExtractor:
    """Turns a :class:`SourceDocument` into plain text. Never raises."""

    def __init__(self, pdf: Optional[Capability] = None, docx: Optional[Capability] = None) -> None:
        self.pdf = pdf or pdf_capability()
        self.docx = docx or docx_capability()
        self._handlers: Dict[DocumentClass, Callable[[SourceDocument], Awaitable[str]]] = {
            DocumentClass.TEXT: self._extract_text,
            DocumentClass.PDF: self._extract_pdf,
            DocumentClass.DOCX: self._extract_docx,
            DocumentClass.UNSUPPORTED: self._extract_unsupported,
        }

    async def extract(self, document: SourceDocument) -> str:
        document_class = classify(document)
        logger.debug("Extracting %s as %s (%d bytes)", document.filename, document_class.value, document.size)
        return await self._handlers[document_class](document)

    async def _extract_text(self, document: SourceDocument) -> str:
        return document.data.decode("utf-8-sig", errors="replace")

    async def _extract_pdf(self, document: SourceDocument) -> str:
        try:
            await self.pdf.ensure()
            text = await asyncio.to_thread(self.pdf.read, document.data)
            return text.strip()
        except (ExtractionUnavailable, ExtractionFailed) as exc:
            logger.warning("PDF processing failed for %s, using fallback: %s", document.filename, exc)
            return (
                f"PDF File: {document.filename} ({format_file_size(document.size)}) - "
                "Text extraction not available. Please upload as text or use a different format for AI analysis."
            )

    async def _extract_docx(self, document: SourceDocument) -> str:
        try:
            await self.docx.ensure()
            text = await asyncio.to_thread(self.docx.read, document.data)
            return text.strip()
        except (ExtractionUnavailable, ExtractionFailed) as exc:
            logger.warning("DOCX processing failed for %s, using fallback: %s", document.filename, exc)
            return (
                f"DOCX File: {document.filename} ({format_file_size(document.size)}) - "
                "Text extraction failed. Please upload as text or use a different format for AI analysis."
            )

    async def _extract_unsupported(self, document: SourceDocument) -> str:
        return (
            f"File: {document.filename} ({format_file_size(document.size)}) - "
            "Content extraction not supported for this file type."
        )
