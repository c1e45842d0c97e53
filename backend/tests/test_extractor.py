"""Tests for content extraction and optional PDF/DOCX capabilities.

Most tests give each Capability a fake loader that hands back a
module-shaped namespace; TestInstalledLibraries runs the real ones.
"""

import asyncio
import contextlib
import io
import time
from types import SimpleNamespace

import pytest

from studyhub.documents import DOCX_MEDIA_TYPE, SourceDocument
from studyhub.errors import ExtractionFailed, ExtractionUnavailable
from studyhub.extractor import (
    DOCX_READERS,
    PDF_READERS,
    Capability,
    ContentExtractor,
    docx_capability,
    pdf_capability,
)


class _FakePage:
    def __init__(self, text):
        self._text = text

    def extract_text(self):
        return self._text


def _fake_pypdf(pages):
    class _Reader:
        def __init__(self, stream):
            self.pages = [_FakePage(text) for text in pages]

    return SimpleNamespace(PdfReader=_Reader)


def _fake_pdfplumber(pages):
    class _Pdf:
        def __init__(self):
            self.pages = [_FakePage(text) for text in pages]

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    return SimpleNamespace(open=lambda stream: _Pdf())


class _RecordingLoader:
    """Loader that serves fake modules by name and records every attempt."""

    def __init__(self, modules):
        self.modules = modules
        self.calls = []

    def __call__(self, name):
        self.calls.append(name)
        if name not in self.modules:
            raise ImportError(f"No module named {name!r}")
        return self.modules[name]


def _extractor(pdf=None, docx=None):
    missing = _RecordingLoader({})
    return ContentExtractor(
        pdf=pdf or Capability("PDF", PDF_READERS, ["pypdf"], loader=missing),
        docx=docx or Capability("DOCX", DOCX_READERS, ["mammoth"], loader=missing),
    )


class TestTextExtraction:
    @pytest.mark.asyncio
    async def test_ascii_round_trips(self):
        text = "".join(chr(c) for c in range(32, 127)) + "\nsecond line\n"
        result = await _extractor().extract(SourceDocument(text.encode("utf-8"), filename="notes.txt"))
        assert result == text

    @pytest.mark.asyncio
    async def test_utf8_bom_is_dropped(self):
        doc = SourceDocument("\ufeffcafé".encode("utf-8"), filename="notes.md")
        assert await _extractor().extract(doc) == "café"

    @pytest.mark.asyncio
    async def test_invalid_bytes_are_replaced(self):
        doc = SourceDocument(b"ok \xff\xfe done", filename="x.txt")
        result = await _extractor().extract(doc)
        assert result.startswith("ok ")
        assert result.endswith(" done")


class TestUnsupported:
    @pytest.mark.asyncio
    async def test_empty_unknown_file(self):
        result = await _extractor().extract(SourceDocument(b"", filename="foo.xyz"))
        assert "foo.xyz" in result
        assert "0 Bytes" in result
        assert "not supported" in result

    @pytest.mark.asyncio
    @pytest.mark.parametrize("filename", ["slides.pptx", "photo.png", "archive.zip"])
    async def test_placeholder_names_the_file(self, filename):
        result = await _extractor().extract(SourceDocument(b"x" * 1536, filename=filename))
        assert result == f"File: {filename} (1.5 KB) - Content extraction not supported for this file type."


class TestPdfExtraction:
    @pytest.mark.asyncio
    async def test_pages_are_joined_and_whitespace_collapsed(self):
        loader = _RecordingLoader({"pypdf": _fake_pypdf(["Hello\n  world", None, "  Page   two  "])})
        extractor = _extractor(pdf=Capability("PDF", PDF_READERS, ["pypdf"], loader=loader))

        result = await extractor.extract(SourceDocument(b"%PDF-1.4", filename="doc.pdf"))

        assert result == "Hello world\n\n\n\nPage two"

    @pytest.mark.asyncio
    async def test_falls_back_to_next_source(self):
        loader = _RecordingLoader({"pdfplumber": _fake_pdfplumber(["From plumber"])})
        capability = Capability("PDF", PDF_READERS, ["pypdf", "pdfplumber", "fitz"], loader=loader)

        result = await _extractor(pdf=capability).extract(SourceDocument(b"%PDF", filename="doc.pdf"))

        assert result == "From plumber"
        assert capability.source == "pdfplumber"
        assert loader.calls == ["pypdf", "pdfplumber"]

    @pytest.mark.asyncio
    async def test_placeholder_when_no_source_loads(self):
        loader = _RecordingLoader({})
        capability = Capability("PDF", PDF_READERS, ["pypdf", "fitz"], loader=loader)

        result = await _extractor(pdf=capability).extract(SourceDocument(b"x" * 2048, filename="doc.pdf"))

        assert result.startswith("PDF File: doc.pdf (2 KB) - Text extraction not available.")
        assert loader.calls == ["pypdf", "fitz"]

    @pytest.mark.asyncio
    async def test_placeholder_when_reader_fails(self):
        class _Broken:
            def __init__(self, stream):
                raise ValueError("EOF marker not found")

        loader = _RecordingLoader({"pypdf": SimpleNamespace(PdfReader=_Broken)})
        extractor = _extractor(pdf=Capability("PDF", PDF_READERS, ["pypdf"], loader=loader))

        result = await extractor.extract(SourceDocument(b"garbage", filename="broken.pdf"))

        assert result.startswith("PDF File: broken.pdf (7 Bytes)")

    @pytest.mark.asyncio
    async def test_library_is_loaded_once(self):
        loader = _RecordingLoader({"pypdf": _fake_pypdf(["text"])})
        extractor = _extractor(pdf=Capability("PDF", PDF_READERS, ["pypdf"], loader=loader))

        for _ in range(3):
            await extractor.extract(SourceDocument(b"%PDF", filename="doc.pdf"))

        assert loader.calls == ["pypdf"]

    @pytest.mark.asyncio
    async def test_failed_load_is_retried_later(self):
        loader = _RecordingLoader({})
        capability = Capability("PDF", PDF_READERS, ["pypdf"], loader=loader)
        extractor = _extractor(pdf=capability)

        await extractor.extract(SourceDocument(b"%PDF", filename="doc.pdf"))
        loader.modules["pypdf"] = _fake_pypdf(["now available"])
        result = await extractor.extract(SourceDocument(b"%PDF", filename="doc.pdf"))

        assert result == "now available"
        assert loader.calls == ["pypdf", "pypdf"]


class TestDocxExtraction:
    @pytest.mark.asyncio
    async def test_mammoth_raw_text_is_trimmed(self):
        mammoth = SimpleNamespace(extract_raw_text=lambda stream: SimpleNamespace(value="  Hello docx \n"))
        loader = _RecordingLoader({"mammoth": mammoth})
        extractor = _extractor(docx=Capability("DOCX", DOCX_READERS, ["mammoth"], loader=loader))

        doc = SourceDocument(b"PK", filename="essay.docx", media_type=DOCX_MEDIA_TYPE)
        assert await extractor.extract(doc) == "Hello docx"

    @pytest.mark.asyncio
    async def test_python_docx_paragraphs(self):
        paragraphs = [SimpleNamespace(text="First"), SimpleNamespace(text="Second")]
        module = SimpleNamespace(Document=lambda stream: SimpleNamespace(paragraphs=paragraphs))
        loader = _RecordingLoader({"docx": module})
        extractor = _extractor(docx=Capability("DOCX", DOCX_READERS, ["mammoth", "docx"], loader=loader))

        assert await extractor.extract(SourceDocument(b"PK", filename="essay.docx")) == "First\n\nSecond"

    @pytest.mark.asyncio
    async def test_placeholder_on_failure(self):
        def _explode(stream):
            raise KeyError("word/document.xml")

        loader = _RecordingLoader({"mammoth": SimpleNamespace(extract_raw_text=_explode)})
        extractor = _extractor(docx=Capability("DOCX", DOCX_READERS, ["mammoth"], loader=loader))

        result = await extractor.extract(SourceDocument(b"PK", filename="essay.docx"))

        assert result.startswith("DOCX File: essay.docx (2 Bytes) - Text extraction failed.")


class TestCapability:
    @pytest.mark.asyncio
    async def test_concurrent_ensure_loads_once(self):
        loader = _RecordingLoader({"pypdf": _fake_pypdf([])})
        capability = Capability("PDF", PDF_READERS, ["pypdf"], loader=loader)

        await asyncio.gather(*(capability.ensure() for _ in range(5)))

        assert capability.available
        assert loader.calls == ["pypdf"]

    @pytest.mark.asyncio
    async def test_ensure_raises_when_every_source_fails(self):
        capability = Capability("PDF", PDF_READERS, ["pypdf"], loader=_RecordingLoader({}))
        with pytest.raises(ExtractionUnavailable):
            await capability.ensure()
        assert not capability.available

    def test_unregistered_source_is_skipped(self):
        loader = _RecordingLoader({"tika": object()})
        capability = Capability("PDF", PDF_READERS, ["tika"], loader=loader)

        assert capability.try_load("tika") is False
        assert loader.calls == []

    def test_read_before_load_is_unavailable(self):
        capability = Capability("PDF", PDF_READERS, ["pypdf"], loader=_RecordingLoader({}))
        with pytest.raises(ExtractionUnavailable):
            capability.read(b"%PDF")

    def test_read_wraps_library_errors(self):
        def _explode(stream):
            raise RuntimeError("bad zip")

        loader = _RecordingLoader({"mammoth": SimpleNamespace(extract_raw_text=_explode)})
        capability = Capability("DOCX", DOCX_READERS, ["mammoth"], loader=loader)
        assert capability.try_load("mammoth")

        with pytest.raises(ExtractionFailed) as exc_info:
            capability.read(b"PK")
        assert "bad zip" in str(exc_info.value)


class _SlowPage:
    def extract_text(self):
        time.sleep(0.3)
        return "slow page"


async def _count_ticks_during(awaitable):
    """Await ``awaitable`` while a ticker task counts how often the loop ran."""
    ticks = 0

    async def _ticker():
        nonlocal ticks
        while True:
            await asyncio.sleep(0.01)
            ticks += 1

    task = asyncio.create_task(_ticker())
    try:
        result = await awaitable
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    return result, ticks


class TestEventLoopResponsiveness:
    @pytest.mark.asyncio
    async def test_slow_pdf_reader_runs_off_the_loop(self):
        module = SimpleNamespace(PdfReader=lambda stream: SimpleNamespace(pages=[_SlowPage()]))
        loader = _RecordingLoader({"pypdf": module})
        extractor = _extractor(pdf=Capability("PDF", PDF_READERS, ["pypdf"], loader=loader))

        result, ticks = await _count_ticks_during(extractor.extract(SourceDocument(b"%PDF", filename="big.pdf")))

        assert result == "slow page"
        assert ticks >= 5

    @pytest.mark.asyncio
    async def test_slow_import_runs_off_the_loop(self):
        def _slow_loader(name):
            time.sleep(0.3)
            return SimpleNamespace(extract_raw_text=lambda stream: SimpleNamespace(value="docx text"))

        extractor = _extractor(docx=Capability("DOCX", DOCX_READERS, ["mammoth"], loader=_slow_loader))

        result, ticks = await _count_ticks_during(extractor.extract(SourceDocument(b"PK", filename="essay.docx")))

        assert result == "docx text"
        assert ticks >= 5


class TestInstalledLibraries:
    """Round trips through the real PDF and DOCX libraries."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source", ["mammoth", "docx"])
    async def test_docx_written_by_python_docx(self, source):
        import docx

        document = docx.Document()
        document.add_paragraph("Hello world")
        buffer = io.BytesIO()
        document.save(buffer)

        extractor = ContentExtractor(pdf=pdf_capability(["pypdf"]), docx=docx_capability([source]))
        doc = SourceDocument(buffer.getvalue(), filename="hello.docx", media_type=DOCX_MEDIA_TYPE)

        assert await extractor.extract(doc) == "Hello world"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source", ["pypdf", "pdfplumber"])
    async def test_blank_pdf_written_by_pypdf(self, source):
        from pypdf import PdfWriter

        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        buffer = io.BytesIO()
        writer.write(buffer)

        extractor = ContentExtractor(pdf=pdf_capability([source]), docx=docx_capability(["mammoth"]))
        result = await extractor.extract(SourceDocument(buffer.getvalue(), filename="blank.pdf"))

        # A page without text is an empty extraction, not a failure
        assert result == ""
