"""Source document model and media-type classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MEDIA_TYPE = "application/pdf"

# Read as plain text regardless of the declared media type
TEXT_EXTENSIONS = frozenset(
    {
        "txt", "md", "json", "js", "ts", "tsx", "jsx", "html", "css",
        "py", "java", "cpp", "c", "cs", "go", "rb",
    }
)

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


class DocumentClass(Enum):
    TEXT = "text"
    PDF = "pdf"
    DOCX = "docx"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SourceDocument:
    """An uploaded or fetched file. Owned by the caller and never mutated."""

    data: bytes
    filename: str = ""
    media_type: str = ""
    size: int = field(default=-1)

    def __post_init__(self) -> None:
        if self.size < 0:
            object.__setattr__(self, "size", len(self.data))

    @property
    def extension(self) -> str:
        name = (self.filename or "").lower()
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[-1]


def classify(document: SourceDocument) -> DocumentClass:
    """Pick the extraction strategy for a document.

    Text wins over PDF, which wins over DOCX; media type and extension are
    checked together at each step.
    """
    media_type = (document.media_type or "").split(";", 1)[0].strip().lower()
    ext = document.extension
    if "text" in media_type or ext in TEXT_EXTENSIONS:
        return DocumentClass.TEXT
    if media_type == PDF_MEDIA_TYPE or ext == "pdf":
        return DocumentClass.PDF
    if media_type == DOCX_MEDIA_TYPE or ext == "docx":
        return DocumentClass.DOCX
    return DocumentClass.UNSUPPORTED


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    k = 1024
    i = 0
    while i < len(SIZE_UNITS) - 1 and num_bytes >= k ** (i + 1):
        i += 1
    value = f"{num_bytes / k ** i:.2f}".rstrip("0").rstrip(".")
    return f"{value} {SIZE_UNITS[i]}"
