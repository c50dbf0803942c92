"""
Document conversion for ingestion.

Turns a file on disk into plain text plus simple metadata. Plain-text and
source-code formats are read directly; PDF and DOCX need the optional
pypdf and python-docx libraries.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import DocumentNotFoundError, UnsupportedInputError

logger = logging.getLogger("agent_memory.convert")

PLAIN_TEXT_FORMATS = frozenset({
    ".txt", ".md", ".json", ".yaml", ".yml",
    ".js", ".ts", ".py", ".java", ".cpp", ".c", ".go", ".rs",
    ".html", ".css", ".xml", ".csv",
})

DOCUMENT_FORMATS = frozenset({".pdf", ".docx"})


@dataclass
class ConversionMetadata:
    """What we know about the source of converted text."""
    original_format: str
    converted_format: str = "text"
    word_count: int = 0
    page_count: Optional[int] = None


@dataclass
class ConversionResult:
    """Plain text extracted from a file."""
    content: str
    metadata: ConversionMetadata


def count_words(text: str) -> int:
    return len(text.split())


class DocumentConverter:
    """Converts supported files to plain text."""

    def __init__(self):
        self._supported = PLAIN_TEXT_FORMATS | DOCUMENT_FORMATS

    def is_supported(self, path: str | Path) -> bool:
        """Check if a file format is supported."""
        return Path(path).suffix.lower() in self._supported

    def supported_formats(self) -> list[str]:
        """List of supported extensions, dot included."""
        return sorted(self._supported)

    async def convert(self, path: str | Path) -> ConversionResult:
        """
        Convert a file to text.

        Raises:
            DocumentNotFoundError: If the file does not exist.
            UnsupportedInputError: If the format is unknown or extraction fails.
        """
        path = Path(path)
        if not path.is_file():
            raise DocumentNotFoundError(str(path))

        suffix = path.suffix.lower()
        if not self.is_supported(path):
            raise UnsupportedInputError(str(path), f"Unsupported file format: {suffix or '(none)'}")

        if suffix in PLAIN_TEXT_FORMATS:
            result = await asyncio.to_thread(self._convert_plain_text, path)
        elif suffix == ".pdf":
            result = await asyncio.to_thread(self._convert_pdf, path)
        else:
            result = await asyncio.to_thread(self._convert_docx, path)

        logger.info(
            f"Converted {path.name}: {result.metadata.word_count} words "
            f"({result.metadata.original_format})"
        )
        return result

    def _convert_plain_text(self, path: Path) -> ConversionResult:
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise UnsupportedInputError(str(path), f"File is not valid UTF-8 text ({e.reason})")

        return ConversionResult(
            content=content,
            metadata=ConversionMetadata(
                original_format=path.suffix.lower().lstrip("."),
                word_count=count_words(content),
            ),
        )

    def _convert_pdf(self, path: Path) -> ConversionResult:
        try:
            from pypdf import PdfReader
        except ImportError:
            raise UnsupportedInputError(
                str(path),
                "PDF support requires 'pypdf' library. Install with: pip install pypdf",
            )

        try:
            reader = PdfReader(path)
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as e:
            raise UnsupportedInputError(str(path), f"Failed to convert PDF ({e})")

        content = "\n\n".join(text.strip() for text in pages if text.strip())
        return ConversionResult(
            content=content,
            metadata=ConversionMetadata(
                original_format="pdf",
                word_count=count_words(content),
                page_count=len(pages),
            ),
        )

    def _convert_docx(self, path: Path) -> ConversionResult:
        try:
            from docx import Document as DocxDocument
        except ImportError:
            raise UnsupportedInputError(
                str(path),
                "DOCX support requires 'python-docx' library. Install with: pip install python-docx",
            )

        try:
            doc = DocxDocument(path)
            parts = [para.text.strip() for para in doc.paragraphs if para.text.strip()]
        except Exception as e:
            raise UnsupportedInputError(str(path), f"Failed to convert DOCX ({e})")

        content = "\n\n".join(parts)
        return ConversionResult(
            content=content,
            metadata=ConversionMetadata(
                original_format="docx",
                word_count=count_words(content),
            ),
        )
