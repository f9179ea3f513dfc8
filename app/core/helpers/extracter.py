"""
Material text extraction.
Supports PDF, DOCX and TXT uploads, and web pages referenced by URL.
"""
import html
import io
import logging
import re

import httpx
from docx import Document as DocxDocument
from pypdf import PdfReader

from app.core.config import settings
from app.core.constants import MaterialType

logger = logging.getLogger(__name__)

_SCRIPT_STYLE = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAGS = re.compile(r"<[^>]+>")
_BLANK_LINES = re.compile(r"\n\s*\n+")


class MaterialTextExtractor:
    """Extract plain text from the supported material types."""

    def extract_file(self, file_bytes: bytes, material_type: str) -> str:
        """
        Extract text from uploaded file bytes.

        Args:
            file_bytes: Raw file content as bytes
            material_type: One of pdf, docx, txt

        Returns:
            Extracted text content

        Raises:
            ValueError: If the type is unsupported or the file cannot be read
        """
        logger.info(f"Extracting text from {material_type.upper()} file")

        if material_type == MaterialType.PDF.value:
            return self._extract_pdf(file_bytes)
        elif material_type == MaterialType.DOCX.value:
            return self._extract_docx(file_bytes)
        elif material_type == MaterialType.TXT.value:
            return self._extract_text(file_bytes)

        raise ValueError(f"Unsupported material type: {material_type}")

    def extract_url(self, url: str) -> str:
        """Fetch a page and reduce its HTML to text."""
        try:
            with httpx.Client(timeout=settings.URL_FETCH_TIMEOUT, follow_redirects=True) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"URL fetch error for {url}: {e}")
            raise ValueError(f"Failed to fetch URL: {str(e)}")

        content_type = response.headers.get("content-type", "")
        if "html" not in content_type:
            return response.text
        return self._html_to_text(response.text)

    def _extract_pdf(self, file_bytes: bytes) -> str:
        """Extract text from PDF."""
        try:
            pdf = PdfReader(io.BytesIO(file_bytes))
            text_parts = []

            for page in pdf.pages:
                page_text = page.extract_text() or ""
                if page_text.strip():
                    text_parts.append(page_text)

            return "\n\n".join(text_parts)
        except Exception as e:
            logger.error(f"PDF extraction error: {e}")
            raise ValueError(f"Failed to extract PDF: {str(e)}")

    def _extract_docx(self, file_bytes: bytes) -> str:
        """Extract text from DOCX."""
        try:
            doc = DocxDocument(io.BytesIO(file_bytes))
            paragraphs = [para.text for para in doc.paragraphs if para.text.strip()]
            return "\n\n".join(paragraphs)
        except Exception as e:
            logger.error(f"DOCX extraction error: {e}")
            raise ValueError(f"Failed to extract DOCX: {str(e)}")

    def _extract_text(self, file_bytes: bytes) -> str:
        return file_bytes.decode("utf-8", errors="ignore")

    def _html_to_text(self, markup: str) -> str:
        text = _SCRIPT_STYLE.sub(" ", markup)
        text = re.sub(r"<br\s*/?>|</p>|</div>|</li>|</h[1-6]>", "\n", text, flags=re.IGNORECASE)
        text = html.unescape(_TAGS.sub(" ", text))
        lines = [" ".join(line.split()) for line in text.splitlines()]
        return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()
