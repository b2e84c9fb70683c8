"""
ClauseGuard Backend — Text Extractor
=====================================

What:  Turns an uploaded document into raw text, based on its declared media type.
How:   Dispatches to a format-specific reader:
           application/pdf → pypdf PdfReader (text layer of every page)
           image/*         → Pillow + pytesseract OCR (fixed language)
           text/plain      → raw bytes decoded as UTF-8
Who:   Called by AnalysisService inside the temporary-upload scope.

The readers are blocking; AnalysisService runs extract() in the threadpool.
Whether the text is usable (non-blank) is decided by the caller.
"""

import logging
from pathlib import Path
from typing import Optional

import pytesseract
from PIL import Image
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from clauseguard.config import settings
from clauseguard.exceptions import ExtractionError, UnsupportedMediaError

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
TEXT_MEDIA_TYPE = "text/plain"
IMAGE_MEDIA_PREFIX = "image/"

CORRUPT_PDF_MESSAGE = "O PDF enviado está corrompido ou não pode ser lido."


def normalize_media_type(media_type: Optional[str]) -> str:
    """Lowercases and drops parameters: 'Text/Plain; charset=utf-8' → 'text/plain'."""
    if not media_type:
        return ""
    return media_type.split(";", 1)[0].strip().lower()


def is_supported_media_type(media_type: Optional[str]) -> bool:
    normalized = normalize_media_type(media_type)
    return (
        normalized in (PDF_MEDIA_TYPE, TEXT_MEDIA_TYPE)
        or normalized.startswith(IMAGE_MEDIA_PREFIX)
    )


class TextExtractor:
    """
    Format-specific text extraction.

    Failure semantics differ per format:
        PDF:   unreadable or text-less → ExtractionError (user fault, 400)
        Image: OCR failure → "" (the caller reports the document as unreadable);
               tesseract not installed → ExtractionError (our fault, 500)
        Text:  always returns the decoded content
        Any:   OS error reading the file → ExtractionError (our fault, 500)
    """

    def __init__(self, ocr_language: Optional[str] = None):
        self.ocr_language = ocr_language or settings.ocr_language

    def extract(self, file_path: str, media_type: str) -> str:
        normalized = normalize_media_type(media_type)
        path = Path(file_path)

        if normalized == PDF_MEDIA_TYPE:
            text = self._extract_pdf(path)
        elif normalized.startswith(IMAGE_MEDIA_PREFIX):
            text = self._extract_image(path)
        elif normalized == TEXT_MEDIA_TYPE:
            text = self._extract_plain_text(path)
        else:
            raise UnsupportedMediaError(media_type=media_type)

        logger.info("Extracted %d chars from %s upload", len(text), normalized)
        return text

    def _extract_pdf(self, path: Path) -> str:
        try:
            reader = PdfReader(str(path))
            pages = [(page.extract_text() or "") for page in reader.pages]
        except OSError as e:
            logger.error("Could not read PDF %s: %s", path.name, str(e))
            raise ExtractionError(
                message="Erro ao ler o arquivo enviado.",
                user_fault=False,
                context={"os_error": str(e)},
            )
        except PyPdfError as e:
            logger.warning("Unreadable PDF %s: %s", path.name, str(e))
            raise ExtractionError(
                message=CORRUPT_PDF_MESSAGE,
                context={"error_type": type(e).__name__},
            )
        except Exception as e:
            # Damaged object graphs surface as arbitrary errors from inside pypdf
            logger.warning(
                "Unreadable PDF %s (%s): %s", path.name, type(e).__name__, str(e)
            )
            raise ExtractionError(
                message=CORRUPT_PDF_MESSAGE,
                context={"error_type": type(e).__name__},
            )

        text = "\n".join(pages)
        if not text.strip():
            raise ExtractionError(
                message="O PDF enviado não contém texto extraível.",
                context={"pages": len(pages)},
            )
        return text

    def _extract_image(self, path: Path) -> str:
        # An unrecognizable image is reported as blank text; a missing
        # tesseract install is a server fault
        try:
            with Image.open(path) as image:
                return pytesseract.image_to_string(image, lang=self.ocr_language)
        except pytesseract.TesseractNotFoundError as e:
            logger.error("Tesseract binary not available: %s", str(e))
            raise ExtractionError(
                message="Erro ao processar a imagem enviada.",
                user_fault=False,
                context={"ocr_language": self.ocr_language},
            )
        except Exception as e:
            logger.warning(
                "OCR failed for %s (lang=%s): %s",
                path.name,
                self.ocr_language,
                str(e),
            )
            return ""

    def _extract_plain_text(self, path: Path) -> str:
        try:
            return path.read_bytes().decode("utf-8", errors="replace")
        except OSError as e:
            logger.error("Could not read text file %s: %s", path.name, str(e))
            raise ExtractionError(
                message="Erro ao ler o arquivo enviado.",
                user_fault=False,
                context={"os_error": str(e)},
            )


text_extractor = TextExtractor()
