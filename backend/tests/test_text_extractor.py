"""
ClauseGuard Backend — Text Extractor Unit Tests
================================================

What:  Tests for TextExtractor dispatch and per-format failure semantics.
How:   Real PDFs built in memory (pypdf reads them), real PNGs written with
       Pillow, tesseract patched out.

What we test:
    ✅ PDF text layer extracted
    ✅ Corrupt, structurally damaged or text-less PDF → ExtractionError (400)
    ✅ Missing file → ExtractionError (500)
    ✅ Image OCR uses the configured language; OCR failure → ""
    ✅ Tesseract binary missing → ExtractionError (500)
    ✅ Plain text decoded as UTF-8 (invalid bytes replaced)
    ✅ Media type normalization
"""

import zlib
from unittest.mock import patch

import pytesseract
import pytest
from PIL import Image

from clauseguard.exceptions import ExtractionError, UnsupportedMediaError
from clauseguard.services.text_extractor import (
    TextExtractor,
    is_supported_media_type,
    normalize_media_type,
)


CATALOG = b"<< /Type /Catalog /Pages 2 0 R >>"
PAGE_TREE = b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>"


def build_pdf(text: bytes, catalog: bytes = CATALOG, pages: bytes = PAGE_TREE) -> bytes:
    """
    Single-page PDF with one Helvetica text run; xref offsets computed.

    catalog / pages replace objects 1 and 2, for structurally damaged files
    whose xref table is still valid.
    """
    content = b"BT /F1 12 Tf 72 720 Td (" + text + b") Tj ET" if text else b""
    objects = [
        catalog,
        pages,
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = b"%PDF-1.4\n"
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_pos = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_pos
    return out


class TestMediaTypes:

    def test_normalize_drops_parameters_and_case(self):
        assert normalize_media_type("Text/Plain; charset=utf-8") == "text/plain"
        assert normalize_media_type(None) == ""

    @pytest.mark.parametrize(
        "media_type",
        ["application/pdf", "text/plain", "image/png", "image/jpeg", "IMAGE/WEBP"],
    )
    def test_supported(self, media_type):
        assert is_supported_media_type(media_type)

    @pytest.mark.parametrize(
        "media_type",
        ["application/zip", "application/msword", "text/html", "", None],
    )
    def test_unsupported(self, media_type):
        assert not is_supported_media_type(media_type)


class TestPdfExtraction:

    def setup_method(self):
        self.extractor = TextExtractor(ocr_language="por")

    def test_extracts_text_layer(self, tmp_path):
        path = tmp_path / "contract.pdf"
        path.write_bytes(build_pdf(b"Clausula 1: rescisao unilateral"))

        text = self.extractor.extract(str(path), "application/pdf")

        assert "rescisao unilateral" in text

    def test_corrupt_pdf_is_user_fault(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf document at all")

        with pytest.raises(ExtractionError) as exc_info:
            self.extractor.extract(str(path), "application/pdf")

        assert exc_info.value.user_fault is True
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(
        "damaged",
        [
            # catalog replaced by a bare number
            build_pdf(b"Clausula 1", catalog=b"42"),
            # page tree whose only kid is a number
            build_pdf(b"Clausula 1", pages=b"<< /Type /Pages /Kids [7] /Count 1 >>"),
            # page tree replaced by a number
            build_pdf(b"Clausula 1", pages=b"5"),
            # cut off in the middle of the page objects
            build_pdf(b"Clausula 1")[:150],
        ],
        ids=["numeric-catalog", "numeric-kid", "numeric-page-tree", "truncated"],
    )
    def test_structurally_damaged_pdf_is_user_fault(self, tmp_path, damaged):
        path = tmp_path / "damaged.pdf"
        path.write_bytes(damaged)

        with pytest.raises(ExtractionError) as exc_info:
            self.extractor.extract(str(path), "application/pdf")

        assert exc_info.value.user_fault is True
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("error", [AttributeError, IndexError, RecursionError, zlib.error])
    def test_unexpected_parser_error_is_user_fault(self, tmp_path, error):
        path = tmp_path / "damaged.pdf"
        path.write_bytes(build_pdf(b"Clausula 1"))

        with patch("clauseguard.services.text_extractor.PdfReader", side_effect=error("damaged")):
            with pytest.raises(ExtractionError) as exc_info:
                self.extractor.extract(str(path), "application/pdf")

        assert exc_info.value.status_code == 400
        assert exc_info.value.context["error_type"] == error.__name__

    def test_pdf_without_text_is_rejected(self, tmp_path):
        path = tmp_path / "scanned.pdf"
        path.write_bytes(build_pdf(b""))

        with pytest.raises(ExtractionError) as exc_info:
            self.extractor.extract(str(path), "application/pdf")

        assert exc_info.value.status_code == 400

    def test_missing_file_is_server_fault(self, tmp_path):
        with pytest.raises(ExtractionError) as exc_info:
            self.extractor.extract(str(tmp_path / "gone.pdf"), "application/pdf")

        assert exc_info.value.user_fault is False
        assert exc_info.value.status_code == 500


class TestImageExtraction:

    def setup_method(self):
        self.extractor = TextExtractor(ocr_language="por")

    def _write_png(self, tmp_path):
        path = tmp_path / "photo.png"
        Image.new("RGB", (20, 20), "white").save(path)
        return path

    def test_ocr_text_returned_with_configured_language(self, tmp_path):
        path = self._write_png(tmp_path)
        with patch("clauseguard.services.text_extractor.pytesseract.image_to_string") as ocr:
            ocr.return_value = "Cláusula 2: multa"

            text = self.extractor.extract(str(path), "image/png")

        assert text == "Cláusula 2: multa"
        assert ocr.call_args.kwargs["lang"] == "por"

    def test_ocr_failure_yields_empty_text(self, tmp_path):
        path = self._write_png(tmp_path)
        with patch(
            "clauseguard.services.text_extractor.pytesseract.image_to_string",
            side_effect=pytesseract.TesseractError(1, "Error opening data file"),
        ):
            text = self.extractor.extract(str(path), "image/png")

        assert text == ""

    def test_missing_tesseract_binary_is_server_fault(self, tmp_path):
        path = self._write_png(tmp_path)
        with patch(
            "clauseguard.services.text_extractor.pytesseract.image_to_string",
            side_effect=pytesseract.TesseractNotFoundError(),
        ):
            with pytest.raises(ExtractionError) as exc_info:
                self.extractor.extract(str(path), "image/png")

        assert exc_info.value.user_fault is False
        assert exc_info.value.status_code == 500

    def test_unopenable_image_yields_empty_text(self, tmp_path):
        path = tmp_path / "fake.jpg"
        path.write_bytes(b"not an image")

        assert self.extractor.extract(str(path), "image/jpeg") == ""


class TestPlainTextExtraction:

    def setup_method(self):
        self.extractor = TextExtractor()

    def test_utf8_decoded(self, tmp_path):
        path = tmp_path / "contract.txt"
        path.write_bytes("Cláusula 1: rescisão unilateral".encode("utf-8"))

        assert self.extractor.extract(str(path), "text/plain") == "Cláusula 1: rescisão unilateral"

    def test_invalid_bytes_replaced(self, tmp_path):
        path = tmp_path / "latin1.txt"
        path.write_bytes(b"multa de 10\xff")

        text = self.extractor.extract(str(path), "text/plain; charset=latin-1")

        assert text.startswith("multa de 10")
        assert "\ufffd" in text

    def test_unsupported_type_raises(self, tmp_path):
        path = tmp_path / "archive.zip"
        path.write_bytes(b"PK")

        with pytest.raises(UnsupportedMediaError):
            self.extractor.extract(str(path), "application/zip")
