"""File-to-text helpers (PDF/image/text) for uploaded health reports."""
from __future__ import annotations

import io
from typing import Tuple

import pytesseract
from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

SUPPORTED_IMAGE_EXT = {".png", ".jpg", ".jpeg", ".tiff", ".bmp", ".webp"}


class TextAcquisitionError(ValueError):
    """Raised when no usable text can be obtained from an uploaded file."""


def _pdf_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError as exc:
        raise TextAcquisitionError(f"Unreadable PDF: {exc}") from exc
    return "\n".join(pages).strip()


def _image_text(data: bytes) -> str:
    try:
        img = Image.open(io.BytesIO(data))
        return pytesseract.image_to_string(img, lang="eng").strip()
    except UnidentifiedImageError as exc:
        raise TextAcquisitionError("Unreadable image") from exc
    except pytesseract.TesseractNotFoundError as exc:
        raise TextAcquisitionError("OCR engine is not installed") from exc


def extract_text_from_bytes(data: bytes, filename: str, content_type: str) -> Tuple[str, str]:
    """Return ``(text, source)`` where source is ``pdf``, ``ocr`` or ``text``."""
    lowered = (filename or "").lower()
    mt = (content_type or "").lower()

    if mt == "application/pdf" or lowered.endswith(".pdf"):
        text = _pdf_text(data)
        if not text:
            raise TextAcquisitionError("No text extracted from PDF; scanned PDFs need OCR")
        return text, "pdf"

    if mt.startswith("image/") or any(lowered.endswith(ext) for ext in SUPPORTED_IMAGE_EXT):
        text = _image_text(data)
        if not text:
            raise TextAcquisitionError("OCR produced empty output")
        return text, "ocr"

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TextAcquisitionError("Unable to decode file as UTF-8 text") from exc
    if not text.strip():
        raise TextAcquisitionError("File contains no text")
    return text, "text"


__all__ = ["extract_text_from_bytes", "TextAcquisitionError", "SUPPORTED_IMAGE_EXT"]
