"""
StudyPal - Utility Functions
Input validation, file type checks, PDF extraction, JSON array extraction
"""

import io
import json
from typing import Dict, List, Optional

import PyPDF2

# Configuration
MAX_PDF_PAGES = 100
TEXT_EXTENSIONS = (".txt", ".md")


def validate_input(value, message: str) -> Dict:
    """
    Validate a required text input
    Returns: {"error": bool, "message": str}
    """
    if not isinstance(value, str) or not value.strip():
        return {
            "error": True,
            "message": message
        }

    return {"error": False}


def is_image(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.startswith("image/")


def is_pdf(mime_type: Optional[str], filename: str = "") -> bool:
    return mime_type == "application/pdf" or (filename or "").lower().endswith(".pdf")


def is_text_file(mime_type: Optional[str], filename: str = "") -> bool:
    if mime_type and mime_type.startswith("text/"):
        return True
    return (filename or "").lower().endswith(TEXT_EXTENSIONS)


def decode_text(data: bytes) -> str:
    """Decode uploaded text file bytes as UTF-8 (bad bytes are replaced)."""
    return data.decode("utf-8", errors="replace")


def extract_pdf_text(data: bytes) -> str:
    """
    Extract text from PDF bytes
    Returns: Extracted text as string
    """
    try:
        text = ""

        pdf_reader = PyPDF2.PdfReader(io.BytesIO(data))

        # Check page limit
        num_pages = len(pdf_reader.pages)
        if num_pages > MAX_PDF_PAGES:
            raise ValueError(f"PDF has {num_pages} pages. Maximum allowed is {MAX_PDF_PAGES}.")

        for page_num in range(num_pages):
            page_text = pdf_reader.pages[page_num].extract_text()

            if page_text:
                text += f"\n[Page {page_num + 1}]\n{page_text}"

        return text

    except Exception as e:
        raise ValueError(f"Failed to extract text from PDF: {str(e)}") from e


def _first_bracket_span(text: str) -> Optional[str]:
    """
    The balanced [...] span opening at the first "[", or None when it
    never closes. Brackets inside JSON string literals are ignored.
    """
    start = text.find("[")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False

    for pos in range(start, len(text)):
        ch = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start:pos + 1]

    return None


def extract_json_array(raw: str) -> Optional[List]:
    """
    Best-effort extraction of a JSON array from model output.

    1. The whole response parsed as JSON, if that is a list.
    2. The balanced [...] span opening at the first "[", if it parses
       as a list. Later spans are never tried; they are nested values
       of a broken outer array.
    Returns None when neither works; callers substitute their fallback.
    """
    if not raw:
        return None

    try:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            return parsed
    except json.JSONDecodeError:
        pass

    span = _first_bracket_span(raw)
    if span is None:
        return None
    try:
        parsed = json.loads(span)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, list) else None
