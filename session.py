"""
StudyPal - Study Session
Client-side state for one study session: selected files, study mode,
document context for chat and a capped conversation history
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from utils import decode_text, is_image, is_pdf, is_text_file

MODES = ("flashcards", "summary", "quiz")
MODE_ENDPOINTS = {
    "flashcards": "/generate-flashcards",
    "summary": "/summarize",
    "quiz": "/generate-quiz",
}
MODE_LOADING_MESSAGES = {
    "flashcards": "Creating flashcards...",
    "summary": "Generating summary...",
    "quiz": "Building quiz questions...",
}
MAX_HISTORY = 10


@dataclass
class UploadedFile:
    name: str
    data: bytes
    mime_type: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def size(self) -> int:
        return len(self.data)


def format_file_size(num_bytes: int) -> str:
    """1536 -> '1.5 KB'."""
    if num_bytes == 0:
        return "0 Bytes"
    size = float(num_bytes)
    for unit in ("Bytes", "KB", "MB"):
        if size < 1024:
            return f"{size:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        size /= 1024
    return f"{size:.2f}".rstrip("0").rstrip(".") + " GB"


class StudySession:
    def __init__(self, mode: str = "flashcards") -> None:
        self.files: List[UploadedFile] = []
        self.mode = "flashcards"
        self.document_context = ""
        self.history: List[Dict[str, str]] = []
        self.set_mode(mode)

    # Files
    def add_file(self, name: str, data: bytes, mime_type: str) -> UploadedFile:
        uploaded = UploadedFile(name=name, data=data, mime_type=mime_type or "")
        self.files.append(uploaded)
        return uploaded

    def remove_file(self, file_id: str) -> bool:
        """Drop a file by id. Returns False when no file had that id."""
        before = len(self.files)
        self.files = [f for f in self.files if f.id != file_id]
        return len(self.files) != before

    def has_files(self) -> bool:
        return bool(self.files)

    # Mode
    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown mode: {mode}")
        self.mode = mode

    @property
    def endpoint(self) -> str:
        return MODE_ENDPOINTS[self.mode]

    # Generation
    def build_generation_payload(self) -> Tuple[Dict[str, str], List[Tuple[str, Tuple[str, bytes, str]]]]:
        """
        Form fields and multipart files for a generation request.

        Text files are read locally and sent as one `text` field, which also
        becomes the document context for chat. Images (and anything else
        the server can read, like PDFs) are attached as `file` parts.
        """
        all_text = ""
        files = []

        for uploaded in self.files:
            if is_text_file(uploaded.mime_type, uploaded.name):
                all_text += decode_text(uploaded.data) + "\n\n"
            elif is_image(uploaded.mime_type) or is_pdf(uploaded.mime_type, uploaded.name):
                files.append(("file", (uploaded.name, uploaded.data, uploaded.mime_type)))

        data = {}
        if all_text.strip():
            data["text"] = all_text
            self.document_context = all_text

        return data, files

    # Chat
    def add_message(self, role: str, content: str) -> None:
        """Append a turn, keeping only the most recent MAX_HISTORY."""
        if role not in ("user", "assistant"):
            raise ValueError(f"Unknown role: {role}")
        self.history.append({"role": role, "content": content})
        if len(self.history) > MAX_HISTORY:
            self.history = self.history[-MAX_HISTORY:]

    def build_chat_payload(self, message: str) -> Dict:
        """
        Chat request body. Call after the user message was appended; it is
        sent as `message` and left out of `history`.
        """
        history = self.history
        if history and history[-1] == {"role": "user", "content": message}:
            history = history[:-1]
        return {
            "message": message,
            "context": self.document_context,
            "history": list(history),
        }
