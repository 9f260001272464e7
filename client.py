"""
StudyPal - API Client
Drives a running StudyPal server from Python: generate study material from
local files, chat about it and search. Responses are rendered locally.

Usage:
    python client.py notes.txt diagram.png --mode quiz
    python client.py notes.txt --ask "What is osmosis?"
    python client.py --search "photosynthesis" --json
"""

import argparse
import json
import mimetypes
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import requests

from render import (
    SERVER_UNREACHABLE_MESSAGE,
    render_chat_message,
    render_error,
    render_notice,
    render_result,
    render_search_results,
)
from session import MODE_LOADING_MESSAGES, MODES, StudySession, format_file_size

API_BASE_URL = "http://localhost:5000"

CHAT_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."
CHAT_OFFLINE_MESSAGE = "Unable to connect to AI. Make sure the server is running."
SEARCH_EMPTY_MESSAGE = "No results found. Try asking the AI chatbot instead!"
SEARCH_OFFLINE_MESSAGE = "Search failed. Make sure the server is running."


@dataclass
class ClientResult:
    ok: bool
    html: str
    data: Dict = field(default_factory=dict)
    error: Optional[str] = None


class StudyClient:
    def __init__(self, base_url: str = API_BASE_URL, http=None, timeout: Optional[float] = None) -> None:
        """
        :param base_url: Where the StudyPal server is listening.
        :param http: requests-compatible session (defaults to requests.Session()).
        :param timeout: Per-request timeout in seconds; None waits forever.
        """
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    def _failed(self, message: str, data: Optional[Dict] = None) -> ClientResult:
        return ClientResult(ok=False, html=render_error(message), data=data or {}, error=message)

    def generate(self, session: StudySession) -> ClientResult:
        """Send the session's files to the endpoint for its current mode."""
        if not session.has_files():
            return self._failed("Add at least one file first.")

        data, files = session.build_generation_payload()
        try:
            response = self.http.post(
                self.base_url + session.endpoint,
                data=data,
                files=files or None,
                timeout=self.timeout,
            )
        except requests.RequestException:
            return self._failed(SERVER_UNREACHABLE_MESSAGE)

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            return self._failed(f"Failed to generate content (HTTP {response.status_code})")

        if not response.ok:
            return self._failed(payload.get("error") or "Failed to generate content", payload)

        return ClientResult(ok=True, html=render_result(session.mode, payload), data=payload)

    def chat(self, session: StudySession, message: str) -> ClientResult:
        """
        Ask a question. The user turn is recorded before the request; the
        reply (or a friendly error) is recorded after it.
        """
        message = (message or "").strip()
        if not message:
            raise ValueError("Message is empty")

        session.add_message("user", message)
        payload = session.build_chat_payload(message)

        try:
            response = self.http.post(self.base_url + "/chat", json=payload, timeout=self.timeout)
        except requests.RequestException:
            session.add_message("assistant", CHAT_OFFLINE_MESSAGE)
            return ClientResult(ok=False, html=render_chat_message(CHAT_OFFLINE_MESSAGE), error=CHAT_OFFLINE_MESSAGE)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if data.get("success"):
            reply = data.get("response") or ""
            session.add_message("assistant", reply)
            return ClientResult(ok=True, html=render_chat_message(reply), data=data)

        session.add_message("assistant", CHAT_ERROR_MESSAGE)
        return ClientResult(
            ok=False,
            html=render_chat_message(CHAT_ERROR_MESSAGE),
            data=data,
            error=data.get("error") or CHAT_ERROR_MESSAGE,
        )

    def search(self, query: str) -> ClientResult:
        query = (query or "").strip()
        if not query:
            raise ValueError("Search query is empty")

        try:
            response = self.http.get(self.base_url + "/search", params={"q": query}, timeout=self.timeout)
            data = response.json()
        except requests.RequestException:
            return ClientResult(ok=False, html=render_error(SEARCH_OFFLINE_MESSAGE), error=SEARCH_OFFLINE_MESSAGE)
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if data.get("success") and isinstance(data.get("result"), dict):
            return ClientResult(ok=True, html=render_search_results(data["result"], query), data=data)
        return ClientResult(ok=False, html=render_notice(SEARCH_EMPTY_MESSAGE), data=data, error=data.get("error"))

    def health(self) -> Dict:
        response = self.http.get(self.base_url + "/health", timeout=self.timeout)
        response.raise_for_status()
        return response.json()


def load_files(session: StudySession, paths) -> None:
    """Add local files to the session, guessing MIME types from names."""
    for path in paths:
        path = Path(path)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        uploaded = session.add_file(path.name, path.read_bytes(), mime_type)
        print(f"  + {uploaded.name} ({format_file_size(uploaded.size)}, {mime_type})", file=sys.stderr)


def _emit(result: ClientResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.data, indent=2))
    else:
        print(result.html)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate study material with a running StudyPal server")
    parser.add_argument("files", nargs="*", help="Text, PDF or image files to study")
    parser.add_argument("--mode", "-m", choices=MODES, default="flashcards", help="What to generate")
    parser.add_argument("--ask", type=str, help="Follow-up question for the chat, grounded in the files")
    parser.add_argument("--search", type=str, help="Search the web instead of generating")
    parser.add_argument("--url", type=str, default=API_BASE_URL, help="StudyPal server URL")
    parser.add_argument("--json", action="store_true", help="Print raw JSON instead of HTML")

    args = parser.parse_args(argv)
    client = StudyClient(args.url)

    if args.search:
        result = client.search(args.search)
        _emit(result, args.json)
        return 0 if result.ok else 1

    if not args.files:
        parser.error("give at least one file, or use --search")

    session = StudySession(mode=args.mode)
    load_files(session, args.files)

    print(MODE_LOADING_MESSAGES[session.mode], file=sys.stderr)
    result = client.generate(session)
    _emit(result, args.json)
    if not result.ok:
        return 1

    if args.ask:
        reply = client.chat(session, args.ask)
        _emit(reply, args.json)
        return 0 if reply.ok else 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
