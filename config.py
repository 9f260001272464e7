"""
StudyPal - Configuration
Settings are read from the environment (and .env) once at import time
"""

import os
from dotenv import load_dotenv

load_dotenv()

PLACEHOLDER_API_KEY = "your_gemini_api_key_here"


def _env_list(name, default):
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return float(raw)


def api_key_configured(api_key) -> bool:
    """True when a real (non-placeholder) API key is present."""
    return bool(api_key) and api_key != PLACEHOLDER_API_KEY


class Config:
    """Flask config object, loaded with app.config.from_object()."""

    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")

    # Models
    TEXT_MODEL = os.getenv("TEXT_MODEL", "gemini-2.5-flash")
    FALLBACK_MODELS = _env_list(
        "FALLBACK_MODELS",
        ["gemini-2.5-flash-lite", "gemini-2.0-flash", "gemini-2.0-flash-lite"],
    )
    VISION_MODEL = os.getenv("VISION_MODEL", "gemini-2.5-flash")
    MAX_OUTPUT_TOKENS = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))
    TEMPERATURE = _env_float("TEMPERATURE", 0.7)

    # Uploads
    MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB max per uploaded file
    MAX_FILES = int(os.getenv("MAX_FILES", "10"))
    # Whole request body: every file at the cap plus room for form fields
    MAX_CONTENT_LENGTH = MAX_FILE_SIZE * MAX_FILES + 1024 * 1024
    MAX_FORM_MEMORY_SIZE = MAX_FILE_SIZE

    # Search
    SEARCH_URL = os.getenv("SEARCH_URL", "https://api.duckduckgo.com/")
    SEARCH_TIMEOUT = _env_float("SEARCH_TIMEOUT", None)

    # Telemetry (empty string disables it)
    TELEMETRY_PATH = os.getenv("TELEMETRY_PATH", "telemetry.jsonl")

    PORT = int(os.getenv("PORT", "5000"))
    DEBUG = os.getenv("FLASK_DEBUG", "true").lower() == "true"
