"""
StudyPal - Completion Client
Gemini chat completions with a linear model fallback chain, plus a
single-shot vision call for reading images
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import google.generativeai as genai

# Message roles accepted from callers, mapped onto Gemini's roles
ROLE_MAP = {
    "user": "user",
    "assistant": "model",
}

DEFAULT_IMAGE_MIME = "image/png"


class GenerationError(Exception):
    """Every model in the fallback chain failed."""


class VisionError(Exception):
    """The vision model could not process an image."""


@dataclass
class Completion:
    text: str
    model: str
    attempts: int = 1


def to_gemini_contents(messages: List[Dict[str, str]]) -> Tuple[str, List[Dict]]:
    """
    Split an OpenAI-style message list into a system instruction and
    Gemini contents.

    :param messages: [{"role": "system"|"user"|"assistant", "content": str}, ...]
    :return: (system_instruction, contents)
    """
    system_parts = []
    contents = []

    for message in messages:
        if not isinstance(message, dict):
            raise ValueError(f"Message must be a dict, got {type(message).__name__}")

        role = message.get("role")
        content = message.get("content")
        if not isinstance(content, str):
            raise ValueError(f"Message content must be a string (role={role!r})")

        if role == "system":
            system_parts.append(content)
        elif role in ROLE_MAP:
            contents.append({"role": ROLE_MAP[role], "parts": [content]})
        else:
            raise ValueError(f"Unsupported message role: {role!r}")

    if not contents:
        raise ValueError("At least one user or assistant message is required")

    return "\n\n".join(system_parts), contents


def _response_text(response) -> str:
    # .text raises ValueError when the candidate was blocked or has no parts
    text = response.text
    if not text or not text.strip():
        raise ValueError("Empty response from model")
    return text


class CompletionClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        text_model: str = "gemini-2.5-flash",
        fallback_models: Optional[List[str]] = None,
        vision_model: str = "gemini-2.5-flash",
        max_output_tokens: int = 2048,
        temperature: float = 0.7,
        model_factory=None,
    ) -> None:
        """
        Init the completion client.

        :param api_key: Gemini API key. When missing, calls fail and are
            surfaced through the normal error path.
        :param text_model: Primary text model, tried first.
        :param fallback_models: Models tried in order after the primary fails.
        :param vision_model: Model used for image transcription (no fallback).
        :param model_factory: Callable building a model object from a name;
            defaults to genai.GenerativeModel.
        """
        if api_key:
            genai.configure(api_key=api_key)

        self.text_model = text_model
        self.fallback_models = list(fallback_models or [])
        self.vision_model = vision_model
        self.generation_config = {
            "max_output_tokens": max_output_tokens,
            "temperature": temperature,
        }
        self.model_factory = model_factory or genai.GenerativeModel

    @classmethod
    def from_config(cls, config, model_factory=None) -> "CompletionClient":
        return cls(
            api_key=config.get("GEMINI_API_KEY"),
            text_model=config.get("TEXT_MODEL", "gemini-2.5-flash"),
            fallback_models=config.get("FALLBACK_MODELS"),
            vision_model=config.get("VISION_MODEL", "gemini-2.5-flash"),
            max_output_tokens=config.get("MAX_OUTPUT_TOKENS", 2048),
            temperature=config.get("TEMPERATURE", 0.7),
            model_factory=model_factory,
        )

    @property
    def models(self) -> List[str]:
        """Primary model followed by the fallbacks, in try order."""
        return [name for name in [self.text_model] + self.fallback_models if name]

    def complete(self, system_prompt: str, user_message: str) -> Completion:
        """Single-turn completion."""
        return self.complete_messages([
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ])

    def complete_messages(self, messages: List[Dict[str, str]]) -> Completion:
        """
        Multi-turn completion over a full message list.

        Models are tried once each, in order; the first success wins.
        Raises GenerationError carrying the last failure when all fail.
        """
        system_prompt, contents = to_gemini_contents(messages)

        last_error = None
        for attempt, model_name in enumerate(self.models, start=1):
            try:
                print(f"Using model: {model_name} with {len(contents)} messages")
                model = self.model_factory(
                    model_name,
                    system_instruction=system_prompt or None,
                )
                response = model.generate_content(
                    contents,
                    generation_config=self.generation_config,
                )
                return Completion(_response_text(response), model_name, attempt)
            except Exception as e:
                print(f"Model {model_name} failed: {e}")
                last_error = e
                if attempt < len(self.models):
                    print("Trying fallback model...")

        if last_error is None:
            raise GenerationError("AI generation failed: no models configured")
        raise GenerationError(f"AI generation failed: {last_error}") from last_error

    def describe_image(self, image_bytes: bytes, prompt: str, mime_type: Optional[str] = None) -> Completion:
        """
        Ask the vision model about an image. One attempt only; any failure
        is raised as VisionError.
        """
        try:
            model = self.model_factory(self.vision_model)
            response = model.generate_content(
                [prompt, {"mime_type": mime_type or DEFAULT_IMAGE_MIME, "data": image_bytes}],
                generation_config=self.generation_config,
            )
            return Completion(_response_text(response), self.vision_model, 1)
        except Exception as e:
            print(f"Vision API error: {e}")
            raise VisionError(f"Vision processing failed: {e}") from e
