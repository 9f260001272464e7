"""
StudyPal - Content Generation Service
Turns uploaded study material into flashcards, summaries and quizzes,
answers chat messages and enriches web searches
"""

from collections import namedtuple
from typing import Dict, List, Optional, Tuple

from completion import Completion, CompletionClient, GenerationError
from search import DEFAULT_SEARCH_URL, build_search_context, build_search_result, fetch_instant_answer
from utils import decode_text, extract_json_array, extract_pdf_text, is_image, is_pdf, is_text_file

# An uploaded file, independent of the web framework
Attachment = namedtuple("Attachment", ["filename", "mime_type", "data"])

FLASHCARD_FALLBACK_CHARS = 500
QUIZ_FALLBACK_CHARS = 200
MAX_CHAT_HISTORY = 8

IMAGE_TEXT_PROMPT = "Extract all text from this image. Return only the text content."

FLASHCARDS_PROMPT = """You are an expert educational content creator. Generate flashcards from the provided text.

Rules:
1. Create 5-10 flashcards based on the key concepts
2. Each flashcard should have a clear question and concise answer
3. Focus on the most important information

Output format (JSON array):
[
  {"question": "What is...?", "answer": "..."},
  {"question": "How does...?", "answer": "..."}
]

Return ONLY the JSON array, no other text."""

SUMMARY_PROMPT = """You are an expert summarizer. Create a clear, concise summary.

Rules:
1. Capture the main ideas and key points
2. Keep the summary to 3-5 paragraphs
3. Use bullet points for key takeaways

Format:
## Summary
[Your summary]

## Key Takeaways
- Point 1
- Point 2
- Point 3"""

QUIZ_PROMPT = """You are an expert quiz creator. Generate a quiz from the provided text.

Rules:
1. Create exactly 5 multiple choice questions
2. Each question should have 4 options (A, B, C, D)
3. Include the letter of the correct answer
4. Add a brief explanation where it helps

Output format (JSON array):
[
  {
    "question": "What is...?",
    "options": ["A) Option 1", "B) Option 2", "C) Option 3", "D) Option 4"],
    "correct": "A",
    "explanation": "Brief explanation"
  }
]

Return ONLY the JSON array."""

CHAT_PROMPT = """You are StudyPal, a helpful AI study buddy. You help students learn and understand their study materials.

{context}Be friendly, encouraging, and educational. Keep responses concise but helpful. Use plain text without markdown formatting - avoid using asterisks (*), hashtags (#), or other markdown symbols."""

SEARCH_PROMPT = (
    "You are a helpful research assistant. Based on the search results provided, "
    "give a clear, educational answer to the user's question. Be concise but informative. "
    "If the information is incomplete, say so."
)

SEARCH_USER_TEMPLATE = """User searched for: "{query}"

Search results:
{context}
Provide a helpful, well-organized answer based on this information."""


class NoContentError(ValueError):
    """Nothing usable was found in the request's text or files."""


def flashcards_fallback(raw: str) -> List[Dict]:
    return [{"question": "Generated content", "answer": raw[:FLASHCARD_FALLBACK_CHARS]}]


def quiz_fallback(raw: str) -> List[Dict]:
    return [{
        "question": "Generated content",
        "options": ["A) See details"],
        "correct": "A",
        "explanation": raw[:QUIZ_FALLBACK_CHARS],
    }]


def _records(raw: str) -> Optional[List[Dict]]:
    """Extracted array, only if every item is an object."""
    items = extract_json_array(raw)
    if items is None or not all(isinstance(item, dict) for item in items):
        return None
    return items


def parse_flashcards(raw: str) -> List:
    items = _records(raw)
    return items if items is not None else flashcards_fallback(raw)


def parse_quiz(raw: str) -> List:
    items = _records(raw)
    return items if items is not None else quiz_fallback(raw)


def clean_history(history) -> List[Dict[str, str]]:
    """Keep well-formed user/assistant turns, most recent MAX_CHAT_HISTORY."""
    if not isinstance(history, list):
        return []
    cleaned = [
        {"role": turn["role"], "content": turn["content"]}
        for turn in history
        if isinstance(turn, dict)
        and turn.get("role") in ("user", "assistant")
        and isinstance(turn.get("content"), str)
    ]
    return cleaned[-MAX_CHAT_HISTORY:]


def build_chat_prompt(context: Optional[str]) -> str:
    block = ""
    if isinstance(context, str) and context.strip():
        block = f"Context from uploaded documents:\n{context}\n\n"
    return CHAT_PROMPT.format(context=block)


class StudyGenerator:
    def __init__(
        self,
        client: CompletionClient,
        search_url: str = DEFAULT_SEARCH_URL,
        search_timeout: Optional[float] = None,
    ) -> None:
        self.client = client
        self.search_url = search_url
        self.search_timeout = search_timeout

    # Input extraction
    def extract_text_content(self, text: Optional[str], attachments: List[Attachment]) -> str:
        """
        Collect study text from the form field and every attachment.

        Images go through the vision model, PDFs through PyPDF2 and text
        files are decoded as UTF-8. Raises NoContentError when the result
        is blank.
        """
        parts = []
        if text and text.strip():
            parts.append(text.strip())

        for attachment in attachments:
            if is_image(attachment.mime_type):
                result = self.client.describe_image(attachment.data, IMAGE_TEXT_PROMPT, attachment.mime_type)
                parts.append(result.text)
            elif is_pdf(attachment.mime_type, attachment.filename):
                parts.append(extract_pdf_text(attachment.data))
            elif is_text_file(attachment.mime_type, attachment.filename):
                parts.append(decode_text(attachment.data))
            else:
                print(f"Skipping unsupported file: {attachment.filename} ({attachment.mime_type})")

        content = "\n\n".join(part.strip() for part in parts if part and part.strip())
        if not content:
            raise NoContentError("No text content provided")
        return content

    # Tasks
    def generate_flashcards(self, content: str) -> Tuple[List, Completion]:
        completion = self.client.complete(FLASHCARDS_PROMPT, content)
        return parse_flashcards(completion.text), completion

    def summarize(self, content: str) -> Tuple[str, Completion]:
        completion = self.client.complete(SUMMARY_PROMPT, content)
        return completion.text, completion

    def generate_quiz(self, content: str) -> Tuple[List, Completion]:
        completion = self.client.complete(QUIZ_PROMPT, content)
        return parse_quiz(completion.text), completion

    def chat(self, message: str, context: Optional[str] = None, history=None) -> Tuple[str, Completion]:
        messages = [{"role": "system", "content": build_chat_prompt(context)}]
        messages += clean_history(history)
        messages.append({"role": "user", "content": message})

        completion = self.client.complete_messages(messages)
        return completion.text, completion

    def search(self, query: str) -> Tuple[Dict, Optional[Completion]]:
        """
        Instant-answer lookup plus an AI-written answer when there is
        anything to summarize. The AI step is best-effort: on failure the
        result simply has no aiSummary.
        """
        data = fetch_instant_answer(query, self.search_url, self.search_timeout)
        context = build_search_context(data)

        ai_summary = None
        completion = None
        if context.strip():
            try:
                completion = self.client.complete(
                    SEARCH_PROMPT,
                    SEARCH_USER_TEMPLATE.format(query=query, context=context),
                )
                ai_summary = completion.text
            except GenerationError as e:
                print(f"AI enhancement failed: {e}")

        return build_search_result(query, data, ai_summary), completion
