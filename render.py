"""
StudyPal - Rendering
Pure functions that turn generated study material into HTML fragments.
Used by the API responses (the page injects them) and by the Python client.
"""

import re
from typing import Dict, List, Optional

from jinja2 import Environment
from markupsafe import Markup, escape

_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)

NO_RESULTS_MESSAGE = 'No results found for "{query}". Try a different search term or ask the AI chatbot above!'
SERVER_UNREACHABLE_MESSAGE = "Failed to generate content. Make sure the server is running."
THINKING_MESSAGE = "Thinking..."

# --- Markdown subset ---

CODE_BLOCK_RE = re.compile(r"```(?:[\w+-]*\n)?([\s\S]*?)```")
INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
PLACEHOLDER_RE = re.compile(r"\x00([BC])(\d+)\x00")
HEADER_RE = re.compile(r"^(#{1,3}) (.*)$")
UL_ITEM_RE = re.compile(r"^[-*] (.*)$")
OL_ITEM_RE = re.compile(r"^\d+\. (.*)$")
BOLD_RE = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
ITALIC_RE = re.compile(r"\*(.+?)\*|(?<!\w)_(.+?)_(?!\w)")


def _either(match) -> str:
    return match.group(1) if match.group(1) is not None else match.group(2)


def _inline(text: str) -> str:
    text = BOLD_RE.sub(lambda m: f"<strong>{_either(m)}</strong>", text)
    return ITALIC_RE.sub(lambda m: f"<em>{_either(m)}</em>", text)


def markdown_to_html(text: Optional[str], heading_offset: int = 0) -> Markup:
    """
    Convert a small markdown subset to HTML.

    The input is HTML-escaped before any substitution. Code spans and
    blocks are set aside first so nothing inside them is formatted.
    Consecutive list items of the same kind share one <ul>/<ol>.

    :param heading_offset: Added to the header level ("#" is h1 at 0,
        h2 at 1). Chat bubbles render one level smaller than summaries.
    """
    if not text:
        return Markup("")

    source = str(escape(text.replace("\x00", ""))).replace("\r\n", "\n")
    stash = {"B": [], "C": []}

    def stash_block(match):
        code = match.group(1).strip("\n")
        stash["B"].append(f"<pre><code>{code}</code></pre>")
        return f"\n\x00B{len(stash['B']) - 1}\x00\n"

    def stash_inline(match):
        stash["C"].append(f"<code>{match.group(1)}</code>")
        return f"\x00C{len(stash['C']) - 1}\x00"

    source = CODE_BLOCK_RE.sub(stash_block, source)
    source = INLINE_CODE_RE.sub(stash_inline, source)

    out = []
    paragraph = []
    list_items = []
    list_tag = None

    def flush_paragraph():
        if paragraph:
            out.append("<p>" + "<br>".join(paragraph) + "</p>")
            paragraph.clear()

    def flush_list():
        nonlocal list_tag
        if list_items:
            items = "".join(f"<li>{item}</li>" for item in list_items)
            out.append(f"<{list_tag}>{items}</{list_tag}>")
            list_items.clear()
        list_tag = None

    for line in source.split("\n"):
        stripped = line.strip()
        if not stripped:
            flush_paragraph()
            flush_list()
            continue

        if PLACEHOLDER_RE.fullmatch(stripped) and stripped.startswith("\x00B"):
            flush_paragraph()
            flush_list()
            out.append(stripped)
            continue

        header = HEADER_RE.match(stripped)
        if header:
            flush_paragraph()
            flush_list()
            level = min(len(header.group(1)) + heading_offset, 6)
            out.append(f"<h{level}>{_inline(header.group(2))}</h{level}>")
            continue

        item = UL_ITEM_RE.match(stripped)
        tag = "ul"
        if not item:
            item = OL_ITEM_RE.match(stripped)
            tag = "ol"
        if item:
            flush_paragraph()
            if list_tag != tag:
                flush_list()
                list_tag = tag
            list_items.append(_inline(item.group(1)))
            continue

        flush_list()
        paragraph.append(_inline(stripped))

    flush_paragraph()
    flush_list()

    html = "".join(out)
    html = PLACEHOLDER_RE.sub(lambda m: stash[m.group(1)][int(m.group(2))], html)
    return Markup(html)


# --- Quiz answer logic ---

LABEL_RE = re.compile(r"^\s*([A-Za-z])\s*(?:[).:]|\s|$)")


def normalize_label(correct) -> Optional[str]:
    """'A', 'a', 'B) Paris', 'C.' -> single upper-case letter, else None."""
    if correct is None:
        return None
    match = LABEL_RE.match(str(correct))
    return match.group(1).upper() if match else None


def correct_option_index(options: List, correct) -> Optional[int]:
    """
    Index of the option matching the stored correct label.

    Options prefixed with their letter ("B) ...", "B. ...", "B ...") are
    matched by prefix; otherwise the letter's position is used. A label
    that is not a letter is compared against the option texts.
    """
    label = normalize_label(correct)
    if label is None:
        wanted = str(correct).strip() if correct is not None else ""
        for index, option in enumerate(options):
            if wanted and str(option).strip() == wanted:
                return index
        return None

    for index, option in enumerate(options):
        text = str(option).lstrip()
        if text[:1].upper() == label and text[1:2] in ("", ")", ".", ":", " "):
            return index

    index = ord(label) - ord("A")
    if 0 <= index < len(options):
        return index
    return None


def select_quiz_option(question: Dict, selected_index: int) -> Dict:
    """
    State of a question after the student clicks an option.

    Every option is locked, the correct one is marked, the selected one is
    marked incorrect when it is wrong, and the explanation is revealed
    only if there is one.
    """
    options = question.get("options") or []
    if not 0 <= selected_index < len(options):
        raise ValueError(f"Option {selected_index} does not exist")

    correct_index = correct_option_index(options, question.get("correct"))
    states = [
        {
            "text": str(option),
            "disabled": True,
            "selected": index == selected_index,
            "correct": index == correct_index,
            "incorrect": index == selected_index and index != correct_index,
        }
        for index, option in enumerate(options)
    ]
    explanation = question.get("explanation")
    return {
        "options": states,
        "is_correct": selected_index == correct_index,
        "show_explanation": bool(explanation and str(explanation).strip()),
    }


# --- Fragments ---

FLASHCARDS_TEMPLATE = _env.from_string("""\
<div class="flashcards-grid">
{% for card in cards %}
  <div class="flashcard" onclick="this.classList.toggle('flipped')">
    <div class="flashcard-inner">
      <div class="flashcard-front">
        <div class="flashcard-label">Question {{ loop.index }}</div>
        <div class="flashcard-content">{{ card.question }}</div>
        <div class="flashcard-hint">Click to flip</div>
      </div>
      <div class="flashcard-back">
        <div class="flashcard-label">Answer</div>
        <div class="flashcard-content">{{ card.answer }}</div>
      </div>
    </div>
  </div>
{% endfor %}
</div>
""")

QUIZ_TEMPLATE = _env.from_string("""\
<div class="quiz-container">
{% for q in questions %}
  <div class="quiz-question" data-correct-index="{{ q.correct_index }}">
    <div class="quiz-question-number">Question {{ loop.index }}</div>
    <div class="quiz-question-text">{{ q.question }}</div>
    <div class="quiz-options">
    {% for option in q.options %}
      <button class="quiz-option" data-index="{{ loop.index0 }}" onclick="handleQuizAnswer(this)">{{ option }}</button>
    {% endfor %}
    </div>
    <div class="quiz-explanation">{{ q.explanation }}</div>
  </div>
{% endfor %}
</div>
""")

SUMMARY_TEMPLATE = _env.from_string("""\
<div class="summary-container">{{ body }}</div>
""")

CHAT_MESSAGE_TEMPLATE = _env.from_string("""\
<div class="chat-message {{ 'user' if is_user else 'assistant' }}"{% if element_id %} id="{{ element_id }}"{% endif %}>
  <div class="message-avatar">{{ '👤' if is_user else '🤖' }}</div>
  <div class="message-content">{{ body }}</div>
</div>
""")

SEARCH_TEMPLATE = _env.from_string("""\
{% if ai_summary %}
<div class="search-result-item ai-summary">
  <div class="search-result-title"><span>🤖</span> AI Summary</div>
  <div class="search-result-text">{{ ai_summary }}</div>
</div>
{% endif %}
{% if result.abstract %}
<div class="search-result-item">
  <div class="search-result-title">📚 {{ result.abstractSource or result.query }}</div>
  <div class="search-result-text">{{ result.abstract }}</div>
  {% if result.abstractUrl %}<a href="{{ result.abstractUrl }}" target="_blank" rel="noopener" class="search-result-link">Read more →</a>{% endif %}
</div>
{% endif %}
{% if result.definition %}
<div class="search-result-item">
  <div class="search-result-title">📖 Definition</div>
  <div class="search-result-text">{{ result.definition }}</div>
</div>
{% endif %}
{% if result.answer %}
<div class="search-result-item">
  <div class="search-result-title">💡 Quick Answer</div>
  <div class="search-result-text">{{ result.answer }}</div>
</div>
{% endif %}
{% if result.relatedTopics %}
<div class="search-result-item">
  <div class="search-result-title">🔗 Related Topics</div>
  {% for topic in result.relatedTopics %}
  <div class="search-result-text related-topic">{{ topic.text }}</div>
  {% if topic.url %}<a href="{{ topic.url }}" target="_blank" rel="noopener" class="search-result-link">Learn more →</a>{% endif %}
  {% endfor %}
</div>
{% endif %}
""")

NOTICE_TEMPLATE = _env.from_string("""\
<div class="search-result-item"><div class="search-result-text">{{ message }}</div></div>
""")

ERROR_TEMPLATE = _env.from_string("""\
<div class="results-error"><p>❌ {{ message }}</p></div>
""")

LOADING_TEMPLATE = _env.from_string("""\
<div class="results-loading"><div class="loading-spinner"></div><p class="loading-text">{{ message }}</p></div>
""")


def _field(item, name: str) -> str:
    value = item.get(name) if isinstance(item, dict) else None
    return "" if value is None else str(value)


def render_error(message: str) -> str:
    return ERROR_TEMPLATE.render(message=message)


def render_notice(message: str) -> str:
    return NOTICE_TEMPLATE.render(message=message)


def render_loading(message: str = "Processing...") -> str:
    return LOADING_TEMPLATE.render(message=message)


def render_flashcards(flashcards: Optional[List]) -> str:
    if not flashcards:
        return render_error("No flashcards generated")
    cards = [
        {"question": _field(card, "question") if isinstance(card, dict) else str(card),
         "answer": _field(card, "answer")}
        for card in flashcards
    ]
    return FLASHCARDS_TEMPLATE.render(cards=cards)


def render_quiz(quiz: Optional[List]) -> str:
    if not quiz:
        return render_error("No quiz generated")
    questions = []
    for item in quiz:
        if not isinstance(item, dict):
            item = {"question": str(item)}
        options = item.get("options") if isinstance(item.get("options"), list) else []
        index = correct_option_index(options, item.get("correct"))
        questions.append({
            "question": _field(item, "question"),
            "options": [str(option) for option in options],
            "correct_index": -1 if index is None else index,
            "explanation": _field(item, "explanation"),
        })
    return QUIZ_TEMPLATE.render(questions=questions)


def render_summary(summary: Optional[str]) -> str:
    if not summary:
        return render_error("No summary generated")
    return SUMMARY_TEMPLATE.render(body=markdown_to_html(summary))


def render_chat_message(content: str, is_user: bool = False, element_id: Optional[str] = None) -> str:
    """User text is shown verbatim (escaped); assistant replies go through markdown."""
    if is_user:
        body = Markup("<br>".join(str(escape(line)) for line in (content or "").split("\n")))
    else:
        body = markdown_to_html(content, heading_offset=1)
    return CHAT_MESSAGE_TEMPLATE.render(body=body, is_user=is_user, element_id=element_id)


def render_thinking() -> str:
    return CHAT_MESSAGE_TEMPLATE.render(body=THINKING_MESSAGE, is_user=False, element_id="typing-indicator")


def render_search_results(result: Optional[Dict], query: str = "") -> str:
    """Search blocks in fixed order; a literal no-results notice when empty."""
    result = result or {}
    query = result.get("query") or query

    has_content = any(
        result.get(key) for key in ("aiSummary", "abstract", "definition", "answer", "relatedTopics")
    )
    if not has_content:
        return render_notice(NO_RESULTS_MESSAGE.format(query=query))

    return SEARCH_TEMPLATE.render(
        result=dict(result, query=query),
        ai_summary=markdown_to_html(result.get("aiSummary"), heading_offset=1),
    )


def render_result(mode: str, payload: Dict) -> str:
    """Dispatch on study mode: flashcards, summary or quiz."""
    if mode == "flashcards":
        return render_flashcards(payload.get("flashcards"))
    if mode == "summary":
        return render_summary(payload.get("summary"))
    if mode == "quiz":
        return render_quiz(payload.get("quiz"))
    raise ValueError(f"Unknown mode: {mode}")
