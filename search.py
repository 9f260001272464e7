"""
StudyPal - Instant-answer search
Thin wrapper around the DuckDuckGo instant-answer API
"""

from typing import Dict, List, Optional

import requests

DEFAULT_SEARCH_URL = "https://api.duckduckgo.com/"
USER_AGENT = "studypal/0.1"
MAX_RELATED_TOPICS = 5


class SearchError(Exception):
    """The instant-answer API could not be reached or returned garbage."""


def fetch_instant_answer(query: str, url: str = DEFAULT_SEARCH_URL, timeout: Optional[float] = None) -> Dict:
    """Query the instant-answer API and return its decoded JSON payload."""
    params = {
        "q": query,
        "format": "json",
        "no_html": "1",
        "skip_disambig": "1",
    }
    try:
        response = requests.get(url, params=params, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise SearchError(f"Search failed: {e}") from e

    if not isinstance(data, dict):
        raise SearchError("Search failed: unexpected response format")
    return data


def _text(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def related_topics(data: Dict) -> List[Dict[str, Optional[str]]]:
    """First few related topics that carry text, as {text, url}."""
    topics = data.get("RelatedTopics") or []
    out = []
    for topic in topics[:MAX_RELATED_TOPICS]:
        if not isinstance(topic, dict):
            continue
        text = _text(topic.get("Text"))
        if text:
            out.append({"text": text, "url": _text(topic.get("FirstURL"))})
    return out


def build_search_context(data: Dict) -> str:
    """Flatten the useful parts of a payload into prompt context."""
    context = ""

    if _text(data.get("Abstract")):
        context += f"Main Info: {data['Abstract']}\n"
    if _text(data.get("Definition")):
        context += f"Definition: {data['Definition']}\n"
    if _text(data.get("Answer")):
        context += f"Answer: {data['Answer']}\n"

    topics = "\n".join(topic["text"] for topic in related_topics(data))
    if topics:
        context += f"Related Information:\n{topics}\n"

    return context


def build_search_result(query: str, data: Dict, ai_summary: Optional[str] = None) -> Dict:
    return {
        "query": query,
        "aiSummary": ai_summary,
        "abstract": _text(data.get("Abstract")),
        "abstractSource": _text(data.get("AbstractSource")),
        "abstractUrl": _text(data.get("AbstractURL")),
        "definition": _text(data.get("Definition")),
        "answer": _text(data.get("Answer")),
        "relatedTopics": related_topics(data),
    }
