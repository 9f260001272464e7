import io
import json

import app as app_module
import generator
from search import SearchError


def read_telemetry():
    path = app_module.app.config["TELEMETRY_PATH"]
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


def test_home_serves_page(web):
    response = web.get("/")

    assert response.status_code == 200
    assert b"StudyPal" in response.data


def test_health(web):
    data = web.get("/health").get_json()

    assert data["status"] == "ok"
    assert isinstance(data["tokenConfigured"], bool)
    assert set(data["models"]) == {"text", "vision"}
    assert data["timestamp"]


def test_flashcards_from_text(web, factory):
    factory.default = '[{"question": "What makes ATP?", "answer": "Mitochondria"}]'

    response = web.post("/generate-flashcards", data={"text": "Mitochondria make ATP."})

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["flashcards"] == [{"question": "What makes ATP?", "answer": "Mitochondria"}]
    assert "flashcards-grid" in data["html"]


def test_summary_from_uploaded_text_file(web, factory):
    factory.default = "## Summary\nCells."

    response = web.post(
        "/summarize",
        data={"file": (io.BytesIO(b"Cells are the unit of life."), "notes.txt", "text/plain")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    assert response.get_json()["summary"] == "## Summary\nCells."
    assert factory.calls[0]["contents"] == [{"role": "user", "parts": ["Cells are the unit of life."]}]


def test_quiz_from_image_goes_through_vision(web, factory):
    factory.replies["vision"] = "Photosynthesis happens in chloroplasts."
    factory.default = "no json"

    response = web.post(
        "/generate-quiz",
        data={"file": (io.BytesIO(b"\x89PNG"), "board.png", "image/png")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    assert factory.models_called == ["vision", "primary"]
    assert response.get_json()["quiz"][0]["question"] == "Generated content"


def test_generation_without_content_is_400(web, factory):
    response = web.post("/generate-quiz", data={"text": "   "})

    assert response.status_code == 400
    assert response.get_json() == {"error": "No text content provided"}
    assert factory.calls == []


def test_generation_failure_is_500(web, factory):
    factory.default = RuntimeError("quota exceeded")

    response = web.post("/summarize", data={"text": "notes"})

    assert response.status_code == 500
    assert "quota exceeded" in response.get_json()["error"]
    assert factory.models_called == ["primary", "fallback-1", "fallback-2"]


def test_vision_failure_is_500(web, factory):
    factory.replies["vision"] = RuntimeError("unreadable")

    response = web.post(
        "/generate-flashcards",
        data={"file": (io.BytesIO(b"\x89PNG"), "board.png", "image/png")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 500
    assert response.get_json()["error"].startswith("Vision processing failed")


def test_telemetry_records_model_and_fallback(web, factory):
    factory.replies["primary"] = RuntimeError("busy")
    factory.default = "## Summary\nok"

    web.post("/summarize", data={"text": "notes"})

    entry = read_telemetry()[-1]
    assert entry["mode"] == "summary"
    assert entry["model"] == "fallback-1"
    assert entry["attempts"] == 2
    assert entry["input_chars"] == len("notes")
    assert entry["metadata"] == {"fallback_used": True}


def test_chat(web, factory):
    factory.default = "Chloroplasts."

    response = web.post("/chat", json={
        "message": "Where does photosynthesis happen?",
        "context": "Plant cell notes",
        "history": [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}],
    })

    data = response.get_json()
    assert response.status_code == 200
    assert data["success"] is True
    assert data["response"] == "Chloroplasts."
    assert "chat-message assistant" in data["html"]
    assert "Plant cell notes" in factory.calls[0]["system_instruction"]
    assert len(factory.calls[0]["contents"]) == 3


def test_chat_without_message_is_400(web):
    assert web.post("/chat", json={"context": "x"}).status_code == 400
    assert web.post("/chat", json=["not", "an", "object"]).status_code == 400
    response = web.post("/chat", data="not json", content_type="text/plain")
    assert response.status_code == 400
    assert response.get_json() == {"error": "No message provided"}


def test_chat_failure_is_500(web, factory):
    factory.default = RuntimeError("down")

    response = web.post("/chat", json={"message": "hello"})

    assert response.status_code == 500
    assert response.get_json()["success"] is False


def test_search(web, factory, monkeypatch):
    monkeypatch.setattr(generator, "fetch_instant_answer", lambda q, url, timeout: {"Abstract": "Plants make food."})
    factory.default = "Photosynthesis turns light into sugar."

    response = web.get("/search?q=%20photosynthesis%20")

    data = response.get_json()
    assert response.status_code == 200
    assert data["result"]["query"] == "photosynthesis"
    assert data["result"]["aiSummary"] == "Photosynthesis turns light into sugar."
    assert "AI Summary" in data["html"]


def test_search_without_query_is_400(web):
    response = web.get("/search?q=")

    assert response.status_code == 400
    assert response.get_json() == {"error": "No search query provided"}


def test_search_upstream_failure_is_502(web, monkeypatch):
    def boom(q, url, timeout):
        raise SearchError("Search failed: timed out")

    monkeypatch.setattr(generator, "fetch_instant_answer", boom)

    response = web.get("/search?q=atp")

    assert response.status_code == 502
    assert response.get_json() == {"success": False, "error": "Search failed: timed out"}


def test_request_over_total_cap_is_413(web, monkeypatch):
    monkeypatch.setitem(app_module.app.config, "MAX_CONTENT_LENGTH", 100)

    response = web.post("/summarize", data={"text": "x" * 500})

    assert response.status_code == 413
    assert response.get_json()["error"].startswith("Upload too large")


def test_default_request_cap_fits_several_full_size_files():
    config = app_module.app.config

    assert config["MAX_FILE_SIZE"] == 10 * 1024 * 1024
    assert config["MAX_CONTENT_LENGTH"] > 2 * config["MAX_FILE_SIZE"]


def test_files_each_under_the_limit_are_accepted(web, factory, monkeypatch):
    monkeypatch.setitem(app_module.app.config, "MAX_FILE_SIZE", 100)
    factory.default = "## Summary\nok"

    response = web.post(
        "/summarize",
        data={"file": [
            (io.BytesIO(b"a" * 80), "part1.txt", "text/plain"),
            (io.BytesIO(b"b" * 80), "part2.txt", "text/plain"),
        ]},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    assert factory.calls[0]["contents"][0]["parts"][0] == "a" * 80 + "\n\n" + "b" * 80


def test_single_file_over_the_limit_is_413(web, factory, monkeypatch):
    monkeypatch.setitem(app_module.app.config, "MAX_FILE_SIZE", 100)

    response = web.post(
        "/summarize",
        data={"file": (io.BytesIO(b"a" * 150), "big.txt", "text/plain")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 413
    assert response.get_json()["error"].startswith("File too large: big.txt.")
    assert factory.calls == []


def test_image_and_text_are_combined(web, factory):
    factory.replies["vision"] = "Board: four phases"
    factory.default = "## Summary\nok"

    response = web.post(
        "/summarize",
        data={
            "text": "Typed notes",
            "file": (io.BytesIO(b"\x89PNG"), "board.png", "image/png"),
        },
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    assert factory.calls[1]["contents"][0]["parts"][0] == "Typed notes\n\nBoard: four phases"


def test_unknown_route_is_json_404(web):
    response = web.get("/nope")

    assert response.status_code == 404
    assert "error" in response.get_json()
