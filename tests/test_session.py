import pytest

from session import MAX_HISTORY, StudySession, format_file_size


@pytest.mark.parametrize("size, label", [
    (0, "0 Bytes"),
    (500, "500 Bytes"),
    (1536, "1.5 KB"),
    (1024 * 1024, "1 MB"),
    (3 * 1024 ** 3, "3 GB"),
])
def test_format_file_size(size, label):
    assert format_file_size(size) == label


def test_add_and_remove_files():
    session = StudySession()
    first = session.add_file("notes.txt", b"abc", "text/plain")
    session.add_file("scan.png", b"png", "image/png")

    assert first.size == 3
    assert session.remove_file(first.id) is True
    assert session.remove_file(first.id) is False
    assert [f.name for f in session.files] == ["scan.png"]


def test_mode_and_endpoint():
    session = StudySession(mode="quiz")
    assert session.endpoint == "/generate-quiz"

    session.set_mode("summary")
    assert session.endpoint == "/summarize"

    with pytest.raises(ValueError):
        session.set_mode("essay")


def test_generation_payload_splits_text_and_files():
    session = StudySession()
    session.add_file("a.txt", b"Alpha notes", "text/plain")
    session.add_file("b.md", b"Beta notes", "")
    session.add_file("board.png", b"\x89PNG", "image/png")
    session.add_file("book.pdf", b"%PDF", "application/pdf")
    session.add_file("data.zip", b"PK", "application/zip")

    data, files = session.build_generation_payload()

    assert data == {"text": "Alpha notes\n\nBeta notes\n\n"}
    assert session.document_context == "Alpha notes\n\nBeta notes\n\n"
    assert files == [
        ("file", ("board.png", b"\x89PNG", "image/png")),
        ("file", ("book.pdf", b"%PDF", "application/pdf")),
    ]


def test_images_only_payload_keeps_previous_context():
    session = StudySession()
    session.document_context = "earlier notes"
    session.add_file("board.png", b"\x89PNG", "image/png")

    data, files = session.build_generation_payload()

    assert data == {}
    assert len(files) == 1
    assert session.document_context == "earlier notes"


def test_history_is_capped():
    session = StudySession()
    for i in range(MAX_HISTORY + 2):
        session.add_message("user" if i % 2 == 0 else "assistant", f"m{i}")

    assert len(session.history) == MAX_HISTORY
    assert session.history[0]["content"] == "m2"
    assert session.history[-1]["content"] == f"m{MAX_HISTORY + 1}"


def test_bad_role_rejected():
    with pytest.raises(ValueError):
        StudySession().add_message("system", "nope")


def test_chat_payload_excludes_pending_message():
    session = StudySession()
    session.document_context = "Osmosis notes"
    session.add_message("user", "hi")
    session.add_message("assistant", "hello")
    session.add_message("user", "What is osmosis?")

    payload = session.build_chat_payload("What is osmosis?")

    assert payload == {
        "message": "What is osmosis?",
        "context": "Osmosis notes",
        "history": [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ],
    }
