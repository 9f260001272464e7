import pytest

from completion import CompletionClient


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    def __init__(self, factory, name, kwargs):
        self.factory = factory
        self.name = name
        self.kwargs = kwargs

    def generate_content(self, contents, generation_config=None):
        self.factory.calls.append({
            "model": self.name,
            "system_instruction": self.kwargs.get("system_instruction"),
            "contents": contents,
            "generation_config": generation_config,
        })
        reply = self.factory.replies.get(self.name, self.factory.default)
        if isinstance(reply, Exception):
            raise reply
        return FakeResponse(reply)


class FakeModelFactory:
    """
    Stands in for genai.GenerativeModel. `replies` maps a model name to
    the text it returns, or to an exception it raises.
    """

    def __init__(self, replies=None, default="ok"):
        self.replies = dict(replies or {})
        self.default = default
        self.calls = []

    def __call__(self, model_name, **kwargs):
        return FakeModel(self, model_name, kwargs)

    @property
    def models_called(self):
        return [call["model"] for call in self.calls]


@pytest.fixture
def factory():
    return FakeModelFactory()


@pytest.fixture
def client(factory):
    return CompletionClient(
        text_model="primary",
        fallback_models=["fallback-1", "fallback-2"],
        vision_model="vision",
        model_factory=factory,
    )


@pytest.fixture
def study(client):
    from generator import StudyGenerator

    return StudyGenerator(client, search_url="https://search.test/")


@pytest.fixture
def web(monkeypatch, tmp_path, study):
    """Flask test client wired to the fake models, telemetry in tmp_path."""
    import app as app_module

    monkeypatch.setattr(app_module, "generator", study)
    monkeypatch.setitem(app_module.app.config, "TELEMETRY_PATH", str(tmp_path / "telemetry.jsonl"))
    monkeypatch.setitem(app_module.app.config, "TESTING", True)
    return app_module.app.test_client()
