"""Shared fixtures: keep every test away from the real ~/.config and API keys."""

import pytest

_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_ENGINE",
    "LLM_EXPLAIN_API_KEY",
    "LLM_EXPLAIN_ENGINE",
    "LLM_EXPLAIN_MAX_TOKENS",
    "LLM_EXPLAIN_TEMPERATURE",
    "LLM_EXPLAIN_TOP_P",
    "LLM_EXPLAIN_SESSION_LOG",
    "LLM_EXPLAIN_PROMPT_STYLE",
    "LLM_EXPLAIN_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp dir and clear llm-explain env vars."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "llm-explain"


class FakeResponse:
    def __init__(self, text):
        self._text = text

    def text(self):
        return self._text


class FakeModel:
    """Stands in for an llm.Model; records every prompt call."""

    model_id = "fake-model"

    def __init__(self, reply="  Permission denied means...  ", error=None):
        self.key = None
        self.reply = reply
        self.error = error
        self.calls = []

    def prompt(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.error:
            raise self.error
        return FakeResponse(self.reply)


@pytest.fixture
def fake_model(monkeypatch):
    """Replace llm.get_model with one returning a FakeModel."""
    import llm

    model = FakeModel()
    requested = []

    def get_model(name=None):
        requested.append(name)
        return model

    monkeypatch.setattr(llm, "get_model", get_model)
    model.requested = requested
    return model
