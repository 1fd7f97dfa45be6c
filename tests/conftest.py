"""Shared test fixtures for all test modules."""

import pytest

from promptweave.services.draft_store import DraftStore
from promptweave.services.prompt_store import PromptStore
from promptweave.session import EditorSession


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """
    Point HOME (and therefore config, data and log paths) into tmp_path.

    Also clears PROMPTWEAVE_* overrides so a developer's environment never
    leaks into the tests.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in ("PROMPTWEAVE_DATA_DIR", "PROMPTWEAVE_DRAFT_HISTORY_LIMIT", "PROMPTWEAVE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def prompt_store(tmp_path):
    return PromptStore(tmp_path / "data" / "prompts.json")


@pytest.fixture
def draft_store(tmp_path):
    return DraftStore(tmp_path / "data" / "drafts.json")


@pytest.fixture
def greeting(prompt_store):
    """Saved prompt used by most session tests."""
    return prompt_store.create("Greeting", "Hi there", tags=["social"])


@pytest.fixture
def session(prompt_store, draft_store):
    return EditorSession(prompt_store, draft_store)
