"""Shared test fixtures for pytest.

Env defaults are set before anything from ``studyhub`` is imported, so the
settings singleton and the database engine pick up a throwaway SQLite file
and a dummy provider key instead of whatever a local .env holds.
"""

import os
import tempfile
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient


_DB_DIR = tempfile.mkdtemp(prefix="studyhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/studyhub-test.db"
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("AI_PROXY_URL", "http://proxy.test/api/gemini")

from studyhub.db import Base, SessionLocal, engine  # noqa: E402
from studyhub.main import app  # noqa: E402
from studyhub.prompts import (  # noqa: E402
    FLASHCARDS_SYSTEM_PROMPT,
    STUDY_PLAN_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
)
from studyhub.schemas import GenerationKind, ProxyRequest  # noqa: E402


_KIND_BY_SYSTEM_PROMPT = {
    SUMMARY_SYSTEM_PROMPT: GenerationKind.SUMMARY,
    STUDY_PLAN_SYSTEM_PROMPT: GenerationKind.STUDY_PLAN,
    FLASHCARDS_SYSTEM_PROMPT: GenerationKind.FLASHCARDS,
}


class FakeProxy:
    """Stands in for ProxyClient; answers per generation kind.

    ``responses`` maps a kind to the text to return or an exception to raise.
    Every request is recorded in ``requests``.
    """

    def __init__(self, responses: dict) -> None:
        self.responses = responses
        self.requests: list[ProxyRequest] = []
        self.closed = False

    async def send(self, request: ProxyRequest) -> str:
        self.requests.append(request)
        kind = _KIND_BY_SYSTEM_PROMPT[request.system_prompt]
        outcome = self.responses[kind]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def kinds(self) -> list[GenerationKind]:
        return [_KIND_BY_SYSTEM_PROMPT[r.system_prompt] for r in self.requests]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_proxy() -> Callable[..., FakeProxy]:
    """Factory for a FakeProxy with sensible default answers."""

    def _make(**overrides) -> FakeProxy:
        responses = {
            GenerationKind.SUMMARY: "**Overview**\n1. Key idea",
            GenerationKind.STUDY_PLAN: "1. Week one\n- Read chapter 1",
            GenerationKind.FLASHCARDS: '[{"question": "What is a cell?", "answer": "The basic unit of life"}]',
        }
        for name, value in overrides.items():
            responses[GenerationKind(name)] = value
        return FakeProxy(responses)

    return _make


@pytest.fixture(scope="session", autouse=True)
def _schema() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
