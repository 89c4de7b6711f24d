"""Shared stubs for the quizmaster test suite."""

from .trivia import (  # noqa: F401
    FakeHTTP,
    FakeResponse,
    StubTriviaSource,
    encode_payload,
    make_questions,
)
from .gemini import StubGeminiModel  # noqa: F401
from .store import BlockingStore, FailingStore  # noqa: F401

__all__ = [
    "BlockingStore",
    "FailingStore",
    "FakeHTTP",
    "FakeResponse",
    "StubGeminiModel",
    "StubTriviaSource",
    "encode_payload",
    "make_questions",
]
