# tests/test_classifiers.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from first_todo.classify.keyword_classifier import KeywordCategoryClassifier
from first_todo.classify.llm_classifier import (
    CLASSIFIER_SYSTEM_PROMPT,
    MAX_TEXT_CHARS,
    LLMCategoryClassifier,
    extract_label,
)
from first_todo.cli.bootstrap import build_classifier

from .fakes import FakeLLMClient


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Buy milk and bread", "shopping"),
        ("장보기 하기", "shopping"),
        ("Team standup at 10", "meeting"),
        ("팀 회의 준비", "meeting"),
        ("Go to the gym", "workout"),
        ("저녁에 운동", "workout"),
        ("Read a novel", None),
        ("   ", None),
    ],
)
def test_keyword_classifier(text: str, expected: str | None) -> None:
    assert KeywordCategoryClassifier().classify(text) == expected


def test_keyword_classifier_checks_categories_in_order() -> None:
    # Matches both shopping ("buy") and workout ("yoga"); shopping comes first.
    assert KeywordCategoryClassifier().classify("buy a yoga mat") == "shopping"


def test_llm_classifier_sends_prompt_and_parses_label() -> None:
    llm = FakeLLMClient(next_text="Workout.")
    classifier = LLMCategoryClassifier(llm)

    assert classifier.classify("  morning run  ") == "workout"

    messages, system_prompt = llm.calls[0]
    assert system_prompt == CLASSIFIER_SYSTEM_PROMPT
    assert messages == [{"role": "user", "content": "morning run"}]


def test_llm_classifier_truncates_long_text() -> None:
    llm = FakeLLMClient(next_text="others")
    LLMCategoryClassifier(llm).classify("x" * (MAX_TEXT_CHARS + 100))

    messages, _ = llm.calls[0]
    assert len(messages[0]["content"]) == MAX_TEXT_CHARS


def test_llm_classifier_returns_none_on_error_or_blank() -> None:
    failing = LLMCategoryClassifier(FakeLLMClient(error=RuntimeError("All LLM models failed.")))
    assert failing.classify("buy milk") is None

    llm = FakeLLMClient()
    assert LLMCategoryClassifier(llm).classify("  ") is None
    assert llm.calls == []


@pytest.mark.parametrize(
    ("reply", "expected"),
    [
        ("shopping", "shopping"),
        ("Label: meeting", "meeting"),
        ("회의", "meeting"),
        ("I think it's 42 workout", "workout"),
        ("no idea", None),
        ("", None),
    ],
)
def test_extract_label(reply: str, expected: str | None) -> None:
    assert extract_label(reply) == expected


def _settings(**overrides) -> SimpleNamespace:
    base = dict(
        classifier_backend="auto",
        openrouter_api_key=None,
        openrouter_base_url="https://openrouter.ai/api/v1",
        llm_models=["some/model"],
        extra_headers={},
    )
    base.update(overrides)
    return SimpleNamespace(**base)


def test_build_classifier_auto_without_key_uses_keywords() -> None:
    classifier, name = build_classifier(_settings())
    assert name == "keyword"
    assert isinstance(classifier, KeywordCategoryClassifier)


def test_build_classifier_auto_with_key_uses_llm() -> None:
    classifier, name = build_classifier(_settings(openrouter_api_key="sk-test"))
    assert name == "llm"
    assert isinstance(classifier, LLMCategoryClassifier)


def test_build_classifier_llm_without_key_falls_back() -> None:
    classifier, name = build_classifier(_settings(classifier_backend="llm"))
    assert name == "keyword"
    assert isinstance(classifier, KeywordCategoryClassifier)


def test_build_classifier_keyword_ignores_key() -> None:
    _, name = build_classifier(_settings(classifier_backend="keyword", openrouter_api_key="sk-test"))
    assert name == "keyword"
