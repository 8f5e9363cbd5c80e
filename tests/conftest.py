import json
from pathlib import Path

import pytest

from lokal.models.translation_result import TranslationResult


class FakeProvider:
    """Provider double that records every batch it receives."""

    def __init__(self, translations=None, fail_keys=()):
        self.translations = dict(translations or {})
        self.fail_keys = set(fail_keys)
        self.calls = []

    def translate(self, request):
        if request.context in self.fail_keys:
            return TranslationResult.failure(request.source_text, "boom")
        text = self.translations.get(
            request.source_text, f"[{request.target_locale}] {request.source_text}"
        )
        return TranslationResult(translated_text=text, source_text=request.source_text)

    def translate_batch(self, requests):
        self.calls.append(list(requests))
        return [self.translate(request) for request in requests]


@pytest.fixture
def provider_factory():
    return FakeProvider


@pytest.fixture
def project(tmp_path):
    """A project directory with a lokal.config.json and an empty src/."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    config = {
        "locales": ["en", "es"],
        "defaultLocale": "en",
        "sourceDir": "./src",
        "outputDir": "./locales",
        "ai": {"provider": "openai", "apiKey": "sk-test"},
    }
    (root / "lokal.config.json").write_text(json.dumps(config), encoding="utf-8")
    return root


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write_file():
    return write
