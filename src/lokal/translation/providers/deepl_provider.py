"""DeepL translation provider."""

from typing import List, Optional

import deepl

from ...models.translation_result import TranslationRequest, TranslationResult
from .base import BaseProvider


class DeepLProvider(BaseProvider):
    """Translates through the DeepL API, using its native batch call."""

    name = "deepl"

    # DeepL wants regional variants for a few targets
    TARGET_LANGUAGE_MAP = {
        "en": "EN-US",
        "pt": "PT-BR",
    }

    def __init__(self, api_key: str, translator: Optional[deepl.Translator] = None):
        """
        Initialize the DeepL provider.

        Args:
            api_key: DeepL API key
            translator: Preconfigured deepl.Translator (tests)
        """
        if not api_key and translator is None:
            raise ValueError("DeepL API key is required")
        self.translator = translator or deepl.Translator(api_key)

    def _target(self, locale: str) -> str:
        code = locale.replace("_", "-")
        return self.TARGET_LANGUAGE_MAP.get(code.lower(), code.upper())

    @staticmethod
    def _source(locale: str) -> str:
        # Source languages are never regional
        return locale.replace("_", "-").split("-")[0].upper()

    def _translate_text(self, request: TranslationRequest) -> str:
        result = self.translator.translate_text(
            request.source_text,
            source_lang=self._source(request.source_locale),
            target_lang=self._target(request.target_locale),
            preserve_formatting=True,
        )
        return result.text

    def translate_batch(self, requests: List[TranslationRequest]) -> List[TranslationResult]:
        """
        Translate requests grouped by language pair, one API call per pair.

        Results are returned in request order; a failed call fails every
        request in its group.
        """
        results: List[Optional[TranslationResult]] = [None] * len(requests)

        groups = {}
        for index, request in enumerate(requests):
            groups.setdefault((request.source_locale, request.target_locale), []).append(index)

        for (source_locale, target_locale), indexes in groups.items():
            texts = [requests[i].source_text for i in indexes]
            try:
                translated = self.translator.translate_text(
                    texts,
                    source_lang=self._source(source_locale),
                    target_lang=self._target(target_locale),
                    preserve_formatting=True,
                )
                if not isinstance(translated, list):
                    translated = [translated]
            except Exception as e:
                for i in indexes:
                    results[i] = TranslationResult.failure(requests[i].source_text, str(e))
                continue

            for i, item in zip(indexes, translated):
                results[i] = TranslationResult(
                    translated_text=item.text,
                    source_text=requests[i].source_text,
                    success=bool(item.text),
                    error=None if item.text else "No translation returned",
                )

        return [
            result or TranslationResult.failure(requests[i].source_text, "No translation returned")
            for i, result in enumerate(results)
        ]
