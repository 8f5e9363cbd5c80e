"""Gemini (Google) translation provider."""

from typing import Optional

import httpx

from ...errors import ProviderFailure
from ...models.translation_result import TranslationRequest
from .base import BaseProvider, SYSTEM_PROMPT

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiProvider(BaseProvider):
    """Translates through the Gemini generateContent REST endpoint."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.3,
        timeout: float = 60.0,
        client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise ValueError("Gemini API key is required")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.client = client or httpx.Client(timeout=timeout)
        self.url = f"{GEMINI_BASE_URL}/{model}:generateContent"

    def _translate_text(self, request: TranslationRequest) -> str:
        # The key travels in a header, never in the URL
        response = self.client.post(
            self.url,
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.api_key,
            },
            json={
                "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
                "contents": [{"parts": [{"text": self.build_prompt(request)}]}],
                "generationConfig": {
                    "temperature": self.temperature,
                    "maxOutputTokens": 2048,
                },
            },
        )
        if response.status_code != 200:
            raise ProviderFailure(self.name, f"HTTP {response.status_code} - {response.text}")

        data = response.json()
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise ProviderFailure(self.name, "No translation returned")
        return self.clean_response(text)
