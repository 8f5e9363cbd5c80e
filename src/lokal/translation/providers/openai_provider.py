"""OpenAI translation provider."""

from typing import Optional

from openai import OpenAI

from ...models.translation_result import TranslationRequest
from .base import BaseProvider, SYSTEM_PROMPT


class OpenAIProvider(BaseProvider):
    """Translates through the OpenAI chat completions API."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        client: Optional[OpenAI] = None,
    ):
        """
        Initialize the OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Chat model to use
            temperature: Sampling temperature
            client: Preconfigured client (tests, proxies)
        """
        if not api_key and client is None:
            raise ValueError("OpenAI API key is required")
        self.client = client or OpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature

    def _translate_text(self, request: TranslationRequest) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": self.build_prompt(request)},
            ],
            temperature=self.temperature,
        )
        content = response.choices[0].message.content or ""
        return self.clean_response(content)
