"""Client for the Gemini text generation API."""

from dataclasses import dataclass

import httpx

from ..errors import ConfigurationError, TransientFetchError


@dataclass
class GenerationOptions:
    temperature: float = 0.7
    max_tokens: int = 100
    top_p: float = 0.95
    top_k: int = 40


class GeminiClient:
    """Client for ``models/{model}:generateContent``."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise ConfigurationError("GEMINI API key is missing")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def generate(
        self,
        system_instruction: str,
        prompt: str,
        options: GenerationOptions | None = None,
    ) -> str:
        """
        Generate text for a prompt.

        Returns:
            The first candidate's text, untrimmed

        Raises:
            TransientFetchError: on request failure or a response without text
        """
        options = options or GenerationOptions()
        payload = {
            "contents": [{"parts": [{"text": f"{system_instruction}\n\n{prompt}"}]}],
            "generationConfig": {
                "temperature": options.temperature,
                "maxOutputTokens": options.max_tokens,
                "topP": options.top_p,
                "topK": options.top_k,
            },
        }

        try:
            response = await self._client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransientFetchError(f"Gemini request failed: {e}") from e

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise TransientFetchError(f"Malformed Gemini response: {e}") from e

        if not isinstance(text, str):
            raise TransientFetchError("Gemini response text is not a string")
        return text
