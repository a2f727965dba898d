# ecopack/gemini_client.py
from typing import Dict, Iterable, Optional

import requests

from .config import get_settings
from .logging_config import get_logger

logger = get_logger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class GeminiError(Exception):
    pass


class GeminiClient:
    def __init__(self, api_key: Optional[str], timeout: float = 30.0, session=None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def generate_text(self, prompt: str, model: str, temperature: float = 0.7,
                      max_output_tokens: int = 800) -> str:
        if not self.configured:
            raise GeminiError("GEMINI_API_KEY is not set")

        payload = {
            "contents": [
                {
                    "parts": [{"text": prompt}]
                }
            ],
            "generationConfig": {
                "temperature": temperature,
                "topP": 0.95,
                "maxOutputTokens": max_output_tokens,
            },
        }

        try:
            r = self.session.post(
                GEMINI_URL.format(model=model),
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GeminiError(f"{model}: request failed: {e}") from e

        if not r.ok:
            raise GeminiError(f"{model}: HTTP {r.status_code}: {r.text[:200]}")

        try:
            data = r.json()
        except ValueError as e:
            raise GeminiError(f"{model}: response is not JSON") from e

        try:
            output = (
                (data.get("candidates") or [{}])[0]
                .get("content", {})
                .get("parts", [{}])[0]
                .get("text", "")
            )
        except (AttributeError, IndexError, TypeError) as e:
            raise GeminiError(f"{model}: unexpected response shape") from e
        if not output:
            raise GeminiError(f"{model}: empty response")

        logger.info("gemini response received", model=model, chars=len(output))
        return output

    def probe_models(self, models: Iterable[str]) -> Dict[str, Dict[str, str]]:
        """Ask every model for a one-word reply; used by the model health endpoint."""
        results = {}
        for model in models:
            try:
                text = self.generate_text('Say "hello" in one word', model, max_output_tokens=10)
                results[model] = {"status": "success", "response": text.strip()}
            except GeminiError as e:
                results[model] = {"status": "failed", "error": str(e)}
        return results


def default_client() -> GeminiClient:
    settings = get_settings()
    return GeminiClient(settings.gemini_api_key, settings.gemini_timeout)
