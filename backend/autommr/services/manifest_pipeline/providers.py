"""
Extraction Providers
====================

A provider takes page images plus an instruction prompt and returns the
model's raw text answer. Every provider honours the same contract:

    provider.submit(images, prompt) -> str

Supported backends:
- Gemini ``generateContent`` REST API (default)
- Any OpenAI-compatible ``/chat/completions`` endpoint (vllm, ollama, hosted)

Calls are made one at a time with no retry; a failed call surfaces
immediately as a ``ProviderError``.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from autommr.config import Config
from autommr.errors import ConfigurationError, ProviderError
from autommr.models import ImageData

logger = logging.getLogger(__name__)


class ExtractionProvider:
    """Base class for multimodal extraction backends."""

    name = "provider"
    display_name = "Provider"

    def __init__(self, api_key: str, api_base: str, model_name: str, timeout: int = 120):
        self.api_key = api_key
        self.api_base = api_base.rstrip('/')
        self.model_name = model_name
        self.timeout = timeout

    def submit(self, images: List[ImageData], prompt: str) -> str:
        """
        Send page images and a prompt to the model.

        Args:
            images: Page images, sent in order before the prompt
            prompt: Instruction text

        Returns:
            The model's text answer

        Raises:
            ValueError: If no images are given
            ProviderError: On network failure, non-2xx status or empty answer
        """
        if not images:
            raise ValueError("No image data provided for analysis.")

        start_time = time.time()
        url, headers, payload = self._build_request(images, prompt)

        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"{self.display_name} request failed: {e}")
            raise ProviderError(f"{self.display_name} API Error: {e}")

        if not response.ok:
            message = self._error_message(response)
            logger.error(f"{self.display_name} returned HTTP {response.status_code}: {message}")
            raise ProviderError(f"{self.display_name} API Error: {message}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise ProviderError(f"{self.display_name} API Error: response is not valid JSON")

        text = self._extract_text(data)
        if not text:
            raise ProviderError(f"{self.display_name} API Error: the model returned no text")

        logger.info(
            f"{self.display_name} answered in {int((time.time() - start_time) * 1000)}ms "
            f"({len(images)} image(s), {len(text)} chars)"
        )
        return text

    def _build_request(self, images: List[ImageData], prompt: str):
        raise NotImplementedError

    def _extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        raise NotImplementedError

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Best-effort error text from an upstream error body."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or response.reason or f"HTTP {response.status_code}"

        error = body.get('error') if isinstance(body, dict) else None
        if isinstance(error, dict):
            return error.get('message') or str(error)
        if error:
            return str(error)
        return response.reason or f"HTTP {response.status_code}"


class GeminiProvider(ExtractionProvider):
    """Gemini generateContent over REST."""

    name = "gemini"
    display_name = "Gemini"

    def _build_request(self, images: List[ImageData], prompt: str):
        model = self.model_name if self.model_name.startswith('models/') else f"models/{self.model_name}"
        url = f"{self.api_base}/{model}:generateContent"

        parts = [
            {"inline_data": {"mime_type": image.mime_type, "data": image.base64}}
            for image in images
        ]
        parts.append({"text": prompt})

        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }
        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"responseMimeType": "application/json"}
        }
        return url, headers, payload

    def _extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        candidates = data.get('candidates') or []
        if not candidates:
            feedback = data.get('promptFeedback', {})
            if feedback.get('blockReason'):
                raise ProviderError(f"Gemini API Error: request blocked ({feedback['blockReason']})")
            return None

        parts = candidates[0].get('content', {}).get('parts', [])
        return "".join(part.get('text', '') for part in parts if isinstance(part, dict))


class OpenAICompatibleProvider(ExtractionProvider):
    """OpenAI-compatible chat completions with image_url parts."""

    name = "openai"
    display_name = "OpenAI"

    def _build_request(self, images: List[ImageData], prompt: str):
        content = [
            {"type": "image_url", "image_url": {"url": f"data:{image.mime_type};base64,{image.base64}"}}
            for image in images
        ]
        content.append({"type": "text", "text": prompt})

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": content}],
            "temperature": 0.0
        }
        return f"{self.api_base}/chat/completions", headers, payload

    def _extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        choices = data.get('choices') or []
        if not choices:
            return None
        return choices[0].get('message', {}).get('content')


PROVIDERS = {
    GeminiProvider.name: GeminiProvider,
    OpenAICompatibleProvider.name: OpenAICompatibleProvider,
}


def get_provider(name: Optional[str] = None) -> ExtractionProvider:
    """
    Build the configured extraction provider.

    Raises:
        ConfigurationError: If the provider is unknown or has no API key
    """
    name = (name or Config.EXTRACTION_PROVIDER).lower()
    if name not in PROVIDERS:
        raise ConfigurationError(f"Server configuration error: unknown extraction provider '{name}'.")

    if not Config.api_key_for(name):
        logger.error(f"API key for provider '{name}' is not configured")
        raise ConfigurationError("Server configuration error: API key is missing.")

    if name == GeminiProvider.name:
        return GeminiProvider(
            api_key=Config.GEMINI_API_KEY,
            api_base=Config.GEMINI_API_BASE,
            model_name=Config.GEMINI_MODEL_NAME,
            timeout=Config.REQUEST_TIMEOUT,
        )
    return OpenAICompatibleProvider(
        api_key=Config.OPENAI_API_KEY,
        api_base=Config.OPENAI_API_BASE,
        model_name=Config.OPENAI_MODEL_NAME,
        timeout=Config.REQUEST_TIMEOUT,
    )
