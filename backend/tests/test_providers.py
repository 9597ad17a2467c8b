import pytest
import requests

from autommr.config import Config
from autommr.errors import ConfigurationError, ProviderError
from autommr.services.manifest_pipeline import providers
from autommr.services.manifest_pipeline.providers import (
    GeminiProvider, OpenAICompatibleProvider, get_provider
)


class FakeResponse:

    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.reason = "Bad Request" if status_code >= 400 else "OK"

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def captured(monkeypatch):
    calls = []

    def install(response):
        def fake_post(url, headers=None, json=None, timeout=None):
            calls.append({'url': url, 'headers': headers, 'json': json, 'timeout': timeout})
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(providers.requests, "post", fake_post)
        return calls

    return install


def test_gemini_request_shape(gemini_config, captured, page_image):
    calls = captured(FakeResponse(payload={
        'candidates': [{'content': {'parts': [{'text': '{"mmrNo": '}, {'text': '"1"}'}]}}]
    }))

    text = get_provider().submit([page_image], "PROMPT")

    assert text == '{"mmrNo": "1"}'
    call = calls[0]
    assert call['url'] == "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent"
    assert call['headers']['x-goog-api-key'] == "test-key"
    parts = call['json']['contents'][0]['parts']
    assert parts[0] == {'inline_data': {'mime_type': 'image/png', 'data': page_image.base64}}
    assert parts[-1] == {'text': 'PROMPT'}
    assert call['json']['generationConfig']['responseMimeType'] == "application/json"


def test_gemini_http_error_carries_upstream_message(gemini_config, captured, page_image):
    captured(FakeResponse(status_code=400, payload={'error': {'code': 400, 'message': 'API key not valid.'}}))

    with pytest.raises(ProviderError) as exc_info:
        get_provider().submit([page_image], "PROMPT")
    assert exc_info.value.message == "Gemini API Error: API key not valid."
    assert exc_info.value.status_code == 400


def test_network_failure(gemini_config, captured, page_image):
    captured(requests.ConnectionError("connection refused"))
    with pytest.raises(ProviderError) as exc_info:
        get_provider().submit([page_image], "PROMPT")
    assert "connection refused" in exc_info.value.message


def test_blocked_prompt(gemini_config, captured, page_image):
    captured(FakeResponse(payload={'promptFeedback': {'blockReason': 'SAFETY'}}))
    with pytest.raises(ProviderError) as exc_info:
        get_provider().submit([page_image], "PROMPT")
    assert "SAFETY" in exc_info.value.message


def test_empty_image_list_is_rejected_before_any_call(gemini_config, captured):
    calls = captured(FakeResponse(payload={}))
    with pytest.raises(ValueError):
        get_provider().submit([], "PROMPT")
    assert calls == []


def test_openai_compatible_request_shape(monkeypatch, captured, page_image):
    monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(Config, "OPENAI_API_BASE", "http://llm.local/v1/")
    monkeypatch.setattr(Config, "OPENAI_MODEL_NAME", "glm-4v")
    calls = captured(FakeResponse(payload={'choices': [{'message': {'content': '[]'}}]}))

    provider = get_provider("openai")
    assert isinstance(provider, OpenAICompatibleProvider)
    assert provider.submit([page_image], "PROMPT") == "[]"

    call = calls[0]
    assert call['url'] == "http://llm.local/v1/chat/completions"
    assert call['headers']['Authorization'] == "Bearer sk-test"
    content = call['json']['messages'][0]['content']
    assert content[0]['image_url']['url'].startswith("data:image/png;base64,")
    assert content[-1] == {'type': 'text', 'text': 'PROMPT'}


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(Config, "EXTRACTION_PROVIDER", "gemini")
    monkeypatch.setattr(Config, "GEMINI_API_KEY", None)
    with pytest.raises(ConfigurationError) as exc_info:
        get_provider()
    assert exc_info.value.message == "Server configuration error: API key is missing."


def test_unknown_provider(monkeypatch):
    with pytest.raises(ConfigurationError):
        get_provider("watson")


def test_model_name_without_prefix(gemini_config, captured, page_image):
    calls = captured(FakeResponse(payload={'candidates': [{'content': {'parts': [{'text': '{}'}]}}]}))
    GeminiProvider(api_key="k", api_base="https://g.test", model_name="gemini-pro").submit([page_image], "P")
    assert calls[0]['url'] == "https://g.test/models/gemini-pro:generateContent"
