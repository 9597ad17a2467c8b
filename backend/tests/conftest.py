"""
Shared fixtures: in-memory images, a scripted provider and an API client
wired to in-memory state.
"""
import base64
from io import BytesIO
from typing import List

import pytest
from PIL import Image

from autommr.config import Config
from autommr.models import ImageData
from autommr.services.manifest_pipeline import ExtractionProvider
from autommr.utils.counter_store import MemoryStore, UsageCounters


HEADER_JSON = """{
  "mmrNo": "027/2025",
  "data": "27-fev-25",
  "gerador": "VALARIS DS-17",
  "transportador": "DELTA COMMANDER",
  "baseDeApoio": "TRIUNFO LOGISTICA",
  "atividade": "Perfuração",
  "bacia": "Bacalhau",
  "poco": "WI-5",
  "projeto": null
}"""

ITEMS_JSON = """```json
[
  {"item": "1", "codigo": "A009", "tipoDeResiduo": "Madeira não contaminada", "descricao": "Non contaminated wood",
   "acondicionamento": "Lote", "quantidade": 1, "unidade": "UN", "pesoKg": 715, "classeNbr": "IIA", "mtr": "2113232195"},
  {"item": "2", "codigo": "A001", "tipoDeResiduo": "Papel/papelão não contaminado", "descricao": "Non contaminated paper/cardboard",
   "acondicionamento": "Big Bag", "quantidade": 1, "unidade": "UN", "pesoKg": 9, "classeNbr": "IIA", "mtr": "2113249689"}
]
```"""


class ScriptedProvider(ExtractionProvider):
    """Returns canned answers in order and records every call."""

    name = "scripted"
    display_name = "Scripted"

    def __init__(self, responses: List[str]):
        super().__init__(api_key="test", api_base="http://localhost", model_name="test")
        self.responses = list(responses)
        self.calls = []

    def submit(self, images, prompt):
        if not images:
            raise ValueError("No image data provided for analysis.")
        self.calls.append((list(images), prompt))
        return self.responses.pop(0)


def make_image_bytes(fmt: str = "PNG", size=(40, 20), color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def page_image(png_bytes) -> ImageData:
    return ImageData(
        base64=base64.b64encode(png_bytes).decode("utf-8"),
        mime_type="image/png",
        file_name="mmr.png",
    )


@pytest.fixture
def mmr_provider() -> ScriptedProvider:
    return ScriptedProvider([HEADER_JSON, ITEMS_JSON])


@pytest.fixture
def counters() -> UsageCounters:
    return UsageCounters(MemoryStore(), minutes_per_page=15)


@pytest.fixture
def gemini_config(monkeypatch):
    monkeypatch.setattr(Config, "EXTRACTION_PROVIDER", "gemini")
    monkeypatch.setattr(Config, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(Config, "GEMINI_API_BASE", "https://gemini.test/v1beta")
    monkeypatch.setattr(Config, "GEMINI_MODEL_NAME", "models/gemini-2.5-flash")
    return Config


@pytest.fixture
def make_provider():
    """Factory for scripted providers with custom answers."""
    return ScriptedProvider
