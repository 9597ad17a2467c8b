"""
Manifest Extraction Pipeline
============================

Digitizes Maritime/Transport Waste Manifest (MMR/MTR) forms with a hosted
multimodal model.

Pipeline Stages:
1. INPUT: uploaded image or PDF pages as base64 payloads (utils.document_loader)
2. EXTRACTION: page images + fixed prompt sent to the provider
3. RECOVERY: strict JSON parse, falling back to per-object salvage
4. NORMALIZATION: typed header/items or generic sections
5. OUTPUT: HTML tables and an Excel workbook (services.renderer, services.exporter)
"""

from .providers import (
    ExtractionProvider,
    GeminiProvider,
    OpenAICompatibleProvider,
    get_provider,
)
from .response_parser import ParseResult, ParseStatus, parse_json_response
from .extractor import MMRExtractor, ExtractionOutcome
from .normalizer import sections_from_mmr, sections_from_payload

__all__ = [
    'ExtractionProvider',
    'GeminiProvider',
    'OpenAICompatibleProvider',
    'get_provider',
    'ParseResult',
    'ParseStatus',
    'parse_json_response',
    'MMRExtractor',
    'ExtractionOutcome',
    'sections_from_mmr',
    'sections_from_payload',
]
