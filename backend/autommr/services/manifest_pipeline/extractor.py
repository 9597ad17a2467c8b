"""
Manifest Extractor
==================

Coordinates the model requests for one document.

Typed manifest flow:
--------------------
1. Header request (object expected). A header that cannot be parsed stops
   the flow before the second request.
2. Items request (array expected). Individually broken rows are dropped and
   counted; the rest are kept.

Generic flow:
-------------
A single sections request normalized into ``ExtractedSection`` records.

Pages are sent together in each request; requests are strictly sequential.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from autommr.errors import ResponseParseError
from autommr.models import (
    ExtractedSection, FullExtractedData, ImageData, MMRHeader, MMRWasteItem
)
from .normalizer import sections_from_payload
from .prompts import MMR_HEADER_PROMPT, MMR_ITEMS_PROMPT, SECTIONS_PROMPT
from .providers import ExtractionProvider
from .response_parser import ParseStatus, parse_json_response

logger = logging.getLogger(__name__)


@dataclass
class ExtractionOutcome:
    """Result of extracting one document."""
    pages: int
    data: Optional[FullExtractedData] = None
    sections: List[ExtractedSection] = field(default_factory=list)

    # Rows or fragments discarded during recovery
    dropped_count: int = 0
    recovered: bool = False

    requests_made: int = 0
    processing_time_ms: int = 0
    raw_responses: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'pages': self.pages,
            'data': self.data.model_dump(by_alias=True) if self.data else None,
            'sections': [s.model_dump() for s in self.sections],
            'dropped_count': self.dropped_count,
            'recovered': self.recovered,
            'requests_made': self.requests_made,
            'processing_time_ms': self.processing_time_ms,
            'raw_responses': list(self.raw_responses),
        }


class MMRExtractor:
    """
    Extracts manifest data from page images through an extraction provider.

    Example usage:

        extractor = MMRExtractor(get_provider())
        outcome = extractor.extract(load_document('mmr.pdf', None, pdf_bytes))
        print(outcome.data.header.mmr_no, len(outcome.data.items))
    """

    def __init__(self, provider: ExtractionProvider):
        self.provider = provider

    def extract(self, images: List[ImageData]) -> ExtractionOutcome:
        """
        Run the header and items requests.

        Raises:
            ValueError: If no images are given
            ProviderError: If a model call fails
            ResponseParseError: If the header or the item list cannot be recovered
        """
        start_time = time.time()
        outcome = ExtractionOutcome(pages=len(images))

        header_text = self.provider.submit(images, MMR_HEADER_PROMPT)
        outcome.requests_made += 1
        outcome.raw_responses.append(header_text)
        header = self._parse_header(header_text)

        items_text = self.provider.submit(images, MMR_ITEMS_PROMPT)
        outcome.requests_made += 1
        outcome.raw_responses.append(items_text)

        result = parse_json_response(items_text, expect_array=True)
        raw_items = self._as_item_list(result.unwrap())
        items, invalid = self._validate_items(raw_items)

        outcome.data = FullExtractedData(header=header, items=items)
        outcome.dropped_count = result.dropped_count + invalid
        outcome.recovered = result.status == ParseStatus.PARTIAL_RECOVERY
        outcome.processing_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            f"Extracted MMR {header.mmr_no or '(no number)'}: {len(items)} item(s) "
            f"from {outcome.pages} page(s), dropped {outcome.dropped_count} "
            f"in {outcome.processing_time_ms}ms"
        )
        return outcome

    def extract_sections(self, images: List[ImageData]) -> ExtractionOutcome:
        """Run the generic sections request."""
        start_time = time.time()
        outcome = ExtractionOutcome(pages=len(images))

        text = self.provider.submit(images, SECTIONS_PROMPT)
        outcome.requests_made += 1
        outcome.raw_responses.append(text)

        result = parse_json_response(text, expect_array=True)
        outcome.sections = sections_from_payload(result.unwrap())
        outcome.dropped_count = result.dropped_count
        outcome.recovered = result.status == ParseStatus.PARTIAL_RECOVERY
        outcome.processing_time_ms = int((time.time() - start_time) * 1000)

        logger.info(f"Extracted {len(outcome.sections)} section(s) from {outcome.pages} page(s)")
        return outcome

    @staticmethod
    def _parse_header(text: str) -> MMRHeader:
        value = parse_json_response(text, expect_array=False).unwrap()

        # Some answers wrap the single object in a list
        if isinstance(value, list):
            value = next((v for v in value if isinstance(v, dict)), None)

        if not isinstance(value, dict):
            raise ResponseParseError(
                f"Failed to parse the model's JSON response. Response (start): {text[:100]}..."
            )

        try:
            return MMRHeader.model_validate(value)
        except ValidationError as e:
            logger.error(f"Header validation failed: {e}")
            raise ResponseParseError("The manifest header returned by the model has an unexpected format.")

    @staticmethod
    def _as_item_list(value: Any) -> List[Any]:
        if isinstance(value, list):
            return value
        if isinstance(value, dict):
            for key in ('items', 'itens'):
                if key in value and isinstance(value[key], list):
                    return value[key]
            return [value]
        raise ResponseParseError("The waste item list returned by the model has an unexpected format.")

    @staticmethod
    def _validate_items(raw_items: List[Any]):
        items = []
        invalid = 0
        for raw in raw_items:
            if not isinstance(raw, dict):
                invalid += 1
                continue
            try:
                items.append(MMRWasteItem.model_validate(raw))
            except ValidationError as e:
                invalid += 1
                logger.warning(f"Dropping waste item that failed validation: {e}")
        return items, invalid
