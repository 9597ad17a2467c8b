"""
Extraction sessions.

A session holds what a single browser tab works with: the selected file
as page images, the last extraction result, and loading/error flags. One
document is processed at a time; selecting a new file replaces the
previous result.
"""
import logging
import uuid
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Dict, List, Optional

from autommr.config import Config
from autommr.errors import AutoMMRError
from autommr.models import (
    DocumentInfo, ExtractedSection, FullExtractedData, ImageData, SessionState
)
from autommr.services.image_processor import ImageProcessor
from autommr.services.manifest_pipeline import (
    ExtractionProvider, MMRExtractor, get_provider, sections_from_mmr
)
from autommr.utils.counter_store import UsageCounters
from autommr.utils.document_loader import DocumentLoader

logger = logging.getLogger(__name__)


class ExtractionMode(str, Enum):
    """What to ask the model for."""
    MMR = "mmr"            # Typed header + waste items
    SECTIONS = "sections"  # Generic topic/answer sections


class ExtractionSession:
    """State of one user's upload/extract/export flow."""

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or str(uuid.uuid4())
        self.file_name: Optional[str] = None
        self.documents: List[ImageData] = []
        self.extracted_data: Optional[FullExtractedData] = None
        self.sections: List[ExtractedSection] = []
        self.dropped_fragments = 0
        self.is_loading = False
        self.error: Optional[str] = None
        self.updated_at = datetime.now()
        self.image_processor = ImageProcessor(jpeg_quality=Config.JPEG_QUALITY)

    def _touch(self):
        self.updated_at = datetime.now()

    def select_file(self, filename: str, content_type: Optional[str], data: bytes) -> bool:
        """
        Load a newly selected file.

        A valid file replaces the current pages and clears the previous
        result. An unsupported or unreadable file only sets the error; the
        current pages and result are left as they were.

        Returns:
            True if the file was accepted
        """
        self._touch()
        try:
            documents = DocumentLoader.load(filename, content_type, data)
        except AutoMMRError as e:
            logger.warning(f"Session {self.session_id}: rejected file {filename}: {e.message}")
            self.error = e.message
            return False

        self.file_name = filename
        self.documents = documents
        self.extracted_data = None
        self.sections = []
        self.dropped_fragments = 0
        self.error = None
        logger.info(f"Session {self.session_id}: selected {filename} ({len(documents)} page(s))")
        return True

    def rotate_page(self, page_number: int, degrees: int) -> ImageData:
        """Rotate one page of the selected file in place."""
        if not self.documents:
            raise ValueError("Please select a file first.")
        if page_number < 1 or page_number > len(self.documents):
            raise ValueError(f"Page {page_number} does not exist in the selected file.")

        rotated = self.image_processor.rotate(self.documents[page_number - 1], degrees)
        self.documents[page_number - 1] = rotated
        self._touch()
        return rotated

    def process(
        self,
        counters: UsageCounters,
        mode: ExtractionMode = ExtractionMode.MMR,
        provider: Optional[ExtractionProvider] = None
    ) -> bool:
        """
        Extract data from the selected file.

        Every failure ends up as a single message in ``error``.

        Returns:
            True on success
        """
        self._touch()
        if not self.documents:
            self.error = "Please select a file first."
            self.is_loading = False
            return False

        self.is_loading = True
        self.error = None
        self.extracted_data = None
        self.sections = []
        self.dropped_fragments = 0

        try:
            extractor = MMRExtractor(provider or get_provider())
            if mode == ExtractionMode.SECTIONS:
                outcome = extractor.extract_sections(self.documents)
                self.sections = outcome.sections
            else:
                outcome = extractor.extract(self.documents)
                self.extracted_data = outcome.data
                self.sections = sections_from_mmr(outcome.data)
            self.dropped_fragments = outcome.dropped_count

            counters.record_extraction(pages=len(self.documents))
            logger.info(f"Session {self.session_id}: extraction finished ({mode.value})")
            return True

        except AutoMMRError as e:
            logger.error(f"Session {self.session_id}: extraction failed: {e.message}")
            self.error = e.message
            return False
        except ValueError as e:
            logger.error(f"Session {self.session_id}: extraction failed: {e}")
            self.error = str(e)
            return False
        finally:
            self.is_loading = False
            self._touch()

    def to_state(self) -> SessionState:
        return SessionState(
            session_id=self.session_id,
            file_name=self.file_name,
            documents=[
                DocumentInfo(
                    file_name=d.file_name,
                    mime_type=d.mime_type,
                    page_number=d.page_number,
                    size_bytes=len(d.base64) * 3 // 4,
                )
                for d in self.documents
            ],
            is_loading=self.is_loading,
            error=self.error,
            extracted_data=self.extracted_data,
            sections=self.sections,
            dropped_fragments=self.dropped_fragments,
            updated_at=self.updated_at,
        )


class SessionManager:
    """In-memory session registry (in production, use a database)."""

    def __init__(self):
        self._sessions: Dict[str, ExtractionSession] = {}
        self.lock = Lock()

    def create(self) -> ExtractionSession:
        session = ExtractionSession()
        with self.lock:
            self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id}")
        return session

    def get(self, session_id: str) -> Optional[ExtractionSession]:
        with self.lock:
            return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        with self.lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self.lock:
            return len(self._sessions)
