"""
Configuration management for the AutoMMR extraction service.
Loads model provider credentials and settings from environment variables.
"""
import os
from typing import Optional
from dotenv import load_dotenv

from autommr.errors import ConfigurationError

# Load environment variables from .env file if it exists
load_dotenv()


class Config:
    """Configuration class for provider credentials and settings."""

    # Extraction provider: 'gemini' or 'openai' (any OpenAI-compatible endpoint)
    EXTRACTION_PROVIDER: str = os.getenv('EXTRACTION_PROVIDER', 'gemini').lower()

    # Gemini
    GEMINI_API_KEY: Optional[str] = os.getenv('GEMINI_API_KEY') or os.getenv('API_KEY')
    GEMINI_API_BASE: str = os.getenv('GEMINI_API_BASE', 'https://generativelanguage.googleapis.com/v1beta')
    GEMINI_MODEL_NAME: str = os.getenv('GEMINI_MODEL_NAME', 'models/gemini-2.5-flash')

    # OpenAI-compatible (vllm, ollama, hosted)
    OPENAI_API_KEY: Optional[str] = os.getenv('OPENAI_API_KEY')
    OPENAI_API_BASE: str = os.getenv('OPENAI_API_BASE', 'https://api.openai.com/v1')
    OPENAI_MODEL_NAME: str = os.getenv('OPENAI_MODEL_NAME', 'gpt-4o-mini')

    REQUEST_TIMEOUT: int = int(os.getenv('REQUEST_TIMEOUT', '120'))

    # PDF rasterization
    # 108 DPI matches a 1.5x render of a 72 DPI page
    PDF_DPI: int = int(os.getenv('PDF_DPI', '108'))
    # Set to 0 for all pages
    PDF_MAX_PAGES: int = int(os.getenv('PDF_MAX_PAGES', '1'))
    JPEG_QUALITY: int = int(os.getenv('JPEG_QUALITY', '90'))

    # Usage counters
    COUNTERS_FILE: str = os.getenv('COUNTERS_FILE', 'output/counters.json')
    MINUTES_SAVED_PER_PAGE: int = int(os.getenv('MINUTES_SAVED_PER_PAGE', '15'))

    # API Settings
    API_HOST: str = os.getenv('API_HOST', '0.0.0.0')
    API_PORT: int = int(os.getenv('API_PORT', '8000'))
    CORS_ORIGINS: list = os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://localhost:5173').split(',')
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO').upper()

    @classmethod
    def api_key_for(cls, provider: str) -> Optional[str]:
        """Return the API key configured for a provider name."""
        if provider == 'gemini':
            return cls.GEMINI_API_KEY
        if provider == 'openai':
            return cls.OPENAI_API_KEY
        return None

    @classmethod
    def validate(cls) -> bool:
        """
        Validate that required configuration is present.
        """
        if cls.EXTRACTION_PROVIDER not in ('gemini', 'openai'):
            raise ConfigurationError(
                f"Server configuration error: unknown extraction provider '{cls.EXTRACTION_PROVIDER}'."
            )

        if not cls.api_key_for(cls.EXTRACTION_PROVIDER):
            raise ConfigurationError("Server configuration error: API key is missing.")

        if cls.PDF_DPI <= 0:
            raise ConfigurationError("PDF_DPI must be a positive integer.")
        return True
