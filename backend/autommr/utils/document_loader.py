"""
Upload intake utilities for in-memory processing.
Turns uploaded images and PDFs into base64 page payloads without saving to disk.
"""
import base64
import logging
import mimetypes
from typing import Optional, List
from io import BytesIO
from pdf2image import convert_from_bytes
from PIL import Image, UnidentifiedImageError

from autommr.config import Config
from autommr.errors import UnsupportedFileError
from autommr.models import ImageData

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = 'application/pdf'
IMAGE_MIME_TYPES = ('image/jpeg', 'image/png', 'image/webp')
SUPPORTED_MIME_TYPES = IMAGE_MIME_TYPES + (PDF_MIME_TYPE,)


class DocumentLoader:
    """Loader for uploaded manifest files."""

    @staticmethod
    def resolve_mime_type(filename: str, content_type: Optional[str]) -> str:
        """
        Determine the MIME type of an upload.

        Browsers sometimes send an empty or generic content type, in which
        case the type is guessed from the file extension.
        """
        mime_type = (content_type or '').split(';')[0].strip().lower()
        if mime_type in ('', 'application/octet-stream'):
            guessed, _ = mimetypes.guess_type(filename or '')
            mime_type = (guessed or '').lower()
        if mime_type == 'image/jpg':
            mime_type = 'image/jpeg'
        return mime_type

    @classmethod
    def load(cls, filename: str, content_type: Optional[str], data: bytes) -> List[ImageData]:
        """
        Convert an uploaded file into page images.

        Args:
            filename: Original file name
            content_type: MIME type sent with the upload
            data: Raw file bytes

        Returns:
            List of ImageData, one per page

        Raises:
            UnsupportedFileError: If the type is not supported or the file cannot be read
        """
        mime_type = cls.resolve_mime_type(filename, content_type)
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedFileError(
                "Please select an image file (JPG, PNG, WEBP) or a PDF."
            )

        if not data:
            raise UnsupportedFileError(f"The file '{filename}' is empty.")

        if mime_type == PDF_MIME_TYPE:
            return cls.pdf_to_documents(filename, data)

        try:
            with Image.open(BytesIO(data)) as image:
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            logger.warning(f"Unreadable image upload {filename}: {e}")
            raise UnsupportedFileError(f"Could not read the image file '{filename}'.")

        logger.info(f"Loaded image {filename} ({len(data)} bytes, {mime_type})")
        return [
            ImageData(
                base64=base64.b64encode(data).decode('utf-8'),
                mime_type=mime_type,
                file_name=filename,
            )
        ]

    @classmethod
    def pdf_to_documents(cls, filename: str, pdf_bytes: bytes) -> List[ImageData]:
        """Rasterize PDF pages sequentially into JPEG page payloads."""
        if not pdf_bytes.startswith(b'%PDF'):
            raise UnsupportedFileError(f"Could not read the PDF file '{filename}'.")

        images = cls.pdf_to_images(pdf_bytes, max_pages=Config.PDF_MAX_PAGES, dpi=Config.PDF_DPI)
        if not images:
            raise UnsupportedFileError(f"Error converting PDF '{filename}' to image.")

        documents = []
        for page_number, image in enumerate(images, 1):
            jpeg_bytes = cls.image_to_bytes(image, format='JPEG')
            documents.append(
                ImageData(
                    base64=base64.b64encode(jpeg_bytes).decode('utf-8'),
                    mime_type='image/jpeg',
                    file_name=filename,
                    page_number=page_number,
                )
            )

        logger.info(f"Converted PDF {filename} to {len(documents)} page image(s)")
        return documents

    @staticmethod
    def pdf_to_images(pdf_bytes: bytes, max_pages: int = 1, dpi: int = 108) -> List[Image.Image]:
        """
        Convert PDF bytes to PIL Image objects.

        Args:
            pdf_bytes: PDF file as bytes
            max_pages: Number of leading pages to convert, 0 for all
            dpi: Render resolution

        Returns:
            List of PIL Image objects, empty if conversion fails
        """
        try:
            if max_pages and max_pages > 0:
                images = convert_from_bytes(pdf_bytes, dpi=dpi, first_page=1, last_page=max_pages)
            else:
                images = convert_from_bytes(pdf_bytes, dpi=dpi)

            logger.info(f"Converted PDF to {len(images)} image(s)")
            return images

        except Exception as e:
            logger.error(f"Error converting PDF to images: {e}")
            return []

    @staticmethod
    def image_to_bytes(image: Image.Image, format: str = 'PNG') -> bytes:
        """
        Convert PIL Image to bytes.

        Args:
            image: PIL Image object
            format: Image format (PNG, JPEG, etc.)

        Returns:
            Image as bytes
        """
        if format.upper() == 'JPEG' and image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')
        buffer = BytesIO()
        if format.upper() == 'JPEG':
            image.save(buffer, format=format, quality=Config.JPEG_QUALITY)
        else:
            image.save(buffer, format=format)
        return buffer.getvalue()


def load_document(filename: str, content_type: Optional[str], data: bytes) -> List[ImageData]:
    """Convenience wrapper around DocumentLoader.load."""
    return DocumentLoader.load(filename, content_type, data)
