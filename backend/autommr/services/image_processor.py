"""
Image processing service for correcting page orientation before extraction.
"""
import base64
import logging
from io import BytesIO
from PIL import Image

from autommr.models import ImageData

logger = logging.getLogger(__name__)


class ImageProcessor:
    """Service for editing page images in memory."""

    def __init__(self, jpeg_quality: int = 90):
        """
        Initialize image processor.

        Args:
            jpeg_quality: Quality used when re-encoding edited pages
        """
        self.jpeg_quality = jpeg_quality

    @staticmethod
    def normalize_degrees(degrees: int) -> int:
        """Map any angle to [0, 360)."""
        return (degrees % 360 + 360) % 360

    def rotate(self, image_data: ImageData, degrees: int) -> ImageData:
        """
        Rotate a page image.

        Args:
            image_data: Page to rotate
            degrees: Multiple of 90; positive values rotate clockwise

        Returns:
            The same page when the net rotation is zero, otherwise a new
            JPEG-encoded ImageData
        """
        normalized = self.normalize_degrees(degrees)
        if normalized % 90 != 0:
            raise ValueError(f"Rotation must be a multiple of 90 degrees, got {degrees}")

        if normalized == 0:
            return image_data

        raw = base64.b64decode(image_data.base64)
        with Image.open(BytesIO(raw)) as image:
            # PIL rotates counter-clockwise
            rotated = image.rotate(-normalized, expand=True)
            if rotated.mode not in ('RGB', 'L'):
                rotated = rotated.convert('RGB')

            buffer = BytesIO()
            rotated.save(buffer, format='JPEG', quality=self.jpeg_quality)

        logger.info(
            f"Rotated {image_data.file_name or 'image'} "
            f"(page {image_data.page_number or 1}) by {normalized} degrees"
        )
        return ImageData(
            base64=base64.b64encode(buffer.getvalue()).decode('utf-8'),
            mime_type='image/jpeg',
            file_name=image_data.file_name,
            page_number=image_data.page_number,
        )
