import base64
from io import BytesIO

import pytest
from PIL import Image

from autommr.models import ImageData
from autommr.services.image_processor import ImageProcessor


def _size(image_data: ImageData):
    with Image.open(BytesIO(base64.b64decode(image_data.base64))) as image:
        return image.size


def test_quarter_turn_swaps_dimensions(page_image):
    rotated = ImageProcessor().rotate(page_image, 90)
    assert _size(page_image) == (40, 20)
    assert _size(rotated) == (20, 40)
    assert rotated.mime_type == "image/jpeg"
    assert rotated.file_name == page_image.file_name


def test_full_turn_returns_page_unchanged(page_image):
    processor = ImageProcessor()
    assert processor.rotate(page_image, 360) is page_image
    assert processor.rotate(page_image, -720) is page_image


def test_negative_angles_are_normalized(page_image):
    assert ImageProcessor.normalize_degrees(-90) == 270
    assert _size(ImageProcessor().rotate(page_image, -270)) == (20, 40)


def test_only_quarter_turns(page_image):
    with pytest.raises(ValueError):
        ImageProcessor().rotate(page_image, 45)
