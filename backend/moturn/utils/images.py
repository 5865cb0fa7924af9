"""Listing photos: validation, 512x512 thumbnails, and where the thumbnail ends up."""
import base64
import logging
from io import BytesIO
from uuid import uuid4

from PIL import Image, ImageOps, UnidentifiedImageError

from moturn import config
from moturn.utils.s3 import upload_file_to_s3

logger = logging.getLogger(__name__)

MAX_IMAGES = 10
MAX_IMAGE_BYTES = 5 * 1024 * 1024
THUMBNAIL_SIZE = (512, 512)
JPEG_QUALITY = 85


class InvalidImageError(ValueError):
    pass


def make_thumbnail(data: bytes) -> bytes:
    """Cover-crop to THUMBNAIL_SIZE and re-encode as JPEG."""
    if len(data) > MAX_IMAGE_BYTES:
        raise InvalidImageError("Image exceeds the 5MB limit")
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError("File is not a supported image") from e

    image = ImageOps.exif_transpose(image).convert("RGB")
    thumbnail = ImageOps.fit(image, THUMBNAIL_SIZE, method=Image.Resampling.LANCZOS)

    out = BytesIO()
    thumbnail.save(out, format="JPEG", quality=JPEG_QUALITY)
    return out.getvalue()


def to_data_url(jpeg: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii")


def store_image(data: bytes) -> str:
    """Thumbnail an upload and return the URL to keep on the item."""
    jpeg = make_thumbnail(data)
    if config.S3_BUCKET:
        return upload_file_to_s3(jpeg, f"items/{uuid4()}.jpg")
    logger.debug("S3_BUCKET not set, storing thumbnail inline")
    return to_data_url(jpeg)
