"""
Data URL and Image File Helpers
===============================

Everything the application moves around (source photos, the generated image,
voice recordings) travels as a base64 data URL: ``data:<mime>;base64,<payload>``.
This module converts between files, raw bytes, Pillow images and that form.

Key Responsibilities:
---------------------
- Reading a user-selected photo into a data URL, verifying it with Pillow.
- Parsing and validating data URLs before they are sent to the Gemini API.
- Decoding data URLs back to bytes (saving results) or images (previews).
"""

import base64
import binascii
import io
import logging
import os
import re
from pathlib import Path
from typing import Tuple, Union

from PIL import Image, UnidentifiedImageError

from reunify.core import config
from reunify.core.errors import ValidationError

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r'^data:(.+);base64,(.+)$', re.DOTALL)


def is_data_url(value) -> bool:
    """Return True when ``value`` is syntactically a base64 data URL."""
    return isinstance(value, str) and DATA_URL_RE.match(value) is not None


def parse_data_url(data_url: str) -> Tuple[str, str]:
    """
    Split a data URL into its MIME type and base64 payload.

    Raises:
        ValidationError: If the value is not a ``data:<mime>;base64,<payload>`` string.
    """
    if not isinstance(data_url, str):
        raise ValidationError("Invalid data URL")
    match = DATA_URL_RE.match(data_url)
    if not match:
        raise ValidationError("Invalid data URL")
    mime_type, payload = match.groups()
    return mime_type, payload


def bytes_to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def data_url_to_bytes(data_url: str) -> bytes:
    """Decode the payload of a data URL to raw bytes."""
    _, payload = parse_data_url(data_url)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(f"Data URL payload is not valid base64: {exc}") from exc


def file_to_data_url(path: Union[str, Path]) -> str:
    """
    Read a photo from disk and return it as a data URL.

    The file is opened with Pillow to confirm it is a PNG, JPEG or WebP image;
    the MIME type comes from the detected format, not the file extension.

    Args:
        path: Path to the selected image file.

    Returns:
        The image as ``data:image/<type>;base64,...``.

    Raises:
        ValidationError: If the file is missing, too large, or not a supported image.
    """
    path = Path(path)
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")

    size_mb = os.path.getsize(path) / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        raise ValidationError(
            f"{path.name} is {size_mb:.1f} MB; the limit is {config.MAX_IMAGE_SIZE_MB} MB."
        )

    data = path.read_bytes()
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError(f"{path.name} is not a readable image.") from exc

    mime_type = config.SUPPORTED_IMAGE_FORMATS.get(image_format or "")
    if mime_type is None:
        raise ValidationError(
            f"Unsupported image format '{image_format}'. Use PNG, JPEG or WebP."
        )

    logger.info(f"Loaded photo {path.name} ({mime_type}, {len(data)} bytes)")
    return bytes_to_data_url(data, mime_type)


def data_url_to_image(data_url: str) -> Image.Image:
    """Decode an image data URL into a loaded Pillow image (used for previews)."""
    raw = data_url_to_bytes(data_url)
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("Data URL does not contain a readable image.") from exc
    return img


def save_data_url(data_url: str, path: Union[str, Path]) -> Path:
    """Write the payload of a data URL to ``path`` and return the path."""
    path = Path(path)
    path.write_bytes(data_url_to_bytes(data_url))
    logger.info(f"Saved {path.name} ({path.stat().st_size} bytes)")
    return path
