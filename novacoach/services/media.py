"""
Media helpers - decode uploaded images, sniff their type.
"""
import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from novacoach.core.errors import RequestValidationError
from novacoach.core.logger import logger
from novacoach.models.generation import MediaBlob


# Uploaded photos above this size are rejected before decoding.
MAX_IMAGE_BYTES = 20 * 1024 * 1024

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})


def _strip_data_uri(payload: str) -> tuple[str, str | None]:
    """Split 'data:<mime>;base64,<data>' into (data, mime)."""
    if payload.startswith("data:") and "," in payload:
        header, data = payload.split(",", 1)
        mime = header[5:].split(";")[0] or None
        return data, mime
    return payload, None


def decode_image(payload: str, field: str = "image") -> MediaBlob:
    """
    Decode a base64 (or data URI) image upload into a MediaBlob.

    The MIME type is sniffed from the bytes, not trusted from the caller.

    Args:
        payload: Base64 string or data URI
        field: Field name used in error messages

    Returns:
        MediaBlob with the detected MIME type

    Raises:
        RequestValidationError: If the payload is empty, too large, not base64,
            or not a supported image
    """
    if not payload or not payload.strip():
        raise RequestValidationError(f"{field} is required")

    data, declared = _strip_data_uri(payload.strip())
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise RequestValidationError(f"{field} is not valid base64")

    if len(raw) > MAX_IMAGE_BYTES:
        raise RequestValidationError(f"{field} too large: exceeds 20MB limit")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise RequestValidationError(f"{field} is not a readable image: {e}")

    mime = Image.MIME.get(fmt, declared or "")
    if mime not in ALLOWED_IMAGE_TYPES:
        raise RequestValidationError(f"{field}: unsupported image type '{mime or fmt}'")

    if declared and declared != mime:
        logger.warning(f"{field}: declared {declared} but content is {mime}")
    return MediaBlob(data=raw, mime_type=mime)
