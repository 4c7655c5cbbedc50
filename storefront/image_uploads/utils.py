import base64
import binascii
import math
import re
from dataclasses import dataclass
from storefront.common.custom_exceptions import ImageTooLarge, InvalidImageData, UnsupportedImageType

DEFAULT_MAX_IMAGE_MB = 8

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"}

_DATA_URL_RE = re.compile(r"^data:(image/[a-z0-9.+-]+);base64,(.+)$", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class DecodedImage:
    content_type: str
    data: bytes


def max_image_bytes(max_mb) -> int:
    try:
        mb = float(max_mb)
    except (TypeError, ValueError):
        mb = DEFAULT_MAX_IMAGE_MB
    if not math.isfinite(mb) or mb <= 0:
        mb = DEFAULT_MAX_IMAGE_MB
    return math.floor(mb * 1024 * 1024)


def parse_image_data_url(data_url: str, max_bytes: int) -> DecodedImage:
    """Decode ``data:image/<type>;base64,<payload>``; exactly ``max_bytes`` is accepted."""
    match = _DATA_URL_RE.match(str(data_url or "").strip())
    if not match:
        raise InvalidImageData()

    content_type = match.group(1).lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise UnsupportedImageType()

    # estimate first so a huge payload is rejected before decoding
    payload = re.sub(r"\s+", "", match.group(2))
    if len(payload) // 4 * 3 > max_bytes + 3:
        raise ImageTooLarge(f"Image too large (max {max_bytes // (1024 * 1024)}MB), compress it before sending")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidImageData()
    if not data:
        raise InvalidImageData()
    if len(data) > max_bytes:
        raise ImageTooLarge(f"Image too large (max {max_bytes // (1024 * 1024)}MB), compress it before sending")

    return DecodedImage(content_type=content_type, data=data)
