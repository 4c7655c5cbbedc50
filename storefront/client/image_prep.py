import base64
import io
from PIL import Image, ImageOps, UnidentifiedImageError
from storefront.client.constants import MAX_PHOTO_DATA_URL_CHARS


class PhotoTooLarge(Exception):
    pass


class PhotoUnreadable(Exception):
    pass


def _target_size(width: int, height: int, max_side: int):
    if width >= height and width > max_side:
        return max_side, max(1, round(height * max_side / width))
    if height > width and height > max_side:
        return max(1, round(width * max_side / height)), max_side
    return width, height


def compress_image_to_jpeg_data_url(raw: bytes, max_side: int = 1280, quality: int = 78) -> str:
    """Downscale so the longest side is at most `max_side` and re-encode as a JPEG data URL."""
    try:
        with Image.open(io.BytesIO(raw)) as im:
            im = ImageOps.exif_transpose(im)
            if im.mode != "RGB":
                im = im.convert("RGB")
            size = _target_size(im.width, im.height, max_side)
            if size != (im.width, im.height):
                im = im.resize(size, Image.LANCZOS)
            buf = io.BytesIO()
            im.save(buf, format="JPEG", quality=quality, optimize=True)
    except Image.DecompressionBombError as e:
        raise PhotoTooLarge("Image is too large, choose another photo") from e
    except (UnidentifiedImageError, OSError) as e:
        raise PhotoUnreadable("Could not read the selected image") from e

    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def prepare_chat_photo(raw: bytes, max_chars: int = MAX_PHOTO_DATA_URL_CHARS) -> str:
    data_url = compress_image_to_jpeg_data_url(raw, max_side=1280, quality=78)
    if len(data_url) <= max_chars:
        return data_url
    smaller = compress_image_to_jpeg_data_url(raw, max_side=900, quality=70)
    if len(smaller) <= max_chars:
        return smaller
    raise PhotoTooLarge("Image is too large, choose another photo")
