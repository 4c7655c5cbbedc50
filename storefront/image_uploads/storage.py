import asyncio
import io
from dataclasses import dataclass
from typing import Protocol
import cloudinary
import cloudinary.uploader
from storefront.config.media_config import media_settings
from storefront import logger


@dataclass(frozen=True)
class StoredBlob:
    url: str
    path: str


class BlobStorage(Protocol):
    async def put(self, path: str, data: bytes, content_type: str) -> StoredBlob: ...


class CloudinaryBlobStorage:
    """Uploads with the Cloudinary SDK; the SDK call is blocking so it runs in a thread."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)

    def _upload_sync(self, path: str, data: bytes) -> dict:
        return cloudinary.uploader.upload(
            io.BytesIO(data),
            public_id=path,
            resource_type="image",
            overwrite=False,
            unique_filename=False,
        )

    async def put(self, path: str, data: bytes, content_type: str) -> StoredBlob:
        result = await asyncio.to_thread(self._upload_sync, path, data)
        logger.debug("media.upload.done", extra={"path": path, "bytes": len(data), "content_type": content_type})
        return StoredBlob(url=result["secure_url"], path=result.get("public_id", path))


def chat_image_path(order_id: str, message_id: str) -> str:
    return f"{media_settings.CHAT_IMAGE_FOLDER}/{order_id}/messages/{message_id}"
