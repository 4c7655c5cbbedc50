from functools import lru_cache
from storefront.config.media_config import media_settings
from storefront.image_uploads.storage import BlobStorage, CloudinaryBlobStorage


@lru_cache(maxsize=1)
def _cloudinary_storage() -> CloudinaryBlobStorage:
    return CloudinaryBlobStorage(media_settings.CLOUDINARY_CLOUD_NAME, media_settings.CLOUDINARY_API_KEY,
                                 media_settings.CLOUDINARY_API_SECRET)


def get_blob_storage() -> BlobStorage:
    return _cloudinary_storage()
