from storefront.chat.constants import HISTORY_LIMIT
from storefront.chat.models import ChatLimits
from storefront.config.settings import config_settings
from storefront.image_uploads.utils import max_image_bytes


def chat_limits() -> ChatLimits:
    return ChatLimits(max_image_bytes=max_image_bytes(config_settings.MAX_CHAT_IMAGE_MB),
                      history_limit=HISTORY_LIMIT)
