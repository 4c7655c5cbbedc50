from storefront.common.logging_setup import get_logger
from storefront.config.settings import config_settings

logger = get_logger("storefront.chat")

MAX_TEXT_LENGTH = 2000
HISTORY_LIMIT = config_settings.CHAT_HISTORY_LIMIT if config_settings.CHAT_HISTORY_LIMIT > 0 else 300
