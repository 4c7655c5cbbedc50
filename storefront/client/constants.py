from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.client")

POLL_INTERVAL_SECONDS = 2.0
REQUEST_TIMEOUT_SECONDS = 10.0
MESSAGES_PATH = "/api/customer/messages"

# base64 data URL ceiling for a prepared photo
MAX_PHOTO_DATA_URL_CHARS = 1_800_000
