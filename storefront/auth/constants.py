from datetime import timedelta
from storefront.config.settings import config_settings
from storefront.config.admin_config import admin_config
from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.auth")

SESSION_VERSION = 1

MAX_SESSION_LIFETIME = timedelta(days=30)
MIN_SESSION_TTL = timedelta(minutes=1)
DEFAULT_SESSION_TTL = min(MAX_SESSION_LIFETIME, max(MIN_SESSION_TTL, timedelta(days=config_settings.SESSION_TTL_DAYS)))
CLOCK_SKEW_TOLERANCE = timedelta(minutes=5)

MIN_SECRET_LENGTH = 32

ORDER_ID_MAX_LENGTH = 128
PHONE_MIN_DIGITS = 8
PHONE_MAX_DIGITS = 15

COOKIE_NAME = config_settings.SESSION_COOKIE_NAME
# cookie and token expire together
COOKIE_MAX_AGE_SECONDS = int(DEFAULT_SESSION_TTL.total_seconds())
secure_cookie = admin_config.ENV == "prod"
