from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.orders")

SALE_CATEGORY = "sale"

# first non-empty wins
CUSTOM_TEXT_FIELDS = (
    "customText",
    "note",
    "customization",
    "customizationNote",
    "personalization",
    "personalizationNote",
)
