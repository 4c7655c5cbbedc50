from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.cashflow")

CATEGORIES = ("sale", "equipment", "accessory", "material", "other")
MANUAL_IN_CATEGORY = "other"
