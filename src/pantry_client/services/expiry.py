"""Category-driven default expiration dates."""

from datetime import date, timedelta

DEFAULT_EXPIRATION_DAYS: dict[str, int] = {
    "Produce": 7,
    "Fruits": 7,
    "Vegetables": 7,
    "Dairy": 10,
    "Meat": 3,
    "Seafood": 2,
    "Grains & Pasta": 180,
    "Bakery": 5,
    "Canned & Jarred": 365,
    "Frozen": 180,
    "Snacks": 60,
    "Beverages": 30,
    "Spices & Herbs": 365,
    "Baking": 180,
    "Condiments & Sauces": 90,
    "Oils & Vinegars": 180,
    "Breakfast & Cereal": 90,
    "Legumes & Nuts": 120,
    "Sweets & Desserts": 30,
    "Household": 365,
    "Other": 30,
}

_DAYS_BY_KEY = {name.casefold(): days for name, days in DEFAULT_EXPIRATION_DAYS.items()}


def default_expiration(category: str | None, today: date) -> date | None:
    """Return the default expiry for a category, or None when it has none."""
    if not category:
        return None
    days = _DAYS_BY_KEY.get(category.strip().casefold())
    if days is None:
        return None
    return today + timedelta(days=days)
