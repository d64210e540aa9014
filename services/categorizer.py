"""Rule-based transaction categorization."""
from typing import List, Optional, Tuple

from models.transaction import Category

# Ordering matters: the first rule with a matching keyword wins.
CATEGORY_RULES: List[Tuple[Tuple[str, ...], Category]] = [
    (("salary", "deposit", "income"), Category.SALARY),
    (("uber", "lyft", "gas", "shell", "fuel"), Category.TRAVEL),
    (("food", "restaurant", "coffee", "starbucks", "market", "grocery", "whole foods"), Category.FOOD),
    (("netflix", "spotify", "hulu", "subscription", "prime"), Category.SUBSCRIPTIONS),
    (("rent", "apartment", "mortgage"), Category.RENT),
    (("electric", "water", "utility", "internet", "wifi"), Category.UTILITIES),
    (("invest", "vanguard", "stock", "crypto"), Category.INVESTMENTS),
    (("doctor", "pharmacy", "health", "gym", "fitness"), Category.HEALTH),
    (("cinema", "movie", "game", "concert"), Category.ENTERTAINMENT),
    (("store", "amazon", "target", "walmart"), Category.SHOPPING),
]


def categorize(description: str, amount: Optional[float] = None) -> Category:
    """
    Maps a free-text description to a Category by case-insensitive substring match.

    `amount` mirrors the remote classifier's signature and is not used here.
    Never raises; anything without a matching keyword is Other.
    """
    desc_lower = (description or "").lower()
    for keywords, category in CATEGORY_RULES:
        if any(keyword in desc_lower for keyword in keywords):
            return category
    return Category.OTHER


class LocalClassifier:
    """Classifier backed only by the keyword rules."""

    async def classify(self, description: str, amount: Optional[float] = None) -> Category:
        return categorize(description, amount)
