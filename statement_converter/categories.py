"""Static category taxonomy and known-merchant table.

Both tables are read-only module constants. Dict order is significant: the
classifier walks them top to bottom and the first hit wins, so longer or more
specific keys are listed before the shorter keys they contain
('uber eats' before 'uber', 'amazon prime' before 'amazon').
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class TransactionCategory:
    id: str
    name: str
    parent: Optional[str] = None
    keywords: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MerchantInfo:
    name: str
    category: str
    subcategory: Optional[str] = None
    is_subscription: bool = False


def _cat(id: str, name: str, parent: Optional[str] = None, keywords: Tuple[str, ...] = ()) -> TransactionCategory:
    return TransactionCategory(id=id, name=name, parent=parent, keywords=keywords)


_CATEGORY_LIST: List[TransactionCategory] = [
    # Income
    _cat("income", "Income"),
    _cat("salary", "Salary", "income", ("salary", "payroll", "wage", "compensation")),
    _cat("investment_income", "Investment Income", "income", ("dividend", "interest", "capital gain", "investment return")),
    _cat("freelance", "Freelance/Business", "income", ("invoice", "payment", "client", "project")),
    # Food & Dining
    _cat("food_dining", "Food & Dining"),
    _cat("groceries", "Groceries", "food_dining", ("grocery", "supermarket", "market")),
    _cat("restaurants", "Restaurants", "food_dining", ("restaurant", "dining", "eat", "food")),
    _cat("coffee_tea", "Coffee & Tea", "food_dining", ("coffee", "cafe", "tea")),
    _cat("takeout_delivery", "Takeout & Delivery", "food_dining", ("delivery", "takeout", "takeaway")),
    # Transportation
    _cat("transportation", "Transportation"),
    _cat("fuel", "Fuel", "transportation", ("gas", "fuel", "petrol", "diesel")),
    _cat("public_transport", "Public Transport", "transportation", ("metro", "subway", "bus", "train", "tube", "tfl")),
    _cat("rideshare", "Rideshare & Taxi", "transportation", ("taxi", "cab", "ride")),
    _cat("parking", "Parking", "transportation", ("parking", "park")),
    # Shopping
    _cat("shopping", "Shopping"),
    _cat("online", "Online Shopping", "shopping"),
    _cat("clothing", "Clothing & Accessories", "shopping", ("clothes", "clothing", "apparel", "fashion", "shoes")),
    _cat("electronics", "Electronics", "shopping", ("electronics", "computer", "phone", "gadget")),
    _cat("home_garden", "Home & Garden", "shopping", ("furniture", "home", "garden", "decor")),
    # Entertainment & Subscriptions
    _cat("entertainment", "Entertainment"),
    _cat("streaming", "Streaming Services", "entertainment", ("streaming", "subscription")),
    _cat("gaming", "Gaming", "entertainment", ("game", "gaming", "playstation", "xbox", "nintendo")),
    _cat("events", "Events & Activities", "entertainment", ("ticket", "concert", "movie", "theatre", "event")),
    # Bills & Utilities
    _cat("bills_utilities", "Bills & Utilities"),
    _cat("rent_mortgage", "Rent/Mortgage", "bills_utilities", ("rent", "mortgage", "housing")),
    _cat("utilities", "Utilities", "bills_utilities", ("electric", "gas", "water", "utility", "power")),
    _cat("internet_phone", "Internet & Phone", "bills_utilities", ("internet", "broadband", "phone", "mobile", "cellular")),
    # Healthcare
    _cat("healthcare", "Healthcare"),
    _cat("medical", "Medical", "healthcare", ("doctor", "hospital", "clinic", "medical")),
    _cat("pharmacy", "Pharmacy", "healthcare", ("pharmacy", "drug", "medicine", "prescription")),
    # Financial
    _cat("financial", "Financial"),
    _cat("banking_fees", "Banking Fees", "financial", ("fee", "charge", "overdraft", "atm")),
    _cat("investments", "Investments", "financial", ("investment", "stock", "trading", "crypto", "bitcoin")),
    _cat("savings", "Savings", "financial", ("savings", "save", "deposit")),
    _cat("transfers", "Transfers", "financial", ("transfer", "payment", "send", "receive")),
    _cat("insurance", "Insurance", "financial", ("insurance", "policy", "premium", "coverage", "deductible")),
    # Other
    _cat("other", "Other"),
]

TRANSACTION_CATEGORIES: Dict[str, TransactionCategory] = {c.id: c for c in _CATEGORY_LIST}


def _m(name: str, category: str, subcategory: Optional[str] = None, is_subscription: bool = False) -> MerchantInfo:
    return MerchantInfo(name=name, category=category, subcategory=subcategory, is_subscription=is_subscription)


MERCHANT_DATABASE: Dict[str, MerchantInfo] = {
    # Streaming services (subscriptions)
    "netflix": _m("Netflix", "entertainment", "streaming", True),
    "spotify": _m("Spotify", "entertainment", "streaming", True),
    "apple music": _m("Apple Music", "entertainment", "streaming", True),
    "disney plus": _m("Disney+", "entertainment", "streaming", True),
    "disney+": _m("Disney+", "entertainment", "streaming", True),
    "hulu": _m("Hulu", "entertainment", "streaming", True),
    "hbo max": _m("HBO Max", "entertainment", "streaming", True),
    "prime video": _m("Prime Video", "entertainment", "streaming", True),
    "amazon prime": _m("Amazon Prime", "entertainment", "streaming", True),
    "youtube premium": _m("YouTube Premium", "entertainment", "streaming", True),
    # Food delivery
    "uber eats": _m("Uber Eats", "food_dining", "takeout_delivery"),
    "deliveroo": _m("Deliveroo", "food_dining", "takeout_delivery"),
    "just eat": _m("Just Eat", "food_dining", "takeout_delivery"),
    "doordash": _m("DoorDash", "food_dining", "takeout_delivery"),
    "grubhub": _m("Grubhub", "food_dining", "takeout_delivery"),
    # Coffee shops
    "starbucks": _m("Starbucks", "food_dining", "coffee_tea"),
    "costa coffee": _m("Costa Coffee", "food_dining", "coffee_tea"),
    "pret a manger": _m("Pret A Manger", "food_dining", "coffee_tea"),
    "caffe nero": _m("Caffè Nero", "food_dining", "coffee_tea"),
    # Supermarkets
    "tesco": _m("Tesco", "food_dining", "groceries"),
    "sainsburys": _m("Sainsbury's", "food_dining", "groceries"),
    "sainsbury's": _m("Sainsbury's", "food_dining", "groceries"),
    "asda": _m("ASDA", "food_dining", "groceries"),
    "morrisons": _m("Morrisons", "food_dining", "groceries"),
    "waitrose": _m("Waitrose", "food_dining", "groceries"),
    "aldi": _m("Aldi", "food_dining", "groceries"),
    "lidl": _m("Lidl", "food_dining", "groceries"),
    "whole foods": _m("Whole Foods", "food_dining", "groceries"),
    "walmart": _m("Walmart", "food_dining", "groceries"),
    # Transportation
    "uber": _m("Uber", "transportation", "rideshare"),
    "lyft": _m("Lyft", "transportation", "rideshare"),
    "bolt": _m("Bolt", "transportation", "rideshare"),
    "transport for london": _m("Transport for London", "transportation", "public_transport"),
    "tfl": _m("TfL", "transportation", "public_transport"),
    # Retail
    "amazon": _m("Amazon", "shopping", "online"),
    "apple": _m("Apple", "shopping", "electronics"),
    "ikea": _m("IKEA", "shopping", "home_garden"),
    "zara": _m("Zara", "shopping", "clothing"),
    "h&m": _m("H&M", "shopping", "clothing"),
    "uniqlo": _m("Uniqlo", "shopping", "clothing"),
    "nike": _m("Nike", "shopping", "clothing"),
    "adidas": _m("Adidas", "shopping", "clothing"),
    # Utilities & services
    "ee": _m("EE", "bills_utilities", "internet_phone", True),
    "o2": _m("O2", "bills_utilities", "internet_phone", True),
    "vodafone": _m("Vodafone", "bills_utilities", "internet_phone", True),
    "three": _m("Three", "bills_utilities", "internet_phone", True),
    "bt": _m("BT", "bills_utilities", "internet_phone", True),
    "virgin media": _m("Virgin Media", "bills_utilities", "internet_phone", True),
    # Gaming
    "steam": _m("Steam", "entertainment", "gaming"),
    "playstation": _m("PlayStation", "entertainment", "gaming"),
    "xbox": _m("Xbox", "entertainment", "gaming"),
    "nintendo": _m("Nintendo", "entertainment", "gaming"),
    # Card fees
    "membership fee": _m("American Express Fee", "financial", "banking_fees"),
    "annual fee": _m("American Express Fee", "financial", "banking_fees"),
    "amex annual": _m("American Express Fee", "financial", "banking_fees"),
    "foreign transaction fee": _m("Foreign Transaction Fee", "financial", "banking_fees"),
    # Insurance
    "aviva": _m("Aviva", "financial", "insurance"),
    "axa": _m("AXA", "financial", "insurance"),
    "admiral": _m("Admiral", "financial", "insurance"),
    "direct line": _m("Direct Line", "financial", "insurance"),
    "churchill": _m("Churchill", "financial", "insurance"),
    "geico": _m("GEICO", "financial", "insurance"),
    "state farm": _m("State Farm", "financial", "insurance"),
    "allstate": _m("Allstate", "financial", "insurance"),
}


def get_category_info(category_id: str) -> TransactionCategory:
    return TRANSACTION_CATEGORIES.get(category_id) or TRANSACTION_CATEGORIES["other"]


def get_all_categories() -> List[TransactionCategory]:
    """Top-level categories only."""
    return [c for c in TRANSACTION_CATEGORIES.values() if c.parent is None]


def get_subcategories(parent_id: str) -> List[TransactionCategory]:
    return [c for c in TRANSACTION_CATEGORIES.values() if c.parent == parent_id]
