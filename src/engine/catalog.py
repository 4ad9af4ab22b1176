# client-side filtering and stats over an already fetched product list
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from db.models import Product

LOW_STOCK_THRESHOLD = 5


@dataclass(frozen=True)
class InventoryStats:
    active_products: int
    total_stock: int
    stock_value: float
    low_stock: int


def filter_products(
    products: Iterable[Product],
    category: str = "",
    price_range: Optional[Tuple[float, float]] = None,
    query: str = "",
    active_only: bool = True,
    lang: str = "fr",
) -> List[Product]:
    """
    Products matching every given criterion, input order preserved.

    category is compared against the localized category; query is a
    case-insensitive substring of the localized name or description.
    """
    needle = (query or "").strip().lower()
    result = []
    for p in products:
        if active_only and not p.is_active:
            continue
        if category and p.localized("category", lang) != category:
            continue
        if price_range and not price_range[0] <= p.price <= price_range[1]:
            continue
        if needle and not (
            needle in p.localized("name", lang).lower()
            or needle in p.localized("description", lang).lower()
        ):
            continue
        result.append(p)
    return result


def categories(products: Iterable[Product], lang: str = "fr") -> List[str]:
    """Distinct non-empty categories of active products, first seen first."""
    seen = {}
    for p in products:
        cat = p.localized("category", lang)
        if p.is_active and cat:
            seen.setdefault(cat, None)
    return list(seen)


def max_price(products: Iterable[Product]) -> float:
    return max((p.price for p in products), default=0.0)


def low_stock(products: Iterable[Product], threshold: int = LOW_STOCK_THRESHOLD) -> List[Product]:
    return [p for p in products if p.stock <= threshold]


def most_viewed(products: Iterable[Product], n: int = 5) -> List[Product]:
    return sorted(products, key=lambda p: p.views, reverse=True)[:n]


def inventory_stats(products: Iterable[Product]) -> InventoryStats:
    products = list(products)
    return InventoryStats(
        active_products=sum(1 for p in products if p.is_active),
        total_stock=sum(p.stock for p in products),
        stock_value=sum(p.price * p.stock for p in products),
        low_stock=len(low_stock(products)),
    )
