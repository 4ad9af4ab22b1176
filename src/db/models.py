# provide dataclass models
from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

OrderStatus = Literal["pending", "completed", "cancelled"]
ORDER_STATUSES = ("pending", "completed", "cancelled")


def parse_timestamp(val: Any) -> Optional[datetime]:
    """datetime, ISO-8601 string (a trailing Z included) or None."""
    if isinstance(val, datetime):
        return val
    if not isinstance(val, str) or not val.strip():
        return None
    text = val.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _to_float(val: Any) -> Optional[float]:
    if isinstance(val, bool):
        return None
    try:
        out = float(val)
    except (TypeError, ValueError):
        return None
    return out if out == out else None  # NaN


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    stock: int
    category: str = ""
    description: str = ""
    name_ar: Optional[str] = None
    description_ar: Optional[str] = None
    category_ar: Optional[str] = None
    images: Tuple[str, ...] = ()
    is_active: bool = True
    views: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        if not math.isfinite(self.price):
            raise ValueError(f"Product {self.id}: price must be a finite number.")
        if self.price < 0:
            raise ValueError(f"Product {self.id}: price cannot be negative.")
        if self.stock < 0:
            raise ValueError(f"Product {self.id}: stock cannot be negative.")

    def localized(self, attr: Literal["name", "description", "category"], lang: str) -> str:
        """Arabic variant of name/description/category when asked for and present."""
        if lang == "ar":
            value = getattr(self, f"{attr}_ar")
            if value:
                return value
        return getattr(self, attr)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["images"] = list(self.images)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Product":
        """
        Build from a JSON object or a database row mapping.
        Raises KeyError/TypeError/ValueError on unusable input.
        """
        images = data.get("images") or ()
        if isinstance(images, str):
            images = json.loads(images)
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            price=float(data["price"]),
            stock=int(data["stock"]),
            category=data.get("category") or "",
            description=data.get("description") or "",
            name_ar=data.get("name_ar"),
            description_ar=data.get("description_ar"),
            category_ar=data.get("category_ar"),
            images=tuple(str(i) for i in images),
            is_active=bool(data.get("is_active", True)),
            views=int(data.get("views") or 0),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    product_name: str
    quantity: int
    price: float  # unit price at time of order

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class OrderRecord:
    items: Tuple[OrderItem, ...]
    total: Optional[float]
    status: OrderStatus = "pending"
    source: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderRecord":
        """
        Tolerant parse of a stored order. A bad timestamp or total becomes None,
        bad item entries are dropped; the record itself is always produced.
        """
        raw_items = row.get("items")
        if isinstance(raw_items, str):
            try:
                raw_items = json.loads(raw_items)
            except ValueError:
                raw_items = []
        items = []
        for raw in raw_items if isinstance(raw_items, list) else []:
            if not isinstance(raw, Mapping):
                continue
            price = _to_float(raw.get("price"))
            try:
                quantity = int(raw.get("quantity"))
            except (TypeError, ValueError):
                continue
            if price is None or raw.get("product_id") is None:
                continue
            items.append(
                OrderItem(
                    product_id=str(raw["product_id"]),
                    product_name=str(raw.get("product_name") or raw["product_id"]),
                    quantity=quantity,
                    price=price,
                )
            )
        status = row.get("status")
        return cls(
            id=None if row.get("id") is None else str(row["id"]),
            items=tuple(items),
            total=_to_float(row.get("total")),
            status=status if status in ORDER_STATUSES else "pending",
            source=row.get("source") or None,
            created_at=parse_timestamp(row.get("created_at")),
        )


@dataclass(frozen=True)
class StoreSettings:
    name: str = "Ma Boutique"
    name_ar: Optional[str] = "متجري"
    whatsapp_number: str = "+212600000000"
    address: str = "123 Rue Mohammed V, Casablanca"
    address_ar: Optional[str] = "123 شارع محمد الخامس، الدار البيضاء"
    email: str = "contact@maboutique.com"
    social_links: Dict[str, str] = field(
        default_factory=lambda: {
            "facebook": "https://facebook.com/maboutique",
            "instagram": "https://instagram.com/maboutique",
        }
    )
    logo: Optional[str] = None
    welcome_message: str = (
        "Bienvenue dans notre boutique ! Découvrez nos produits de qualité."
    )
    welcome_message_ar: Optional[str] = (
        "مرحباً بكم في متجرنا! اكتشفوا منتجاتنا عالية الجودة."
    )

    def localized(self, attr: str, lang: str) -> str:
        if lang == "ar":
            value = getattr(self, f"{attr}_ar", None)
            if value:
                return value
        return getattr(self, attr)


@dataclass(frozen=True)
class Visit:
    page: str
    product_id: Optional[str] = None
    source: Optional[str] = None
    referrer: str = ""
    created_at: Optional[datetime] = None
