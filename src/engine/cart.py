"""
Client-side cart.

The cart is owned by one session, lives in memory and is written to durable
local storage after every mutation. Quantities are clamped to stock rather
than rejected: asking for more than is available silently gives what is
available. Callers that want to warn the user compare the quantity before and
after the call.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from db.models import Product
from db.storage import KeyValueStorage, StorageError
from engine.signals import Signal
from utils.i18n import t
from utils.logger import get_logger
from utils.pure import format_money

_logger = get_logger(__name__)

CART_STORAGE_KEY = "store_cart"


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


class CartEngine:
    """
    Ordered collection of cart lines, unique by product id.

    Invariant after every public call: each line has 0 < quantity <= stock.
    """

    def __init__(self, storage: KeyValueStorage, currency: str = "MAD") -> None:
        self._storage = storage
        self.currency = currency
        self.changed = Signal("cart_changed")
        self._lines: List[CartLine] = self._load()

    # ---------------------------
    # Persistence
    # ---------------------------

    def _load(self) -> List[CartLine]:
        try:
            raw = self._storage.get(CART_STORAGE_KEY)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored cart is not a list")
            lines = []
            for entry in data:
                if not isinstance(entry, dict) or not isinstance(entry.get("product"), dict):
                    raise ValueError(f"malformed cart entry {entry!r}")
                lines.append((Product.from_dict(entry["product"]), int(entry["quantity"])))
        except (
            StorageError,
            ValueError,
            TypeError,
            KeyError,
            AttributeError,
            OverflowError,
        ) as e:
            _logger.warning(f"Discarding unreadable stored cart: {e}")
            return []
        return _normalize(lines)

    def _save(self) -> None:
        payload = json.dumps(
            [
                {"product": line.product.to_dict(), "quantity": line.quantity}
                for line in self._lines
            ],
            ensure_ascii=False,
        )
        try:
            self._storage.set(CART_STORAGE_KEY, payload)
        except StorageError as e:
            _logger.error(f"Cart could not be persisted: {e}")

    def _commit(self, lines: List[CartLine]) -> None:
        self._lines = lines
        self._save()
        self.changed.emit(self)

    # ---------------------------
    # Mutations
    # ---------------------------

    def add_to_cart(self, product: Product, quantity: int = 1) -> None:
        lines = list(self._lines)
        for i, line in enumerate(lines):
            if line.product.id == product.id:
                new_qty = min(line.quantity + quantity, product.stock)
                if new_qty > 0:
                    lines[i] = CartLine(product, new_qty)
                else:
                    del lines[i]
                break
        else:
            new_qty = min(quantity, product.stock)
            if new_qty > 0:
                lines.append(CartLine(product, new_qty))
        self._commit(lines)

    def remove_from_cart(self, product_id: str) -> None:
        self._commit([line for line in self._lines if line.product.id != product_id])

    def update_quantity(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_from_cart(product_id)
            return
        lines = []
        for line in self._lines:
            if line.product.id == product_id:
                new_qty = min(quantity, line.product.stock)
                if new_qty <= 0:
                    continue
                line = CartLine(line.product, new_qty)
            lines.append(line)
        self._commit(lines)

    def clear_cart(self) -> None:
        self._commit([])

    def refresh_products(self, products: Iterable[Product]) -> bool:
        """
        Re-bind lines to fresh catalog rows so prices and stock are current.
        Lines whose product vanished or ran out are dropped. Returns True and
        persists when anything changed.
        """
        by_id = {p.id: p for p in products}
        lines = []
        for line in self._lines:
            fresh = by_id.get(line.product.id)
            if fresh is None or fresh.stock <= 0:
                continue
            lines.append(CartLine(fresh, min(line.quantity, fresh.stock)))
        if lines == self._lines:
            return False
        self._commit(lines)
        return True

    # ---------------------------
    # Queries
    # ---------------------------

    @property
    def items(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def find_line(self, product_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.product.id == product_id:
                return line
        return None

    def get_total_price(self) -> float:
        return sum(line.line_total for line in self._lines)

    def get_total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    def get_cart_message(self, lang: str = "fr") -> str:
        """
        The order text handed to the messenger, byte for byte. Empty cart
        gives "".
        """
        if not self._lines:
            return ""
        lines = [t("order_greeting", lang)]
        lines += [
            f"- {line.quantity}x {line.product.localized('name', lang)} – "
            f"{format_money(line.line_total, self.currency)}"
            for line in self._lines
        ]
        lines += [
            "",
            f"{t('order_total', lang)}: {format_money(self.get_total_price(), self.currency)}",
            "",
            f"{t('order_name', lang)}: _____",
            f"{t('order_address', lang)}: _____",
            f"{t('order_phone', lang)}: _____",
        ]
        return "\n".join(lines)

    def on_change(self, callback: Callable[["CartEngine"], None]) -> Callable[[], None]:
        """Subscribe to mutations; returns the unsubscribe function."""
        return self.changed.connect(callback)

    def __len__(self) -> int:
        return len(self._lines)


def _normalize(entries: List[Tuple[Product, int]]) -> List[CartLine]:
    # duplicates fold into their first occurrence, then everything is clamped
    merged: Dict[str, List] = {}
    for product, quantity in entries:
        if product.id in merged:
            merged[product.id][1] += quantity
        else:
            merged[product.id] = [product, quantity]
    lines = []
    for product, quantity in merged.values():
        quantity = min(quantity, product.stock)
        if quantity > 0:
            lines.append(CartLine(product, quantity))
    return lines
