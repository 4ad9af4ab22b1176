"""
Checkout: an order draft saved best-effort plus a pre-filled WhatsApp link.

There is no payment step. The message carries the whole order, so failing to
save the order record never stops the handoff to the messenger.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional
from urllib.parse import parse_qs, quote, urlsplit

from db.models import OrderItem, OrderRecord, StoreSettings
from engine.cart import CartEngine
from utils.logger import get_logger

_logger = get_logger(__name__)

WHATSAPP_BASE_URL = "https://wa.me/"

OrderWriter = Callable[[OrderRecord], Awaitable[str]]


@dataclass(frozen=True)
class CheckoutResult:
    url: str
    message: str
    order_id: Optional[str] = None  # None when the order store write failed


def build_order_draft(cart: CartEngine, source: Optional[str] = None) -> OrderRecord:
    """Snapshot of the cart lines, without id or timestamp."""
    return OrderRecord(
        items=tuple(
            OrderItem(
                product_id=line.product.id,
                product_name=line.product.name,
                quantity=line.quantity,
                price=line.product.price,
            )
            for line in cart.items
        ),
        total=cart.get_total_price(),
        source=source,
        status="pending",
    )


def whatsapp_url(number: str, message: str) -> str:
    digits = re.sub(r"[^0-9]", "", number)
    return f"{WHATSAPP_BASE_URL}{digits}?text={quote(message, safe='')}"


def source_from_url(url: Optional[str]) -> Optional[str]:
    """The `source` query parameter of an inbound link, if any."""
    if not url:
        return None
    values = parse_qs(urlsplit(url).query).get("source")
    return values[0] if values and values[0] else None


async def checkout(
    cart: CartEngine,
    order_writer: OrderWriter,
    settings: StoreSettings,
    source: Optional[str] = None,
    lang: str = "fr",
) -> CheckoutResult:
    """
    Save the order (best-effort) and return the messenger link.

    The cart is left untouched; it is cleared by the caller once the user
    confirms the message was sent.
    """
    message = cart.get_cart_message(lang)
    order_id = None
    if cart.items:
        try:
            order_id = await order_writer(build_order_draft(cart, source))
        except Exception:
            # failures of the injected writer are logged, never raised
            _logger.exception("Error saving order, continuing to WhatsApp.")
    return CheckoutResult(
        url=whatsapp_url(settings.whatsapp_number, message),
        message=message,
        order_id=order_id,
    )
