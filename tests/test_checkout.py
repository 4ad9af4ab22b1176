import os
import sys
import unittest
from urllib.parse import unquote

import aiosqlite

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.models import OrderRecord, Product, StoreSettings  # noqa: E402
from db.storage import MemoryStorage  # noqa: E402
from engine.cart import CartEngine  # noqa: E402
from engine.checkout import (  # noqa: E402
    build_order_draft,
    checkout,
    source_from_url,
    whatsapp_url,
)


def make_cart() -> CartEngine:
    cart = CartEngine(MemoryStorage())
    cart.add_to_cart(Product(id="1", name="T-Shirt", price=150, stock=10), 2)
    cart.add_to_cart(Product(id="2", name="Sac & Co", price=480, stock=3), 1)
    return cart


class WhatsappUrlTestCase(unittest.TestCase):
    def test_number_keeps_digits_only(self):
        url = whatsapp_url("+212 600-000 000", "hi")
        self.assertTrue(url.startswith("https://wa.me/212600000000?text="))

    def test_message_is_fully_encoded(self):
        message = "Bonjour & merci\n- 2x T-Shirt – 300 MAD?"
        url = whatsapp_url("212600000000", message)
        encoded = url.split("?text=", 1)[1]
        for raw in (" ", "&", "\n", "?", "–"):
            self.assertNotIn(raw, encoded)
        self.assertEqual(unquote(encoded), message)


class SourceFromUrlTestCase(unittest.TestCase):
    def test_source_parameter(self):
        self.assertEqual(source_from_url("https://shop.ma/?source=instagram&x=1"), "instagram")

    def test_missing_or_empty(self):
        self.assertIsNone(source_from_url(None))
        self.assertIsNone(source_from_url(""))
        self.assertIsNone(source_from_url("https://shop.ma/products"))
        self.assertIsNone(source_from_url("https://shop.ma/?source="))


class BuildOrderDraftTestCase(unittest.TestCase):
    def test_draft_snapshots_cart(self):
        draft = build_order_draft(make_cart(), source="facebook")
        self.assertEqual(draft.total, 780)
        self.assertEqual(draft.status, "pending")
        self.assertEqual(draft.source, "facebook")
        self.assertIsNone(draft.id)
        self.assertEqual(
            [(i.product_id, i.quantity, i.price) for i in draft.items],
            [("1", 2, 150), ("2", 1, 480)],
        )


class CheckoutTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_order_saved_and_url_returned(self):
        cart = make_cart()
        saved = []

        async def writer(draft: OrderRecord) -> str:
            saved.append(draft)
            return "order-1"

        result = await checkout(cart, writer, StoreSettings(), source="instagram")
        self.assertEqual(result.order_id, "order-1")
        self.assertEqual(result.message, cart.get_cart_message())
        self.assertEqual(result.url, whatsapp_url("+212600000000", result.message))
        self.assertEqual(saved[0].source, "instagram")
        self.assertEqual(cart.get_total_items(), 3, "checkout must not clear the cart")

    async def test_writer_failure_still_yields_url(self):
        cart = make_cart()

        async def failing_writer(draft: OrderRecord) -> str:
            raise aiosqlite.OperationalError("database is locked")

        with self.assertLogs("engine.checkout", level="ERROR"):
            result = await checkout(cart, failing_writer, StoreSettings())
        self.assertIsNone(result.order_id)
        self.assertTrue(result.url.startswith("https://wa.me/212600000000?text="))
        self.assertEqual(unquote(result.url.split("?text=", 1)[1]), cart.get_cart_message())

    async def test_unexpected_writer_error_still_yields_url(self):
        cart = make_cart()

        async def unreachable_writer(draft: OrderRecord) -> str:
            raise RuntimeError("store unreachable")

        with self.assertLogs("engine.checkout", level="ERROR") as logs:
            result = await checkout(cart, unreachable_writer, StoreSettings())
        self.assertIsInstance(logs.records[0].exc_info[1], RuntimeError)
        self.assertIsNone(result.order_id)
        self.assertEqual(result.message, cart.get_cart_message())
        self.assertEqual(result.url, whatsapp_url("+212600000000", result.message))

    async def test_empty_cart_writes_nothing(self):
        calls = []

        async def writer(draft: OrderRecord) -> str:
            calls.append(draft)
            return "never"

        result = await checkout(CartEngine(MemoryStorage()), writer, StoreSettings())
        self.assertEqual(calls, [])
        self.assertEqual(result.message, "")
        self.assertIsNone(result.order_id)


if __name__ == "__main__":
    unittest.main()
