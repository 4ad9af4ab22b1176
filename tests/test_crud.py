import os
import sys
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

import aiosqlite

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import crud  # noqa: E402
from db import database as db_database  # noqa: E402
from db.models import OrderItem, OrderRecord  # noqa: E402


class CrudTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the DB to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database.reset(self.db_path)

    async def asyncSetUp(self):
        # Touch initialization by opening a connection
        async with db_database.connect() as conn:
            cur = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table';"
            )
            await cur.fetchall()
            await cur.close()

    def tearDown(self):
        self.temp_dir.cleanup()

    # ---------- Products ----------

    async def test_seeded_products_newest_first(self):
        products = await crud.list_products()
        self.assertEqual([p.id for p in products], ["3", "2", "1"])
        shirt = await crud.get_product("1")
        self.assertEqual(shirt.name, "T-Shirt Premium")
        self.assertEqual(shirt.localized("name", "ar"), "تيشيرت فاخر")
        self.assertEqual(shirt.price, 150)
        self.assertEqual(shirt.stock, 25)
        self.assertTrue(shirt.is_active)
        self.assertEqual(len(shirt.images), 1)
        self.assertIsNone(await crud.get_product("missing"))

    async def test_add_update_delete_product(self):
        emitted = []
        unsubscribe = crud.products_changed.connect(lambda: emitted.append(True))
        try:
            pid = await crud.add_product(
                "Bague Argent", 95.5, 3, category="Bijoux", images=["a.jpg", "b.jpg"]
            )
            product = await crud.get_product(pid)
            self.assertEqual(product.views, 0)
            self.assertEqual(product.images, ("a.jpg", "b.jpg"))

            self.assertTrue(await crud.update_product(pid, price=80, is_active=False))
            product = await crud.get_product(pid)
            self.assertEqual(product.price, 80)
            self.assertFalse(product.is_active)

            self.assertFalse(await crud.update_product(pid))
            self.assertFalse(await crud.update_product("missing", stock=1))

            self.assertTrue(await crud.delete_product(pid))
            self.assertIsNone(await crud.get_product(pid))
            self.assertFalse(await crud.delete_product(pid))
        finally:
            unsubscribe()
        self.assertEqual(len(emitted), 3)

    async def test_invalid_product_values(self):
        with self.assertRaises(ValueError):
            await crud.add_product("Bad", -1, 1)
        with self.assertRaises(ValueError):
            await crud.update_product("1", stock=-2)
        with self.assertRaises(ValueError):
            await crud.update_product("1", views=1000)
        self.assertEqual((await crud.get_product("1")).stock, 25)

    async def test_increment_views(self):
        before = (await crud.get_product("3")).views
        await crud.increment_product_views("3")
        await crud.increment_product_views("3")
        self.assertEqual((await crud.get_product("3")).views, before + 2)
        # unknown ids are a silent no-op
        await crud.increment_product_views("missing")

    # ---------- Orders ----------

    async def test_create_and_list_orders(self):
        draft = OrderRecord(
            items=(OrderItem("1", "T-Shirt Premium", 2, 150.0),),
            total=300.0,
            source="instagram",
        )
        order_id = await crud.create_order(draft)
        orders = await crud.list_orders()
        self.assertEqual(len(orders), 1)
        stored = orders[0]
        self.assertEqual(stored.id, order_id)
        self.assertEqual(stored.items, draft.items)
        self.assertEqual(stored.total, 300.0)
        self.assertEqual(stored.source, "instagram")
        self.assertEqual(stored.status, "pending")
        self.assertIsNotNone(stored.created_at.tzinfo)

    async def test_list_orders_range_needs_both_bounds(self):
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        for days_ago in (0, 10, 40):
            await crud.create_order(
                OrderRecord(items=(), total=float(days_ago), created_at=now - timedelta(days=days_ago))
            )
        everything = await crud.list_orders()
        self.assertEqual([o.total for o in everything], [0.0, 10.0, 40.0])

        window = await crud.list_orders(now - timedelta(days=10), now)
        self.assertEqual([o.total for o in window], [0.0, 10.0])

        self.assertEqual(len(await crud.list_orders(start=now)), 3)
        self.assertEqual(len(await crud.list_orders(end=now - timedelta(days=20))), 3)

    async def test_malformed_order_rows_are_tolerated(self):
        async with db_database.connect() as conn:
            await conn.execute(
                "INSERT INTO orders(id, items, total, status, created_at) "
                "VALUES ('bad', 'not json', NULL, 'weird', 'yesterday');"
            )
            await conn.commit()
        (order,) = await crud.list_orders()
        self.assertEqual(order.items, ())
        self.assertIsNone(order.total)
        self.assertIsNone(order.created_at)
        self.assertEqual(order.status, "pending")

    async def test_update_order_status(self):
        order_id = await crud.create_order(OrderRecord(items=(), total=10.0))
        self.assertTrue(await crud.update_order_status(order_id, "completed"))
        self.assertEqual((await crud.list_orders())[0].status, "completed")
        self.assertFalse(await crud.update_order_status("missing", "cancelled"))
        with self.assertRaises(ValueError):
            await crud.update_order_status(order_id, "shipped")

    # ---------- Settings ----------

    async def test_settings_default_then_merge(self):
        settings = await crud.get_store_settings()
        self.assertEqual(settings.name, "Ma Boutique")
        self.assertEqual(settings.whatsapp_number, "+212600000000")

        updated = await crud.update_store_settings(
            whatsapp_number="+212 611 223 344",
            social_links={"twitter": "https://twitter.com/maboutique"},
        )
        self.assertEqual(updated.whatsapp_number, "+212 611 223 344")
        reread = await crud.get_store_settings()
        self.assertEqual(reread, updated)
        self.assertEqual(
            set(reread.social_links), {"facebook", "instagram", "twitter"}
        )

    async def test_corrupt_settings_fall_back_to_defaults(self):
        async with db_database.connect() as conn:
            await conn.execute("INSERT INTO store_settings(id, data) VALUES (1, '{oops');")
            await conn.commit()
        self.assertEqual((await crud.get_store_settings()).name, "Ma Boutique")

    # ---------- Connection ----------

    async def test_connection_closed_when_init_fails(self):
        db_database.reset(os.path.join(self.temp_dir.name, "fresh.sqlite"))
        opened = []
        real_connect = aiosqlite.connect

        def tracking_connect(*args, **kwargs):
            conn = real_connect(*args, **kwargs)
            opened.append(conn)
            return conn

        init_error = aiosqlite.OperationalError("disk I/O error")
        with mock.patch.object(db_database.aiosqlite, "connect", tracking_connect):
            with mock.patch.object(db_database, "_init_db", side_effect=init_error):
                with self.assertRaises(aiosqlite.OperationalError):
                    async with db_database.connect():
                        pass
        self.assertEqual(len(opened), 1)
        self.assertIsNone(opened[0]._connection)
        self.assertFalse(db_database._initialized)

    # ---------- Visits ----------

    async def test_track_and_list_visits(self):
        await crud.track_visit("catalog", source="facebook")
        await crud.track_visit("product", product_id="2", referrer="catalog")
        visits = await crud.list_visits()
        self.assertEqual([v.page for v in visits], ["product", "catalog"])
        self.assertEqual(visits[0].product_id, "2")
        self.assertEqual(visits[1].source, "facebook")
        self.assertIsNotNone(visits[0].created_at)
        self.assertEqual(len(await crud.list_visits(limit=1)), 1)


if __name__ == "__main__":
    unittest.main()
