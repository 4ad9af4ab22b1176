import os
import sys
import unittest
from datetime import date, datetime, timedelta, timezone

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.models import OrderItem, OrderRecord  # noqa: E402
from engine.analytics import (  # noqa: E402
    aggregate,
    daily_windows,
    monthly_windows,
    sample_snapshot,
    weekly_windows,
)

NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)


def order(total, days_ago=0, items=(), created_at="auto"):
    if created_at == "auto":
        created_at = NOW - timedelta(days=days_ago)
    return OrderRecord(items=tuple(items), total=total, created_at=created_at)


def item(pid, price, quantity, name=None):
    return OrderItem(product_id=pid, product_name=name or pid, quantity=quantity, price=price)


class AggregateTestCase(unittest.TestCase):
    def test_empty_input(self):
        snap = aggregate([], now=NOW)
        self.assertEqual(snap.total_sales, 0)
        self.assertEqual(snap.total_orders, 0)
        self.assertEqual(snap.average_order_value, 0)
        self.assertEqual(snap.top_products, [])
        self.assertEqual([len(snap.daily), len(snap.weekly), len(snap.monthly)], [7, 4, 6])
        for series in (snap.daily, snap.weekly, snap.monthly):
            self.assertTrue(all(b.sales == 0 and b.orders == 0 for b in series))
        self.assertFalse(snap.is_sample)

    def test_summary(self):
        snap = aggregate([order(100), order(250, 3), order(50, 40)], now=NOW)
        self.assertEqual(snap.total_sales, 400)
        self.assertEqual(snap.total_orders, 3)
        self.assertAlmostEqual(snap.average_order_value, 400 / 3)

    def test_top_products_ranked_by_revenue(self):
        orders = [
            order(200, items=[item("A", 100, 2)]),
            order(800, items=[item("B", 200, 4)]),
            order(600, items=[item("C", 300, 2)]),
        ]
        snap = aggregate(orders, now=NOW)
        self.assertEqual([p.product_id for p in snap.top_products], ["B", "C", "A"])
        self.assertEqual(snap.top_products[0].quantity, 4)
        self.assertEqual(snap.top_products[0].revenue, 800)

    def test_top_products_merge_and_limit(self):
        orders = [
            order(10, items=[item(str(i), 10 + i, 1) for i in range(7)]),
            order(10, items=[item("0", 10, 5)]),
        ]
        snap = aggregate(orders, now=NOW)
        self.assertEqual(len(snap.top_products), 5)
        self.assertEqual(snap.top_products[0].product_id, "0")
        self.assertEqual(snap.top_products[0].quantity, 6)
        self.assertEqual(snap.top_products[0].revenue, 60)

    def test_top_products_ties_keep_first_seen_order(self):
        orders = [order(10, items=[item("x", 10, 1), item("y", 5, 2)])]
        snap = aggregate(orders, now=NOW)
        self.assertEqual([p.product_id for p in snap.top_products], ["x", "y"])

    def test_daily_window_boundaries(self):
        snap = aggregate([order(10, 6), order(20, 7), order(5, 0)], now=NOW)
        self.assertEqual(sum(b.sales for b in snap.daily), 15)
        self.assertEqual(snap.daily[0].sales, 10)
        self.assertEqual(snap.daily[-1].sales, 5)
        self.assertEqual(snap.daily[-1].label, "19 oct.")
        self.assertEqual(snap.daily[0].label, "13 oct.")

    def test_weekly_buckets(self):
        orders = [order(1, 0), order(2, 6), order(4, 7), order(8, 27), order(16, 28)]
        snap = aggregate(orders, now=NOW)
        self.assertEqual([b.label for b in snap.weekly], ["Sem 1", "Sem 2", "Sem 3", "Sem 4"])
        self.assertEqual([b.sales for b in snap.weekly], [8, 0, 4, 3])
        self.assertEqual([b.orders for b in snap.weekly], [1, 0, 1, 2])

    def test_monthly_buckets(self):
        orders = [
            order(1, created_at=datetime(2026, 10, 1, tzinfo=timezone.utc)),
            order(2, created_at=datetime(2026, 9, 30, tzinfo=timezone.utc)),
            order(4, created_at=datetime(2026, 5, 1, tzinfo=timezone.utc)),
            order(8, created_at=datetime(2026, 4, 30, tzinfo=timezone.utc)),
        ]
        snap = aggregate(orders, now=NOW)
        self.assertEqual(snap.monthly[0].label, "mai 26")
        self.assertEqual(snap.monthly[-1].label, "oct. 26")
        self.assertEqual([b.sales for b in snap.monthly], [4, 0, 0, 0, 2, 1])
        self.assertEqual(snap.total_sales, 15)

    def test_malformed_records(self):
        orders = [
            OrderRecord.from_row({"items": "not json", "total": "abc", "created_at": "x"}),
            OrderRecord.from_row({"items": "[]", "total": 30, "created_at": "garbage"}),
            OrderRecord.from_row(
                {"items": "[]", "total": "20", "created_at": "2026-10-19T09:00:00Z"}
            ),
        ]
        snap = aggregate(orders, now=NOW)
        self.assertEqual(snap.total_orders, 2)
        self.assertEqual(snap.total_sales, 50)
        self.assertEqual(sum(b.sales for b in snap.daily), 20)
        self.assertEqual(sum(b.orders for b in snap.monthly), 1)

    def test_timestamps_read_in_reference_timezone(self):
        casablanca = timezone(timedelta(hours=1))
        now = datetime(2026, 10, 19, 12, 0, tzinfo=casablanca)
        # 23:30 UTC on the 18th is already the 19th at UTC+1
        late = order(7, created_at=datetime(2026, 10, 18, 23, 30, tzinfo=timezone.utc))
        snap = aggregate([late], now=now)
        self.assertEqual(snap.daily[-1].sales, 7)

    def test_arabic_labels(self):
        snap = aggregate([], now=NOW, lang="ar")
        self.assertEqual(snap.weekly[0].label, "الأسبوع 1")
        self.assertEqual(snap.monthly[-1].label, "أكتوبر 26")


class WindowsTestCase(unittest.TestCase):
    def test_windows_are_contiguous(self):
        today = date(2026, 3, 2)
        for windows in (daily_windows(today), weekly_windows(today), monthly_windows(today)):
            for (_, _, end), (_, start, _) in zip(windows, windows[1:]):
                self.assertEqual(end + timedelta(days=1), start)
            self.assertGreaterEqual(windows[-1][2], today)

    def test_monthly_windows_cross_year(self):
        windows = monthly_windows(date(2026, 2, 14))
        self.assertEqual(windows[0][1], date(2025, 9, 1))
        self.assertEqual(windows[3][2], date(2025, 12, 31))
        self.assertEqual(windows[-1][2], date(2026, 2, 28))
        self.assertEqual(windows[0][0], "sept. 25")


class SampleSnapshotTestCase(unittest.TestCase):
    def test_sample_is_flagged_and_shaped(self):
        snap = sample_snapshot(now=NOW)
        self.assertTrue(snap.is_sample)
        self.assertEqual(snap.total_orders, 42)
        self.assertEqual(len(snap.top_products), 5)
        self.assertEqual([len(snap.daily), len(snap.weekly), len(snap.monthly)], [7, 4, 6])
        self.assertIs(snap.series("weekly"), snap.weekly)
        self.assertIs(snap.series("unknown"), snap.daily)


if __name__ == "__main__":
    unittest.main()
