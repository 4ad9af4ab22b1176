import os
import sys
import unittest
from datetime import datetime

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.models import Product  # noqa: E402
from db.storage import MemoryStorage  # noqa: E402
from engine.analytics import AnalyticsSnapshot, sample_snapshot  # noqa: E402
from engine.cart import CartEngine  # noqa: E402
from views.modal_checkout import order_summary_markdown  # noqa: E402
from views.scr_admin_analytics import analytics_markdown, granularity_options  # noqa: E402


def make_cart() -> CartEngine:
    cart = CartEngine(MemoryStorage())
    cart.add_to_cart(Product(id="1", name="T-Shirt", name_ar="تيشيرت", price=150, stock=10), 2)
    return cart


class CheckoutSummaryTestCase(unittest.TestCase):
    def test_french_summary(self):
        md = order_summary_markdown(make_cart(), "fr")
        self.assertTrue(md.startswith("### Résumé de la commande"))
        self.assertIn("| Produit | Prix unitaire | Quantité | Total |", md)
        self.assertIn("| T-Shirt | 150 MAD | 2 | 300 MAD |", md)
        self.assertTrue(md.endswith("**Total:** 300 MAD"))

    def test_arabic_summary(self):
        md = order_summary_markdown(make_cart(), "ar", currency="EUR")
        self.assertTrue(md.startswith("### ملخص الطلب"))
        self.assertIn("| المنتج | سعر الوحدة | الكمية | المجموع |", md)
        self.assertIn("| تيشيرت | 150 EUR | 2 | 300 EUR |", md)
        self.assertNotIn("Résumé", md)
        self.assertNotIn("Prix unitaire", md)


class AnalyticsMarkdownTestCase(unittest.TestCase):
    def test_granularity_options_follow_language(self):
        self.assertEqual(
            [value for _, value in granularity_options("ar")], ["daily", "weekly", "monthly"]
        )
        self.assertEqual(granularity_options("ar")[0][0], "المبيعات اليومية (آخر 7 أيام)")
        self.assertEqual(granularity_options()[2][0], "Ventes Mensuelles (6 derniers mois)")

    def test_arabic_sample_snapshot(self):
        snap = sample_snapshot(datetime(2026, 10, 19), lang="ar")
        md = analytics_markdown(snap, "weekly", "ar")
        self.assertIn("> بيانات تجريبية", md)
        self.assertIn("| # | المنتج | الكمية | المبيعات |", md)
        self.assertIn("| الفترة | المبيعات | الطلبات |  |", md)
        self.assertIn("#### المبيعات الأسبوعية (آخر 4 أسابيع)", md)
        for french in ("Données d'exemple", "| Période |", "| Commandes |", "| Ventes |"):
            self.assertNotIn(french, md)

    def test_no_sales_message(self):
        self.assertIn("_Aucune vente._", analytics_markdown(AnalyticsSnapshot(), "daily"))
        md = analytics_markdown(AnalyticsSnapshot(), "monthly", "ar")
        self.assertIn("_لا توجد مبيعات._", md)
        self.assertNotIn("> ", md)


if __name__ == "__main__":
    unittest.main()
