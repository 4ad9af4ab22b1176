"""
French / Arabic labels used by the engines and the screens.

Only strings that actually appear somewhere live here; anything missing from
the Arabic table falls back to French, and an unknown key falls back to the
key itself.
"""
from typing import Dict

MONTHS_SHORT: Dict[str, tuple] = {
    "fr": (
        "janv.", "févr.", "mars", "avr.", "mai", "juin",
        "juil.", "août", "sept.", "oct.", "nov.", "déc.",
    ),
    "ar": (
        "يناير", "فبراير", "مارس", "أبريل", "مايو", "يونيو",
        "يوليو", "أغسطس", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر",
    ),
}

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "fr": {
        "order_greeting": "Bonjour, j'aimerais commander:",
        "order_total": "Total",
        "order_name": "Nom",
        "order_address": "Adresse",
        "order_phone": "Téléphone",
        "week_label": "Sem {n}",
        "catalog": "Produits",
        "cart": "Panier",
        "admin_dashboard": "Tableau de Bord",
        "admin_products": "Gestion des Produits",
        "admin_analytics": "Analyses des Ventes",
        "admin_settings": "Paramètres",
        "empty_cart": "Votre panier est vide",
        "all_categories": "Toutes les catégories",
        "add_to_cart": "Ajouter au panier",
        "update_cart": "Mettre à jour",
        "out_of_stock": "Rupture de stock",
        "send_order": "Envoyer via WhatsApp",
        "clear_cart": "Vider le panier",
        "checkout": "Commander",
        "back": "Retour",
        "refresh": "Actualiser",
        "daily": "Ventes Quotidiennes (7 derniers jours)",
        "weekly": "Ventes Hebdomadaires (4 dernières semaines)",
        "monthly": "Ventes Mensuelles (6 derniers mois)",
        "total_sales": "Ventes Totales",
        "total_orders": "Commandes Totales",
        "average_order": "Panier Moyen",
        "top_products": "Meilleurs Produits",
        "save": "Enregistrer",
        "order_summary": "Résumé de la commande",
        "col_product": "Produit",
        "col_unit_price": "Prix unitaire",
        "col_quantity": "Quantité",
        "col_total": "Total",
        "col_sales": "Ventes",
        "col_period": "Période",
        "col_orders": "Commandes",
        "sample_data": "Données d'exemple",
        "sample_data_shown": "Données d'exemple affichées.",
        "no_sales": "Aucune vente.",
        "confirm_sent_clear": "Message envoyé ? Vider le panier.",
        "yes": "Oui",
        "keep": "Garder",
        "no": "Non",
        "col_category": "Catégorie",
        "col_price": "Prix",
        "col_stock": "Stock",
        "quantity": "Quantité",
        "search_placeholder": "Rechercher un produit...",
        "max_price_placeholder": "Prix max",
        "results_found": "{n} produit(s) trouvé(s) · prix max {ceiling}",
        "confirm_clear_cart": "Vider tout le panier ?",
        "item_removed": "Article retiré du panier.",
        "items_count": "{n} article(s)",
    },
    "ar": {
        "order_greeting": "مرحبا، أود أن أطلب:",
        "order_total": "المجموع",
        "order_name": "الاسم",
        "order_address": "العنوان",
        "order_phone": "الهاتف",
        "week_label": "الأسبوع {n}",
        "catalog": "المنتجات",
        "cart": "السلة",
        "admin_dashboard": "لوحة التحكم",
        "admin_products": "إدارة المنتجات",
        "admin_analytics": "تحليلات المبيعات",
        "admin_settings": "الإعدادات",
        "empty_cart": "سلتك فارغة",
        "all_categories": "جميع الفئات",
        "add_to_cart": "أضف إلى السلة",
        "update_cart": "تحديث",
        "out_of_stock": "نفذ من المخزون",
        "send_order": "أرسل عبر واتساب",
        "clear_cart": "إفراغ السلة",
        "checkout": "اطلب",
        "back": "رجوع",
        "refresh": "تحديث",
        "daily": "المبيعات اليومية (آخر 7 أيام)",
        "weekly": "المبيعات الأسبوعية (آخر 4 أسابيع)",
        "monthly": "المبيعات الشهرية (آخر 6 أشهر)",
        "total_sales": "إجمالي المبيعات",
        "total_orders": "إجمالي الطلبات",
        "average_order": "متوسط الطلب",
        "top_products": "أفضل المنتجات",
        "save": "حفظ",
        "order_summary": "ملخص الطلب",
        "col_product": "المنتج",
        "col_unit_price": "سعر الوحدة",
        "col_quantity": "الكمية",
        "col_total": "المجموع",
        "col_sales": "المبيعات",
        "col_period": "الفترة",
        "col_orders": "الطلبات",
        "sample_data": "بيانات تجريبية",
        "sample_data_shown": "تم عرض بيانات تجريبية.",
        "no_sales": "لا توجد مبيعات.",
        "confirm_sent_clear": "تم إرسال الرسالة؟ إفراغ السلة.",
        "yes": "نعم",
        "keep": "احتفظ",
        "no": "لا",
        "col_category": "الفئة",
        "col_price": "السعر",
        "col_stock": "المخزون",
        "quantity": "الكمية",
        "search_placeholder": "ابحث عن منتج...",
        "max_price_placeholder": "أقصى سعر",
        "results_found": "{n} منتج(ات) · أقصى سعر {ceiling}",
        "confirm_clear_cart": "إفراغ السلة بالكامل؟",
        "item_removed": "تمت إزالة المنتج من السلة.",
        "items_count": "{n} قطعة",
    },
}


def t(key: str, lang: str = "fr", **kwargs) -> str:
    text = TRANSLATIONS.get(lang, {}).get(key) or TRANSLATIONS["fr"].get(key, key)
    return text.format(**kwargs) if kwargs else text


def month_short(month: int, lang: str = "fr") -> str:
    """Abbreviated month name, month in 1..12."""
    return MONTHS_SHORT.get(lang, MONTHS_SHORT["fr"])[month - 1]
