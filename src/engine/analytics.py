"""
Sales analytics computed in memory from order records.

aggregate() is a pure function of its inputs: the order list and the
reference time `now`. It is recomputed on every load; nothing here is
cached or persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from db.models import OrderRecord
from utils.i18n import month_short, t

TOP_PRODUCTS = 5
DAILY_BUCKETS = 7
WEEKLY_BUCKETS = 4
MONTHLY_BUCKETS = 6


@dataclass(frozen=True)
class SalesBucket:
    label: str
    start: date
    end: date  # inclusive
    sales: float = 0.0
    orders: int = 0


@dataclass(frozen=True)
class TopProduct:
    product_id: str
    name: str
    quantity: int
    revenue: float


@dataclass(frozen=True)
class AnalyticsSnapshot:
    total_sales: float = 0.0
    total_orders: int = 0
    average_order_value: float = 0.0
    top_products: List[TopProduct] = field(default_factory=list)
    daily: List[SalesBucket] = field(default_factory=list)
    weekly: List[SalesBucket] = field(default_factory=list)
    monthly: List[SalesBucket] = field(default_factory=list)
    is_sample: bool = False

    def series(self, granularity: str) -> List[SalesBucket]:
        """'daily', 'weekly' or 'monthly'; anything else gives the daily series."""
        return {"weekly": self.weekly, "monthly": self.monthly}.get(
            granularity, self.daily
        )


# ---------------------------
# Bucket layouts
# ---------------------------


def daily_windows(today: date, lang: str = "fr") -> List[Tuple[str, date, date]]:
    days = [today - timedelta(days=i) for i in range(DAILY_BUCKETS - 1, -1, -1)]
    return [(f"{d.day} {month_short(d.month, lang)}", d, d) for d in days]


def weekly_windows(today: date, lang: str = "fr") -> List[Tuple[str, date, date]]:
    windows = []
    for n, k in enumerate(range(WEEKLY_BUCKETS - 1, -1, -1), start=1):
        start = today - timedelta(days=7 * (k + 1) - 1)
        end = today - timedelta(days=7 * k)
        windows.append((t("week_label", lang, n=n), start, end))
    return windows


def monthly_windows(today: date, lang: str = "fr") -> List[Tuple[str, date, date]]:
    windows = []
    for back in range(MONTHLY_BUCKETS - 1, -1, -1):
        year, month = today.year, today.month - back
        while month < 1:
            month += 12
            year -= 1
        start = date(year, month, 1)
        next_month = date(year + month // 12, month % 12 + 1, 1)
        windows.append(
            (
                f"{month_short(month, lang)} {year % 100:02d}",
                start,
                next_month - timedelta(days=1),
            )
        )
    return windows


# ---------------------------
# Aggregation
# ---------------------------


def _local_day(ts: datetime, now: datetime) -> date:
    """Calendar day of ts as seen from now's timezone."""
    if now.tzinfo is None:
        if ts.tzinfo is not None:
            ts = ts.astimezone().replace(tzinfo=None)
    elif ts.tzinfo is None:
        ts = ts.replace(tzinfo=now.tzinfo)
    else:
        ts = ts.astimezone(now.tzinfo)
    return ts.date()


def _bucketize(
    dated: Sequence[Tuple[date, float]],
    windows: Iterable[Tuple[str, date, date]],
) -> List[SalesBucket]:
    buckets = []
    for label, start, end in windows:
        hits = [total for day, total in dated if start <= day <= end]
        buckets.append(
            SalesBucket(label=label, start=start, end=end, sales=sum(hits), orders=len(hits))
        )
    return buckets


def _top_products(orders: Iterable[OrderRecord], n: int) -> List[TopProduct]:
    grouped: Dict[str, List] = {}  # id -> [name, quantity, revenue], insertion ordered
    for order in orders:
        for item in order.items:
            entry = grouped.setdefault(item.product_id, [item.product_name, 0, 0.0])
            entry[1] += item.quantity
            entry[2] += item.price * item.quantity
    ranked = sorted(grouped.items(), key=lambda kv: kv[1][2], reverse=True)
    return [
        TopProduct(product_id=pid, name=name, quantity=qty, revenue=revenue)
        for pid, (name, qty, revenue) in ranked[:n]
    ]


def aggregate(
    orders: Iterable[OrderRecord],
    now: Optional[datetime] = None,
    lang: str = "fr",
    top_n: int = TOP_PRODUCTS,
) -> AnalyticsSnapshot:
    """
    Build the analytics snapshot of `orders` as of `now`.

    Records without a total are left out entirely. Records without a
    timestamp count in the summary and top products but in no time series.
    """
    now = now or datetime.now()
    valid = [o for o in orders if o.total is not None]

    total_sales = sum(o.total for o in valid)
    total_orders = len(valid)
    average = total_sales / total_orders if total_orders else 0.0

    dated = [
        (_local_day(o.created_at, now), o.total) for o in valid if o.created_at is not None
    ]
    today = _local_day(now, now)

    return AnalyticsSnapshot(
        total_sales=total_sales,
        total_orders=total_orders,
        average_order_value=average,
        top_products=_top_products(valid, top_n),
        daily=_bucketize(dated, daily_windows(today, lang)),
        weekly=_bucketize(dated, weekly_windows(today, lang)),
        monthly=_bucketize(dated, monthly_windows(today, lang)),
    )


def sample_snapshot(now: Optional[datetime] = None, lang: str = "fr") -> AnalyticsSnapshot:
    """
    Demonstration figures shown when the order store cannot be read.
    Bucket dates follow `now` so the screen stays consistent.
    """
    today = (now or datetime.now()).date()

    def fill(windows, values: Sequence[Tuple[float, int]]) -> List[SalesBucket]:
        return [
            SalesBucket(label=label, start=start, end=end, sales=sales, orders=count)
            for (label, start, end), (sales, count) in zip(windows, values)
        ]

    return AnalyticsSnapshot(
        total_sales=15750,
        total_orders=42,
        average_order_value=375,
        top_products=[
            TopProduct("sample-1", "Produit Premium", 12, 4500),
            TopProduct("sample-2", "Article Populaire", 16, 3200),
            TopProduct("sample-3", "Nouveau Produit", 8, 2800),
            TopProduct("sample-4", "Produit Classique", 14, 2100),
            TopProduct("sample-5", "Article Tendance", 6, 1650),
        ],
        daily=fill(
            daily_windows(today, lang),
            [(1200, 3), (1800, 5), (2200, 6), (1600, 4), (2800, 8), (3200, 9), (2950, 7)],
        ),
        weekly=fill(
            weekly_windows(today, lang),
            [(8500, 22), (9200, 25), (7800, 19), (10500, 28)],
        ),
        monthly=fill(
            monthly_windows(today, lang),
            [(28500, 75), (32200, 85), (29800, 78), (35500, 92), (41200, 108), (38900, 98)],
        ),
        is_sample=True,
    )
