from datetime import datetime

import aiosqlite
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, MarkdownViewer, Select

import db.crud as crud
from engine.analytics import AnalyticsSnapshot, aggregate, sample_snapshot
from utils.i18n import t
from utils.logger import get_logger
from utils.pure import format_money, generate_markdown_table
from views.base_screen import BaseScreen

_logger = get_logger(__name__)

GRANULARITIES = ("daily", "weekly", "monthly")


def granularity_options(lang: str = "fr") -> list:
    return [(t(g, lang), g) for g in GRANULARITIES]


def analytics_markdown(
    snap: AnalyticsSnapshot, granularity: str, lang: str = "fr", currency: str = "MAD"
) -> str:
    """Summary figures, top products and one sales series as Markdown."""
    md = f"### {t('admin_analytics', lang)}\n\n"
    if snap.is_sample:
        md += f"> {t('sample_data', lang)}\n\n"
    md += (
        f"- {t('total_sales', lang)}: {format_money(snap.total_sales, currency)}\n"
        f"- {t('total_orders', lang)}: {snap.total_orders}\n"
        f"- {t('average_order', lang)}: "
        f"{format_money(snap.average_order_value, currency)}\n\n"
    )

    md += f"#### {t('top_products', lang)}\n\n"
    if snap.top_products:
        md += generate_markdown_table(
            ["#", t("col_product", lang), t("col_quantity", lang), t("col_sales", lang)],
            [
                [i, p.name, p.quantity, format_money(p.revenue, currency)]
                for i, p in enumerate(snap.top_products, start=1)
            ],
            ["r", "l", "r", "r"],
        )
    else:
        md += f"_{t('no_sales', lang)}_"

    series = snap.series(granularity)
    peak = max((b.sales for b in series), default=0) or 1
    md += f"\n\n#### {t(granularity, lang)}\n\n"
    md += generate_markdown_table(
        [t("col_period", lang), t("col_sales", lang), t("col_orders", lang), ""],
        [
            [
                b.label,
                format_money(b.sales, currency),
                b.orders,
                "█" * round(20 * b.sales / peak),
            ]
            for b in series
        ],
        ["l", "r", "r", "l"],
    )
    return md


class AdminAnalyticsScreen(BaseScreen):
    """
    Sales summary, top products and a daily/weekly/monthly series,
    recomputed from the order store on every load.
    """

    def __init__(self) -> None:
        super().__init__()
        self._snapshot: AnalyticsSnapshot | None = None

    def compose(self) -> ComposeResult:
        lang = self.state.lang
        yield from super().compose()
        with Vertical():
            with Horizontal(id="hort-analytics-controls"):
                yield Select(
                    granularity_options(lang),
                    value="daily",
                    allow_blank=False,
                    id="select-granularity",
                )
                yield Button(t("refresh", lang), id="btn-refresh", variant="primary")
            yield MarkdownViewer(id="md-analytics", show_table_of_contents=False)

    def on_mount(self) -> None:
        self.watch(self.app, "orders_version", self.handle_reload)
        self.watch(self.app, "lang", self.handle_lang, init=False)

    def handle_lang(self) -> None:
        lang = self.state.lang
        select = self.query_one("#select-granularity", Select)
        granularity = select.value
        with select.prevent(Select.Changed):
            select.set_options(granularity_options(lang))
            select.value = granularity
        self.query_one("#btn-refresh", Button).label = t("refresh", lang)
        self.handle_reload()

    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)  # a newer load cancels the pending one
    async def handle_reload(self) -> None:
        lang = self.state.lang
        try:
            orders = await crud.list_orders()
        except (aiosqlite.Error, OSError) as e:
            _logger.error(f"Error loading orders, showing sample data: {e}")
            self.notify(t("sample_data_shown", lang), severity="warning")
            self._snapshot = sample_snapshot(lang=lang)
        else:
            self._snapshot = aggregate(orders, now=datetime.now().astimezone(), lang=lang)
        await self.render_snapshot()

    @on(Select.Changed, "#select-granularity")
    async def handle_granularity(self) -> None:
        await self.render_snapshot()

    async def render_snapshot(self) -> None:
        if self._snapshot is None:
            return
        granularity = self.query_one("#select-granularity", Select).value
        md = analytics_markdown(
            self._snapshot, granularity, self.state.lang, self.state.config.currency
        )
        await self.query_one("#md-analytics", MarkdownViewer).document.update(md)
