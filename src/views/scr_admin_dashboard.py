from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import MarkdownViewer

from engine.catalog import inventory_stats, low_stock, most_viewed
from utils.pure import format_money, generate_markdown_table
from views.base_screen import BaseScreen


class AdminDashboardScreen(BaseScreen):
    """
    Inventory overview: stock figures, low-stock alerts, most viewed products.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-dashboard", show_table_of_contents=False)

    def on_mount(self) -> None:
        self.watch(self.app, "products_version", self.render_dashboard)

    async def render_dashboard(self) -> None:
        products = self.state.products
        currency = self.state.config.currency
        stats = inventory_stats(products)

        md = (
            "### Tableau de Bord\n\n"
            + generate_markdown_table(
                ["Indicateur", "Valeur"],
                [
                    ["Produits Actifs", stats.active_products],
                    ["Stock Total", stats.total_stock],
                    ["Valeur Stock", format_money(stats.stock_value, currency)],
                    ["Stock Faible", stats.low_stock],
                ],
                ["l", "r"],
            )
            + "\n\n#### Stock Faible (≤ 5)\n\n"
        )
        low = low_stock(products)
        if low:
            md += generate_markdown_table(
                ["Produit", "Stock"], [[p.name, p.stock] for p in low], ["l", "r"]
            )
        else:
            md += "_Aucun produit en stock faible._"

        md += "\n\n#### Produits les plus vus\n\n"
        md += generate_markdown_table(
            ["Produit", "Vues"],
            [[p.name, p.views] for p in most_viewed(products)],
            ["l", "r"],
        )
        await self.query_one("#md-dashboard", MarkdownViewer).document.update(md)
