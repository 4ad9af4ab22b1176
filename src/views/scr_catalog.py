from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.validation import Number
from textual.widgets import DataTable, Input, Label, Select

from engine.catalog import categories, filter_products, max_price
from utils.i18n import t
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal


class CatalogScreen(BaseScreen):
    """
    Storefront product list with text search, category and price filters.
    Filtering runs on the products already held by the session.
    """

    # only here to be displayed in footer
    BINDINGS = [
        Binding("enter", "noop", "View Product", show=True, key_display="⏎"),
    ]

    def __init__(self):
        super().__init__()

    def compose(self) -> ComposeResult:
        lang = self.state.lang
        yield from super().compose()
        yield Label("", id="label-welcome")
        with Horizontal(id="hort-filters"):
            yield Input(id="input-search", placeholder=t("search_placeholder", lang))
            yield Select([], id="select-category", prompt=t("all_categories", lang))
            yield Input(
                id="input-max-price",
                placeholder=t("max_price_placeholder", lang),
                type="number",
                validators=[Number(minimum=0)],
            )
        yield DataTable(id="table-products")
        yield Label("", id="label-result-cnt")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        self.watch(self.app, "products_version", self.handle_products_change)
        self.watch(self.app, "lang", self.handle_products_change, init=False)
        self.query_one("#input-search").focus()

    def handle_products_change(self) -> None:
        state = self.state
        table = self.query_one(DataTable)
        table.clear(columns=True)
        table.add_columns(
            *(t(k, state.lang) for k in ("col_product", "col_category", "col_price", "col_stock"))
        )
        self.query_one("#input-search", Input).placeholder = t("search_placeholder", state.lang)
        self.query_one("#input-max-price", Input).placeholder = t(
            "max_price_placeholder", state.lang
        )
        select = self.query_one("#select-category", Select)
        current = select.value
        options = categories(state.products, state.lang)
        select.prompt = t("all_categories", state.lang)
        select.set_options([(c, c) for c in options])
        if current in options:
            select.value = current
        self.query_one("#label-welcome", Label).update(
            state.settings.localized("welcome_message", state.lang)
        )
        self.update_results()

    @on(Input.Changed)
    @on(Select.Changed)
    def handle_filter_change(self) -> None:
        self.update_results()

    def update_results(self) -> None:
        state = self.state
        category = self.query_one("#select-category", Select).value
        price_input = self.query_one("#input-max-price", Input)
        price_range = None
        if price_input.value and price_input.is_valid:
            price_range = (0.0, float(price_input.value))

        products = filter_products(
            state.products,
            category=category if isinstance(category, str) else "",
            price_range=price_range,
            query=self.query_one("#input-search", Input).value,
            lang=state.lang,
        )

        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.localized("name", state.lang),
                p.localized("category", state.lang),
                format_money(p.price, state.config.currency),
                p.stock if p.stock > 0 else t("out_of_stock", state.lang),
                key=p.id,
            )
        ceiling = format_money(max_price(state.products), state.config.currency)
        self.query_one("#label-result-cnt", Label).update(
            t("results_found", state.lang, n=len(products), ceiling=ceiling)
        )

    @on(DataTable.RowSelected, "#table-products")
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        self.app.push_screen(ProdDetailModal(event.row_key.value))
