from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from db.crud import increment_product_views, track_visit
from db.models import Product
from utils.i18n import t
from utils.pure import format_money, generate_markdown_table


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail plus quantity picker.
    Dismisses with True when the cart changed, False otherwise.
    """

    order_qty = reactive(1)

    def __init__(self, product_id: str) -> None:
        super().__init__()

        self._product_id = product_id
        self._prod: Product | None = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label(t("quantity", self.app.state.lang))
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                with Horizontal():
                    yield Button(t("back", self.app.state.lang), id="btn-quit")
                    yield Button(
                        t("add_to_cart", self.app.state.lang),
                        id="btn-addcart",
                        variant="primary",
                    )

    async def on_mount(self):
        state = self.app.state
        self._prod = state.product(self._product_id)
        if self._prod is None:
            self.notify("Produit introuvable.", severity="error")
            self.dismiss(False)
            return
        self.record_view()

        lang = state.lang
        rows = [
            ["Catégorie", self._prod.localized("category", lang)],
            ["Prix", format_money(self._prod.price, state.config.currency)],
            ["Stock", self._prod.stock],
            ["Description", self._prod.localized("description", lang)],
        ]
        if self._prod.images:
            rows.append(["Image", self._prod.images[0]])
        md_table_str = generate_markdown_table(["", ""], rows, ["l", "l"])
        header_md = f"### {self._prod.localized('name', lang)}\n\n"
        await self.query_one(MarkdownViewer).document.update(header_md + md_table_str)

        stock_cnt = self._prod.stock
        if stock_cnt < 1:
            order_btn = self.query_one("#btn-addcart", Button)
            order_btn.label = t("out_of_stock", lang)
            order_btn.disabled = True
            order_btn.variant = "warning"

        self.query_one("#input-order-qty").validators = [
            Number(minimum=1, maximum=max(stock_cnt, 1))
        ]

        # a product already in the cart edits that line instead of adding to it
        existing = state.cart.find_line(self._product_id)
        if existing:
            self.order_qty = existing.quantity
            self.query_one("#btn-addcart", Button).label = t("update_cart", lang)
        self.watch_order_qty(self.order_qty)

        self.query_one("#input-order-qty").focus()

    @work()
    async def record_view(self) -> None:
        await increment_product_views(self._product_id)
        await track_visit(
            f"Product: {self._prod.name}",
            product_id=self._product_id,
            source=self.app.state.source,
        )

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and message.value
            and self.focused == message.input
        ):
            self.order_qty = int(message.value)

    def watch_order_qty(self, qty: int):
        if self._prod is None:
            return
        self.query_one("#btn-sub-qty").disabled = qty <= 1
        self.query_one("#btn-add-qty").disabled = qty >= self._prod.stock
        self.query_one("#input-order-qty", Input).value = str(qty)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        if self._prod and self.order_qty < self._prod.stock:
            self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        if self.order_qty > 1:
            self.order_qty -= 1

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        cart = self.app.state.cart
        existing = cart.find_line(self._product_id)
        if existing:
            cart.update_quantity(self._product_id, self.order_qty)
            self.app.notify("Quantité mise à jour.")
        else:
            cart.add_to_cart(self._prod, self.order_qty)
            line = cart.find_line(self._product_id)
            # quantities are clamped to stock, tell the user when that happened
            if line and line.quantity < self.order_qty:
                self.app.notify(
                    f"Stock limité: {line.quantity} ajouté(s).", severity="warning"
                )
            else:
                self.app.notify("Produit ajouté au panier.")
        self.dismiss(True)
