from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Label, Rule

from engine.cart import CartLine
from utils.i18n import t
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal


class CartLineActionMessage(Message):
    bubble = True

    def __init__(self, product_id: str, action: str) -> None:
        super().__init__()
        self.product_id = product_id
        self.action = action  # "inc" | "dec" | "remove"


class CartLineWidget(HorizontalGroup):
    def __init__(self, line: CartLine, lang: str, currency: str):
        super().__init__()
        self.line = line
        self._lang = lang
        self._currency = currency

    def compose(self):
        product = self.line.product
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(product.localized("name", self._lang), id="label-item-name")
                yield Label(
                    format_money(product.price, self._currency), id="label-item-price"
                )
                yield Label(
                    format_money(self.line.line_total, self._currency),
                    id="label-item-total",
                )
            with Horizontal(id="div-actions"):
                yield Button("-", id="btn-dec", classes="btn-qty")
                yield Label(str(self.line.quantity), id="label-item-qty")
                yield Button(
                    "+",
                    id="btn-inc",
                    classes="btn-qty",
                    disabled=self.line.quantity >= product.stock,
                )
                yield Button("✕", id="btn-remove", variant="error", classes="btn-qty")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(
            CartLineActionMessage(self.line.product.id, event.button.id.removeprefix("btn-"))
        )


class CartScreen(BaseScreen):
    """
    Cart lines with quantity controls, total, and the WhatsApp checkout.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Total: 0", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button(t("clear_cart"), id="btn-clear-cart")
            yield Button(t("checkout"), id="btn-checkout", variant="primary")

    def on_mount(self):
        self.watch(self.app, "cart_version", self.handle_cart_change)
        self.watch(self.app, "lang", self.handle_cart_change, init=False)

    @work(exclusive=True)
    async def handle_cart_change(self):
        """
        Rebuild the line widgets from the cart engine.
        """
        state = self.state
        cart = state.cart
        content = self.query_one("#vertscroll-content")
        shown = [w.line for w in content.query(CartLineWidget)]
        if shown != list(cart.items) or not shown:
            await content.remove_children()
            if cart.items:
                await content.mount_all(
                    [
                        CartLineWidget(line, state.lang, state.config.currency)
                        for line in cart.items
                    ]
                )
                content.remove_class("no-items")
            else:
                await content.mount(Label(t("empty_cart", state.lang), id="label-empty"))
                content.add_class("no-items")

        self.query_one("#label-cart-total", Label).update(
            f"{t('order_total', state.lang)}: "
            f"{format_money(cart.get_total_price(), state.config.currency)}"
            f"  ({t('items_count', state.lang, n=cart.get_total_items())})"
        )
        self.query_one("#btn-checkout", Button).disabled = not cart.items

    @on(CartLineActionMessage)
    def handle_line_action(self, message: CartLineActionMessage) -> None:
        cart = self.state.cart
        line = cart.find_line(message.product_id)
        if line is None:
            return
        if message.action == "inc":
            cart.update_quantity(line.product.id, line.quantity + 1)
        elif message.action == "dec":
            # falling to zero removes the line
            cart.update_quantity(line.product.id, line.quantity - 1)
        elif message.action == "remove":
            cart.remove_from_cart(line.product.id)
            self.notify(t("item_removed", self.state.lang))

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if not self.state.cart.items:
            self.app.notify(t("empty_cart", self.state.lang), severity="warning")
            return

        if await self.app.push_screen_wait(
            DialogModal(
                t("confirm_clear_cart", self.state.lang),
                primary_text=t("yes", self.state.lang),
                secondary_text=t("no", self.state.lang),
                tone="error",
            )
        ):
            self.state.cart.clear_cart()

    @on(Button.Pressed, "#btn-checkout")
    def handle_checkout(self) -> None:
        if not self.state.cart.items:
            self.app.notify(t("empty_cart", self.state.lang), severity="warning")
            return
        self.app.push_screen(CheckoutModal())
