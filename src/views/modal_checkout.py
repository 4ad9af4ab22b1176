from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer, TextArea

from db.crud import create_order
from engine.cart import CartEngine
from engine.checkout import checkout
from utils.i18n import t
from utils.messages import NewOrderMessage
from utils.pure import format_money, generate_markdown_table
from views.modal_dialog import DialogModal


def order_summary_markdown(cart: CartEngine, lang: str = "fr", currency: str = "MAD") -> str:
    """Markdown summary of the cart lines shown above the WhatsApp message."""
    headers = [t(k, lang) for k in ("col_product", "col_unit_price", "col_quantity", "col_total")]
    rows = [
        [
            line.product.localized("name", lang),
            format_money(line.product.price, currency),
            line.quantity,
            format_money(line.line_total, currency),
        ]
        for line in cart.items
    ]
    md = f"### {t('order_summary', lang)}\n\n"
    md += generate_markdown_table(headers, rows, ["l", "r", "c", "r"])
    md += f"\n\n**{t('order_total', lang)}:** {format_money(cart.get_total_price(), currency)}"
    return md


class CheckoutModal(ModalScreen[bool]):
    """
    Order summary and the exact message that will be sent on WhatsApp.
    Dismisses with True when the handoff happened.
    """

    def __init__(self):
        super().__init__()

    def compose(self) -> ComposeResult:
        lang = self.app.state.lang
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            yield TextArea("", id="textarea-message", read_only=True)
            with Horizontal():
                yield Button(t("back", lang), id="btn-quit")
                yield Button(t("send_order", lang), id="btn-submit", variant="success")

    async def on_mount(self):
        state = self.app.state
        md = order_summary_markdown(state.cart, state.lang, state.config.currency)
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#textarea-message", TextArea).text = state.cart.get_cart_message(state.lang)
        self.query_one("#btn-submit").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        state = self.app.state
        lang = state.lang
        result = await checkout(
            state.cart, create_order, state.settings, source=state.source, lang=lang
        )
        if result.order_id:
            self.app.post_message(NewOrderMessage())
        self.app.open_url(result.url)

        # the cart survives until the user confirms the message went out
        if await self.app.push_screen_wait(
            DialogModal(
                t("confirm_sent_clear", lang),
                primary_text=t("yes", lang),
                secondary_text=t("keep", lang),
                tone="positive",
                detail=result.url,
            )
        ):
            state.cart.clear_cart()
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
