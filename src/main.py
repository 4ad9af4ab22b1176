import argparse
from typing import Optional, Sequence

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.reactive import reactive
from textual.widgets import LoadingIndicator

import db.crud as crud
from engine.checkout import source_from_url
from utils.config import LANGUAGES, Config, load_config
from utils.logger import get_logger
from utils.messages import (
    CartChangedMessage,
    LanguageChangedMessage,
    ModeSwitchedMessage,
    NewOrderMessage,
    ProductsChangedMessage,
    QuitRequestedMessage,
)
from utils.state import SessionState
from views.scr_admin_analytics import AdminAnalyticsScreen
from views.scr_admin_dashboard import AdminDashboardScreen
from views.scr_admin_products import AdminProductsScreen
from views.scr_admin_settings import AdminSettingsScreen
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen

_logger = get_logger(__name__)


class BoutiqueApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "admin_dashboard": AdminDashboardScreen,
        "admin_products": AdminProductsScreen,
        "admin_analytics": AdminAnalyticsScreen,
        "admin_settings": AdminSettingsScreen,
    }

    STORE_MODES = ("catalog", "cart")
    ADMIN_MODES = ("admin_dashboard", "admin_products", "admin_analytics", "admin_settings")

    CSS_PATH = "styles/boutique.tcss"

    # screens watch these counters instead of receiving app-level messages
    cart_version = reactive(0)
    products_version = reactive(0)
    orders_version = reactive(0)
    lang = reactive("fr")

    state: SessionState

    def __init__(self, state: SessionState, start_mode: str = "catalog"):
        super().__init__()
        self.state = state
        self.start_mode = start_mode
        self.set_reactive(BoutiqueApp.lang, state.lang)
        self._unsubscribe = [
            state.cart.on_change(lambda _cart: self.post_message(CartChangedMessage())),
            crud.products_changed.connect(
                lambda: self.post_message(ProductsChangedMessage())
            ),
        ]

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.title = "Boutique"
        self.main_flow()

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work
    async def main_flow(self):
        await self.state.reload()
        self.title = self.state.settings.localized("name", self.state.lang)
        _logger.info(
            f"Loaded {len(self.state.products)} products, "
            f"{self.state.cart.get_total_items()} items in cart."
        )
        await self.switch_mode(self.start_mode)

    @on(CartChangedMessage)
    def handle_cart_changed(self):
        self.cart_version += 1

    @on(ProductsChangedMessage)
    @work(exclusive=True, group="products")
    async def handle_products_changed(self):
        await self.state.reload()
        self.products_version += 1

    @on(NewOrderMessage)
    def handle_new_order(self):
        self.orders_version += 1

    @on(LanguageChangedMessage)
    def handle_language_changed(self, message: LanguageChangedMessage):
        self.lang = message.lang
        self.title = self.state.settings.localized("name", message.lang)

    @on(ModeSwitchedMessage)
    def handle_mode_switched(self, message: ModeSwitchedMessage):
        _logger.debug(f"Mode {message.old_mode} -> {message.new_mode}")

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="boutique", description="Bilingual terminal storefront and back-office."
    )
    parser.add_argument("--lang", choices=LANGUAGES, help="interface language")
    parser.add_argument("--source", help="acquisition source tag recorded with orders")
    parser.add_argument(
        "--link", help="inbound link; its 'source' parameter is used when --source is absent"
    )
    parser.add_argument("--admin", action="store_true", help="start in the admin area")
    return parser.parse_args(argv)


def build_app(argv: Optional[Sequence[str]] = None) -> BoutiqueApp:
    args = parse_args(argv)
    config: Config = load_config()
    state = SessionState.create(config, source=args.source or source_from_url(args.link))
    if args.lang:
        state.lang = args.lang
    return BoutiqueApp(state, start_mode="admin_dashboard" if args.admin else "catalog")


def run() -> None:
    build_app().run()


if __name__ == "__main__":
    run()
