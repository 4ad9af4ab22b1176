from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Resize
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.i18n import t
from utils.messages import LanguageChangedMessage, ModeSwitchedMessage
from utils.pure import format_money, generate_markdown_table
from views.modal_dialog import QuitDialogModal
from views.modal_resize import ResizeScreenPromptModal


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("Boutique", id="label-info-1")
        yield Markdown("", id="md-shopinfo")
        yield Button("FR / عربي", id="btn-lang")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        self.init_mode = self.app.current_mode
        self.watch(self.app, "cart_version", self.update_info)
        self.watch(self.app, "lang", self.update_menu)

    async def update_info(self) -> None:
        state = self.app.state
        rows = [
            ["Shop", state.settings.localized("name", state.lang)],
            [t("cart", state.lang), state.cart.get_total_items()],
            [
                t("order_total", state.lang),
                format_money(state.cart.get_total_price(), state.config.currency),
            ],
        ]
        if state.source:
            rows.append(["Source", state.source])
        await self.query_one(Markdown).update(
            generate_markdown_table(None, rows, ["l", "l"])
        )

    async def update_menu(self) -> None:
        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(t(mode, self.app.state.lang)), id="list-menu-item-" + mode)
                for mode in (*self.app.STORE_MODES, *self.app.ADMIN_MODES)
            ]
        )
        self.highlight_item(self.init_mode)
        await self.update_info()

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-lang")
    def handle_toggle_lang(self):
        self.post_message(LanguageChangedMessage(self.app.state.toggle_lang()))

    def highlight_item(self, mode_str: str):
        for item in self.query_one("#list-menu").children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all mode screens: header, footer, sidebar and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        self.sub_title = header_sub_title
        for mode, screen_cls in self.app.MODES.items():
            if type(self) is screen_cls:
                self.sub_title = t(mode, self.app.state.lang)

        self._show_sidebar = show_sidebar

    @property
    def state(self):
        return self.app.state

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    async def on_resize(self, event: Resize) -> None:
        min_width = 80
        min_height = 24
        if event.size.width < min_width or event.size.height < min_height:
            self.app.push_screen(ResizeScreenPromptModal(min_width, min_height))

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
