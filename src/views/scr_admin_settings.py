import aiosqlite
from textual import on, work
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Button, Input, Label

import db.crud as crud
from views.base_screen import BaseScreen

_FIELDS = (
    ("name", "Nom de la boutique"),
    ("name_ar", "Nom de la boutique (arabe)"),
    ("whatsapp_number", "Numéro WhatsApp"),
    ("email", "Email"),
    ("address", "Adresse"),
    ("address_ar", "Adresse (arabe)"),
    ("welcome_message", "Message d'accueil"),
    ("welcome_message_ar", "Message d'accueil (arabe)"),
)
_SOCIAL = ("facebook", "instagram", "twitter")


class AdminSettingsScreen(BaseScreen):
    """
    Store settings form; the WhatsApp number is where checkout messages go.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with VerticalScroll(id="div-settings"):
            for key, label in _FIELDS:
                yield Label(label)
                yield Input(id=f"input-{key}")
            for network in _SOCIAL:
                yield Label(network.capitalize())
                yield Input(id=f"input-social-{network}", placeholder="https://...")
            yield Button("Enregistrer", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        settings = self.state.settings
        for key, _ in _FIELDS:
            self.query_one(f"#input-{key}", Input).value = getattr(settings, key) or ""
        for network in _SOCIAL:
            self.query_one(f"#input-social-{network}", Input).value = (
                settings.social_links.get(network, "")
            )

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        values = {
            key: self.query_one(f"#input-{key}", Input).value.strip() for key, _ in _FIELDS
        }
        if not any(ch.isdigit() for ch in values["whatsapp_number"]):
            number_input = self.query_one("#input-whatsapp_number", Input)
            number_input.focus()
            number_input.add_class("-invalid")
            self.notify("Numéro WhatsApp invalide.", severity="error")
            return
        for key in ("name_ar", "address_ar", "welcome_message_ar"):
            values[key] = values[key] or None
        values["social_links"] = {
            network: value
            for network in _SOCIAL
            if (value := self.query_one(f"#input-social-{network}", Input).value.strip())
        }

        try:
            self.state.settings = await crud.update_store_settings(**values)
        except aiosqlite.Error as e:
            self.notify(f"Échec de l'enregistrement: {e}", severity="error")
            return
        self.notify("Paramètres enregistrés.")
