from typing import Any, Dict, Optional

from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label

# (input id suffix, label, input type)
_FIELDS = (
    ("name", "Nom", "text"),
    ("name_ar", "Nom (arabe)", "text"),
    ("category", "Catégorie", "text"),
    ("category_ar", "Catégorie (arabe)", "text"),
    ("description", "Description", "text"),
    ("description_ar", "Description (arabe)", "text"),
    ("price", "Prix", "number"),
    ("stock", "Stock", "integer"),
    ("images", "Images (URLs séparées par des virgules)", "text"),
)

_REQUIRED = ("name", "price", "stock")


class ProductFormModal(ModalScreen[Optional[Dict[str, Any]]]):
    """
    New product form. Dismisses with keyword arguments for crud.add_product,
    or None when cancelled.
    """

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="div-product-form"):
            for key, label, kind in _FIELDS:
                yield Label(label)
                validators = [Number(minimum=0)] if kind != "text" else []
                yield Input(id=f"input-{key}", type=kind, validators=validators)
            with Horizontal():
                yield Button("Annuler", id="btn-cancel")
                yield Button("Créer", id="btn-create", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#input-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#btn-create")
    def handle_create(self) -> None:
        raw = {key: self.query_one(f"#input-{key}", Input) for key, _, _ in _FIELDS}
        for key in _REQUIRED:
            if not raw[key].value.strip() or not raw[key].is_valid:
                raw[key].focus()
                raw[key].add_class("-invalid")
                self.notify("Champ obligatoire ou invalide.", severity="error")
                return

        values: Dict[str, Any] = {
            "name": raw["name"].value.strip(),
            "price": float(raw["price"].value),
            "stock": int(raw["stock"].value),
            "category": raw["category"].value.strip(),
            "description": raw["description"].value.strip(),
            "images": [u.strip() for u in raw["images"].value.split(",") if u.strip()],
        }
        for key in ("name_ar", "category_ar", "description_ar"):
            values[key] = raw[key].value.strip() or None
        self.dismiss(values)
