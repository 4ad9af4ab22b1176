from __future__ import annotations

from typing import Optional

import aiosqlite
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, Switch

import db.crud as crud
from db.models import Product
from engine.catalog import filter_products
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal
from views.modal_product_form import ProductFormModal


class AdminProductsScreen(BaseScreen):
    """
    Admin product list: search, edit price/stock/visibility, add and delete.
    """

    current_id: Optional[str] = None

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            with Horizontal(id="hort-admin-top"):
                yield Input(id="input-search", placeholder="Rechercher...")
                yield Button("Ajouter un produit", id="btn-add", variant="primary")
            yield DataTable(id="table-admin-products")
            with Horizontal(id="hort-controls"):
                with Vertical():
                    yield Label("Prix:")
                    yield Input(
                        id="input-price", type="number", validators=[Number(minimum=0.0)]
                    )
                with Vertical():
                    yield Label("Stock:")
                    yield Input(
                        id="input-stock", type="integer", validators=[Number(minimum=0)]
                    )
                with Vertical():
                    yield Label("Actif:")
                    yield Switch(id="switch-active")
                yield Button("Mettre à jour", id="btn-update", variant="success")
                yield Button("Supprimer", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Produit", "Catégorie", "Prix", "Stock", "Vues", "Actif")
        self.query_one("#hort-controls").add_class("hidden")
        self.watch(self.app, "products_version", self.update_table)

    @on(Input.Changed, "#input-search")
    def update_table(self) -> None:
        state = self.state
        products = filter_products(
            state.products,
            query=self.query_one("#input-search", Input).value,
            active_only=False,
            lang=state.lang,
        )
        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.name,
                p.category,
                format_money(p.price, state.config.currency),
                p.stock,
                p.views,
                "oui" if p.is_active else "non",
                key=p.id,
            )
        if self.current_id and state.product(self.current_id) is None:
            self.current_id = None
            self.query_one("#hort-controls").add_class("hidden")

    @on(DataTable.RowSelected, "#table-admin-products")
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        prod = self.state.product(event.row_key.value)
        if prod is None:
            return
        self.current_id = prod.id
        # prefill inputs with current values
        self.query_one("#input-price", Input).value = f"{prod.price:.2f}"
        self.query_one("#input-stock", Input).value = str(prod.stock)
        self.query_one("#switch-active", Switch).value = prod.is_active
        self.query_one("#hort-controls").remove_class("hidden")

    def _selected(self) -> Optional[Product]:
        return self.state.product(self.current_id) if self.current_id else None

    @on(Button.Pressed, "#btn-update")
    @work(exclusive=True)
    async def handle_update(self) -> None:
        prod = self._selected()
        if prod is None:
            return

        price_input = self.query_one("#input-price", Input)
        stock_input = self.query_one("#input-stock", Input)
        for field_input in (price_input, stock_input):
            if not field_input.value or not field_input.is_valid:
                field_input.focus()
                field_input.add_class("-invalid")
                return

        changes = {
            "price": float(price_input.value),
            "stock": int(stock_input.value),
            "is_active": self.query_one("#switch-active", Switch).value,
        }
        changes = {k: v for k, v in changes.items() if getattr(prod, k) != v}
        if not changes:
            self.notify("Rien à mettre à jour.", severity="warning")
            return

        try:
            updated = await crud.update_product(prod.id, **changes)
        except (aiosqlite.Error, ValueError) as e:
            self.notify(f"Échec de la mise à jour: {e}", severity="error")
            return
        if updated:
            self.notify("Produit mis à jour.")
        else:
            self.notify("Produit introuvable.", severity="error")

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        prod = self._selected()
        if prod is None:
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Supprimer « {prod.name} » ?",
                primary_text="Supprimer",
                secondary_text="Annuler",
                tone="error",
            )
        ):
            return
        try:
            await crud.delete_product(prod.id)
        except aiosqlite.Error as e:
            self.notify(f"Échec de la suppression: {e}", severity="error")
            return
        self.notify("Produit supprimé.")

    @on(Button.Pressed, "#btn-add")
    @work(exclusive=True)
    async def handle_add(self) -> None:
        values = await self.app.push_screen_wait(ProductFormModal())
        if not values:
            return
        try:
            await crud.add_product(**values)
        except (aiosqlite.Error, ValueError) as e:
            self.notify(f"Échec de l'ajout: {e}", severity="error")
            return
        self.notify("Produit ajouté.")
