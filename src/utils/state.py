from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import db.crud as crud
from db.models import Product, StoreSettings
from db.storage import KeyValueStorage, LocalStorage
from engine.cart import CartEngine
from utils.config import Config, Language


@dataclass
class SessionState:
    """
    Everything one running session shares between screens.

    Fields:
      - cart: the session's cart engine, restored from local storage
      - lang: "fr" | "ar"
      - source: acquisition source tag read from the inbound link, if any
      - settings: last loaded store settings
      - products: last loaded catalog, refreshed on products_changed
    """

    cart: CartEngine
    config: Config
    lang: Language = "fr"
    source: Optional[str] = None
    settings: StoreSettings = field(default_factory=StoreSettings)
    products: List[Product] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        config: Config,
        source: Optional[str] = None,
        storage: Optional[KeyValueStorage] = None,
    ) -> "SessionState":
        storage = storage or LocalStorage(config.storage_path)
        return cls(
            cart=CartEngine(storage, currency=config.currency),
            config=config,
            lang=config.lang,
            source=source,
        )

    async def reload(self) -> None:
        """Pull catalog and settings, then re-bind the cart to current prices and stock."""
        self.products = await crud.list_products()
        self.settings = await crud.get_store_settings()
        self.cart.refresh_products(self.products)

    def product(self, product_id: str) -> Optional[Product]:
        for p in self.products:
            if p.id == product_id:
                return p
        return None

    def toggle_lang(self) -> Language:
        self.lang = "ar" if self.lang == "fr" else "fr"
        return self.lang
