# src/db/crud.py
from __future__ import annotations

import dataclasses
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiosqlite

from db import models
from db.database import connect
from engine.signals import Signal
from utils.logger import get_logger

_logger = get_logger(__name__)

# emitted after every product write; subscribers re-read with list_products()
products_changed = Signal("products_changed")

_PRODUCT_COLUMNS = (
    "id, name, name_ar, description, description_ar, price, stock, category, "
    "category_ar, images, is_active, views, created_at, updated_at"
)
_EDITABLE_PRODUCT_FIELDS = {
    "name",
    "name_ar",
    "description",
    "description_ar",
    "price",
    "stock",
    "category",
    "category_ar",
    "images",
    "is_active",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _to_iso(when: datetime) -> str:
    # naive datetimes are taken as UTC so every stored timestamp compares as text
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc).isoformat(timespec="seconds")


def _row_to_product(row) -> models.Product:
    return models.Product.from_dict(dict(row))


def _check_product_values(values: Dict[str, Any]) -> None:
    if "price" in values and float(values["price"]) < 0:
        raise ValueError("Price cannot be negative.")
    if "stock" in values and int(values["stock"]) < 0:
        raise ValueError("Stock cannot be negative.")


# ---------------------------
# Products
# ---------------------------


async def list_products() -> List[models.Product]:
    """All products, newest first."""
    async with connect() as conn:
        cur = await conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products ORDER BY created_at DESC, id;"
        )
        rows = await cur.fetchall()
        await cur.close()
    return [_row_to_product(row) for row in rows]


async def get_product(product_id: str) -> Optional[models.Product]:
    """Fetch a product by id, None when absent."""
    async with connect() as conn:
        cur = await conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE id = ?;", (product_id,)
        )
        row = await cur.fetchone()
        await cur.close()
    if not row:
        return None
    return _row_to_product(row)


async def add_product(
    name: str,
    price: float,
    stock: int,
    category: str = "",
    description: str = "",
    name_ar: Optional[str] = None,
    description_ar: Optional[str] = None,
    category_ar: Optional[str] = None,
    images: Optional[List[str]] = None,
    is_active: bool = True,
) -> str:
    """
    Insert a product with zero views and return its generated id.
    """
    _check_product_values({"price": price, "stock": stock})
    product_id = uuid.uuid4().hex
    now = _now_iso()
    async with connect() as conn:
        await conn.execute(
            f"INSERT INTO products({_PRODUCT_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?);",
            (
                product_id,
                name,
                name_ar,
                description,
                description_ar,
                float(price),
                int(stock),
                category,
                category_ar,
                json.dumps(list(images or [])),
                int(bool(is_active)),
                now,
                now,
            ),
        )
        await conn.commit()
    _logger.info(f"Product {product_id} ({name}) added.")
    products_changed.emit()
    return product_id


async def update_product(product_id: str, **changes: Any) -> bool:
    """
    Update the given fields of a product. Return True if a row was updated.
    Unknown field names raise ValueError, as do negative price/stock.
    """
    unknown = set(changes) - _EDITABLE_PRODUCT_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    if not changes:
        return False
    _check_product_values(changes)

    values = dict(changes)
    if "images" in values:
        values["images"] = json.dumps(list(values["images"] or []))
    if "is_active" in values:
        values["is_active"] = int(bool(values["is_active"]))
    values["updated_at"] = _now_iso()

    assignments = ", ".join(f"{col} = ?" for col in values)
    async with connect() as conn:
        res = await conn.execute(
            f"UPDATE products SET {assignments} WHERE id = ?;",
            (*values.values(), product_id),
        )
        await conn.commit()
        updated = res.rowcount > 0
    if updated:
        products_changed.emit()
    return updated


async def delete_product(product_id: str) -> bool:
    async with connect() as conn:
        res = await conn.execute("DELETE FROM products WHERE id = ?;", (product_id,))
        await conn.commit()
        deleted = res.rowcount > 0
    if deleted:
        _logger.info(f"Product {product_id} deleted.")
        products_changed.emit()
    return deleted


async def increment_product_views(product_id: str) -> None:
    """Bump the view counter; a failure only costs one view, so it is logged."""
    try:
        async with connect() as conn:
            await conn.execute(
                "UPDATE products SET views = views + 1 WHERE id = ?;", (product_id,)
            )
            await conn.commit()
    except aiosqlite.Error as e:
        _logger.error(f"Error incrementing views of {product_id}: {e}")


# ---------------------------
# Orders
# ---------------------------


async def create_order(draft: models.OrderRecord) -> str:
    """
    Store an order and return its id. The id and creation timestamp are
    assigned here unless the draft already carries a timestamp.
    """
    order_id = uuid.uuid4().hex
    created_at = _to_iso(draft.created_at) if draft.created_at else _now_iso()
    items = [dataclasses.asdict(item) for item in draft.items]
    async with connect() as conn:
        await conn.execute(
            "INSERT INTO orders(id, items, total, source, status, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?);",
            (
                order_id,
                json.dumps(items, ensure_ascii=False),
                draft.total,
                draft.source,
                draft.status,
                created_at,
            ),
        )
        await conn.commit()
    _logger.info(f"Order {order_id} saved ({len(items)} lines, total {draft.total}).")
    return order_id


async def list_orders(
    start: Optional[datetime] = None, end: Optional[datetime] = None
) -> List[models.OrderRecord]:
    """
    Orders newest first. The inclusive [start, end] filter applies only when
    both bounds are given.
    """
    query = "SELECT id, items, total, source, status, created_at FROM orders"
    params: tuple = ()
    if start is not None and end is not None:
        query += " WHERE created_at >= ? AND created_at <= ?"
        params = (_to_iso(start), _to_iso(end))
    query += " ORDER BY created_at DESC;"

    async with connect() as conn:
        cur = await conn.execute(query, params)
        rows = await cur.fetchall()
        await cur.close()
    return [models.OrderRecord.from_row(dict(row)) for row in rows]


async def update_order_status(order_id: str, status: models.OrderStatus) -> bool:
    if status not in models.ORDER_STATUSES:
        raise ValueError(f"Unknown order status {status!r}.")
    async with connect() as conn:
        res = await conn.execute(
            "UPDATE orders SET status = ? WHERE id = ?;", (status, order_id)
        )
        await conn.commit()
        return res.rowcount > 0


# ---------------------------
# Store settings
# ---------------------------


def _merge_settings(stored: Dict[str, Any]) -> models.StoreSettings:
    defaults = models.StoreSettings()
    known = {f.name for f in dataclasses.fields(models.StoreSettings)}
    values = {k: v for k, v in stored.items() if k in known and k != "social_links"}
    social = dict(defaults.social_links)
    if isinstance(stored.get("social_links"), dict):
        social.update(stored["social_links"])
    return dataclasses.replace(defaults, social_links=social, **values)


async def get_store_settings() -> models.StoreSettings:
    """Stored settings laid over the defaults; defaults alone when nothing is stored."""
    async with connect() as conn:
        cur = await conn.execute("SELECT data FROM store_settings WHERE id = 1;")
        row = await cur.fetchone()
        await cur.close()
    if not row:
        return models.StoreSettings()
    try:
        stored = json.loads(row[0])
    except ValueError:
        _logger.warning("Stored settings are not valid JSON, using defaults.")
        return models.StoreSettings()
    return _merge_settings(stored if isinstance(stored, dict) else {})


async def update_store_settings(**changes: Any) -> models.StoreSettings:
    current = await get_store_settings()
    updated = _merge_settings({**dataclasses.asdict(current), **changes})
    async with connect() as conn:
        await conn.execute(
            "INSERT INTO store_settings(id, data) VALUES (1, ?) "
            "ON CONFLICT(id) DO UPDATE SET data = excluded.data;",
            (json.dumps(dataclasses.asdict(updated), ensure_ascii=False),),
        )
        await conn.commit()
    return updated


# ---------------------------
# Visits
# ---------------------------


async def track_visit(
    page: str,
    product_id: Optional[str] = None,
    source: Optional[str] = None,
    referrer: str = "",
) -> None:
    """Record a page or product view. Tracking must never break browsing."""
    try:
        async with connect() as conn:
            await conn.execute(
                "INSERT INTO visits(product_id, page, source, referrer, created_at) "
                "VALUES (?, ?, ?, ?, ?);",
                (product_id, page, source, referrer, _now_iso()),
            )
            await conn.commit()
    except aiosqlite.Error as e:
        _logger.error(f"Error tracking visit of {page}: {e}")


async def list_visits(limit: int = 100) -> List[models.Visit]:
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT page, product_id, source, referrer, created_at "
            "FROM visits ORDER BY id DESC LIMIT ?;",
            (limit,),
        )
        rows = await cur.fetchall()
        await cur.close()
    return [
        models.Visit(
            page=row["page"],
            product_id=row["product_id"],
            source=row["source"],
            referrer=row["referrer"],
            created_at=models.parse_timestamp(row["created_at"]),
        )
        for row in rows
    ]
