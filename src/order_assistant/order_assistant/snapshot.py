"""Catalog snapshot builder.

Reads the establishment profile, weekly hours, products and menus from the
store and assembles one consistent :class:`Snapshot` with lookup indices.
"""

from datetime import datetime, timezone
from typing import Any

from loguru import logger

from .errors import DataUnavailableError, InvalidMenuError, NotFoundError
from .models import (
    DayHours,
    MenuOption,
    Product,
    ProductEntry,
    Snapshot,
    SnapshotMenu,
    TimeSession,
)
from .store import SupabaseStore

DEFAULT_CATEGORY = "other"


def _build_hours(schedule: list[dict[str, Any]]) -> list[DayHours]:
    hours = []
    for day in schedule:
        sessions = day.get("session_schedule") or []
        hours.append(
            DayHours(
                day=day["name"],
                open=bool(day.get("is_open")),
                sessions=[
                    TimeSession(from_=s["opening_time"], to=s["closing_time"])
                    for s in sessions
                ]
                or None,
            )
        )
    return hours


def _build_menu(row: dict[str, Any], products_index: dict[str, ProductEntry]) -> SnapshotMenu:
    menu_id = row.get("id_menu")
    if not menu_id:
        raise InvalidMenuError(row.get("name", "<unnamed>"))

    allowed = [link["id_product"] for link in row.get("menu_product") or []]

    options_by_category: dict[str, list[MenuOption]] = {}
    for product_id in allowed:
        product = products_index.get(product_id)
        if product is None:
            logger.debug("Menu {} references unknown product {}", menu_id, product_id)
            continue
        category = product.category
        options_by_category.setdefault(category, []).append(
            MenuOption(id=product_id, name=product.name)
        )

    return SnapshotMenu(
        id=menu_id,
        name=row["name"],
        price=float(row["price"]),
        description=row.get("description"),
        composition=row.get("category_requirements") or {},
        allowed_product_ids=allowed,
        options_by_category=options_by_category,
    )


def build_snapshot(store: SupabaseStore, establishment_id: str) -> Snapshot:
    """Build a fresh snapshot for one establishment.

    Raises:
        NotFoundError: the establishment row does not exist.
        DataUnavailableError: hours, products or menus could not be read.
        InvalidMenuError: a menu row has no ``id_menu``.
    """
    establishment = store.get_establishment(establishment_id)
    if not establishment:
        raise NotFoundError(establishment_id)

    real_id = establishment["id_establishment"]
    schedule = store.get_schedule(real_id)
    if schedule is None:
        raise DataUnavailableError("hours")
    product_rows = store.get_products(real_id)
    if product_rows is None:
        raise DataUnavailableError("products")
    menu_rows = store.get_menus(real_id)
    if menu_rows is None:
        raise DataUnavailableError("menus")

    products = [
        Product(
            id=p["id_product"],
            name=p["name"],
            category=p.get("category") or DEFAULT_CATEGORY,
            price=float(p["price"]),
        )
        for p in product_rows
    ]
    products_index = {
        p.id: ProductEntry(name=p.name, category=p.category, price=p.price)
        for p in products
    }

    menus = [_build_menu(row, products_index) for row in menu_rows]

    snapshot = Snapshot(
        id_establishment=real_id,
        name=establishment["name"],
        address=establishment.get("address"),
        phone=establishment.get("phone_number"),
        order_ratio=establishment.get("order_ratio"),
        hours=_build_hours(schedule),
        products=products,
        products_index=products_index,
        menus=menus,
        menus_index_by_id={m.id: m for m in menus},
        menus_index_by_name={m.name.lower(): m.id for m in menus},
        updated_at=datetime.now(timezone.utc),
    )
    logger.info(
        "Snapshot built: {} ({} products, {} menus)",
        snapshot.name,
        len(products),
        len(menus),
    )
    return snapshot
