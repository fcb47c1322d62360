"""Order line validation against a catalog snapshot."""

from collections import Counter
from collections.abc import Iterable

from .errors import (
    DisallowedProductError,
    IncompleteSelectionError,
    UnknownMenuError,
    UnknownProductError,
)
from .models import Snapshot
from .tools import OrderDetail

MENU_ID_PREFIX = "menu_"


def coerce_menu_id(value: str, snapshot: Snapshot) -> str | None:
    """Resolve a menu reference the model may have sent as a name or alias.

    "MENU_Combo Dulce", "combo dulce" and a real id all resolve to the real
    id. Returns None when nothing matches.
    """
    if value in snapshot.menus_index_by_id:
        return value
    alias = value.strip().lower()
    if alias.startswith(MENU_ID_PREFIX):
        alias = alias[len(MENU_ID_PREFIX) :]
    return snapshot.menus_index_by_name.get(alias)


def validate_order_details(snapshot: Snapshot, details: Iterable[OrderDetail]) -> None:
    """Check every line against the snapshot, raising on the first problem.

    Raises:
        UnknownProductError: a product line names a product not in the catalog.
        UnknownMenuError: a menu line names a menu not in the catalog.
        DisallowedProductError: a menu selection is unknown or not allowed
            in that menu.
        IncompleteSelectionError: a required category count is not met
            exactly.
    """
    for detail in details:
        if detail.id_product:
            if detail.id_product not in snapshot.products_index:
                raise UnknownProductError(detail.id_product)
            continue

        if detail.id_menu:
            menu = snapshot.menus_index_by_id.get(detail.id_menu)
            if menu is None:
                raise UnknownMenuError(detail.id_menu)

            counts: Counter[str] = Counter()
            for product_id in detail.selected_products:
                product = snapshot.products_index.get(product_id)
                if product is None:
                    raise DisallowedProductError(product_id)
                if product_id not in menu.allowed_product_ids:
                    raise DisallowedProductError(product_id, menu.name)
                counts[product.category] += 1

            # Categories outside the composition are ignored.
            for category, expected in menu.composition.items():
                if counts[category] != expected:
                    raise IncompleteSelectionError(menu.name, category, expected)
