"""Exception taxonomy for snapshot building, validation and persistence.

Every error carries a stable ``code`` that the tool dispatcher copies into
the structured payload returned to the model.
"""


class OrderAssistantError(Exception):
    """Base class for all errors raised by the order assistant."""

    code = "ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class NotFoundError(OrderAssistantError):
    code = "ESTABLISHMENT_NOT_FOUND"

    def __init__(self, establishment_id: str) -> None:
        super().__init__(f"Establishment not found: {establishment_id}")
        self.establishment_id = establishment_id


class DataUnavailableError(OrderAssistantError):
    code = "SNAPSHOT_UNAVAILABLE"

    def __init__(self, part: str) -> None:
        super().__init__(f"Establishment {part} not available")
        self.part = part


class InvalidMenuError(OrderAssistantError):
    code = "SNAPSHOT_UNAVAILABLE"

    def __init__(self, menu_name: str) -> None:
        super().__init__(f'Menu without id_menu in store: "{menu_name}"')
        self.menu_name = menu_name


# ---------------------------------------------------------------------------
# Order validation
# ---------------------------------------------------------------------------


class OrderValidationError(OrderAssistantError):
    code = "INVALID_DETAILS"


class UnknownProductError(OrderValidationError):
    code = "UNKNOWN_PRODUCT"

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Unknown product: {product_id}")
        self.product_id = product_id


class UnknownMenuError(OrderValidationError):
    code = "UNKNOWN_MENU"

    def __init__(self, menu_id: str) -> None:
        super().__init__(f"Unknown menu: {menu_id}")
        self.menu_id = menu_id


class DisallowedProductError(OrderValidationError):
    code = "DISALLOWED_PRODUCT"

    def __init__(self, product_id: str, menu_name: str | None = None) -> None:
        if menu_name is None:
            message = f"Selected product is not valid: {product_id}"
        else:
            message = f'Product not allowed in menu "{menu_name}": {product_id}'
        super().__init__(message)
        self.product_id = product_id
        self.menu_name = menu_name


class IncompleteSelectionError(OrderValidationError):
    code = "INCOMPLETE_SELECTION"

    def __init__(self, menu_name: str, category: str, expected: int) -> None:
        super().__init__(
            f'Incomplete selection in "{menu_name}" for "{category}" (expected {expected}).'
        )
        self.menu_name = menu_name
        self.category = category
        self.expected = expected


# ---------------------------------------------------------------------------
# Ordering flow / persistence
# ---------------------------------------------------------------------------


class NoOpenOrderError(OrderAssistantError):
    code = "NO_OPEN_ORDER"

    def __init__(self) -> None:
        super().__init__("There is no open order. Call add_order first.")


class PersistenceError(OrderAssistantError):
    code = "PERSISTENCE_FAILED"

    def __init__(self, message: str, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


class UnknownToolError(OrderAssistantError):
    code = "UNKNOWN_TOOL"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name
