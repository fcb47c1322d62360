"""Tool request types exposed to the chat model.

Each class is both the schema bound to the model (its ``title`` is the tool
name) and the validated request the dispatcher works with.
"""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import UnknownToolError


class GetEstablishmentSnapshot(BaseModel):
    """Return the CURRENT establishment data: profile, opening hours, products, menus and prices."""

    model_config = ConfigDict(title="get_establishment_snapshot")

    id_establishment: str = Field(description="Establishment ID.")


class AddOrder(BaseModel):
    """Create a new order for this conversation."""

    model_config = ConfigDict(title="add_order")

    id_chat: str = Field(description="Chat ID the order belongs to.")
    id_establishment: str = Field(description="Establishment ID.")
    name: str = Field(description="Customer name.")
    is_pickup: bool = Field(description="true: pickup at the establishment; false: delivery.")
    address: str | None = Field(
        default=None, description="Delivery address (required if is_pickup is false)."
    )

    @model_validator(mode="after")
    def require_address_for_delivery(self) -> Self:
        if not self.is_pickup and not (self.address and self.address.strip()):
            raise ValueError("address is required when is_pickup is false")
        return self


class OrderDetail(BaseModel):
    """One line of an order: a single product or a menu with its selections."""

    id_order: str | None = Field(default=None, description="Order ID.")
    id_product: str | None = Field(default=None, description="Product ID (if not a menu).")
    id_menu: str | None = Field(default=None, description="Menu ID (if not a product).")
    selected_products: list[str] = Field(
        default_factory=list, description="Product IDs selected for the menu."
    )
    quantity: int = Field(ge=1, description="Number of units.")
    note: str | None = Field(default=None, description="Optional note.")

    @model_validator(mode="after")
    def product_or_menu(self) -> Self:
        if bool(self.id_product) == bool(self.id_menu):
            raise ValueError("exactly one of id_product or id_menu must be set")
        return self

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class AddDetailsOrder(BaseModel):
    """Add line items (products or menus) to the open order."""

    model_config = ConfigDict(title="add_details_order")

    details: list[OrderDetail] = Field(min_length=1, description="Order lines.")


ToolRequest = GetEstablishmentSnapshot | AddOrder | AddDetailsOrder

TOOL_REQUESTS: dict[str, type[BaseModel]] = {
    "get_establishment_snapshot": GetEstablishmentSnapshot,
    "add_order": AddOrder,
    "add_details_order": AddDetailsOrder,
}

TOOL_SCHEMAS = list(TOOL_REQUESTS.values())


def parse_tool_call(name: str, args: dict[str, Any]) -> ToolRequest:
    """Validate raw model arguments into the request type for ``name``.

    Raises:
        UnknownToolError: ``name`` is not one of the exposed tools.
        pydantic.ValidationError: the arguments do not match the schema.
    """
    request_type = TOOL_REQUESTS.get(name)
    if request_type is None:
        raise UnknownToolError(name)
    return request_type.model_validate(args)
