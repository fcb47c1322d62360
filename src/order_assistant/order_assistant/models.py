from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer


class TimeSession(BaseModel):
    """One opening session within a day, e.g. 09:00 to 14:00."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")
    to: str


class DayHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: str
    open: bool
    sessions: list[TimeSession] | None = None

    @model_serializer(mode="wrap")
    def _omit_missing_sessions(self, handler) -> dict[str, Any]:
        data = handler(self)
        if self.sessions is None:
            data.pop("sessions", None)
        return data


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str
    price: float


class ProductEntry(BaseModel):
    """Value of ``Snapshot.products_index``."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    price: float


class MenuOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class SnapshotMenu(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float
    description: str | None = None
    composition: dict[str, int] = Field(default_factory=dict)
    allowed_product_ids: list[str] = Field(default_factory=list)
    options_by_category: dict[str, list[MenuOption]] = Field(default_factory=dict)


class Snapshot(BaseModel):
    """Point-in-time view of one establishment's ordering data.

    Built by :func:`order_assistant.snapshot.build_snapshot` and cached on the
    conversation session. The indices are derived from ``products`` and
    ``menus`` at build time and never updated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id_establishment: str
    name: str
    address: str | None = None
    phone: str | None = None
    order_ratio: float | None = None
    hours: list[DayHours] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)
    products_index: dict[str, ProductEntry] = Field(default_factory=dict)
    menus: list[SnapshotMenu] = Field(default_factory=list)
    menus_index_by_id: dict[str, SnapshotMenu] = Field(default_factory=dict)
    menus_index_by_name: dict[str, str] = Field(default_factory=dict)
    updated_at: datetime

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe dict sent back to the model as a tool result."""
        return self.model_dump(mode="json", by_alias=True)
