"""Supabase-backed data store.

Catalog and history reads return ``None`` when the store reports an error
(the error is logged) so callers can tell "missing" apart from "empty". The
establishment read is the exception: there ``None`` means "no such row" and a
failed read raises :class:`DataUnavailableError`. Writes raise
:class:`PersistenceError`, carrying the store's error code when it has one.
"""

from typing import Any

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from supabase import Client, create_client

from .config import Settings
from .enums import MessageRole
from .errors import DataUnavailableError, PersistenceError

SCHEDULE_COLUMNS = """
    id_day,
    name,
    is_open,
    session_schedule (
        opening_time,
        closing_time
    )
"""

MENU_COLUMNS = """
    id_menu,
    name,
    price,
    description,
    category_requirements,
    menu_product (
        id_menu,
        id_product
    )
"""

# Errors the client raises: PostgREST error responses and transport failures.
STORE_ERRORS = (APIError, httpx.HTTPError)


def _describe(exc: Exception) -> str:
    if isinstance(exc, APIError):
        return exc.message or str(exc)
    return f"{type(exc).__name__}: {exc}"


class SupabaseStore:
    """Thin wrapper over the Supabase tables used by the assistant."""

    def __init__(self, client: Client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseStore":
        return cls(create_client(settings.supabase_url, settings.supabase_key))

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def _read(self, what: str, query) -> list[dict[str, Any]] | None:
        try:
            return query.execute().data
        except STORE_ERRORS as exc:
            logger.error("Failed to fetch {}: {}", what, _describe(exc))
            return None

    def get_establishment(self, establishment_id: str) -> dict[str, Any] | None:
        """The establishment row, or None when it does not exist.

        Raises:
            DataUnavailableError: the read itself failed.
        """
        query = (
            self._client.table("establishments")
            .select("*")
            .eq("id_establishment", establishment_id)
            .limit(1)
        )
        try:
            rows = query.execute().data or []
        except STORE_ERRORS as exc:
            logger.error("Failed to fetch establishment {}: {}", establishment_id, _describe(exc))
            raise DataUnavailableError("profile") from exc
        return rows[0] if rows else None

    def get_schedule(self, establishment_id: str) -> list[dict[str, Any]] | None:
        return self._read(
            f"schedule for {establishment_id}",
            self._client.table("days")
            .select(SCHEDULE_COLUMNS)
            .eq("id_establishment", establishment_id)
            .order("name"),
        )

    def get_products(self, establishment_id: str) -> list[dict[str, Any]] | None:
        return self._read(
            f"products for {establishment_id}",
            self._client.table("products").select("*").eq("id_establishment", establishment_id),
        )

    def get_menus(self, establishment_id: str) -> list[dict[str, Any]] | None:
        return self._read(
            f"menus for {establishment_id}",
            self._client.table("menus").select(MENU_COLUMNS).eq("id_establishment", establishment_id),
        )

    def load_messages(self, chat_id: str) -> list[dict[str, Any]] | None:
        """Stored conversation rows for a chat, oldest first."""
        return self._read(
            f"history for chat {chat_id}",
            self._client.table("messages")
            .select("role, parts, created_at")
            .eq("id_chat", chat_id)
            .order("created_at"),
        )

    def get_order_with_details(self, order_id: str) -> dict[str, Any] | None:
        rows = self._read(
            f"order {order_id}",
            self._client.table("orders")
            .select("*, details_order (*)")
            .eq("id_order", order_id)
            .limit(1),
        )
        return rows[0] if rows else None

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def _insert(self, table: str, rows: dict[str, Any] | list[dict[str, Any]]) -> list[dict[str, Any]]:
        try:
            response = self._client.table(table).insert(rows).execute()
        except APIError as exc:
            logger.error("Insert into {} failed ({}): {}", table, exc.code, exc.message)
            raise PersistenceError(exc.message or f"Insert into {table} failed", status=exc.code) from exc
        except httpx.HTTPError as exc:
            logger.error("Insert into {} failed: {}", table, _describe(exc))
            raise PersistenceError(f"Insert into {table} failed: {_describe(exc)}") from exc
        if not response.data:
            raise PersistenceError(f"Insert into {table} returned no rows")
        return response.data

    def insert_order(self, order: dict[str, Any]) -> dict[str, Any]:
        return self._insert("orders", order)[0]

    def insert_order_details(self, details: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return self._insert("details_order", details)

    def save_message(self, chat_id: str, role: MessageRole, parts: list[dict[str, Any]]) -> dict[str, Any]:
        return self._insert(
            "messages",
            {"id_chat": chat_id, "role": role.value, "parts": parts},
        )[0]
