"""Shared pytest fixtures for order assistant tests."""

import copy
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest
from langchain_core.messages import AIMessage

from order_assistant.errors import DataUnavailableError, PersistenceError
from order_assistant.models import Snapshot
from order_assistant.session import OrderSession
from order_assistant.snapshot import build_snapshot

ESTABLISHMENT_ID = "est-1"
CHAT_ID = "chat-test"

ESTABLISHMENT_ROW = {
    "id_establishment": ESTABLISHMENT_ID,
    "name": "Dulce Frio",
    "address": "Calle Mayor 1",
    "phone_number": "+34 600 000 000",
    "order_ratio": 4,
}

SCHEDULE_ROWS = [
    {
        "id_day": "d-1",
        "name": "Monday",
        "is_open": True,
        "session_schedule": [
            {"opening_time": "09:00", "closing_time": "14:00"},
            {"opening_time": "17:00", "closing_time": "21:00"},
        ],
    },
    {"id_day": "d-2", "name": "Sunday", "is_open": False, "session_schedule": []},
]

PRODUCT_ROWS = [
    {"id_product": "p-burger", "name": "Burger", "category": "main", "price": "8.50"},
    {"id_product": "p-wrap", "name": "Wrap", "category": "main", "price": 7},
    {"id_product": "p-cola", "name": "Cola", "category": "drink", "price": "2.00"},
    {"id_product": "p-water", "name": "Water", "category": "drink", "price": 1},
    {"id_product": "p-fries", "name": "Fries", "category": "side", "price": "3"},
    {"id_product": "p-cookie", "name": "Cookie", "category": None, "price": "1.5"},
]

MENU_ROWS = [
    {
        "id_menu": "m-combo",
        "name": "Combo Dulce",
        "price": "9.90",
        "description": "Main and drink",
        "category_requirements": {"main": 1, "drink": 1},
        "menu_product": [
            {"id_menu": "m-combo", "id_product": "p-burger"},
            {"id_menu": "m-combo", "id_product": "p-wrap"},
            {"id_menu": "m-combo", "id_product": "p-cola"},
            {"id_menu": "m-combo", "id_product": "p-fries"},
            {"id_menu": "m-combo", "id_product": "p-ghost"},
        ],
    },
    {
        "id_menu": "m-family",
        "name": "Family Pack",
        "price": 25,
        "description": None,
        "category_requirements": {"main": 2, "drink": 2},
        "menu_product": [
            {"id_menu": "m-family", "id_product": "p-burger"},
            {"id_menu": "m-family", "id_product": "p-wrap"},
            {"id_menu": "m-family", "id_product": "p-cola"},
            {"id_menu": "m-family", "id_product": "p-water"},
            {"id_menu": "m-family", "id_product": "p-cookie"},
        ],
    },
]


class FakeStore:
    """In-memory stand-in for SupabaseStore that records every call."""

    def __init__(self) -> None:
        self.establishment: dict[str, Any] | None = copy.deepcopy(ESTABLISHMENT_ROW)
        self.schedule: list[dict[str, Any]] | None = copy.deepcopy(SCHEDULE_ROWS)
        self.products: list[dict[str, Any]] | None = copy.deepcopy(PRODUCT_ROWS)
        self.menus: list[dict[str, Any]] | None = copy.deepcopy(MENU_ROWS)
        self.history: list[dict[str, Any]] = []

        self.orders: list[dict[str, Any]] = []
        self.details: list[list[dict[str, Any]]] = []
        self.messages: list[dict[str, Any]] = []
        self.establishment_reads = 0

        self.fail_establishment_read = False
        self.fail_order_insert = False
        self.fail_details_insert = False
        self.fail_message_insert = False

    def get_establishment(self, establishment_id: str) -> dict[str, Any] | None:
        self.establishment_reads += 1
        if self.fail_establishment_read:
            raise DataUnavailableError("profile")
        if self.establishment and self.establishment["id_establishment"] == establishment_id:
            return self.establishment
        return None

    def get_schedule(self, establishment_id: str):
        return self.schedule

    def get_products(self, establishment_id: str):
        return self.products

    def get_menus(self, establishment_id: str):
        return self.menus

    def load_messages(self, chat_id: str):
        return [row for row in self.history if row.get("id_chat", chat_id) == chat_id]

    def get_order_with_details(self, order_id: str) -> dict[str, Any] | None:
        for order in self.orders:
            if order["id_order"] == order_id:
                details = [d for batch in self.details for d in batch if d.get("id_order") == order_id]
                return {**order, "details_order": details}
        return None

    def insert_order(self, order: dict[str, Any]) -> dict[str, Any]:
        if self.fail_order_insert:
            raise PersistenceError("duplicate key value", status="23505")
        row = {**order, "id_order": f"order-{len(self.orders) + 1}"}
        self.orders.append(row)
        return row

    def insert_order_details(self, details: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if self.fail_details_insert:
            raise PersistenceError("insert failed", status="500")
        self.details.append(details)
        return details

    def save_message(self, chat_id: str, role, parts) -> dict[str, Any]:
        if self.fail_message_insert:
            raise PersistenceError("messages table unavailable")
        row = {"id_chat": chat_id, "role": role.value, "parts": parts}
        self.messages.append(row)
        return row


class ScriptedModel:
    """Chat model double that replays queued AIMessages in order."""

    def __init__(self, responses: list[AIMessage]) -> None:
        self._responses = list(responses)
        self.calls: list[list] = []

    def invoke(self, messages, config=None, **kwargs) -> AIMessage:
        self.calls.append(list(messages))
        if not self._responses:
            raise RuntimeError("ScriptedModel has no responses left")
        return self._responses.pop(0)


def tool_call_message(*calls: tuple[str, dict[str, Any]]) -> AIMessage:
    """AIMessage requesting the given (name, args) tool calls."""
    return AIMessage(
        content="",
        tool_calls=[
            {"id": f"call_{i}", "name": name, "args": args}
            for i, (name, args) in enumerate(calls)
        ],
    )


@pytest.fixture
def store() -> FakeStore:
    """Fresh in-memory store seeded with the sample catalog."""
    return FakeStore()


@pytest.fixture
def snapshot(store: FakeStore) -> Snapshot:
    """Snapshot built from the sample catalog."""
    return build_snapshot(store, ESTABLISHMENT_ID)


@pytest.fixture
def session() -> OrderSession:
    """Open session for the test chat and establishment."""
    return OrderSession(chat_id=CHAT_ID, establishment_id=ESTABLISHMENT_ID)


def query_returning(client: MagicMock, data=None, error: Exception | None = None) -> MagicMock:
    """Make every builder chain on client.table() end in execute() -> data."""
    query = MagicMock()
    for method in ("select", "eq", "order", "limit", "insert"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = SimpleNamespace(data=data)
    client.table.return_value = query
    return query
