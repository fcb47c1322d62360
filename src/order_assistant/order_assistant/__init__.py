"""Conversational order-taking assistant (LangGraph + Mistral + Supabase)."""

from .enums import ConversationStatus, MessageRole
from .models import Snapshot, SnapshotMenu
from .session import OrderSession
from .snapshot import build_snapshot
from .tools import AddDetailsOrder, AddOrder, GetEstablishmentSnapshot, OrderDetail
from .validation import coerce_menu_id, validate_order_details

__all__ = [
    "AddDetailsOrder",
    "AddOrder",
    "ConversationStatus",
    "GetEstablishmentSnapshot",
    "MessageRole",
    "OrderDetail",
    "OrderSession",
    "Snapshot",
    "SnapshotMenu",
    "build_snapshot",
    "coerce_menu_id",
    "validate_order_details",
]
