from pydantic import BaseModel

from .enums import ConversationStatus
from .models import Snapshot


class OrderSession(BaseModel):
    """Mutable state of one conversation, owned by its Conversation."""

    chat_id: str
    establishment_id: str
    status: ConversationStatus = ConversationStatus.AWAITING_SNAPSHOT
    snapshot: Snapshot | None = None
    current_order_id: str | None = None

    @property
    def is_closed(self) -> bool:
        return self.status == ConversationStatus.CLOSED

    def cache_snapshot(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        if self.status == ConversationStatus.AWAITING_SNAPSHOT:
            self.status = ConversationStatus.ORDERING

    def close(self) -> None:
        self.status = ConversationStatus.CLOSED
