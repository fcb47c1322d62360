from enum import StrEnum


class ConversationStatus(StrEnum):
    AWAITING_SNAPSHOT = "awaiting-snapshot"
    ORDERING = "ordering"
    CLOSED = "closed"


class MessageRole(StrEnum):
    USER = "user"
    MODEL = "model"
    FUNCTION = "function"
