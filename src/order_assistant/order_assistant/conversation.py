"""Conversation controller: one instance per chat id.

Owns the session, the running message list and the debouncer, and runs one
graph invocation per (debounced) user message. A failed turn is logged and
answered with an apology; it never ends the conversation.
"""

import json
import threading
from collections.abc import Callable
from typing import Any

from langchain_core.messages import BaseMessage, HumanMessage, ToolMessage
from loguru import logger

from .debounce import DEFAULT_DELAY, InputDebouncer
from .dispatch import ToolDispatcher
from .enums import MessageRole
from .errors import PersistenceError
from .graph import ChatModel, build_graph
from .history import find_open_order_id, function_part, rows_to_messages, text_part
from .prompts import OPENING_MESSAGE, render_system_prompt
from .session import OrderSession
from .store import SupabaseStore

APOLOGY = "Sorry, something went wrong while processing your message. Please try again."


def message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    chunks = []
    for block in content:
        if isinstance(block, str):
            chunks.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            chunks.append(block.get("text", ""))
    return "".join(chunks)


class Conversation:
    """Drives the chat for one session.

    Args:
        session: Per-conversation state shared with the tool dispatcher.
        store: Data store for reads, order writes and message history.
        llm: Chat model with the order tools bound.
        prompt_template: System prompt template with {{var}} placeholders.
        on_reply: Called with every non-empty assistant reply.
        debounce_delay: Quiet period before buffered input becomes a turn.
        config: Extra LangGraph run config (callbacks, metadata).
    """

    def __init__(
        self,
        session: OrderSession,
        store: SupabaseStore,
        llm: ChatModel,
        prompt_template: str,
        on_reply: Callable[[str], object] | None = None,
        debounce_delay: float = DEFAULT_DELAY,
        config: dict[str, Any] | None = None,
    ) -> None:
        self.session = session
        self._store = store
        self._dispatcher = ToolDispatcher(session, store)
        system_prompt = render_system_prompt(
            prompt_template, session.chat_id, session.establishment_id
        )
        self._graph = build_graph(llm, self._dispatcher, system_prompt)
        self._config = config or {}
        self._on_reply = on_reply
        self._messages: list[BaseMessage] = []
        self._turn_lock = threading.Lock()
        self._debouncer = InputDebouncer(self.process, delay=debounce_delay)

    @property
    def is_closed(self) -> bool:
        return self.session.is_closed

    @property
    def messages(self) -> list[BaseMessage]:
        return list(self._messages)

    def start(self) -> str:
        """Restore stored history for the chat, then run the opening turn.

        The open order named by the history is only restored when the store
        still has it. The opening instruction itself is not stored.
        """
        rows = self._store.load_messages(self.session.chat_id) or []
        if rows:
            self._messages = rows_to_messages(rows)
            order_id = find_open_order_id(rows)
            if order_id and self._store.get_order_with_details(order_id) is None:
                logger.warning("Order {} from history not found; starting without an open order", order_id)
                order_id = None
            if order_id:
                self.session.current_order_id = order_id
            logger.info(
                "Resumed chat {} ({} messages, open order: {})",
                self.session.chat_id,
                len(self._messages),
                order_id,
            )
        return self.process(OPENING_MESSAGE, save_input=False)

    def submit(self, text: str) -> None:
        """Buffer user input; it becomes a turn once the input goes quiet."""
        if self.is_closed:
            logger.warning("Ignoring input for closed chat {}", self.session.chat_id)
            return
        self._debouncer.push(text)

    def close(self) -> None:
        """Flush pending input, then close the session."""
        self._debouncer.flush()
        self.session.close()
        logger.info("Conversation closed (chat_id={})", self.session.chat_id)

    def process(self, text: str, save_input: bool = True) -> str:
        reply = self.run_turn(text, save_input=save_input)
        if reply and self._on_reply is not None:
            self._on_reply(reply)
        return reply

    def run_turn(self, text: str, save_input: bool = True) -> str:
        """Run one model turn and return the assistant's final text."""
        with self._turn_lock:
            try:
                return self._run_turn(text, save_input)
            except Exception:
                logger.exception("Failed to process message for chat {}", self.session.chat_id)
                return APOLOGY

    def _run_turn(self, text: str, save_input: bool) -> str:
        logger.debug("User input: {}", text)
        if save_input:
            self._save(MessageRole.USER, [text_part(text)])

        inputs = self._messages + [HumanMessage(content=text)]
        result = self._graph.invoke({"messages": inputs}, config=self._config)
        new_messages = result["messages"][len(inputs) :]

        for message in new_messages:
            if isinstance(message, ToolMessage):
                self._save(
                    MessageRole.FUNCTION,
                    [function_part(message.name, json.loads(message.content))],
                )

        self._messages = list(result["messages"])
        reply = message_text(new_messages[-1]) if new_messages else ""
        if reply:
            logger.debug("Assistant response: {}", reply[:100])
            self._save(MessageRole.MODEL, [text_part(reply)])
        return reply

    def _save(self, role: MessageRole, parts: list[dict[str, Any]]) -> None:
        try:
            self._store.save_message(self.session.chat_id, role, parts)
        except PersistenceError as exc:
            logger.warning("Could not store {} message: {}", role.value, exc.message)
