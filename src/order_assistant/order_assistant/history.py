"""Stored conversation rows <-> chat messages.

Rows are ``{"role": ..., "parts": [...]}`` where each part is either
``{"text": ...}`` or ``{"function_response": {"name": ..., "response": ...}}``.
"""

import json
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from .enums import MessageRole


def text_part(text: str) -> dict[str, Any]:
    return {"text": text}


def function_part(name: str, response: dict[str, Any]) -> dict[str, Any]:
    return {"function_response": {"name": name, "response": response}}


def _load_parts(raw: Any) -> list[Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return [raw]
    if isinstance(raw, dict):
        return [raw]
    return list(raw or [])


def _joined_text(parts: list[Any]) -> str:
    return "\n".join(
        part["text"] for part in parts if isinstance(part, dict) and part.get("text")
    )


def _function_response(part: Any) -> dict[str, Any] | None:
    if not isinstance(part, dict):
        return None
    response = part.get("function_response")
    if not isinstance(response, dict) or not response.get("name"):
        return None
    return response


def rows_to_messages(rows: list[dict[str, Any]]) -> list[BaseMessage]:
    """Rebuild the chat history the model sees from stored rows.

    Tool results are replayed as model-side text since the original tool
    call ids are not stored.
    """
    messages: list[BaseMessage] = []
    for row in rows:
        role = row.get("role")
        parts = _load_parts(row.get("parts"))

        if role == MessageRole.USER:
            text = _joined_text(parts)
            if text:
                messages.append(HumanMessage(content=text))
        elif role in (MessageRole.MODEL, "assistant"):
            text = _joined_text(parts)
            if text:
                messages.append(AIMessage(content=text))
        elif role == MessageRole.FUNCTION:
            for part in parts:
                response = _function_response(part)
                if response is None:
                    messages.append(
                        AIMessage(content=f"[function response malformed] {json.dumps(part, default=str)}")
                    )
                    continue
                messages.append(
                    AIMessage(
                        content=f"[tool result {response['name']}] "
                        f"{json.dumps(response.get('response'), default=str)}"
                    )
                )
    return messages


def find_open_order_id(rows: list[dict[str, Any]]) -> str | None:
    """Return the order id of the last successful add_order in the history."""
    order_id = None
    for row in rows:
        if row.get("role") != MessageRole.FUNCTION:
            continue
        for part in _load_parts(row.get("parts")):
            response = _function_response(part)
            if response is None or response["name"] != "add_order":
                continue
            result = response.get("response")
            if not isinstance(result, dict):
                continue
            if result.get("success") and result.get("id_order"):
                order_id = str(result["id_order"])
    return order_id
