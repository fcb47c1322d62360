"""Tool-call dispatch.

The dispatcher is the trust boundary between the chat model and the
business logic: it validates raw arguments into request types, forces ids
the model must not choose, and turns every known failure into a structured
payload the model can react to.
"""

from typing import Any

from loguru import logger
from pydantic import ValidationError

from .errors import (
    NoOpenOrderError,
    NotFoundError,
    OrderAssistantError,
    OrderValidationError,
    PersistenceError,
)
from .models import Snapshot
from .session import OrderSession
from .snapshot import build_snapshot
from .store import SupabaseStore
from .tools import (
    AddDetailsOrder,
    AddOrder,
    GetEstablishmentSnapshot,
    OrderDetail,
    parse_tool_call,
)
from .validation import coerce_menu_id, validate_order_details

INVALID_ARGUMENTS = "INVALID_ARGUMENTS"


def error_payload(code: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "error": code, "message": message, **extra}


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(problems)


class ToolDispatcher:
    """Executes model tool calls against one conversation session."""

    def __init__(self, session: OrderSession, store: SupabaseStore) -> None:
        self.session = session
        self._store = store
        self._handlers = {
            GetEstablishmentSnapshot: self._get_establishment_snapshot,
            AddOrder: self._add_order,
            AddDetailsOrder: self._add_details_order,
        }

    def dispatch(self, name: str, args: dict[str, Any]) -> dict[str, Any]:
        """Run one tool call and return its JSON-safe result payload."""
        logger.info("Running tool: {}", name)
        logger.debug("{} args: {}", name, args)

        try:
            request = parse_tool_call(name, args)
        except ValidationError as exc:
            message = _describe_validation_error(exc)
            logger.warning("Invalid arguments for {}: {}", name, message)
            return error_payload(INVALID_ARGUMENTS, message)
        except OrderAssistantError as exc:
            logger.warning(exc.message)
            return error_payload(exc.code, exc.message)

        try:
            return self._handlers[type(request)](request)
        except NotFoundError as exc:
            logger.error(exc.message)
            self.session.close()
            return error_payload(exc.code, exc.message)
        except PersistenceError as exc:
            return error_payload(exc.code, exc.message, status=exc.status)
        except OrderValidationError as exc:
            logger.warning("Validation failed: {}", exc.message)
            return error_payload(exc.code, exc.message)
        except OrderAssistantError as exc:
            logger.warning("{} failed: {}", name, exc.message)
            return error_payload(exc.code, exc.message)

    # -----------------------------------------------------------------------
    # Handlers
    # -----------------------------------------------------------------------

    def _refresh_snapshot(self) -> Snapshot:
        snapshot = build_snapshot(self._store, self.session.establishment_id)
        self.session.cache_snapshot(snapshot)
        return snapshot

    def _get_establishment_snapshot(self, request: GetEstablishmentSnapshot) -> dict[str, Any]:
        if request.id_establishment != self.session.establishment_id:
            logger.warning(
                "Ignoring requested establishment {}, using {}",
                request.id_establishment,
                self.session.establishment_id,
            )
        snapshot = self._refresh_snapshot()
        logger.info(
            "Snapshot sent: {} ({}) @ {}",
            snapshot.name,
            snapshot.id_establishment,
            snapshot.updated_at.isoformat(),
        )
        return snapshot.to_payload()

    def _add_order(self, request: AddOrder) -> dict[str, Any]:
        if self.session.current_order_id is not None:
            logger.info("Order already open: {}", self.session.current_order_id)
            return {
                "success": True,
                "id_order": self.session.current_order_id,
                "existing": True,
            }

        row = self._store.insert_order(
            {
                "id_chat": self.session.chat_id,
                "id_establishment": self.session.establishment_id,
                "name": request.name,
                "is_pickup": request.is_pickup,
                "address": request.address,
            }
        )
        order_id = str(row["id_order"])
        self.session.current_order_id = order_id
        logger.info(
            "Order created | id_order={} | id_chat={} | id_establishment={}",
            order_id,
            self.session.chat_id,
            self.session.establishment_id,
        )
        return {"success": True, "id_order": order_id}

    def _prepare_detail(self, detail: OrderDetail, snapshot: Snapshot) -> OrderDetail:
        update: dict[str, Any] = {"id_order": self.session.current_order_id}
        if detail.id_menu and detail.id_menu not in snapshot.menus_index_by_id:
            mapped = coerce_menu_id(detail.id_menu, snapshot)
            if mapped:
                logger.warning('Correcting id_menu "{}" -> "{}"', detail.id_menu, mapped)
                update["id_menu"] = mapped
        return detail.model_copy(update=update)

    def _add_details_order(self, request: AddDetailsOrder) -> dict[str, Any]:
        if self.session.current_order_id is None:
            raise NoOpenOrderError()

        snapshot = self.session.snapshot or self._refresh_snapshot()
        details = [self._prepare_detail(d, snapshot) for d in request.details]
        validate_order_details(snapshot, details)

        self._store.insert_order_details([d.to_row() for d in details])
        logger.info(
            "Added {} detail(s) to order {}", len(details), self.session.current_order_id
        )
        return {
            "success": True,
            "message": "Order details added",
            "count": len(details),
        }
