"""
WebSocket message routing with per-message authorization.
"""

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from shared.errors import AccessLayerException
from shared.logging import get_logger
from ..context.execution import ExecutionContext
from ..guard.guard import AclGuard

MessageHandler = Callable[[Any, Any], Awaitable[Optional[Dict[str, Any]]]]


@dataclass
class WebSocketMessage:
    """WebSocket message wrapper."""
    action: str
    data: Any


async def authorize_ws_message(guard: AclGuard, handler: Any, client: Any, data: Any) -> None:
    """Authorize one socket message for the handler about to process it."""
    await guard.authorize(ExecutionContext.for_ws(handler, client, data))


class GuardedMessageHandler:
    """Routes ``{"action": ..., "data": ...}`` messages to handlers behind the guard.

    Each handler is the operation identity for its action, so metadata is
    registered on the handler functions themselves.
    """

    def __init__(self, guard: AclGuard, handlers: Dict[str, MessageHandler]):
        self.guard = guard
        self.handlers = dict(handlers)
        self.logger = get_logger("acl.ws.handler")

    async def handle_message(self, client: Any, message_text: str) -> Optional[Dict[str, Any]]:
        """Handle one incoming WebSocket message."""
        try:
            message_data = json.loads(message_text)
        except json.JSONDecodeError as e:
            self.logger.error("Invalid JSON message", error=str(e))
            return {
                "error": "INVALID_JSON",
                "message": "Message must be valid JSON"
            }

        if not isinstance(message_data, dict) or not message_data.get("action"):
            return {
                "error": "INVALID_FORMAT",
                "message": "Message must be a JSON object with an 'action' field"
            }

        message = WebSocketMessage(
            action=message_data["action"],
            data=message_data.get("data", {})
        )
        return await self._route_message(client, message)

    async def _route_message(self, client: Any, message: WebSocketMessage) -> Optional[Dict[str, Any]]:
        handler = self.handlers.get(message.action)
        if handler is None:
            return {
                "error": "UNKNOWN_ACTION",
                "message": f"Unknown action: {message.action}",
                "available_actions": list(self.handlers.keys())
            }

        try:
            await authorize_ws_message(self.guard, handler, client, message.data)
        except AccessLayerException as e:
            log = self.logger.error if e.status_code >= 500 else self.logger.warning
            log("Message rejected", action=message.action, code=e.code, message=e.message)
            return {
                "error": e.code,
                "message": e.message,
                "details": e.details
            }
        except Exception as e:
            self.logger.error("Error authorizing message", action=message.action, error=str(e))
            return {
                "error": "INTERNAL_ERROR",
                "message": "Internal server error"
            }

        return await handler(client, message.data)
