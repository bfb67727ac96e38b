"""
Transport integrations: FastAPI route dependencies and WebSocket message routing.
"""

from .http import AclDependency, current_auth, current_ability, current_subject
from .ws import GuardedMessageHandler, authorize_ws_message

__all__ = [
    "AclDependency",
    "current_auth",
    "current_ability",
    "current_subject",
    "GuardedMessageHandler",
    "authorize_ws_message",
]
