"""
Execution context shared by every transport the guard protects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class TransportKind(str, Enum):
    """Transports the context adapter understands."""
    HTTP = "http"
    GRAPHQL = "graphql"
    WS = "ws"
    RPC = "rpc"


@dataclass
class ExecutionContext:
    """One invocation of an operation, as seen by the guard.

    The carrier objects belong to the surrounding framework; the guard only
    reads them and writes a few well-known fields onto the attach target.
    """
    kind: str
    operation: Any = None
    request: Any = None
    context: Any = None
    client: Any = None
    args: Any = None
    data: Any = None

    @classmethod
    def for_http(cls, operation: Any, request: Any) -> "ExecutionContext":
        return cls(kind=TransportKind.HTTP.value, operation=operation, request=request)

    @classmethod
    def for_graphql(cls, operation: Any, context: Any, args: Optional[dict] = None) -> "ExecutionContext":
        return cls(kind=TransportKind.GRAPHQL.value, operation=operation, context=context, args=args or {})

    @classmethod
    def for_ws(cls, operation: Any, client: Any, data: Any = None) -> "ExecutionContext":
        return cls(kind=TransportKind.WS.value, operation=operation, client=client, data=data)

    @classmethod
    def for_rpc(cls, operation: Any, context: Any, data: Any = None) -> "ExecutionContext":
        return cls(kind=TransportKind.RPC.value, operation=operation, context=context, data=data)

    @property
    def transport(self) -> Optional[TransportKind]:
        """Known transport kind, or None for anything the adapter cannot read."""
        try:
            return TransportKind(self.kind)
        except ValueError:
            return None
