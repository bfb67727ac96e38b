"""
Read-side accessors for what the guard attached to a request.

Handlers running after the guard use these to get the principal, the ability
and the resolved subject without knowing which transport delivered the call.
"""

from typing import Any, Optional

from ..ability.ability import Ability
from .adapter import adapt, read_attached
from .execution import ExecutionContext, TransportKind


def _source(context: ExecutionContext) -> Any:
    adapted = adapt(context)
    if adapted.attach_target is not None:
        return adapted.attach_target
    if adapted.kind is TransportKind.RPC:
        # Guards never write RPC contexts, but an RPC server may have
        return adapted.principal_carrier
    return None


def get_auth(context: ExecutionContext) -> Optional[Any]:
    return read_attached(_source(context), "auth")


def get_ability(context: ExecutionContext) -> Optional[Ability]:
    return read_attached(_source(context), "ability")


def get_subject(context: ExecutionContext, subject: Any) -> Optional[Any]:
    """Resolved subject stored under its subject type (class or string)."""
    name = subject if isinstance(subject, str) else subject.__name__
    return read_attached(_source(context), name)
