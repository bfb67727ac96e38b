"""
Transport context adapter.

Reduces the four request shapes the guard protects to one
(principal carrier, argument bag, attach target) triple so the guard never
branches on the transport itself.
"""

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Optional

from fastapi.requests import HTTPConnection

from .execution import ExecutionContext, TransportKind


@dataclass(frozen=True)
class AdaptedContext:
    """Uniform view of one invocation."""
    kind: Optional[TransportKind]
    principal_carrier: Any
    argument_bag: Any
    attach_target: Any

    @property
    def known(self) -> bool:
        return self.kind is not None


UNKNOWN = AdaptedContext(kind=None, principal_carrier=None, argument_bag=None, attach_target=None)


def _is_plain_mapping(obj: Any) -> bool:
    # Starlette connections are Mappings over the ASGI scope; read them by attribute
    return isinstance(obj, Mapping) and not isinstance(obj, HTTPConnection)


def read_field(obj: Any, name: str) -> Any:
    """Read a field from a mapping by key or from an object by attribute."""
    if obj is None:
        return None
    if _is_plain_mapping(obj):
        return obj.get(name)
    return getattr(obj, name, None)


def attach(target: Any, key: str, value: Any) -> None:
    """Write a field onto an attach target."""
    if isinstance(target, MutableMapping):
        target[key] = value
    else:
        setattr(target, key, value)


def read_attached(target: Any, key: str) -> Any:
    """Read back a field written with attach()."""
    return read_field(target, key)


def state_of(obj: Any) -> Any:
    """Per-request/per-connection state of a starlette-style carrier, else the carrier."""
    state = getattr(obj, "state", None)
    return state if state is not None else obj


def _http_params(request: Any) -> Any:
    params = getattr(request, "path_params", None)
    if params is None:
        params = read_field(request, "params")
    return params if params is not None else {}


def _graphql_request(ctx: Any) -> Any:
    request = read_field(ctx, "req")
    return request if request is not None else read_field(ctx, "request")


def adapt(context: ExecutionContext) -> AdaptedContext:
    """Normalize an execution context for the guard."""
    kind = context.transport

    if kind is TransportKind.HTTP:
        request = context.request
        return AdaptedContext(
            kind=kind,
            principal_carrier=request,
            argument_bag=_http_params(request),
            attach_target=state_of(request) if request is not None else None,
        )

    if kind is TransportKind.GRAPHQL:
        ctx = context.context
        request = _graphql_request(ctx)
        # Prefer the underlying request when the context exposes one
        carrier = request if request is not None else ctx
        return AdaptedContext(
            kind=kind,
            principal_carrier=carrier,
            argument_bag=dict(context.args or {}),
            attach_target=state_of(carrier) if carrier is not None else None,
        )

    if kind is TransportKind.WS:
        client = context.client
        return AdaptedContext(
            kind=kind,
            principal_carrier=client,
            argument_bag=context.data,
            attach_target=state_of(client) if client is not None else None,
        )

    if kind is TransportKind.RPC:
        # RPC contexts differ per underlying transport and are never written to
        return AdaptedContext(
            kind=kind,
            principal_carrier=context.context,
            argument_bag=context.data,
            attach_target=None,
        )

    return UNKNOWN
