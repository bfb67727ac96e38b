"""
FastAPI integration.

HTTP routes are protected with a dependency that reads the matched endpoint
from the request scope, so the endpoint function itself is the operation
identity metadata was registered under.
"""

from typing import Any, Callable, Optional

from fastapi import Request

from ..ability.ability import Ability
from ..context.accessors import get_ability, get_auth, get_subject
from ..context.execution import ExecutionContext
from ..guard.guard import AclGuard


class AclDependency:
    """Route dependency running the guard; a denial raises AuthorizationError."""

    def __init__(self, guard: AclGuard):
        self.guard = guard

    async def __call__(self, request: Request) -> None:
        operation = request.scope.get("endpoint")
        await self.guard.authorize(ExecutionContext.for_http(operation, request))


def current_auth(request: Request) -> Optional[Any]:
    return get_auth(ExecutionContext.for_http(None, request))


def current_ability(request: Request) -> Optional[Ability]:
    return get_ability(ExecutionContext.for_http(None, request))


def current_subject(subject: Any) -> Callable[[Request], Optional[Any]]:
    """Dependency returning the subject the guard resolved for this request."""

    def dependency(request: Request) -> Optional[Any]:
        return get_subject(ExecutionContext.for_http(None, request), subject)

    return dependency
