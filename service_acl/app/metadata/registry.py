"""
Operation metadata.

Each protected operation carries one immutable ``AclMetadata`` record,
registered before any invocation and looked up by the guard through the
operation's identity (the handler function, or a string name for transports
that route by pattern).
"""

from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional, TypeVar

from shared.errors import ConfigurationError, MetadataConflictError

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class AclMetadata:
    """What an operation does, to which subject type, and how to find the subject."""
    action: str
    subject: str
    hook_key: Optional[str] = None


def _key_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, type):
        return value.__name__
    # Hook instances are keyed by their class name
    return type(value).__name__


def operation_key(operation: Any) -> Any:
    """Identity used for lookups; bound methods resolve to their function."""
    return getattr(operation, "__func__", operation)


def operation_name(operation: Any) -> str:
    if isinstance(operation, str):
        return operation
    func = operation_key(operation)
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)


class OperationRegistry:
    """Side table of operation -> AclMetadata."""

    def __init__(self):
        self._entries: Dict[Any, AclMetadata] = {}
        self._frozen = False

    def register(self, operation: Any, metadata: AclMetadata) -> AclMetadata:
        if self._frozen:
            raise ConfigurationError(
                "Operation registry is frozen",
                {"operation": operation_name(operation)}
            )
        key = operation_key(operation)
        existing = self._entries.get(key)
        if existing is not None and existing != metadata:
            raise MetadataConflictError(operation_name(operation))
        self._entries[key] = metadata
        return metadata

    def get(self, operation: Any) -> Optional[AclMetadata]:
        if operation is None:
            return None
        try:
            return self._entries.get(operation_key(operation))
        except TypeError:
            # Unhashable operation identities never carry metadata
            return None

    def __contains__(self, operation: Any) -> bool:
        return self.get(operation) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def freeze(self) -> None:
        """Reject further registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def describe(self) -> List[Dict[str, Any]]:
        return [
            {"operation": operation_name(op), **asdict(metadata)}
            for op, metadata in self._entries.items()
        ]


default_registry = OperationRegistry()


def acl(action: str, subject: Any, hook: Any = None,
        registry: Optional[OperationRegistry] = None) -> Callable[[F], F]:
    """Declare the ACL requirements of an operation.

    ``subject`` and ``hook`` accept a class (its name is used) or a string.
    The decorated function is returned unchanged.
    """
    metadata = AclMetadata(
        action=str(getattr(action, "value", action)),
        subject=_key_name(subject),
        hook_key=_key_name(hook),
    )
    target = registry if registry is not None else default_registry

    def decorator(func: F) -> F:
        target.register(func, metadata)
        return func

    return decorator
