"""
Subject hook registry.

Hooks turn request arguments plus the principal into the concrete subject an
operation acts on. The registry is built once at startup and only read while
requests are handled.
"""

import inspect
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from shared.errors import ConfigurationError, HookNotRegisteredError


class SubjectHook(ABC):
    """Resolves the subject instance for an operation."""

    @abstractmethod
    async def run(self, args: Any, auth: Optional[Any] = None) -> Optional[Any]:
        """Return the subject, or None when there is nothing to authorize against."""


class FunctionHook(SubjectHook):
    """Adapts a plain function (sync or async) to the hook contract."""

    def __init__(self, func: Callable[[Any, Optional[Any]], Union[Any, Awaitable[Any]]]):
        self.func = func

    async def run(self, args: Any, auth: Optional[Any] = None) -> Optional[Any]:
        result = self.func(args, auth)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"FunctionHook({getattr(self.func, '__qualname__', self.func)!r})"


def _as_hook(hook: Any) -> SubjectHook:
    if isinstance(hook, type):
        raise ConfigurationError(
            f"Hook {hook.__name__} must be registered as an instance",
            {"hook": hook.__name__}
        )
    if isinstance(hook, SubjectHook):
        return hook
    if callable(getattr(hook, "run", None)):
        # Duck-typed hooks may have a synchronous run()
        return FunctionHook(hook.run)
    if callable(hook):
        return FunctionHook(hook)
    raise ConfigurationError(f"Not a subject hook: {hook!r}")


class HookRegistry:
    """Stable key -> hook mapping, optionally chained to a parent registry.

    Strict resolution only looks at this registry's own hooks; lenient
    resolution falls back through the parent chain.
    """

    def __init__(self, hooks: Optional[Mapping[str, Any]] = None, parent: Optional["HookRegistry"] = None):
        self._hooks: Mapping[str, SubjectHook] = MappingProxyType(
            {key: _as_hook(hook) for key, hook in (hooks or {}).items()}
        )
        self.parent = parent

    @classmethod
    def from_hooks(cls, *hooks: SubjectHook, parent: Optional["HookRegistry"] = None) -> "HookRegistry":
        """Key hook instances by their class name."""
        return cls({type(hook).__name__: hook for hook in hooks}, parent=parent)

    @property
    def hooks(self) -> Mapping[str, SubjectHook]:
        return self._hooks

    def __contains__(self, key: str) -> bool:
        return key in self._hooks

    def resolve(self, key: str, strict: bool = False) -> SubjectHook:
        """Find the hook registered under key; a miss is a configuration error."""
        hook = self._hooks.get(key)
        if hook is not None:
            return hook
        if not strict and self.parent is not None:
            return self.parent.resolve(key, strict=False)
        raise HookNotRegisteredError(key, {"hook_key": key, "strict": strict})

    def describe(self) -> Dict[str, str]:
        """Registered keys and the hook each resolves to, for introspection."""
        return {key: repr(hook) for key, hook in self._hooks.items()}
