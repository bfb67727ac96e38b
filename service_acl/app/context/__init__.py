"""
Transport context package.

- execution: ExecutionContext and the TransportKind vocabulary.
- adapter: Normalizes a context to (principal carrier, argument bag, attach target).
- principal: Principal extraction from carriers.
- accessors: Reads back what the guard attached.
"""

from .execution import ExecutionContext, TransportKind
from .adapter import AdaptedContext, adapt, attach, read_attached
from .principal import PrincipalExtractor, HeaderPrincipalExtractor
from .accessors import get_auth, get_ability, get_subject

__all__ = [
    "ExecutionContext",
    "TransportKind",
    "AdaptedContext",
    "adapt",
    "attach",
    "read_attached",
    "PrincipalExtractor",
    "HeaderPrincipalExtractor",
    "get_auth",
    "get_ability",
    "get_subject",
]
