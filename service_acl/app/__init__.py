"""
ACL Guard package.

Request-scoped authorization for HTTP, GraphQL-style, WebSocket and RPC
operations. Key modules include:

- app.context: Transport adapter, principal extraction and accessors
- app.ability: Rules, condition matching and the ability factory
- app.hooks: Subject hooks resolved by key
- app.metadata: Per-operation ACL metadata
- app.guard: The decision procedure tying the above together
- app.module: Startup wiring
- app.integrations: FastAPI and WebSocket glue
- app.main: FastAPI service hosting protected routes
"""

from .ability import Ability, AbilityBuilder, AbilityFactory, AclActions, Rule, subject
from .context import ExecutionContext, TransportKind, HeaderPrincipalExtractor, get_auth, get_ability, get_subject
from .guard import AclGuard, GuardOptions
from .hooks import SubjectHook, FunctionHook, HookRegistry
from .metadata import AclMetadata, OperationRegistry, acl
from .module import AclModuleOptions, create_acl
from .integrations import AclDependency, GuardedMessageHandler, authorize_ws_message, current_ability, current_auth, current_subject

__all__ = [
    "Ability",
    "AbilityBuilder",
    "AbilityFactory",
    "AclActions",
    "Rule",
    "subject",
    "ExecutionContext",
    "TransportKind",
    "HeaderPrincipalExtractor",
    "get_auth",
    "get_ability",
    "get_subject",
    "AclGuard",
    "GuardOptions",
    "SubjectHook",
    "FunctionHook",
    "HookRegistry",
    "AclMetadata",
    "OperationRegistry",
    "acl",
    "AclModuleOptions",
    "create_acl",
    "AclDependency",
    "GuardedMessageHandler",
    "authorize_ws_message",
    "current_ability",
    "current_auth",
    "current_subject",
]
