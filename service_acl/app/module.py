"""
Startup wiring for the guard.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from shared.config import AclSettings, get_settings
from shared.metrics import MetricsCollector
from .ability.builder import AbilityFactory, DefineRules
from .context.principal import HeaderPrincipalExtractor, PrincipalExtractor
from .guard.guard import AclGuard, GuardOptions
from .hooks.registry import HookRegistry
from .metadata.registry import OperationRegistry, default_registry


@dataclass
class AclModuleOptions:
    """Everything a deployment plugs into the guard.

    ``hooks`` is either a key -> hook mapping or an iterable of hook
    instances keyed by their class name.
    """
    define_rules: DefineRules
    hooks: Union[Mapping[str, Any], Iterable[Any]] = field(default_factory=dict)
    operations: Optional[OperationRegistry] = None
    principal_extractor: Optional[PrincipalExtractor] = None
    guard_options: Optional[GuardOptions] = None
    parent_hooks: Optional[HookRegistry] = None
    settings: Optional[AclSettings] = None
    metrics: Optional[MetricsCollector] = None


def build_hook_registry(hooks: Union[Mapping[str, Any], Iterable[Any]],
                        parent: Optional[HookRegistry] = None) -> HookRegistry:
    if isinstance(hooks, Mapping):
        return HookRegistry(hooks, parent=parent)
    return HookRegistry.from_hooks(*hooks, parent=parent)


def create_acl(options: AclModuleOptions) -> AclGuard:
    """Build a guard from deployment options, filling gaps from settings."""
    settings = options.settings or get_settings()

    extractor = options.principal_extractor or HeaderPrincipalExtractor(
        header=settings.principal_header,
        field=settings.principal_field
    )

    return AclGuard(
        operations=options.operations if options.operations is not None else default_registry,
        ability_factory=AbilityFactory(options.define_rules),
        hooks=build_hook_registry(options.hooks, parent=options.parent_hooks),
        principal_extractor=extractor,
        options=options.guard_options or GuardOptions.from_settings(settings),
        metrics=options.metrics,
    )
