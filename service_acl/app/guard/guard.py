"""
Authorization guard.

Runs once per invocation: metadata lookup, context adaptation, principal
extraction, ability construction, attach, then either subject resolution
through a hook or a direct check against the subject type.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional

from shared.config import AclSettings
from shared.errors import AccessLayerException, AuthorizationError
from shared.logging import get_logger, set_principal_context
from shared.metrics import MetricsCollector
from shared.tracing import trace_span
from ..ability.ability import subject as as_subject
from ..ability.builder import AbilityFactory
from ..context.adapter import AdaptedContext, adapt, attach, read_field
from ..context.execution import ExecutionContext
from ..context.principal import HeaderPrincipalExtractor, PrincipalExtractor
from ..hooks.registry import HookRegistry
from ..metadata.registry import AclMetadata, OperationRegistry, operation_name


def _transport_label(context: ExecutionContext) -> str:
    transport = context.transport
    return transport.value if transport is not None else str(context.kind)


@dataclass(frozen=True)
class GuardOptions:
    """How hooks are resolved and whether the resolved subject is written back."""
    strict_hooks: bool = False
    attach_subject: bool = True
    tracing: bool = False

    @classmethod
    def lenient(cls, tracing: bool = False) -> "GuardOptions":
        return cls(strict_hooks=False, attach_subject=True, tracing=tracing)

    @classmethod
    def strict(cls, tracing: bool = False) -> "GuardOptions":
        return cls(strict_hooks=True, attach_subject=False, tracing=tracing)

    @classmethod
    def from_settings(cls, settings: AclSettings) -> "GuardOptions":
        if settings.guard_mode == "strict":
            return cls.strict(tracing=settings.enable_tracing)
        return cls.lenient(tracing=settings.enable_tracing)


class AclGuard:
    """Allow/deny decision for one invocation of a protected operation."""

    def __init__(
        self,
        operations: OperationRegistry,
        ability_factory: AbilityFactory,
        hooks: Optional[HookRegistry] = None,
        principal_extractor: Optional[PrincipalExtractor] = None,
        options: Optional[GuardOptions] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.operations = operations
        self.ability_factory = ability_factory
        self.hooks = hooks if hooks is not None else HookRegistry()
        self.principal_extractor = principal_extractor or HeaderPrincipalExtractor()
        self.options = options or GuardOptions.lenient()
        self.metrics = metrics
        self.logger = get_logger("acl.guard")

    async def can_activate(self, context: ExecutionContext) -> bool:
        metadata = self.operations.get(context.operation)
        if metadata is None:
            # Operations without metadata are not protected
            return True

        start_time = time.time()
        with trace_span(
            "acl.guard",
            enabled=self.options.tracing,
            **{
                "acl.operation": operation_name(context.operation),
                "acl.transport": _transport_label(context),
                "acl.action": metadata.action,
                "acl.subject": metadata.subject,
            }
        ):
            try:
                allowed = await self._decide(context, metadata)
            except AccessLayerException as e:
                self._record_error(e.code)
                raise
            except Exception as e:
                self._record_error(type(e).__name__)
                raise

        if self.metrics is not None:
            self.metrics.record_decision(
                transport=_transport_label(context),
                action=metadata.action,
                subject=metadata.subject,
                allowed=allowed,
                duration=time.time() - start_time
            )
        return allowed

    async def authorize(self, context: ExecutionContext) -> None:
        """Like can_activate, but a denial raises AuthorizationError."""
        if await self.can_activate(context):
            return

        metadata = self.operations.get(context.operation)
        raise AuthorizationError(
            "Access denied",
            {
                "operation": operation_name(context.operation),
                "action": metadata.action,
                "subject": metadata.subject,
            }
        )

    async def _decide(self, context: ExecutionContext, metadata: AclMetadata) -> bool:
        adapted = adapt(context)
        if not adapted.known:
            self.logger.warning(
                "Unknown transport, denying protected operation",
                transport=_transport_label(context),
                operation=operation_name(context.operation)
            )
            return False

        auth = await self.principal_extractor.extract(adapted.principal_carrier)
        set_principal_context(read_field(auth, "id"))

        ability = await self.ability_factory.create(auth)
        self._attach_principal(adapted, auth, ability)

        if metadata.hook_key:
            return await self._check_hooked_subject(adapted, metadata, auth, ability)

        allowed = ability.can(metadata.action, metadata.subject)
        self._log_decision(metadata, allowed)
        return allowed

    async def _check_hooked_subject(self, adapted: AdaptedContext, metadata: AclMetadata,
                                    auth: Any, ability) -> bool:
        hook = self.hooks.resolve(metadata.hook_key, strict=self.options.strict_hooks)
        entity = await hook.run(adapted.argument_bag, auth)

        if entity is None:
            self.logger.info(
                "Subject not found, denying",
                action=metadata.action,
                subject=metadata.subject,
                hook_key=metadata.hook_key
            )
            return False

        if self.options.attach_subject and adapted.attach_target is not None:
            attach(adapted.attach_target, metadata.subject, entity)

        allowed = ability.can(metadata.action, as_subject(metadata.subject, entity))
        self._log_decision(metadata, allowed)
        return allowed

    @staticmethod
    def _attach_principal(adapted: AdaptedContext, auth: Any, ability) -> None:
        target = adapted.attach_target
        if target is None:
            return
        attach(target, "auth", auth)
        attach(target, "ability", ability)

    def _log_decision(self, metadata: AclMetadata, allowed: bool) -> None:
        log = self.logger.debug if allowed else self.logger.info
        log(
            "ACL decision",
            action=metadata.action,
            subject=metadata.subject,
            hook_key=metadata.hook_key,
            allowed=allowed
        )

    def _record_error(self, error_type: str) -> None:
        if self.metrics is not None:
            self.metrics.record_error(error_type)
