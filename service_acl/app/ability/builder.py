"""
Ability construction.

A deployment supplies a ``define_rules(builder, auth)`` routine; the factory
runs it against a fresh accumulator on every call and freezes the result.
"""

import copy
import inspect
from collections.abc import Mapping
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Tuple, Union

from shared.errors import AccessLayerException, RuleDefinitionError
from shared.logging import get_logger
from .ability import Ability
from .models import Conditions, Rule

Names = Union[str, Iterable[str]]


def _name(value: Any) -> str:
    if isinstance(value, type):
        return value.__name__
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _names(value: Any) -> Tuple[str, ...]:
    if isinstance(value, (str, type, Enum)):
        return (_name(value),)
    return tuple(_name(item) for item in value)


class RuleHandle:
    """Returned by AbilityBuilder.can/cannot to annotate the rule just added."""

    def __init__(self, builder: "AbilityBuilder", index: int):
        self._builder = builder
        self._index = index

    def because(self, reason: str) -> "RuleHandle":
        rules = self._builder._rules
        rule = rules[self._index]
        rules[self._index] = Rule(
            action=rule.action,
            subject=rule.subject,
            conditions=rule.conditions,
            inverted=rule.inverted,
            fields=rule.fields,
            reason=reason,
        )
        return self


class AbilityBuilder:
    """Rule accumulator handed to define_rules."""

    def __init__(self):
        self._rules: List[Rule] = []

    def can(self, action: Names, subject: Any, conditions: Optional[Conditions] = None,
            fields: Optional[Names] = None) -> RuleHandle:
        return self._add(action, subject, conditions, fields, inverted=False)

    def cannot(self, action: Names, subject: Any, conditions: Optional[Conditions] = None,
               fields: Optional[Names] = None) -> RuleHandle:
        return self._add(action, subject, conditions, fields, inverted=True)

    def _add(self, action, subject, conditions, fields, inverted: bool) -> RuleHandle:
        if isinstance(conditions, Mapping):
            # Detach from the caller so the built ability cannot change later
            conditions = copy.deepcopy(dict(conditions))
        self._rules.append(Rule(
            action=_names(action),
            subject=_names(subject),
            conditions=conditions,
            inverted=inverted,
            fields=_names(fields) if fields is not None else None,
        ))
        return RuleHandle(self, len(self._rules) - 1)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return tuple(self._rules)

    def build(self) -> Ability:
        return Ability(self._rules)


DefineRules = Callable[[AbilityBuilder, Optional[Any]], Union[None, Awaitable[None]]]


class AbilityFactory:
    """Execution harness around a deployment's rule definition strategy."""

    def __init__(self, define_rules: DefineRules):
        self.define_rules = define_rules
        self.logger = get_logger("acl.ability_factory")

    async def create(self, auth: Optional[Any] = None) -> Ability:
        """Build a fresh ability for the principal (None for anonymous)."""
        builder = AbilityBuilder()
        try:
            result = self.define_rules(builder, auth)
            if inspect.isawaitable(result):
                await result
        except AccessLayerException:
            raise
        except Exception as e:
            self.logger.error("Rule definition failed", error=str(e), error_type=type(e).__name__)
            raise RuleDefinitionError(
                "Rule definition failed",
                {"error": str(e), "error_type": type(e).__name__}
            ) from e

        ability = builder.build()
        self.logger.debug("Ability built", rules=len(ability.rules), anonymous=auth is None)
        return ability
