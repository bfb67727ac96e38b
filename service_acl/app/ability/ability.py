"""
Immutable ability: the permission set computed for one principal.
"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Tuple

from shared.errors import AuthorizationError
from .conditions import matches
from .models import Rule

SUBJECT_TYPE_ATTR = "__subject_type__"


class _TaggedDict(dict):
    """Mapping subject carrying an explicit subject type."""

    def __init__(self, subject_type: str, data: Mapping):
        super().__init__(data)
        setattr(self, SUBJECT_TYPE_ATTR, subject_type)


class _TaggedObject:
    """Read-only attribute proxy carrying a subject type for the wrapped instance."""

    def __init__(self, subject_type: str, wrapped: Any):
        object.__setattr__(self, SUBJECT_TYPE_ATTR, subject_type)
        object.__setattr__(self, "_wrapped", wrapped)

    def __getattr__(self, name: str) -> Any:
        return getattr(object.__getattribute__(self, "_wrapped"), name)


def subject(subject_type: str, instance: Any) -> Any:
    """Tag an instance with the subject type it should be checked as."""
    if isinstance(instance, Mapping):
        return _TaggedDict(subject_type, instance)
    # Wrapped, never modified: the instance may be an ORM entity owned by the caller
    return _TaggedObject(subject_type, instance)


def is_subject_type(value: Any) -> bool:
    """True for a subject type (string or class), False for an instance."""
    return isinstance(value, (str, type))


def detect_subject_type(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, type):
        return value.__name__
    tagged = getattr(value, SUBJECT_TYPE_ATTR, None)
    if isinstance(tagged, str):
        return tagged
    return type(value).__name__


class Ability:
    """Ordered, immutable set of rules.

    Rules are consulted newest first and the first applicable rule decides,
    so a later ``cannot`` overrides an earlier ``can`` and vice versa.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: Tuple[Rule, ...] = tuple(rules)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def __repr__(self) -> str:
        return f"Ability(rules={len(self._rules)})"

    def rules_for(self, action: str, subject_type: str, field: Optional[str] = None) -> List[Rule]:
        """Rules that could apply to the action and subject type, newest first."""
        return [
            rule for rule in reversed(self._rules)
            if rule.matches_action(action)
            and rule.matches_subject_type(subject_type)
            and rule.matches_field(field)
        ]

    def relevant_rule_for(self, action: str, subject: Any, field: Optional[str] = None) -> Optional[Rule]:
        """The rule deciding the check, or None when nothing applies."""
        subject_type = detect_subject_type(subject)
        checking_type = is_subject_type(subject)

        for rule in self.rules_for(action, subject_type, field):
            if self._matches_conditions(rule, subject, checking_type):
                return rule
        return None

    def can(self, action: str, subject: Any, field: Optional[str] = None) -> bool:
        rule = self.relevant_rule_for(action, subject, field)
        return rule is not None and not rule.inverted

    def cannot(self, action: str, subject: Any, field: Optional[str] = None) -> bool:
        return not self.can(action, subject, field)

    def ensure_can(self, action: str, subject: Any, field: Optional[str] = None) -> None:
        """Raise AuthorizationError unless the action is permitted."""
        rule = self.relevant_rule_for(action, subject, field)
        if rule is not None and not rule.inverted:
            return

        subject_type = detect_subject_type(subject)
        message = rule.reason if rule is not None and rule.reason else (
            f'Cannot execute "{action}" on "{subject_type}"'
        )
        details = {"action": action, "subject": subject_type}
        if field is not None:
            details["field"] = field
        raise AuthorizationError(message, details)

    @staticmethod
    def _matches_conditions(rule: Rule, subject: Any, checking_type: bool) -> bool:
        if rule.conditions is None:
            return True
        if checking_type:
            # A conditional permission may hold for some instance of the type,
            # a conditional forbid never rules out the whole type.
            return not rule.inverted
        return matches(rule.conditions, subject)
