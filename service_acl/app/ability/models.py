"""
Rule data models for the ability.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Tuple, Union


class AclActions(str, Enum):
    """Common action vocabulary."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


# Action matching every action, subject type matching every subject
MANAGE = AclActions.MANAGE.value
ALL = "all"

Conditions = Union[Mapping[str, Any], Callable[[Any], bool]]


@dataclass(frozen=True)
class Rule:
    """One permission rule.

    ``conditions`` is either a Mongo-style query over the subject instance or
    a predicate called with it. ``inverted`` marks a forbid rule.
    """
    action: Tuple[str, ...]
    subject: Tuple[str, ...]
    conditions: Optional[Conditions] = None
    inverted: bool = False
    fields: Optional[Tuple[str, ...]] = None
    reason: Optional[str] = None

    def matches_action(self, action: str) -> bool:
        return MANAGE in self.action or action in self.action

    def matches_subject_type(self, subject_type: str) -> bool:
        return ALL in self.subject or subject_type in self.subject

    def matches_field(self, field: Optional[str]) -> bool:
        if not self.fields:
            return True
        if field is None:
            return not self.inverted
        return field in self.fields
