"""
Ability package.

Rules, the capability matcher and the per-request ability factory:

- models: Rule dataclass and action vocabulary.
- conditions: Mongo-style condition matching over subject instances.
- ability: Immutable Ability with newest-rule-wins evaluation.
- builder: AbilityBuilder accumulator and AbilityFactory harness.
"""

from .ability import Ability, subject, detect_subject_type
from .builder import AbilityBuilder, AbilityFactory
from .models import AclActions, Rule, ALL, MANAGE

__all__ = [
    "Ability",
    "AbilityBuilder",
    "AbilityFactory",
    "AclActions",
    "Rule",
    "ALL",
    "MANAGE",
    "subject",
    "detect_subject_type",
]
