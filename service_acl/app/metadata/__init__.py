"""
Per-operation ACL metadata and its registration surface.
"""

from .registry import AclMetadata, OperationRegistry, acl, default_registry

__all__ = ["AclMetadata", "OperationRegistry", "acl", "default_registry"]
