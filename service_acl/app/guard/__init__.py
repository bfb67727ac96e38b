from .guard import AclGuard, GuardOptions

__all__ = ["AclGuard", "GuardOptions"]
