"""
ACL service: a FastAPI application with the guard wired in.

Deployments create the service with their rule definitions and hooks, then
mount their own routes on ``service.app`` using ``service.protect``.
"""

from typing import Dict, Optional

from fastapi import Depends

from shared.base_service import BaseService
from shared.config import AclSettings, get_settings
from .integrations.http import AclDependency
from .module import AclModuleOptions, create_acl


class AclService(BaseService):
    """Service hosting protected routes."""

    def __init__(self, options: AclModuleOptions, settings: Optional[AclSettings] = None):
        settings = settings or options.settings or get_settings()
        super().__init__(settings.service_name, settings)

        options.settings = settings
        if options.metrics is None:
            options.metrics = self.metrics
        self.guard = create_acl(options)
        self.protect = Depends(AclDependency(self.guard))

        self._setup_acl_routes()

    def _setup_acl_routes(self):
        """Set up guard introspection routes."""

        @self.app.get("/acl/operations")
        async def list_operations():
            """Operations carrying ACL metadata."""
            return {
                "operations": self.guard.operations.describe(),
                "frozen": self.guard.operations.frozen
            }

        @self.app.get("/acl/hooks")
        async def list_hooks():
            """Registered subject hooks."""
            return {
                "hooks": self.guard.hooks.describe(),
                "mode": "strict" if self.guard.options.strict_hooks else "lenient"
            }

    async def on_startup(self) -> None:
        # Metadata is fixed once the service starts taking requests
        self.guard.operations.freeze()
        self.logger.info(
            "ACL guard ready",
            operations=len(self.guard.operations),
            hooks=len(self.guard.hooks.hooks),
            strict_hooks=self.guard.options.strict_hooks
        )

    async def _check_dependencies(self) -> Dict[str, str]:
        return {"operations": "ok" if len(self.guard.operations) else "empty"}


def create_app(options: AclModuleOptions, settings: Optional[AclSettings] = None):
    """Create the FastAPI application."""
    return AclService(options, settings).app
