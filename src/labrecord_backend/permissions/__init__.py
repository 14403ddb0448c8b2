"""
Permission system for the lab record backend

Main components:
- principal: caller identity and role enumerations
- relations: relation graph lookups (assignment, enrollment, ownership chain)
- rules: predicate terms usable both per resource and as SQL filters
- handlers: base permission handler and registry
- handlers_impl: one handler per resource with its action -> rules table
- core: authorize() and registry initialization
- auth: FastAPI dependency resolving the current principal
"""

from .principal import (
    Principal,
    PrincipalBuilder,
    Role,
    Department,
)

from .core import (
    ResourceRef,
    authorize,
    check_admin,
    check_permissions,
    initialize_permission_handlers,
)

from .handlers import (
    PermissionHandler,
    PermissionRegistry,
    permission_registry,
)

__all__ = [
    # Principal
    "Principal",
    "PrincipalBuilder",
    "Role",
    "Department",

    # Evaluator
    "ResourceRef",
    "authorize",
    "check_admin",
    "check_permissions",
    "initialize_permission_handlers",

    # Handlers
    "PermissionHandler",
    "PermissionRegistry",
    "permission_registry",
]
