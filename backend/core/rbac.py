"""Role-Based Access Control (RBAC) enforcement.

Every organization member has exactly one role. Roles map to permission
codes, which FastAPI routes check at the endpoint level.

Usage:
    @router.put("/departments/{id}")
    async def update_department(
        context: RequestContext = Depends(require_permission("departments.update")),
    ): ...
"""

import logging
from typing import Iterable, Optional

from fastapi import Depends

from app.dependencies import RequestContext, require_org_context
from core.constants import MemberRole
from core.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    MemberRole.OWNER.value: frozenset({"*"}),
    MemberRole.ADMIN.value: frozenset({
        "organization.read",
        "organization.update",
        "departments.*",
        "agents.*",
        "workflows.*",
        "executions.*",
    }),
    MemberRole.DEPARTMENT_HEAD.value: frozenset({
        "organization.read",
        "departments.read",
        "agents.*",
        "workflows.*",
        "executions.read",
    }),
    MemberRole.MEMBER.value: frozenset({
        "organization.read",
        "departments.read",
        "agents.read",
        "agents.create",
        "agents.execute",
        "workflows.read",
        "workflows.create",
        "workflows.execute",
        "executions.read",
    }),
}


def permissions_for_role(role: Optional[str]) -> frozenset[str]:
    """Permission codes granted to ``role`` (empty for unknown roles)."""
    return ROLE_PERMISSIONS.get(role or "", frozenset())


def _check_permission(user_perms: Iterable[str], required: str) -> bool:
    """Check if user permissions satisfy the required permission.

    Supports wildcard: "agents.*" matches "agents.read", "agents.execute", etc.
    """
    user_perms = set(user_perms)
    if required in user_perms:
        return True

    # Check wildcards in user permissions
    for perm in user_perms:
        if perm == "*":
            return True
        if perm.endswith(".*"):
            prefix = perm[:-2]
            if required.startswith(prefix + "."):
                return True

    return False


def has_permission(context: RequestContext, permission: str) -> bool:
    return _check_permission(permissions_for_role(context.role), permission)


def require_permission(permission: str):
    """FastAPI dependency that enforces a single permission.

    Returns 404 when the caller has no organization and 403 when their role
    lacks the required permission.
    """

    async def _check(
        context: RequestContext = Depends(require_org_context),
    ) -> RequestContext:
        if not has_permission(context, permission):
            logger.warning(
                "RBAC denied: user=%s role=%s permission=%s",
                context.email,
                context.role,
                permission,
            )
            raise ForbiddenError(f"Missing required permission: {permission}")
        return context

    return _check


def can_access_department(context: RequestContext, department_id: str) -> bool:
    """Owners and admins reach every department; others only their own."""
    if context.is_org_admin:
        return True
    return department_id in context.department_ids


def restrict_to_own_departments(context: RequestContext) -> bool:
    """Whether department listings must be limited to the caller's departments.

    Only plain members are restricted; a member without departments sees none.
    """
    return context.role == MemberRole.MEMBER.value
