"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Permission table and checks for role-based access control.
             Admin holds every permission, editor reads and writes
             without deletes, viewer is read-only.
-------------------------------------------------------------------------
"""
from typing import Any, Dict, FrozenSet

from apps.core.exceptions import UnauthorizedRoleException
from apps.users.models import UserRole, UserStatus


class Permission:
    """Permission codes, grouped by resource."""
    DATA_READ = 'data:read'
    DATA_WRITE = 'data:write'
    DATA_DELETE = 'data:delete'
    INVENTORY_READ = 'inventory:read'
    INVENTORY_WRITE = 'inventory:write'
    INVENTORY_DELETE = 'inventory:delete'
    REPORTS_READ = 'reports:read'
    REPORTS_WRITE = 'reports:write'
    USERS_READ = 'users:read'
    USERS_WRITE = 'users:write'
    USERS_DELETE = 'users:delete'
    SETTINGS_READ = 'settings:read'
    SETTINGS_WRITE = 'settings:write'


ALL_PERMISSIONS: FrozenSet[str] = frozenset(
    value for key, value in vars(Permission).items() if not key.startswith('_')
)

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    UserRole.ADMIN: ALL_PERMISSIONS,
    UserRole.EDITOR: frozenset([
        Permission.DATA_READ,
        Permission.DATA_WRITE,
        Permission.INVENTORY_READ,
        Permission.INVENTORY_WRITE,
        Permission.REPORTS_READ,
        Permission.REPORTS_WRITE,
        Permission.USERS_READ,
        Permission.SETTINGS_READ,
    ]),
    UserRole.VIEWER: frozenset([
        Permission.DATA_READ,
        Permission.INVENTORY_READ,
        Permission.REPORTS_READ,
        Permission.USERS_READ,
        Permission.SETTINGS_READ,
    ]),
}


def permissions_for_user(user: Any) -> FrozenSet[str]:
    """
    Resolve the permission set of a user.

    Anonymous and inactive users hold no permissions; superusers hold all.
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return frozenset()
    if not user.is_active or getattr(user, 'status', UserStatus.ACTIVE) != UserStatus.ACTIVE:
        return frozenset()
    if user.is_superuser:
        return ALL_PERMISSIONS
    return ROLE_PERMISSIONS.get(getattr(user, 'role', None), frozenset())


def has_permission(user: Any, code: str) -> bool:
    """
    Check if user holds a permission code.

    Args:
        user: The user object to check.
        code: Permission code such as 'data:write'.

    Returns:
        True if the user's role grants the permission.
    """
    return code in permissions_for_user(user)


def can_write(user: Any) -> bool:
    """Admins and editors can write."""
    return has_permission(user, Permission.DATA_WRITE)


def can_delete(user: Any) -> bool:
    """Only admins can delete."""
    return has_permission(user, Permission.DATA_DELETE)


def require_permission(user: Any, code: str) -> None:
    """
    Guard a service entry point.

    Args:
        user: The acting user. None means a trusted internal caller.
        code: Required permission code.

    Raises:
        UnauthorizedRoleException: If the user lacks the permission.
    """
    if user is None:
        return
    if not has_permission(user, code):
        raise UnauthorizedRoleException(
            f"This action requires the '{code}' permission.",
            details={'permission': code, 'role': getattr(user, 'role', None)}
        )
