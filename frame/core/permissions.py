"""
Role-Based Access Control Module

Permission strings and the role tables that grant them. Each role table is a
separate constant; manager extends member and owner extends manager, and they
are defined in that order.
"""
from typing import FrozenSet, Dict


class Permission:
    # Time entries
    TIME_ENTRY_CREATE = "time:entry:create"
    TIME_ENTRY_READ_OWN = "time:entry:read:own"
    TIME_ENTRY_READ_ALL = "time:entry:read:all"
    TIME_ENTRY_UPDATE_OWN = "time:entry:update:own"
    TIME_ENTRY_UPDATE_ALL = "time:entry:update:all"
    TIME_ENTRY_DELETE_OWN = "time:entry:delete:own"
    TIME_ENTRY_DELETE_ALL = "time:entry:delete:all"

    # Projects
    PROJECT_CREATE = "project:create"
    PROJECT_READ = "project:read"
    PROJECT_UPDATE = "project:update"
    PROJECT_DELETE = "project:delete"

    # Planning
    PLANNING_READ = "planning:read"
    PLANNING_WRITE = "planning:write"

    # Profitability
    PROFIT_READ_BASIC = "profit:read:basic"
    PROFIT_READ_DETAILED = "profit:read:detailed"

    # Team management
    TEAM_READ = "team:read"
    TEAM_MANAGE = "team:manage"

    # Organization
    ORG_READ = "org:read"
    ORG_UPDATE = "org:update"


MEMBER_PERMISSIONS: FrozenSet[str] = frozenset({
    Permission.TIME_ENTRY_CREATE,
    Permission.TIME_ENTRY_READ_OWN,
    Permission.TIME_ENTRY_UPDATE_OWN,
    Permission.TIME_ENTRY_DELETE_OWN,
    Permission.PROJECT_READ,
    Permission.ORG_READ,
})

MANAGER_PERMISSIONS: FrozenSet[str] = MEMBER_PERMISSIONS | {
    Permission.TIME_ENTRY_READ_ALL,
    Permission.TIME_ENTRY_UPDATE_ALL,
    Permission.PLANNING_READ,
    Permission.PLANNING_WRITE,
    Permission.PROFIT_READ_BASIC,
    Permission.PROFIT_READ_DETAILED,
    Permission.TEAM_READ,
    Permission.PROJECT_CREATE,
    Permission.PROJECT_UPDATE,
}

OWNER_PERMISSIONS: FrozenSet[str] = MANAGER_PERMISSIONS | {
    Permission.TIME_ENTRY_DELETE_ALL,
    Permission.PROJECT_DELETE,
    Permission.TEAM_MANAGE,
    Permission.ORG_UPDATE,
}

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "member": MEMBER_PERMISSIONS,
    "manager": MANAGER_PERMISSIONS,
    "owner": OWNER_PERMISSIONS,
}


def _role_name(role) -> str:
    return getattr(role, "value", role)


def has_permission(role, permission: str) -> bool:
    """True if the role grants the permission. Unknown roles grant nothing."""
    return permission in ROLE_PERMISSIONS.get(_role_name(role), frozenset())


def has_manager_access(role) -> bool:
    return _role_name(role) in ("manager", "owner")


def has_owner_access(role) -> bool:
    return _role_name(role) == "owner"


def can_read_all_time_entries(role) -> bool:
    return has_permission(role, Permission.TIME_ENTRY_READ_ALL)


def can_modify_time_entry(role, user_id: int, entry_user_id: int) -> bool:
    if has_permission(role, Permission.TIME_ENTRY_UPDATE_ALL):
        return True
    if has_permission(role, Permission.TIME_ENTRY_UPDATE_OWN):
        return user_id == entry_user_id
    return False


def can_delete_time_entry(role, user_id: int, entry_user_id: int) -> bool:
    if has_permission(role, Permission.TIME_ENTRY_DELETE_ALL):
        return True
    if has_permission(role, Permission.TIME_ENTRY_DELETE_OWN):
        return user_id == entry_user_id
    return False


def can_view_detailed_profitability(role) -> bool:
    return has_permission(role, Permission.PROFIT_READ_DETAILED)
