from __future__ import annotations

import pytest

from frame.core.permissions import (
    MANAGER_PERMISSIONS,
    MEMBER_PERMISSIONS,
    OWNER_PERMISSIONS,
    Permission,
    can_delete_time_entry,
    can_modify_time_entry,
    can_read_all_time_entries,
    can_view_detailed_profitability,
    has_manager_access,
    has_owner_access,
    has_permission,
)
from frame.models import UserRole


def test_roles_extend_each_other():
    assert MEMBER_PERMISSIONS < MANAGER_PERMISSIONS < OWNER_PERMISSIONS


@pytest.mark.parametrize(
    "role, permission, granted",
    [
        (UserRole.MEMBER, Permission.TIME_ENTRY_CREATE, True),
        (UserRole.MEMBER, Permission.PROJECT_READ, True),
        (UserRole.MEMBER, Permission.PROFIT_READ_BASIC, False),
        (UserRole.MEMBER, Permission.PLANNING_READ, False),
        (UserRole.MANAGER, Permission.PLANNING_WRITE, True),
        (UserRole.MANAGER, Permission.PROFIT_READ_DETAILED, True),
        (UserRole.MANAGER, Permission.PROJECT_DELETE, False),
        (UserRole.MANAGER, Permission.TEAM_MANAGE, False),
        (UserRole.OWNER, Permission.ORG_UPDATE, True),
        (UserRole.OWNER, Permission.TIME_ENTRY_DELETE_ALL, True),
        ("member", Permission.ORG_READ, True),
        ("admin", Permission.ORG_READ, False),
    ],
)
def test_has_permission(role, permission, granted):
    assert has_permission(role, permission) is granted


def test_role_shortcuts():
    assert not has_manager_access(UserRole.MEMBER)
    assert has_manager_access(UserRole.MANAGER)
    assert has_manager_access("owner")
    assert has_owner_access(UserRole.OWNER)
    assert not has_owner_access(UserRole.MANAGER)

    assert not can_read_all_time_entries(UserRole.MEMBER)
    assert can_read_all_time_entries(UserRole.MANAGER)
    assert not can_view_detailed_profitability(UserRole.MEMBER)
    assert can_view_detailed_profitability(UserRole.OWNER)


def test_entry_ownership_rules():
    assert can_modify_time_entry(UserRole.MEMBER, 1, 1)
    assert not can_modify_time_entry(UserRole.MEMBER, 1, 2)
    assert can_modify_time_entry(UserRole.MANAGER, 1, 2)

    assert can_delete_time_entry(UserRole.MEMBER, 1, 1)
    assert not can_delete_time_entry(UserRole.MEMBER, 1, 2)
    assert can_delete_time_entry(UserRole.MANAGER, 1, 1)
    assert not can_delete_time_entry(UserRole.MANAGER, 1, 2)
    assert can_delete_time_entry(UserRole.OWNER, 1, 2)
