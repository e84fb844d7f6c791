"""Role → capability table and the FastAPI dependencies that enforce it."""

import enum
from typing import Dict, FrozenSet, Optional

from fastapi import Depends, HTTPException, status

from workforce.models.user import Role, User
from workforce.routers.auth import get_current_user


class Permission(str, enum.Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_SKILLS = "manage_skills"
    MANAGE_PROJECTS = "manage_projects"
    MANAGE_ASSIGNMENTS = "manage_assignments"
    MANAGE_PIPELINE = "manage_pipeline"
    VIEW_EMPLOYEE_RECORDS = "view_employee_records"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.PROJECT_MANAGER: frozenset({
        Permission.VIEW_EMPLOYEE_RECORDS,
        Permission.MANAGE_ASSIGNMENTS,
    }),
    Role.SALES: frozenset({Permission.MANAGE_PIPELINE}),
    Role.RECRUITMENT: frozenset(),
    Role.EMPLOYEE: frozenset(),
}


def has_permission(user: User, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(user.role, frozenset())


def require(*permissions: Permission):
    """
    Build a dependency that returns the signed-in user.

    Raises 401 when nobody is signed in and 403 when the user's role lacks
    any of ``permissions``. With no permissions it only checks sign-in.
    """

    async def dependency(current_user: Optional[User] = Depends(get_current_user)) -> User:
        if not current_user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
        if not all(has_permission(current_user, p) for p in permissions):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
        return current_user

    return dependency


def ensure_self_or(user: User, employee_id: int, permission: Permission) -> None:
    """Allow the record owner, or anyone holding ``permission``."""
    if user.id != employee_id and not has_permission(user, permission):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
