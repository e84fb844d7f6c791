"""Users router – account administration."""

from typing import List

from fastapi import APIRouter, Depends, status

from workforce.models.user import User
from workforce.permissions import Permission, ensure_self_or, require
from workforce.routers.auth import hash_password
from workforce.schemas.user import UserCreate, UserOut, UserUpdate
from workforce.services.store import WorkforceStore, get_store

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserOut])
async def list_users(
    current_user: User = Depends(require(Permission.MANAGE_USERS)),
    store: WorkforceStore = Depends(get_store),
):
    """Every account (admin only)."""
    return await store.list_users()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    current_user: User = Depends(require(Permission.MANAGE_USERS)),
    store: WorkforceStore = Depends(get_store),
):
    return await store.create_user(
        username=payload.username,
        password_hash=hash_password(payload.password),
        name=payload.name,
        email=payload.email,
        role=payload.role,
        actor_id=current_user.id,
    )


@router.get("/{user_id}", response_model=UserOut)
async def read_user(
    user_id: int,
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    """A single profile: the owner, or anyone who can view employee records."""
    ensure_self_or(current_user, user_id, Permission.VIEW_EMPLOYEE_RECORDS)
    return await store.get_user(user_id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    current_user: User = Depends(require(Permission.MANAGE_USERS)),
    store: WorkforceStore = Depends(get_store),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "password" in changes:
        changes["password_hash"] = hash_password(changes.pop("password"))
    return await store.update_user(user_id, actor_id=current_user.id, **changes)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(require(Permission.MANAGE_USERS)),
    store: WorkforceStore = Depends(get_store),
):
    await store.delete_user(user_id, actor_id=current_user.id)
    return {"message": "User deleted successfully"}
