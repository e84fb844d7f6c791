"""Skills router – the skill catalogue and its categories."""

from typing import List

from fastapi import APIRouter, Depends, status

from workforce.models.user import User
from workforce.permissions import Permission, require
from workforce.schemas.skill import CategoryIn, CategoryOut, SkillCreate, SkillOut, SkillUpdate
from workforce.services.store import WorkforceStore, get_store

router = APIRouter(prefix="/api", tags=["skills"])


# ═══════════════════════════════════════════════════════════════
#  Skills
# ═══════════════════════════════════════════════════════════════

@router.get("/skills", response_model=List[SkillOut])
async def list_skills(
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    return await store.list_skills()


@router.post("/skills", response_model=SkillOut, status_code=status.HTTP_201_CREATED)
async def create_skill(
    payload: SkillCreate,
    current_user: User = Depends(require(Permission.MANAGE_SKILLS)),
    store: WorkforceStore = Depends(get_store),
):
    return await store.create_skill(payload.name, payload.category, actor_id=current_user.id)


@router.patch("/skills/{skill_id}", response_model=SkillOut)
async def update_skill(
    skill_id: int,
    payload: SkillUpdate,
    current_user: User = Depends(require(Permission.MANAGE_SKILLS)),
    store: WorkforceStore = Depends(get_store),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return await store.update_skill(skill_id, actor_id=current_user.id, **changes)


@router.delete("/skills/{skill_id}")
async def delete_skill(
    skill_id: int,
    current_user: User = Depends(require(Permission.MANAGE_SKILLS)),
    store: WorkforceStore = Depends(get_store),
):
    """Remove a skill nobody is rated in, required for, assigned to or forecast for."""
    await store.delete_skill(skill_id, actor_id=current_user.id)
    return {"message": "Skill deleted successfully"}


# ═══════════════════════════════════════════════════════════════
#  Categories
# ═══════════════════════════════════════════════════════════════

@router.get("/categories", response_model=List[CategoryOut])
async def list_categories(
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    return await store.list_categories()


@router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryIn,
    current_user: User = Depends(require(Permission.MANAGE_SKILLS)),
    store: WorkforceStore = Depends(get_store),
):
    return await store.create_category(payload.name, actor_id=current_user.id)


@router.patch("/categories/{category_id}", response_model=CategoryOut)
async def rename_category(
    category_id: int,
    payload: CategoryIn,
    current_user: User = Depends(require(Permission.MANAGE_SKILLS)),
    store: WorkforceStore = Depends(get_store),
):
    return await store.update_category(category_id, payload.name, actor_id=current_user.id)


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    current_user: User = Depends(require(Permission.MANAGE_SKILLS)),
    store: WorkforceStore = Depends(get_store),
):
    await store.delete_category(category_id, actor_id=current_user.id)
    return {"message": "Category deleted successfully"}
