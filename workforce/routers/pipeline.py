"""Pipeline router – prospective projects and the skills they will need."""

from typing import List

from fastapi import APIRouter, Depends, status

from workforce.models.user import User
from workforce.permissions import Permission, require
from workforce.schemas.pipeline import DemandIn, DemandOut, PipelineCreate, PipelineOut
from workforce.services.store import WorkforceStore, get_store

router = APIRouter(prefix="/api/pipeline", tags=["pipeline"])


def _demand_out(demand, skill) -> DemandOut:
    return DemandOut.model_validate(demand).model_copy(update={"skill_name": skill.name})


@router.get("", response_model=List[PipelineOut])
async def list_pipeline(
    current_user: User = Depends(require()),
    store: WorkforceStore = Depends(get_store),
):
    return [
        PipelineOut.model_validate(pipeline).model_copy(
            update={"demands": [_demand_out(d, s) for d, s in demands]}
        )
        for pipeline, demands in await store.list_pipelines()
    ]


@router.post("", response_model=PipelineOut, status_code=status.HTTP_201_CREATED)
async def create_pipeline(
    payload: PipelineCreate,
    current_user: User = Depends(require(Permission.MANAGE_PIPELINE)),
    store: WorkforceStore = Depends(get_store),
):
    pipeline = await store.create_pipeline(
        name=payload.name,
        expected_start_date=payload.expected_start_date,
        expected_end_date=payload.expected_end_date,
        status=payload.status,
        actor_id=current_user.id,
    )
    return PipelineOut.model_validate(pipeline)


@router.post("/{pipeline_id}/skills", response_model=DemandOut, status_code=status.HTTP_201_CREATED)
async def add_skill_demand(
    pipeline_id: int,
    payload: DemandIn,
    current_user: User = Depends(require(Permission.MANAGE_PIPELINE)),
    store: WorkforceStore = Depends(get_store),
):
    demand, skill = await store.add_pipeline_demand(
        pipeline_id=pipeline_id,
        skill_id=payload.skill_id,
        experience_band=payload.experience_band,
        people_needed=payload.people_needed,
        actor_id=current_user.id,
    )
    return _demand_out(demand, skill)
