"""Sales pipeline — prospective projects and the skills they would need."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from workforce.database import Base
from workforce.models.skill import ExperienceBand


class PipelineStatus(str, enum.Enum):
    PROSPECT = "Prospect"
    NEGOTIATION = "Negotiation"
    WON = "Won"
    LOST = "Lost"


class ProjectPipeline(Base):
    __tablename__ = "project_pipelines"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(300), nullable=False)

    # ── Dates ──
    expected_start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    expected_end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    status: Mapped[PipelineStatus] = mapped_column(
        Enum(PipelineStatus), default=PipelineStatus.PROSPECT, nullable=False
    )
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class PipelineSkillDemand(Base):
    __tablename__ = "pipeline_skill_demands"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    pipeline_id: Mapped[int] = mapped_column(
        ForeignKey("project_pipelines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    skill_id: Mapped[int] = mapped_column(ForeignKey("skills.id"), nullable=False, index=True)
    experience_band: Mapped[ExperienceBand] = mapped_column(
        Enum(ExperienceBand), nullable=False
    )
    people_needed: Mapped[int] = mapped_column(Integer, nullable=False)
