"""Skill catalogue and employee skill mappings."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from workforce.database import Base


class ExperienceBand(str, enum.Enum):
    ZERO_TWO = "0-2"
    TWO_FIVE = "2-5"
    FIVE_SEVEN = "5-7"
    SEVEN_TEN = "7-10"
    TEN_PLUS = "10+"


class SkillRating(str, enum.Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    EXPERT = "Expert"


class SkillCategory(Base):
    __tablename__ = "skill_categories"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


# Category names are unique regardless of case.
Index("ix_skill_categories_name_lower", func.lower(SkillCategory.name), unique=True)


class Skill(Base):
    __tablename__ = "skills"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)


class SkillMapping(Base):
    __tablename__ = "skill_mappings"
    __table_args__ = (
        UniqueConstraint(
            "employee_id", "skill_id", "experience_band",
            name="uq_skill_mappings_employee_skill_band",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    skill_id: Mapped[int] = mapped_column(
        ForeignKey("skills.id"), nullable=False, index=True
    )
    experience_band: Mapped[ExperienceBand] = mapped_column(
        Enum(ExperienceBand), nullable=False
    )
    rating: Mapped[SkillRating] = mapped_column(Enum(SkillRating), nullable=False)
    years_of_experience: Mapped[float] = mapped_column(Float, nullable=False)

    # ── Timestamps ──
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
