"""Request/response schemas for projects, skills, experience and education."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import Field

from portfolio_cms.api.schemas.common import ORMModel, Schema
from portfolio_cms.core.enums import (
    EducationType,
    EmploymentType,
    ProficiencyLevel,
    ProjectStatus,
)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
class ProjectCreate(Schema):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    long_description: Optional[str] = None
    technologies: list[str] = Field(default_factory=list)
    category: Optional[str] = Field(None, max_length=100)
    status: ProjectStatus = ProjectStatus.COMPLETED
    github_url: Optional[str] = Field(None, max_length=500)
    live_url: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=500)
    featured: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    display_order: int = 0
    portfolio_id: Optional[str] = None


class ProjectUpdate(Schema):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    long_description: Optional[str] = None
    technologies: Optional[list[str]] = None
    category: Optional[str] = Field(None, max_length=100)
    status: Optional[ProjectStatus] = None
    github_url: Optional[str] = Field(None, max_length=500)
    live_url: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=500)
    featured: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    display_order: Optional[int] = None
    portfolio_id: Optional[str] = None


class ProjectRead(ORMModel):
    id: str
    user_id: str
    portfolio_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    long_description: Optional[str] = None
    technologies: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    status: str
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    image_url: Optional[str] = None
    featured: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    display_order: int
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Skill categories
# ---------------------------------------------------------------------------
class SkillCategoryCreate(Schema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    display_order: int = 0
    is_visible: bool = True


class SkillCategoryUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    display_order: Optional[int] = None
    is_visible: Optional[bool] = None


class SkillCategoryRead(ORMModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    display_order: int
    is_visible: bool


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------
class SkillCreate(Schema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    category_id: Optional[str] = None
    portfolio_id: Optional[str] = None
    proficiency_level: ProficiencyLevel = ProficiencyLevel.INTERMEDIATE
    years_of_experience: Optional[float] = Field(None, ge=0, le=80)
    last_used_date: Optional[date] = None
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    is_featured: bool = False
    display_order: Optional[int] = None
    metadata_json: Optional[dict[str, Any]] = None


class SkillUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    category_id: Optional[str] = None
    portfolio_id: Optional[str] = None
    proficiency_level: Optional[ProficiencyLevel] = None
    years_of_experience: Optional[float] = Field(None, ge=0, le=80)
    last_used_date: Optional[date] = None
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    is_featured: Optional[bool] = None
    display_order: Optional[int] = None
    metadata_json: Optional[dict[str, Any]] = None


class SkillRead(ORMModel):
    id: str
    user_id: str
    category_id: Optional[str] = None
    portfolio_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    proficiency_level: str
    years_of_experience: Optional[float] = None
    last_used_date: Optional[date] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_featured: bool
    display_order: int
    endorsement_count: int
    metadata_json: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------
class ExperienceCreate(Schema):
    company_name: str = Field(..., min_length=1, max_length=255)
    position: str = Field(..., min_length=1, max_length=255)
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    location: Optional[str] = Field(None, max_length=255)
    is_remote: bool = False
    start_date: date
    end_date: Optional[date] = None
    is_current: bool = False
    description: Optional[str] = None
    responsibilities: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    company_url: Optional[str] = Field(None, max_length=500)
    company_logo_url: Optional[str] = Field(None, max_length=500)
    display_order: int = 0
    is_highlighted: bool = False
    portfolio_id: Optional[str] = None


class ExperienceUpdate(Schema):
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    position: Optional[str] = Field(None, min_length=1, max_length=255)
    employment_type: Optional[EmploymentType] = None
    location: Optional[str] = Field(None, max_length=255)
    is_remote: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_current: Optional[bool] = None
    description: Optional[str] = None
    responsibilities: Optional[list[str]] = None
    achievements: Optional[list[str]] = None
    technologies: Optional[list[str]] = None
    company_url: Optional[str] = Field(None, max_length=500)
    company_logo_url: Optional[str] = Field(None, max_length=500)
    display_order: Optional[int] = None
    is_highlighted: Optional[bool] = None
    portfolio_id: Optional[str] = None


class ExperienceRead(ORMModel):
    id: str
    user_id: str
    portfolio_id: Optional[str] = None
    company_name: str
    position: str
    employment_type: str
    location: Optional[str] = None
    is_remote: bool
    start_date: date
    end_date: Optional[date] = None
    is_current: bool
    description: Optional[str] = None
    responsibilities: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    company_url: Optional[str] = None
    company_logo_url: Optional[str] = None
    display_order: int
    is_highlighted: bool
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------
class EducationCreate(Schema):
    institution_name: str = Field(..., min_length=1, max_length=255)
    institution_logo: Optional[str] = Field(None, max_length=500)
    institution_url: Optional[str] = Field(None, max_length=500)
    degree: str = Field(..., min_length=1, max_length=255)
    field_of_study: Optional[str] = Field(None, max_length=255)
    education_type: EducationType = EducationType.BACHELOR
    start_date: date
    end_date: Optional[date] = None
    is_current: bool = False
    location: Optional[str] = Field(None, max_length=255)
    is_remote: bool = False
    gpa: Optional[float] = Field(None, ge=0, le=10)
    description: Optional[str] = None
    courses: list[str] = Field(default_factory=list)
    honors: list[str] = Field(default_factory=list)
    activities: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    is_highlighted: bool = False
    display_order: int = 0
    certificate_url: Optional[str] = Field(None, max_length=500)
    portfolio_id: Optional[str] = None


class EducationUpdate(Schema):
    institution_name: Optional[str] = Field(None, min_length=1, max_length=255)
    institution_logo: Optional[str] = Field(None, max_length=500)
    institution_url: Optional[str] = Field(None, max_length=500)
    degree: Optional[str] = Field(None, min_length=1, max_length=255)
    field_of_study: Optional[str] = Field(None, max_length=255)
    education_type: Optional[EducationType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_current: Optional[bool] = None
    location: Optional[str] = Field(None, max_length=255)
    is_remote: Optional[bool] = None
    gpa: Optional[float] = Field(None, ge=0, le=10)
    description: Optional[str] = None
    courses: Optional[list[str]] = None
    honors: Optional[list[str]] = None
    activities: Optional[list[str]] = None
    achievements: Optional[list[str]] = None
    skills: Optional[list[str]] = None
    is_highlighted: Optional[bool] = None
    display_order: Optional[int] = None
    certificate_url: Optional[str] = Field(None, max_length=500)


class VerifyEducationRequest(Schema):
    verification_method: str = Field(..., min_length=1, max_length=100)


class AttachPortfolioRequest(Schema):
    portfolio_id: str


class EducationRead(ORMModel):
    id: str
    user_id: str
    portfolio_id: Optional[str] = None
    institution_name: str
    institution_logo: Optional[str] = None
    institution_url: Optional[str] = None
    degree: str
    field_of_study: Optional[str] = None
    education_type: str
    start_date: date
    end_date: Optional[date] = None
    is_current: bool
    location: Optional[str] = None
    is_remote: bool
    gpa: Optional[float] = None
    description: Optional[str] = None
    courses: list[str] = Field(default_factory=list)
    honors: list[str] = Field(default_factory=list)
    activities: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    is_highlighted: bool
    display_order: int
    certificate_url: Optional[str] = None
    is_verified: bool
    verification_date: Optional[datetime] = None
    verification_method: Optional[str] = None
    created_at: datetime
    updated_at: datetime
