#!/usr/bin/env python3
"""Seed a demo account with a published portfolio, plus the pricing plans.

Idempotent: the demo user is looked up by email and plans by name, so
re-running only fills in what is missing.

Usage:
    python scripts/seed_demo.py
    python scripts/seed_demo.py --password s3cret!pass

Prerequisites:
    - MySQL running and migrations applied (alembic upgrade head)
    - pip install -e ".[test]"
"""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime, timezone
from pathlib import Path

# Ensure project root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from portfolio_cms.core.database import sync_session_factory
from portfolio_cms.core.models import (
    Experience,
    Portfolio,
    PricingPlan,
    Project,
    Skill,
    SkillCategory,
    User,
)
from portfolio_cms.core.security import hash_password

DEMO_EMAIL = "demo@portfolio.dev"
DEMO_USERNAME = "demo"

PLANS = [
    {
        "name": "Free",
        "description": "A single public portfolio",
        "price": 0,
        "billing_interval": "month",
        "tier": "free",
        "features": ["1 portfolio", "Basic themes"],
        "limits": {"projects": 5, "images": 20},
        "sort_order": 0,
    },
    {
        "name": "Pro",
        "description": "Custom domain, analytics and unlimited projects",
        "price": 9.99,
        "billing_interval": "month",
        "tier": "pro",
        "trial_period_days": 14,
        "features": ["Custom domain", "Analytics", "Unlimited projects"],
        "limits": {"projects": None, "images": 1000},
        "sort_order": 1,
        "is_featured": True,
    },
    {
        "name": "Pro Annual",
        "description": "Pro billed yearly",
        "price": 99.0,
        "billing_interval": "year",
        "tier": "pro",
        "features": ["Custom domain", "Analytics", "Unlimited projects"],
        "limits": {"projects": None, "images": 1000},
        "sort_order": 2,
    },
]

PROJECTS = [
    {
        "title": "Portfolio CMS",
        "description": "Multi-tenant portfolio and blog platform",
        "technologies": ["Python", "FastAPI", "MySQL", "Redis"],
        "category": "Web",
        "status": "in_progress",
        "featured": True,
    },
    {
        "title": "Image Pipeline",
        "description": "Resizes uploads into responsive WEBP variants",
        "technologies": ["Python", "Pillow"],
        "category": "Tooling",
        "status": "completed",
    },
]

SKILLS = {
    "Backend": [("Python", "expert", 8.0), ("SQL", "advanced", 7.0)],
    "Frontend": [("TypeScript", "advanced", 5.0), ("CSS", "intermediate", 5.0)],
}

EXPERIENCES = [
    {
        "company_name": "Acme Corp",
        "position": "Senior Backend Engineer",
        "employment_type": "full_time",
        "start_date": date(2021, 3, 1),
        "is_current": True,
        "technologies": ["Python", "PostgreSQL", "Kubernetes"],
        "responsibilities": ["Own the billing service", "Mentor new hires"],
    },
    {
        "company_name": "Startup Labs",
        "position": "Software Engineer",
        "employment_type": "full_time",
        "start_date": date(2017, 6, 1),
        "end_date": date(2021, 2, 28),
        "technologies": ["Python", "Django"],
    },
]


def seed_plans(session) -> int:
    existing = set(session.execute(select(PricingPlan.name)).scalars())
    created = 0
    for plan in PLANS:
        if plan["name"] in existing:
            continue
        session.add(PricingPlan(**plan))
        created += 1
    return created


def seed_demo_user(session, password: str) -> bool:
    if session.execute(select(User).where(User.email == DEMO_EMAIL)).scalar_one_or_none():
        return False

    user = User(
        username=DEMO_USERNAME,
        email=DEMO_EMAIL,
        password_hash=hash_password(password),
        first_name="Demo",
        last_name="User",
        bio="Backend engineer who writes about Python and databases.",
        location="Lisbon, Portugal",
        github_url="https://github.com/demo",
    )
    user.profile_completeness = user.compute_profile_completeness()
    session.add(user)
    session.flush()

    session.add(
        Portfolio(
            id=user.id,
            user_id=user.id,
            name="Demo User",
            title="Senior Backend Engineer",
            summary="APIs, data pipelines and the occasional frontend.",
            is_published=True,
            published_at=datetime.now(timezone.utc),
        )
    )
    session.flush()

    for index, project in enumerate(PROJECTS):
        session.add(
            Project(user_id=user.id, portfolio_id=user.id, display_order=index, **project)
        )

    order = 0
    for cat_index, (category_name, skills) in enumerate(SKILLS.items()):
        category = SkillCategory(
            user_id=user.id, name=category_name, display_order=cat_index
        )
        session.add(category)
        session.flush()
        for name, level, years in skills:
            session.add(
                Skill(
                    user_id=user.id,
                    portfolio_id=user.id,
                    category_id=category.id,
                    name=name,
                    proficiency_level=level,
                    years_of_experience=years,
                    display_order=order,
                )
            )
            order += 1

    for index, experience in enumerate(EXPERIENCES):
        session.add(
            Experience(
                user_id=user.id, portfolio_id=user.id, display_order=index, **experience
            )
        )
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument("--password", default="DemoPass123!", help="Demo user password")
    args = parser.parse_args()

    session = sync_session_factory()
    try:
        plans = seed_plans(session)
        created_user = seed_demo_user(session, args.password)
        session.commit()
        print(f"Seeded {plans} new pricing plans.")
        if created_user:
            print(f"Created demo user {DEMO_EMAIL} with a published portfolio.")
        else:
            print(f"Demo user {DEMO_EMAIL} already exists; skipped.")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
