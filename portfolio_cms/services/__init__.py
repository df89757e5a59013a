"""Domain services for the Portfolio CMS.

Each service wraps one aggregate over an AsyncSession: ownership checks,
pagination, soft delete and the aggregate's own rules. Routes construct
them per request.

Usage:
    from portfolio_cms.services import ProjectService, UserService
"""

from portfolio_cms.services.analytics import AnalyticsService
from portfolio_cms.services.base import BaseService, Page
from portfolio_cms.services.blogs import BlogCategoryService, BlogService
from portfolio_cms.services.contacts import ContactService
from portfolio_cms.services.educations import EducationService
from portfolio_cms.services.experiences import ExperienceService
from portfolio_cms.services.images import ImageService
from portfolio_cms.services.portfolios import PortfolioService
from portfolio_cms.services.pricing import (
    PaymentService,
    PricingPlanService,
    SubscriptionService,
)
from portfolio_cms.services.projects import ProjectService
from portfolio_cms.services.skills import SkillCategoryService, SkillService
from portfolio_cms.services.social_links import SocialLinkService
from portfolio_cms.services.users import AuthService, UserService

__all__ = [
    "AnalyticsService",
    "AuthService",
    "BaseService",
    "BlogCategoryService",
    "BlogService",
    "ContactService",
    "EducationService",
    "ExperienceService",
    "ImageService",
    "Page",
    "PaymentService",
    "PortfolioService",
    "PricingPlanService",
    "ProjectService",
    "SkillCategoryService",
    "SkillService",
    "SocialLinkService",
    "SubscriptionService",
    "UserService",
]
