"""ORM models for the Portfolio CMS.

Importing this package registers every table with ``Base.metadata``.
"""

from .analytics import PageView, Visitor
from .base import Base
from .blogs import Blog, BlogCategory, BlogComment, BlogTag
from .contacts import Contact
from .educations import Education
from .experiences import Experience
from .images import Image, ImageVariant
from .portfolios import Portfolio
from .pricing import Payment, PricingPlan, Subscription
from .projects import Project
from .skills import Skill, SkillCategory
from .social_links import SocialLink
from .users import User

__all__ = [
    "Base",
    "Blog",
    "BlogCategory",
    "BlogComment",
    "BlogTag",
    "Contact",
    "Education",
    "Experience",
    "Image",
    "ImageVariant",
    "PageView",
    "Payment",
    "Portfolio",
    "PricingPlan",
    "Project",
    "Skill",
    "SkillCategory",
    "SocialLink",
    "Subscription",
    "User",
    "Visitor",
]
