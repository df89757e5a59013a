"""Shared slowapi limiter.

Defined outside ``main`` so route modules can decorate endpoints without a
circular import. Endpoints decorated with ``limiter.limit`` must accept a
``request: Request`` parameter.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from portfolio_cms.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)

AUTH_LIMIT = settings.rate_limit_auth
ENGAGEMENT_LIMIT = settings.rate_limit_engagement
