"""Python client for the Portfolio CMS API used by admin tooling."""

from .api_client import ApiError, PortfolioApiClient, SessionExpiredError
from .query_cache import InfiniteData, PageData, QueryCache
from .resources import Debouncer, ResourceList, ResourceMutator

__all__ = [
    "ApiError",
    "Debouncer",
    "InfiniteData",
    "PageData",
    "PortfolioApiClient",
    "QueryCache",
    "ResourceList",
    "ResourceMutator",
    "SessionExpiredError",
]
