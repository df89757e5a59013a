"""Domain exception hierarchy.

Services raise these; the API layer maps each to an HTTP status code in
``portfolio_cms.api.errors``.

- PortfolioCMSError: base for all domain errors (500)
- ValidationError: request is well-formed but semantically invalid (400)
- AuthenticationError: missing, invalid or expired credentials (401)
- PermissionDeniedError: caller may not act on the resource (403)
- NotFoundError: resource does not exist or is soft-deleted (404)
- ConflictError: uniqueness or state conflict (409)
"""


class PortfolioCMSError(Exception):
    """Base exception for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PortfolioCMSError):
    status_code = 400


class AuthenticationError(PortfolioCMSError):
    status_code = 401


class PermissionDeniedError(PortfolioCMSError):
    status_code = 403


class NotFoundError(PortfolioCMSError):
    status_code = 404


class ConflictError(PortfolioCMSError):
    status_code = 409
