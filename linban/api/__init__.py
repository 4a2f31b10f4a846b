"""Linear API access: GraphQL transport, blocking client and async service."""

from .client import LinearClient
from .exceptions import (
    LinearAPIError,
    LinearAuthenticationError,
    LinearGraphQLError,
    LinearRateLimitError,
    LinearTimeoutError,
)
from .service import LinearService

__all__ = [
    "LinearAPIError",
    "LinearAuthenticationError",
    "LinearClient",
    "LinearGraphQLError",
    "LinearRateLimitError",
    "LinearService",
    "LinearTimeoutError",
]
