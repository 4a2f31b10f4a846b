"""Custom exception classes for Linear API errors."""


class LinearAPIError(Exception):
    """Base exception for Linear API errors."""

    def __init__(
        self,
        message: str,
        endpoint: str = "",
        status_code: int | None = None,
        response_body: str = "",
    ):
        self.endpoint = endpoint
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)

    def details(self) -> str:
        """Multi-line description including the raw response, for verbose output."""
        return (
            f"{self}\n"
            f"Endpoint: {self.endpoint}\n"
            f"Status: {self.status_code}\n"
            f"Response: {self.response_body}"
        )


class LinearRateLimitError(LinearAPIError):
    """Exception raised when the Linear rate limit (429) is exceeded."""

    def __init__(self, endpoint: str, response_body: str):
        super().__init__(
            "Rate limit exceeded. Please wait before making more requests.",
            endpoint,
            429,
            response_body,
        )


class LinearAuthenticationError(LinearAPIError):
    """Exception raised when the API key is missing, invalid or not allowed."""

    def __init__(self, endpoint: str, response_body: str, status_code: int = 401):
        super().__init__(
            "Authentication failed. Check your API key in ~/.config/linban/config.yaml",
            endpoint,
            status_code,
            response_body,
        )


class LinearGraphQLError(LinearAPIError):
    """Exception raised when the GraphQL response carries an ``errors`` array."""

    def __init__(self, errors: list, endpoint: str, response_body: str):
        self.errors = errors
        messages = "; ".join(
            str(err.get("message", err)) if isinstance(err, dict) else str(err)
            for err in errors
        )
        super().__init__(messages or "GraphQL error", endpoint, 200, response_body)


class LinearTimeoutError(LinearAPIError):
    """Exception raised when a remote call does not settle in time."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout:g}s")
