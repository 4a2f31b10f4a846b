"""HTTP request handler for the Linear GraphQL API."""

import json
import urllib.error
import urllib.request
from typing import Any, Callable, Dict, Optional

from .. import utils
from . import exceptions


class GraphQLRequestHandler:
    """Sends GraphQL documents to Linear and unwraps the ``data`` member."""

    def __init__(
        self,
        url: str,
        headers: Dict[str, str],
        timeout: float,
        verbose: bool = False,
        log: Callable[[str], Any] = utils.log,
    ):
        self.url = url
        self.headers = headers
        self.timeout = timeout
        self.verbose = verbose
        self.log = log

    def _get_curl_command(self, payload: Dict[str, Any]) -> str:
        """Generate an equivalent curl command for debugging purposes."""
        curl_parts = ["curl -X POST"]
        for key, value in self.headers.items():
            if key == "Authorization":
                value = "${LINEAR_API_KEY}"
            curl_parts.append(f'-H "{key}: {value}"')
        curl_parts.append(f"-d '{json.dumps(payload)}'")
        curl_parts.append(f"'{self.url}'")
        return " ".join(curl_parts)

    def request(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation: str = "",
    ) -> Dict[str, Any]:
        """Run a query or mutation and return its ``data`` dictionary."""
        payload: Dict[str, Any] = {"query": query, "variables": variables or {}}

        if self.verbose:
            self.log(f"GraphQL {operation or 'request'}: variables={variables}")
            self.log(f"curl command :\n{self._get_curl_command(payload)}")

        request = urllib.request.Request(self.url, method="POST")
        for key, value in self.headers.items():
            request.add_header(key, value)
        data = json.dumps(payload).encode("utf-8")

        try:
            with urllib.request.urlopen(
                request, data=data, timeout=self.timeout
            ) as response:
                status_code = response.status
                response_text = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise self._http_error(e.code, body, operation) from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise exceptions.LinearTimeoutError(
                    operation or "request", self.timeout
                ) from e
            raise exceptions.LinearAPIError(
                f"Connection error: {e.reason}", self.url
            ) from e
        except TimeoutError as e:
            raise exceptions.LinearTimeoutError(
                operation or "request", self.timeout
            ) from e

        if self.verbose:
            self.log(f"Response status: {status_code}")

        return self._unwrap(response_text, operation)

    def _http_error(
        self, status: int, body: str, operation: str
    ) -> exceptions.LinearAPIError:
        if status in (401, 403):
            return exceptions.LinearAuthenticationError(self.url, body, status)
        if status == 429:
            return exceptions.LinearRateLimitError(self.url, body)
        return exceptions.LinearAPIError(
            f"HTTP error {status} during {operation or 'request'}",
            self.url,
            status,
            body,
        )

    def _unwrap(self, response_text: str, operation: str) -> Dict[str, Any]:
        try:
            response_data = json.loads(response_text) if response_text else {}
        except json.JSONDecodeError as e:
            raise exceptions.LinearAPIError(
                f"Invalid JSON in response to {operation or 'request'}",
                self.url,
                200,
                response_text,
            ) from e

        errors = response_data.get("errors")
        if errors:
            codes = {
                (err.get("extensions") or {}).get("code")
                for err in errors
                if isinstance(err, dict)
            }
            if "AUTHENTICATION_ERROR" in codes:
                raise exceptions.LinearAuthenticationError(self.url, response_text)
            raise exceptions.LinearGraphQLError(errors, self.url, response_text)

        return response_data.get("data") or {}
