"""
Base API client for Film Roulette external service integrations.
Provides common functionality for request handling and error parsing.
"""

import logging
import requests
from typing import Any, Dict, Optional

logger = logging.getLogger('film_roulette')


class APIError(Exception):
    """
    Raised when an upstream service request fails.

    Carries the HTTP status code and raw body when the failure came
    from a non-success response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class BaseAPIClient:
    """
    Base class for API clients with common request handling.

    Every call is a single attempt with an explicit timeout.

    Subclasses should:
    - Set `api_name` class attribute for error messages
    - Set `exception_class` class attribute for raising appropriate exceptions
    - Override `_get_headers()` to return auth headers
    - Override `_build_url()` if URL construction differs
    """

    api_name: str = "API"
    exception_class: type = APIError
    request_timeout: int = 30

    def __init__(self, base_url: str, timeout: Optional[int] = None):
        """
        Initialize base client state.

        Args:
            base_url: Service base URL
            timeout: Per-request timeout in seconds (class default if None)
        """
        self.base_url = base_url.rstrip('/')
        if timeout is not None:
            self.request_timeout = timeout

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests. Override in subclass."""
        return {"Content-Type": "application/json"}

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from base and endpoint. Override if needed."""
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _parse_error_response(self, response: requests.Response) -> str:
        """
        Parse error message from response body.

        Handles common patterns:
        - TMDB style dict with 'status_message'
        - OpenAI style dict with nested 'error.message'
        - Dict with 'message' or 'error' key

        Args:
            response: Failed HTTP response

        Returns:
            Extracted error message or raw response text
        """
        error_msg = response.text
        try:
            error_data = response.json()
            if isinstance(error_data, dict):
                error = error_data.get('error')
                if isinstance(error, dict):
                    error_msg = error.get('message', error_msg)
                else:
                    error_msg = error_data.get(
                        'status_message', error_data.get('message', error or error_msg)
                    )
        except ValueError as e:
            logger.debug(f"Failed to parse error response JSON: {e}")
        return error_msg

    def _handle_response(self, response: requests.Response) -> Any:
        """
        Handle HTTP response, raising exceptions for errors.

        Args:
            response: HTTP response object

        Returns:
            Parsed JSON response or None for 204

        Raises:
            exception_class: For HTTP errors
        """
        if response.status_code == 401:
            raise self.exception_class(
                f"{self.api_name}: invalid API key", status_code=401, body=response.text
            )
        elif response.status_code >= 400:
            error_msg = self._parse_error_response(response)
            raise self.exception_class(
                f"{self.api_name} error {response.status_code}: {error_msg}",
                status_code=response.status_code,
                body=response.text,
            )

        if response.status_code == 204:
            return None

        try:
            return response.json()
        except ValueError:
            raise self.exception_class(
                f"{self.api_name} returned a non-JSON response",
                status_code=response.status_code,
                body=response.text,
            )

    def _make_request(self, method: str, endpoint: str,
                      data: Optional[Dict] = None,
                      params: Optional[Dict] = None,
                      headers: Optional[Dict] = None) -> Any:
        """
        Make a single HTTP request with error handling.

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            endpoint: API endpoint (without base URL)
            data: Request body data (will be JSON encoded)
            params: Query parameters
            headers: Optional headers (uses _get_headers() if not provided)

        Returns:
            Response JSON data or None

        Raises:
            exception_class: If request fails
        """
        url = self._build_url(endpoint)

        if headers is None:
            headers = self._get_headers()

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                json=data,
                params=params,
                timeout=self.request_timeout
            )
        except requests.exceptions.Timeout:
            raise self.exception_class(f"{self.api_name} request timeout after {self.request_timeout}s")
        except requests.exceptions.ConnectionError:
            raise self.exception_class(f"Could not connect to {self.api_name}")
        except requests.exceptions.RequestException as e:
            raise self.exception_class(f"{self.api_name} request failed: {e}")

        return self._handle_response(response)
