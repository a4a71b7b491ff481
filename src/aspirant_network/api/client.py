"""
HTTP client for the Aspirant Network REST API.

This module provides the low-level client every service goes through:
bearer authorization, JSON bodies, error extraction from ``{message}`` bodies
and retry with exponential backoff for idempotent reads.
"""

import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urljoin

import requests
from loguru import logger

from ..config import get_settings
from ..errors import APIError

AuthHeaderProvider = Callable[[], Dict[str, str]]

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})


class AspirantAPIClient:
    """
    HTTP client for the Aspirant Network backend.

    Reads are retried on transport errors and 429 responses; mutations are
    sent exactly once so a vote or save toggle is never applied twice.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        retries: Optional[int] = None,
        auth_header: Optional[AuthHeaderProvider] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the API, e.g. ``http://localhost:5000/api``
            timeout: Request timeout in seconds
            retries: Retry attempts for GET requests
            auth_header: Callable returning the Authorization header to send,
                usually ``AuthSession.get_auth_header``
        """
        settings = get_settings()
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout or settings.api_timeout
        self.retries = settings.api_retries if retries is None else retries
        self.auth_header = auth_header

        if not self.base_url.endswith('/'):
            self.base_url += '/'

        logger.info(f"Initialized AspirantAPIClient with base_url: {self.base_url}")

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.auth_header is not None:
            headers.update(self.auth_header())
        return headers

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {response.status_code}: {response.text}"

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        retries: Optional[int] = None,
    ) -> requests.Response:
        """
        Make HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path relative to the base URL
            params: Query parameters
            json_data: JSON request body
            retries: Number of retry attempts; defaults to the configured
                value for reads and to 0 for mutations

        Returns:
            requests.Response: HTTP response with a 2xx status

        Raises:
            APIError: If request fails after all retries
        """
        method = method.upper()
        url = urljoin(self.base_url, endpoint.lstrip('/'))
        if retries is None:
            retries = self.retries if method in IDEMPOTENT_METHODS else 0
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        for attempt in range(retries + 1):
            try:
                logger.debug(f"Making {method} request to {url} (attempt {attempt + 1})")

                response = requests.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json_data,
                    headers=self._headers(),
                    timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                if attempt < retries:
                    wait_time = 2 ** attempt
                    logger.warning(f"Request failed, retrying in {wait_time}s: {str(e)}")
                    time.sleep(wait_time)
                    continue
                raise APIError(f"Request failed after {retries} retries: {str(e)}") from e

            if 200 <= response.status_code < 300:
                logger.debug(f"Request successful: {method} {url}")
                return response

            if response.status_code == 429 and attempt < retries:
                wait_time = 2 ** attempt
                logger.warning(f"Rate limited, waiting {wait_time}s before retry")
                time.sleep(wait_time)
                continue

            message = self._error_message(response)
            logger.warning(f"{method} {url} failed with {response.status_code}: {message}")
            raise APIError(message, response.status_code)

        raise APIError(f"Request failed after {retries} retries")

    def request_json(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """Send a request and decode the JSON body (empty bodies become ``{}``)."""
        response = self._make_request(method, endpoint, params=params, json_data=json_data)
        if response.status_code == 204 or not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise APIError(f"Failed to parse response from {endpoint}: {str(e)}", response.status_code) from e
        if not isinstance(data, dict):
            return {"data": data}
        return data

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request_json("GET", endpoint, params=params)

    def post(self, endpoint: str, json_data: Optional[Any] = None) -> Dict[str, Any]:
        return self.request_json("POST", endpoint, json_data=json_data)

    def put(self, endpoint: str, json_data: Optional[Any] = None) -> Dict[str, Any]:
        return self.request_json("PUT", endpoint, json_data=json_data)

    def patch(self, endpoint: str, json_data: Optional[Any] = None) -> Dict[str, Any]:
        return self.request_json("PATCH", endpoint, json_data=json_data)

    def delete(self, endpoint: str, json_data: Optional[Any] = None) -> Dict[str, Any]:
        return self.request_json("DELETE", endpoint, json_data=json_data)

    def health_check(self) -> bool:
        """Return True if the API health endpoint answers."""
        try:
            self._make_request("GET", "health", retries=0)
            return True
        except APIError as e:
            logger.warning(f"API health check failed: {e.message}")
            return False
