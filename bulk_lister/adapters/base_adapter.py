"""
Base Service Adapter
====================
Shared HTTP plumbing for the services the bulk pipeline talks to.

Every adapter authenticates with the seller's bearer token, sends one
request per call and turns transport problems into a small error taxonomy:

- ServiceUnavailableError: network failure or timeout, nothing came back
- ServiceRejectedError: the service answered with a non-success status
- MalformedResponseError: success status, but the body breaks the contract

Callers decide what each failure means for their stage.
"""

import logging
from typing import Dict, Any, Optional

import requests

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base error for external service calls"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ServiceUnavailableError(ServiceError):
    """Request never completed (connection error, timeout)"""


class ServiceRejectedError(ServiceError):
    """Service responded with a non-success status"""


class MalformedResponseError(ServiceError):
    """Service responded successfully with an unexpected body"""


class ServiceAdapter:
    """
    Base class for JSON-over-HTTP service adapters.

    Subclasses set `service_name` and `endpoint` and call `_post_json`
    or `_post_multipart`.
    """

    service_name = "service"
    endpoint = ""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize adapter.

        Args:
            base_url: Service base URL (no trailing slash needed)
            access_token: Bearer token sent with every request
            timeout: Seconds before a call is abandoned (None waits forever)
            session: Optional requests session (shared connection pool)
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"

    def _headers(self, json_body: bool = True) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _post_json(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._send(json=payload, headers=self._headers())

    def _post_multipart(self, files: Dict[str, Any], data: Dict[str, str]) -> Dict[str, Any]:
        return self._send(files=files, data=data, headers=self._headers(json_body=False))

    def _send(self, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.post(self.url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ServiceUnavailableError(f"{self.service_name} unreachable: {e}") from e

        if not response.ok:
            raise ServiceRejectedError(
                f"{self.service_name} error: {self._error_message(response)}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{self.service_name} returned invalid JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise MalformedResponseError(
                f"{self.service_name} returned {type(body).__name__}, expected object",
                status_code=response.status_code,
            )
        return body

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {response.status_code}"
