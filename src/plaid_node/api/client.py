"""HTTP client for the Plaid REST API."""

import logging
from typing import Any, Dict, Optional

import requests

from ..models.core import PlaidCredentials
from ..utils.error_handler import TransportError, UpstreamApiError, normalize_error_payload
from .credentials import DEFAULT_PLAID_VERSION, build_headers, resolve_base_url


logger = logging.getLogger(__name__)


class PlaidApiClient:
    """Issues JSON POST requests against one Plaid environment

    Client id and secret are sent both as headers and inside the body,
    as the Plaid API expects.
    """

    def __init__(self,
                 credentials: PlaidCredentials,
                 timeout: float = 30.0,
                 plaid_version: str = DEFAULT_PLAID_VERSION,
                 session: Optional[requests.Session] = None):
        """Initialize the client

        Args:
            credentials: Resolved Plaid credentials
            timeout: Per-request timeout in seconds
            plaid_version: Value of the Plaid-Version header
            session: Optional requests session to reuse
        """
        self.credentials = credentials
        self.timeout = timeout
        self.base_url = resolve_base_url(credentials.environment)
        self.headers = build_headers(credentials, plaid_version)
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def post(self, endpoint: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST to a Plaid endpoint and return the decoded JSON object

        Args:
            endpoint: Endpoint path, e.g. "/accounts/get"
            body: Endpoint-specific request fields

        Returns:
            Decoded response body

        Raises:
            UpstreamApiError: Plaid answered with a non-2xx status
            TransportError: Network failure, timeout or malformed body
        """
        url = f"{self.base_url}{endpoint}"
        payload = dict(body or {})
        payload['client_id'] = self.credentials.client_id
        payload['secret'] = self.credentials.secret

        logger.debug(f"POST {url}")
        try:
            response = self.session.post(url, headers=self.headers, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise TransportError(f"Plaid API request timed out after {self.timeout}s: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"Plaid API request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise self._upstream_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Plaid API returned a malformed response body: {e}") from e

        if not isinstance(data, dict):
            raise TransportError("Plaid API response body is not a JSON object")

        logger.debug(f"POST {endpoint} succeeded (request_id: {data.get('request_id')})")
        return data

    def _upstream_error(self, response: requests.Response) -> UpstreamApiError:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        error = normalize_error_payload(payload)
        if error is None:
            text = (response.text or '')[:200]
            logger.warning(f"Plaid returned status {response.status_code} without an error body")
            return UpstreamApiError(
                'PLAID_ERROR',
                f"Request failed with status {response.status_code}: {text}".strip(),
                status_code=response.status_code
            )

        logger.warning(f"Plaid returned {error['error_code']} (status {response.status_code})")
        return UpstreamApiError(
            error['error_code'],
            error['error_message'],
            error_type=error['error_type'],
            display_message=error['display_message'],
            request_id=error['request_id'],
            status_code=response.status_code
        )

    def close(self) -> None:
        """Close the session if this client created it"""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> 'PlaidApiClient':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
