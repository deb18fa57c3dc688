"""
MGMT REST Client

Authenticated request dispatcher for the PowerFlex REST gateway. Every
resource call goes through Client.execute(), which:

1. Reads the version-tagged headers and the session token atomically
2. Sends the request with a bounded timeout
3. On 401, re-authenticates with the stored credentials and retries once
4. Raises a typed error for anything that is not a 2xx

Transport failures are never retried here. Re-authentication after a 401 is
the only built-in retry and is limited to a single extra attempt.

Usage:
    client = Client("https://gateway.example", username="admin", password="...")
    client.authenticate()
    systems = client.get_systems()
"""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from mgmt.models import ErrorBody, System
from mgmt.session import ConnectionConfig, SessionSnapshot, SessionState, derive_version
from shared.config import DEFAULT_TIMEOUT_SECONDS, ClientSettings, show_http_enabled, validate_endpoint
from shared.errors import (
    AuthenticationError,
    MalformedResponseError,
    NotFoundError,
    PowerFlexError,
    StructuredAPIError,
    TransportError,
)
from shared.timing import time_spent

if TYPE_CHECKING:
    from mgmt.api.system import SystemClient

logger = logging.getLogger(__name__)


@runtime_checkable
class HeaderContributor(Protocol):
    """Request body that adds its own HTTP headers to the request"""

    def metadata_headers(self) -> Mapping[str, str]:
        ...


def extract_string(text: str) -> str:
    """Bare string from a quoted scalar response body"""
    return text.strip().lstrip('"').rstrip('"')


def parse_json_error(response: requests.Response) -> StructuredAPIError:
    """Turn a non-2xx response into a StructuredAPIError"""
    try:
        body = ErrorBody.model_validate(response.json())
    except ValueError:
        return StructuredAPIError(
            response.status_code,
            f"unable to parse error response body (HTTP {response.status_code})",
        )
    return StructuredAPIError(response.status_code, body.message, body.error_code)


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code <= 299


class Client:
    """PowerFlex REST gateway client"""

    def __init__(
        self,
        endpoint: str,
        version: str = "",
        username: str = "",
        password: str = "",
        insecure: bool = False,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_session: Optional[requests.Session] = None,
        show_http: Optional[bool] = None,
    ):
        """
        Initialize the client. Does not contact the gateway.

        Args:
            endpoint: Gateway URL, e.g. 'https://10.0.0.1' (a trailing '/api' is accepted)
            version: Gateway API version; negotiated on first login when empty
            username: Login user, kept for re-authentication
            password: Login password, kept for re-authentication
            insecure: Skip TLS certificate verification
            timeout_seconds: Default per-request timeout
            http_session: requests.Session to send through (default: a new one)
            show_http: Trace requests/responses at DEBUG (default: POWERFLEX_SHOWHTTP)
        """
        endpoint = validate_endpoint(endpoint)
        self.state = SessionState(
            ConnectionConfig(endpoint=endpoint, version=version, username=username, password=password)
        )
        self.timeout_seconds = timeout_seconds
        self.verify = not insecure
        self.show_http = show_http_enabled() if show_http is None else show_http
        self._http = http_session or requests.Session()
        self._auth_lock = threading.Lock()
        logger.debug(
            f"PowerFlex client init: endpoint={endpoint} version={version or '<negotiate>'} "
            f"insecure={insecure} timeout={timeout_seconds}s"
        )

    @classmethod
    def from_settings(cls, settings: ClientSettings, http_session: Optional[requests.Session] = None) -> "Client":
        return cls(
            endpoint=settings.endpoint,
            version=settings.version,
            username=settings.username,
            password=settings.password,
            insecure=settings.insecure,
            timeout_seconds=settings.timeout_seconds,
            http_session=http_session,
            show_http=settings.show_http,
        )

    @classmethod
    def from_env(cls) -> "Client":
        """Build a client from POWERFLEX_* environment variables"""
        return cls.from_settings(ClientSettings.from_env())

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Session

    def configure(self, endpoint: str, version: str, username: str, password: str) -> None:
        """Replace the connection configuration; call authenticate() afterwards"""
        endpoint = validate_endpoint(endpoint)
        # Wait out an in-flight login so its token is not stored under the new endpoint
        with self._auth_lock:
            self.state.configure(endpoint, version, username, password)

    @property
    def base_url(self) -> str:
        return self.state.config.base_url

    def get_token(self) -> str:
        return self.state.token

    def set_token(self, token: str) -> None:
        """Use a token obtained elsewhere"""
        self.state.set_token(token)

    def current_headers(self) -> Dict[str, str]:
        return self.state.current_headers()

    def authenticate(self, username: Optional[str] = None, password: Optional[str] = None) -> None:
        """
        Log in to the gateway and store the session token.

        The current token is cleared before the attempt, so a failed login
        always leaves the client unauthenticated. If no API version is known
        yet, it is negotiated right after login.

        Args:
            username: Replace the stored user before logging in
            password: Replace the stored password before logging in

        Raises:
            AuthenticationError: login or version negotiation failed
        """
        with time_spent("authenticate"):
            with self._auth_lock:
                if username is not None or password is not None:
                    config = self.state.config
                    self.state.set_credentials(
                        config.username if username is None else username,
                        config.password if password is None else password,
                    )
                self._authenticate_locked()

    def _authenticate_locked(self) -> None:
        config = self.state.config
        self.state.clear_token()

        url = self._url("/api/login", config.base_url)
        self._trace_request("GET", url, {})
        try:
            response = self._http.request(
                "GET",
                url,
                auth=(config.username, config.password),
                timeout=self.timeout_seconds,
                verify=self.verify,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Login to {config.endpoint} failed: {e}")
            raise AuthenticationError(f"Login to {config.endpoint} failed: {e}") from e

        # Login body is the token itself
        self._trace_response(response, include_body=False)

        if not _is_success(response):
            error = parse_json_error(response)
            logger.error(f"Login rejected for user '{config.username}': HTTP {response.status_code}")
            raise AuthenticationError(f"Login rejected: {error}") from error

        token = extract_string(response.text)
        if not token:
            raise AuthenticationError("Login returned an empty token")
        self.state.set_token(token)

        if not self.state.version:
            try:
                version = self._fetch_version()
            except PowerFlexError as e:
                self.state.clear_token()
                logger.error(f"Error getting version of PowerFlex: {e}")
                raise AuthenticationError("Error getting version of PowerFlex") from e
            self.state.set_version(version)

        logger.info(f"Authenticated to {config.endpoint} as '{config.username}' (version={self.state.version})")

    def _reauthenticate(self, stale_token: str) -> None:
        """Re-login after a 401, unless another caller already refreshed the token"""
        with self._auth_lock:
            current = self.state.token
            if current and current != stale_token:
                logger.debug("Session already refreshed by a concurrent caller")
                return
            if not self.state.config.has_credentials:
                self.state.clear_token()
                raise AuthenticationError("Session expired and no stored credentials to re-authenticate")
            logger.info("Session expired, re-authenticating")
            self._authenticate_locked()

    def _fetch_version(self) -> str:
        response = self._send("GET", "/api/version", None, None, self.state.snapshot())
        if not _is_success(response):
            raise parse_json_error(response)
        return derive_version(extract_string(response.text))

    def get_version(self) -> str:
        """Gateway API version reduced to 'major.minor'"""
        return derive_version(self.execute_string("GET", "/api/version"))

    # Dispatch

    @staticmethod
    def _url(path: str, base_url: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{base_url}/{path.lstrip('/')}"

    def _authorized_snapshot(self) -> SessionSnapshot:
        snap = self.state.snapshot()
        if snap.token:
            return snap

        if not self.state.config.has_credentials:
            raise AuthenticationError("Not authenticated and no stored credentials")

        with self._auth_lock:
            snap = self.state.snapshot()
            if not snap.token:
                self._authenticate_locked()
                snap = self.state.snapshot()
        if not snap.token:
            raise AuthenticationError("Not authenticated")
        return snap

    def _send(
        self,
        method: str,
        path: str,
        body: Any,
        timeout: Optional[float],
        snap: SessionSnapshot,
    ) -> requests.Response:
        headers = snap.headers
        if isinstance(body, HeaderContributor):
            headers.update(body.metadata_headers())

        url = self._url(path, snap.base_url)
        data = self._encode_body(body)
        self._trace_request(method, url, headers, data)
        try:
            response = self._http.request(
                method,
                url,
                headers=headers,
                data=data,
                auth=("", snap.token),
                timeout=timeout or self.timeout_seconds,
                verify=self.verify,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"{method} {url} timed out")
            raise TransportError(f"{method} {path} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {path} failed: {e}") from e

        self._trace_response(response)
        return response

    def _send_with_retry(
        self,
        method: str,
        path: str,
        body: Any,
        timeout: Optional[float],
    ) -> requests.Response:
        snap = self._authorized_snapshot()
        response = self._send(method, path, body, timeout, snap)

        if response.status_code == 401:
            logger.debug(f"Got 401 for {method} {path}: {parse_json_error(response)}")
            self._reauthenticate(snap.token)
            snap = self._authorized_snapshot()
            response = self._send(method, path, body, timeout, snap)
            if response.status_code == 401:
                error = parse_json_error(response)
                logger.error(f"{method} {path} still unauthorized after re-authentication")
                raise AuthenticationError(f"{method} {path} unauthorized after re-authentication") from error

        if not _is_success(response):
            error = parse_json_error(response)
            logger.error(f"{method} {path} returned error: {error}")
            raise error

        return response

    def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        result_type: Any = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Execute one logical request against the gateway.

        Args:
            method: HTTP method
            path: API path, e.g. '/api/types/System/instances'
            body: pydantic model, dict/list, or None
            result_type: pydantic model or typing form (e.g. List[Sdc]) to
                validate the response into; raw JSON when None
            timeout: Per-call timeout override in seconds

        Returns:
            Decoded response, or None for an empty body

        Raises:
            TransportError, AuthenticationError, StructuredAPIError,
            MalformedResponseError
        """
        response = self._send_with_retry(method, path, body, timeout)
        return self._decode(response, result_type, f"{method} {path}")

    def execute_string(self, method: str, path: str, body: Any = None, timeout: Optional[float] = None) -> str:
        """Like execute(), for endpoints answering with a bare quoted string"""
        response = self._send_with_retry(method, path, body, timeout)
        return extract_string(response.text)

    @staticmethod
    def _encode_body(body: Any) -> Optional[str]:
        if body is None:
            return None
        if isinstance(body, BaseModel):
            return body.model_dump_json(by_alias=True, exclude_none=True)
        return json.dumps(body)

    @staticmethod
    def _decode(response: requests.Response, result_type: Any, what: str) -> Any:
        if not response.text or not response.text.strip():
            return None
        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"{what}: response is not valid JSON") from e
        if result_type is None:
            return payload
        try:
            return TypeAdapter(result_type).validate_python(payload)
        except ValidationError as e:
            raise MalformedResponseError(f"{what}: unexpected response shape: {e}") from e

    def _trace_request(self, method: str, url: str, headers: Mapping[str, str], data: Optional[str] = None) -> None:
        if not self.show_http:
            return
        logger.debug(f"--> {method} {url} headers={dict(headers)} body={data}")

    def _trace_response(self, response: requests.Response, include_body: bool = True) -> None:
        if not self.show_http:
            return
        body = response.text[:1000] if include_body else "<omitted>"
        logger.debug(f"<-- {response.status_code} body={body}")

    # Systems

    def get_systems(self) -> List[System]:
        with time_spent("get_systems"):
            return self.execute("GET", "/api/types/System/instances", result_type=List[System]) or []

    def find_system(self, system_id: str = "", name: str = "") -> "SystemClient":
        """System by ID or name; the only system when both are empty"""
        from mgmt.api.system import SystemClient

        with time_spent("find_system"):
            systems = self.get_systems()
            for system in systems:
                if (not system_id and not name) or system.id == system_id or (name and system.name == name):
                    return SystemClient(self, system)
            raise NotFoundError(f"Couldn't find system (id={system_id!r}, name={name!r})")
