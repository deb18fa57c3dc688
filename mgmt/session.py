"""
MGMT Session State

Connection configuration, the current auth token and the version-tagged
request headers for one client. All of it is shared between concurrent
callers, so every read and write goes through one lock; the Accept and
Content-Type values are computed and handed out together so a caller can never
observe a pair that straddles a version change. Requests are built from one
snapshot of base URL, headers and token, so a reconfiguration never pairs a
token with another gateway's URL.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, NamedTuple
from urllib.parse import urlparse

HEADER_KEY_ACCEPT = "Accept"
HEADER_KEY_CONTENT_TYPE = "Content-Type"
HEADER_VAL_CONTENT_TYPE_JSON = "application/json"

_VERSION_RX = re.compile(r"^(\d+\.\d+).*$")


@dataclass(frozen=True)
class ConnectionConfig:
    endpoint: str
    version: str = ""
    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def has_credentials(self) -> bool:
        return bool(self.username)

    @property
    def base_url(self) -> str:
        return base_url_for(self.endpoint)


class SessionSnapshot(NamedTuple):
    """Base URL, headers and token read in one critical section"""
    base_url: str
    headers: Dict[str, str]
    token: str


def base_url_for(endpoint: str) -> str:
    """Gateway root URL; a trailing '/api' on the endpoint is dropped"""
    parsed = urlparse(endpoint)
    path = parsed.path.rstrip("/")
    if path.endswith("/api"):
        path = path[: -len("/api")]
    return f"{parsed.scheme}://{parsed.netloc}{path}"


def derive_version(raw: str) -> str:
    """Leading 'major.minor' of a server version string, or the string unchanged"""
    m = _VERSION_RX.match(raw)
    if m:
        return m.group(1)
    return raw


def build_headers(version: str) -> Dict[str, str]:
    value = HEADER_VAL_CONTENT_TYPE_JSON
    if version:
        value = f"{value};version={version}"
    return {HEADER_KEY_ACCEPT: value, HEADER_KEY_CONTENT_TYPE: value}


class SessionState:
    """Lock-guarded connection config, token and derived headers"""

    def __init__(self, config: ConnectionConfig):
        self._lock = threading.Lock()
        self._config = config
        self._token = ""
        self._headers = build_headers(config.version)

    def configure(self, endpoint: str, version: str, username: str, password: str) -> None:
        """
        Replace the connection configuration; does not authenticate.

        A token is only valid for the gateway that issued it, so it is dropped
        when the endpoint changes.
        """
        with self._lock:
            if endpoint != self._config.endpoint:
                self._token = ""
            self._config = ConnectionConfig(
                endpoint=endpoint, version=version, username=username, password=password
            )
            self._headers = build_headers(version)

    def set_credentials(self, username: str, password: str) -> None:
        with self._lock:
            self._config = replace(self._config, username=username, password=password)

    @property
    def config(self) -> ConnectionConfig:
        with self._lock:
            return self._config

    @property
    def version(self) -> str:
        with self._lock:
            return self._config.version

    def set_version(self, version: str) -> None:
        with self._lock:
            self._config = replace(self._config, version=version)
            self._headers = build_headers(version)

    @property
    def token(self) -> str:
        with self._lock:
            return self._token

    def set_token(self, token: str) -> None:
        with self._lock:
            self._token = token

    def clear_token(self) -> None:
        self.set_token("")

    def current_headers(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._headers)

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(self._config.base_url, dict(self._headers), self._token)
