from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlparse


def _str_env(name: str, default: str = "") -> str:
    return str(os.getenv(name, default)).strip()


def _int_env(name: str, default: int) -> int:
    raw = _str_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _bool_env(name: str, default: bool = False) -> bool:
    raw = _str_env(name, "").lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


DEFAULT_TIMEOUT_SECONDS = 60
IOCTL_DEVICE = "/dev/scini"
DRV_CFG_BINARY = "/opt/emc/scaleio/sdc/bin/drv_cfg"

SDC_DEVICE = _str_env("POWERFLEX_SDC_DEVICE", IOCTL_DEVICE) or IOCTL_DEVICE
SCINI_MOCK_MODE = _bool_env("POWERFLEX_SCINI_MOCK")


def debug_enabled() -> bool:
    return _bool_env("POWERFLEX_DEBUG")


def show_http_enabled() -> bool:
    return _bool_env("POWERFLEX_SHOWHTTP")


def validate_endpoint(endpoint: str) -> str:
    endpoint = str(endpoint or "").strip()
    if not endpoint:
        raise ValueError("endpoint is required")
    parsed = urlparse(endpoint)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("endpoint must be a valid http(s) URL")
    return endpoint


@dataclass
class ClientSettings:
    endpoint: str
    version: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    insecure: bool = False
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    show_http: bool = False

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Read client settings from POWERFLEX_* environment variables"""
        return cls(
            endpoint=validate_endpoint(_str_env("POWERFLEX_ENDPOINT")),
            version=_str_env("POWERFLEX_VERSION"),
            username=_str_env("POWERFLEX_USERNAME"),
            password=_str_env("POWERFLEX_PASSWORD"),
            insecure=_bool_env("POWERFLEX_INSECURE"),
            timeout_seconds=_int_env("POWERFLEX_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            show_http=show_http_enabled(),
        )
