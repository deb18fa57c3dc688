"""
Error taxonomy for the PowerFlex client.

Every public operation either returns a decoded result or raises exactly one of
these. Callers can catch PowerFlexError to handle all of them.
"""

from __future__ import annotations

from typing import Optional


class PowerFlexError(RuntimeError):
    """Base class for all client errors"""


class TransportError(PowerFlexError):
    """Network, timeout or connection failure; never retried by the client"""


class DeviceIOError(TransportError):
    """OS-level failure opening or querying the local SDC driver"""


class AuthenticationError(PowerFlexError):
    """Bad credentials, failed re-authentication, or a repeated 401"""


class StructuredAPIError(PowerFlexError):
    """
    Non-2xx response from the REST gateway.

    Attributes:
        status_code: HTTP status of the response
        message: Server supplied message (or a parse-failure message)
        error_code: Vendor error code, None when the body carried none
    """

    def __init__(
        self,
        status_code: Optional[int],
        message: Optional[str],
        error_code: Optional[int] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        super().__init__(f"HTTP {status_code}: {message} (errorCode={error_code})")


class MalformedResponseError(PowerFlexError):
    """2xx response whose body could not be decoded"""


class DriverAbsentError(PowerFlexError):
    """The SDC driver device (or its tooling) is not present on this host"""


class ProtocolViolationError(PowerFlexError):
    """The driver answered, but with a failing return code or impossible layout"""


class NotFoundError(PowerFlexError):
    """A lookup over cluster objects or links found no match"""
