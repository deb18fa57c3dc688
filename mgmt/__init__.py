"""
MGMT — PowerFlex REST Management Client

Session/authentication layer and resource facades for the gateway's REST API.
- session: connection config, token and version-tagged headers
- client: authenticated request dispatcher (one re-auth retry on 401)
- models: pydantic wire models
- api: system, SDC, protection domain, user and volume facades
"""

from mgmt.client import Client, HeaderContributor
from mgmt.session import ConnectionConfig, SessionState

__all__ = [
    "Client",
    "ConnectionConfig",
    "HeaderContributor",
    "SessionState",
]
