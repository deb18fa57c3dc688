from __future__ import annotations

from typing import TYPE_CHECKING

from mgmt.api.pd import ProtectionDomainMixin
from mgmt.api.sdc import SdcMixin
from mgmt.api.user import UserMixin
from mgmt.models import System

if TYPE_CHECKING:
    from mgmt.client import Client


class SystemClient(ProtectionDomainMixin, SdcMixin, UserMixin):
    """
    A PowerFlex system bound to a client.

    Obtain one through Client.find_system(); all resource calls go through
    the client's authenticated dispatcher.
    """

    def __init__(self, client: "Client", system: System):
        self.client = client
        self.system = system
