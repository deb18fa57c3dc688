from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from mgmt.api.links import get_link
from mgmt.models import EmptyPayload, ProtectionDomain, ProtectionDomainParam, ProtectionDomainResp, System
from shared.errors import NotFoundError
from shared.timing import time_spent

if TYPE_CHECKING:
    from mgmt.client import Client

logger = logging.getLogger(__name__)

SYSTEM_REL_PROTECTION_DOMAIN = "/api/System/relationship/ProtectionDomain"


class ProtectionDomainMixin:
    """Protection domain operations of a system (mixed into SystemClient)"""

    client: "Client"
    system: System

    def create_protection_domain(self, name: str) -> str:
        """Create a protection domain and return its ID"""
        with time_spent("create_protection_domain"):
            resp = self.client.execute(
                "POST",
                "/api/types/ProtectionDomain/instances",
                ProtectionDomainParam(name=name),
                result_type=ProtectionDomainResp,
            )
            logger.info(f"Created protection domain '{name}' ({resp.id})")
            return resp.id

    def get_protection_domain(self, pd_href: str = "") -> List[ProtectionDomain]:
        """All protection domains of the system, or the one at pd_href"""
        with time_spent("get_protection_domain"):
            if not pd_href:
                link = get_link(self.system.links, SYSTEM_REL_PROTECTION_DOMAIN)
                return self.client.execute("GET", link.href, result_type=List[ProtectionDomain]) or []

            pd = self.client.execute("GET", pd_href, result_type=ProtectionDomain)
            return [pd] if pd is not None else []

    def find_protection_domain(self, pd_id: str = "", name: str = "", href: str = "") -> ProtectionDomain:
        with time_spent("find_protection_domain"):
            for pd in self.get_protection_domain(href):
                if href or (pd_id and pd.id == pd_id) or (name and pd.name == name):
                    return pd
            raise NotFoundError("Couldn't find protection domain")

    def delete_protection_domain(self, name: str) -> None:
        with time_spent("delete_protection_domain"):
            domain = self.find_protection_domain(name=name)
            link = get_link(domain.links, "self")
            self.client.execute("POST", f"{link.href}/action/removeProtectionDomain", EmptyPayload())
            logger.info(f"Removed protection domain '{name}' ({domain.id})")
