from typing import Iterable

from mgmt.models import Link, Sdc
from shared.errors import NotFoundError

SDC_REL_STATISTICS = "/api/Sdc/relationship/Statistics"
SDC_REL_VOLUME = "/api/Sdc/relationship/Volume"


def get_link(links: Iterable[Link], rel: str) -> Link:
    for link in links:
        if link.rel == rel:
            return link
    raise NotFoundError(f"Problem finding link '{rel}'")


def get_link_from_sdc(sdc: Sdc, rel: str) -> Link:
    """Relationship link for an SDC, built from its ID"""
    if rel == SDC_REL_STATISTICS:
        return Link(rel=rel, href=f"/api/instances/Sdc::{sdc.id}/relationships/Statistics")
    if rel == SDC_REL_VOLUME:
        return Link(rel=rel, href=f"/api/instances/Sdc::{sdc.id}/relationships/Volume")
    raise NotFoundError(f"Unsupported SDC relationship '{rel}'")
