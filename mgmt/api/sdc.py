from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from mgmt.api.links import SDC_REL_STATISTICS, SDC_REL_VOLUME, get_link_from_sdc
from mgmt.api.volume import VolumeClient
from mgmt.models import ChangeSdcNameParam, Sdc, SdcStatistics, System, Volume
from shared.errors import NotFoundError
from shared.timing import time_spent

if TYPE_CHECKING:
    from mgmt.client import Client


class SdcLookupKey(str, Enum):
    """SDC fields find_sdc() can match on (values are the gateway field names)"""
    ID = "id"
    NAME = "name"
    GUID = "sdcGuid"
    IP = "sdcIp"


_SDC_FIELDS: Dict[SdcLookupKey, Callable[[Sdc], Optional[str]]] = {
    SdcLookupKey.ID: lambda sdc: sdc.id,
    SdcLookupKey.NAME: lambda sdc: sdc.name,
    SdcLookupKey.GUID: lambda sdc: sdc.sdc_guid,
    SdcLookupKey.IP: lambda sdc: sdc.sdc_ip,
}


class SdcClient:
    """SDC bound to a client"""

    def __init__(self, client: "Client", sdc: Sdc):
        self.client = client
        self.sdc = sdc

    def get_statistics(self) -> SdcStatistics:
        with time_spent("get_statistics"):
            link = get_link_from_sdc(self.sdc, SDC_REL_STATISTICS)
            return self.client.execute("GET", link.href, result_type=SdcStatistics)

    def get_volume(self) -> List[Volume]:
        with time_spent("get_volume"):
            link = get_link_from_sdc(self.sdc, SDC_REL_VOLUME)
            return self.client.execute("GET", link.href, result_type=List[Volume]) or []

    def find_volumes(self) -> List[VolumeClient]:
        with time_spent("find_volumes"):
            return [VolumeClient(self.client, vol) for vol in self.get_volume()]


class SdcMixin:
    """SDC operations of a system (mixed into SystemClient)"""

    client: "Client"
    system: System

    def get_sdc(self) -> List[Sdc]:
        with time_spent("get_sdc"):
            path = f"/api/instances/System::{self.system.id}/relationships/Sdc"
            return self.client.execute("GET", path, result_type=List[Sdc]) or []

    def get_sdc_by_id(self, sdc_id: str) -> SdcClient:
        """SDC by ID; lookup errors are raised, never masked by an empty SDC"""
        with time_spent("get_sdc_by_id"):
            sdc = self.client.execute("GET", f"/api/instances/Sdc::{sdc_id}", result_type=Sdc)
            if sdc is None:
                raise NotFoundError(f"Couldn't find SDC {sdc_id}")
            return SdcClient(self.client, sdc)

    def change_sdc_name(self, sdc_id: str, name: str) -> SdcClient:
        """Rename an SDC and return it as stored after the change"""
        with time_spent("change_sdc_name"):
            self.client.execute(
                "POST",
                f"/api/instances/Sdc::{sdc_id}/action/setSdcName",
                ChangeSdcNameParam(sdc_name=name),
            )
        return self.get_sdc_by_id(sdc_id)

    def find_sdc_where(self, predicate: Callable[[Sdc], bool]) -> SdcClient:
        with time_spent("find_sdc"):
            for sdc in self.get_sdc():
                if predicate(sdc):
                    return SdcClient(self.client, sdc)
            raise NotFoundError("Couldn't find SDC")

    def find_sdc(self, key: SdcLookupKey, value: str) -> SdcClient:
        field = _SDC_FIELDS[SdcLookupKey(key)]
        return self.find_sdc_where(lambda sdc: field(sdc) == value)
