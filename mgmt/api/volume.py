from __future__ import annotations

from typing import TYPE_CHECKING

from mgmt.models import MapVolumeSdcParam, SetMappedSdcLimitsParam, UnmapVolumeSdcParam, Volume
from shared.timing import time_spent

if TYPE_CHECKING:
    from mgmt.client import Client


class VolumeClient:
    """Volume bound to a client, for SDC mapping actions"""

    def __init__(self, client: "Client", volume: Volume):
        self.client = client
        self.volume = volume

    def _action(self, action: str) -> str:
        return f"/api/instances/Volume::{self.volume.id}/action/{action}"

    def map_volume_sdc(self, param: MapVolumeSdcParam) -> None:
        with time_spent("map_volume_sdc"):
            self.client.execute("POST", self._action("addMappedSdc"), param)

    def unmap_volume_sdc(self, param: UnmapVolumeSdcParam) -> None:
        with time_spent("unmap_volume_sdc"):
            self.client.execute("POST", self._action("removeMappedSdc"), param)

    def set_mapped_sdc_limits(self, param: SetMappedSdcLimitsParam) -> None:
        with time_spent("set_mapped_sdc_limits"):
            self.client.execute("POST", self._action("setMappedSdcLimits"), param)
