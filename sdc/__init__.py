"""
SDC (Storage Data Client) — Local Driver Queries

Talks to the SDC kernel driver on this host through fixed-layout ioctl
exchanges. Independent of the REST management client.
- ioctl: op-codes and binary buffer layouts
- drv_cfg: device channel (GUID, configured systems, rescan)
"""

from sdc.drv_cfg import MOCK_GUID, MOCK_SYSTEM, SciniDevice, query_guid_via_cli
from sdc.models import ConfiguredCluster

__all__ = [
    "ConfiguredCluster",
    "MOCK_GUID",
    "MOCK_SYSTEM",
    "SciniDevice",
    "query_guid_via_cli",
]
