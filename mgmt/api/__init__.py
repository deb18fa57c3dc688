"""
Resource facades over the authenticated dispatcher.
"""

from mgmt.api.links import get_link, get_link_from_sdc
from mgmt.api.sdc import SdcClient, SdcLookupKey
from mgmt.api.system import SystemClient
from mgmt.api.volume import VolumeClient

__all__ = [
    "SdcClient",
    "SdcLookupKey",
    "SystemClient",
    "VolumeClient",
    "get_link",
    "get_link_from_sdc",
]
