"""
MGMT REST Wire Models

Pydantic models for the gateway's JSON objects and action parameters. Field
names follow the gateway's camelCase JSON through aliases; unknown fields are
kept so newer gateway versions do not break decoding.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Link(WireModel):
    rel: str
    href: str


class ErrorBody(WireModel):
    """Body of a non-2xx gateway response"""
    message: Optional[str] = None
    http_status_code: Optional[int] = Field(default=None, alias="httpStatusCode")
    error_code: Optional[int] = Field(default=None, alias="errorCode")


class System(WireModel):
    id: str
    name: Optional[str] = None
    system_version_name: Optional[str] = Field(default=None, alias="systemVersionName")
    install_id: Optional[str] = Field(default=None, alias="installId")
    mdm_cluster_state: Optional[str] = Field(default=None, alias="mdmClusterState")
    links: List[Link] = Field(default_factory=list)


class Sdc(WireModel):
    id: str
    name: Optional[str] = None
    sdc_guid: Optional[str] = Field(default=None, alias="sdcGuid")
    sdc_ip: Optional[str] = Field(default=None, alias="sdcIp")
    sdc_approved: Optional[bool] = Field(default=None, alias="sdcApproved")
    mdm_connection_state: Optional[str] = Field(default=None, alias="mdmConnectionState")
    system_id: Optional[str] = Field(default=None, alias="systemId")
    links: List[Link] = Field(default_factory=list)


class SdcStatistics(WireModel):
    num_of_mapped_volumes: Optional[int] = Field(default=None, alias="numOfMappedVolumes")
    volume_ids: List[str] = Field(default_factory=list, alias="volumeIds")
    user_data_read_bwc: Optional[Dict[str, Any]] = Field(default=None, alias="userDataReadBwc")
    user_data_write_bwc: Optional[Dict[str, Any]] = Field(default=None, alias="userDataWriteBwc")


class ProtectionDomain(WireModel):
    id: str
    name: Optional[str] = None
    system_id: Optional[str] = Field(default=None, alias="systemId")
    protection_domain_state: Optional[str] = Field(default=None, alias="protectionDomainState")
    links: List[Link] = Field(default_factory=list)


class ProtectionDomainResp(WireModel):
    id: str


class User(WireModel):
    id: str
    name: Optional[str] = None
    user_role: Optional[str] = Field(default=None, alias="userRole")
    system_id: Optional[str] = Field(default=None, alias="systemId")
    links: List[Link] = Field(default_factory=list)


class MappedSdcInfo(WireModel):
    sdc_id: Optional[str] = Field(default=None, alias="sdcId")
    sdc_ip: Optional[str] = Field(default=None, alias="sdcIp")
    limit_iops: Optional[int] = Field(default=None, alias="limitIops")
    limit_bw_in_mbps: Optional[int] = Field(default=None, alias="limitBwInMbps")


class Volume(WireModel):
    id: str
    name: Optional[str] = None
    size_in_kb: Optional[int] = Field(default=None, alias="sizeInKb")
    volume_type: Optional[str] = Field(default=None, alias="volumeType")
    storage_pool_id: Optional[str] = Field(default=None, alias="storagePoolId")
    mapped_sdc_info: List[MappedSdcInfo] = Field(default_factory=list, alias="mappedSdcInfo")
    links: List[Link] = Field(default_factory=list)


# Action parameters


class EmptyPayload(WireModel):
    pass


class ProtectionDomainParam(WireModel):
    name: str


class ChangeSdcNameParam(WireModel):
    sdc_name: str = Field(alias="sdcName")


class MapVolumeSdcParam(WireModel):
    sdc_id: Optional[str] = Field(default=None, alias="sdcId")
    allow_multiple_mappings: Optional[str] = Field(default=None, alias="allowMultipleMappings")
    all_sdcs: Optional[str] = Field(default=None, alias="allSdcs")


class UnmapVolumeSdcParam(WireModel):
    sdc_id: Optional[str] = Field(default=None, alias="sdcId")
    ignore_scsi_initiators: Optional[str] = Field(default=None, alias="ignoreScsiInitiators")
    all_sdcs: Optional[str] = Field(default=None, alias="allSdcs")


class SetMappedSdcLimitsParam(WireModel):
    sdc_id: str = Field(alias="sdcId")
    bandwidth_limit_in_kbps: Optional[str] = Field(default=None, alias="bandwidthLimitInKbps")
    iops_limit: Optional[str] = Field(default=None, alias="iopsLimit")
