"""
SDC Driver Query Codec

Fixed binary layouts and op-codes for the scini kernel driver. Buffers are
plain bytearrays that the ioctl call fills in place; every layout is described
by explicit offsets instead of relying on C structure padding.

GUID query buffer (32 bytes):
    [0:8]    return code (byte 0 is the status)
    [8:24]   raw SDC GUID
    [24:28]  net-id magic (u32)
    [28:32]  net-id time (u32)

Cluster (MDM) list buffer (8496 bytes):
    [0:8]    return code
    [8:10]   record count (u16), set to capacity by the caller
    [10:14]  filler
    [14:16]  alignment
    [16:]    MDM_CAPACITY records of MDM_RECORD_SIZE bytes

MDM record (424 bytes):
    [0:4]    filler
    [4:8]    mdm id low      [8:12]   mdm id high
    [12:16]  sdc id low      [16:20]  sdc id high
    [20:24]  install id low  [24:28]  install id high
    [28:32]  alignment
    [32:40]  socket address count (u64)
    [40:424] 16 opaque 24-byte socket addresses

Rescan buffer: one 8-byte signed integer.

Integers use the host's native byte order (the driver shares the host ABI)
with standard sizes; "=" formats add no implicit padding.
"""

from __future__ import annotations

import struct
import uuid
from dataclasses import dataclass, field
from typing import List, Tuple

from sdc.models import ConfiguredCluster
from shared.errors import ProtocolViolationError

IOCTL_BASE = ord("a")
IOCTL_QUERY_GUID = 14
IOCTL_QUERY_MDM = 12
IOCTL_RESCAN = 10

IOC_NONE = 0x0

RC_SUCCESS = 65
RC_SIZE = 8

GUID_STRUCT = struct.Struct("=8s16sII")
GUID_BUFFER_SIZE = GUID_STRUCT.size

MDM_HEADER_STRUCT = struct.Struct("=8sH4x2x")
MDM_RECORD_STRUCT = struct.Struct("=4xIIIIII4xQ384s")
MDM_RECORD_SIZE = MDM_RECORD_STRUCT.size
MDM_CAPACITY = 20
MDM_BUFFER_SIZE = MDM_HEADER_STRUCT.size + MDM_CAPACITY * MDM_RECORD_SIZE

NET_ADDRESS_SIZE = 24
NET_ADDRESS_SLOTS = 16

RESCAN_STRUCT = struct.Struct("=q")
RESCAN_BUFFER_SIZE = RESCAN_STRUCT.size


def ioc(direction: int, ioc_type: int, nr: int, size: int) -> int:
    return (direction << 30) | (ioc_type << 8) | nr | (size << 16)


def io(ioc_type: int, nr: int) -> int:
    """Op-code for a command that transfers no size-tagged argument"""
    return ioc(IOC_NONE, ioc_type, nr, 0)


OP_QUERY_GUID = io(IOCTL_BASE, IOCTL_QUERY_GUID)
OP_QUERY_MDM = io(IOCTL_BASE, IOCTL_QUERY_MDM)
OP_RESCAN = io(IOCTL_BASE, IOCTL_RESCAN)


def _split64(value: int) -> Tuple[int, int]:
    return value & 0xFFFFFFFF, (value >> 32) & 0xFFFFFFFF


def _join64(low: int, high: int) -> int:
    return (high << 32) | low


def return_code(buf: bytes) -> int:
    """Status byte of the 8-byte return-code field"""
    if len(buf) < RC_SIZE:
        raise ProtocolViolationError(f"Driver buffer too short for return code: {len(buf)} bytes")
    return int(buf[:1].hex(), 16)


def check_return_code(buf: bytes, request: str) -> None:
    rc = return_code(buf)
    if rc != RC_SUCCESS:
        raise ProtocolViolationError(f"Request to {request} failed, RC={rc}")


@dataclass(frozen=True)
class GuidResult:
    rc: bytes
    guid: bytes
    net_id_magic: int = 0
    net_id_time: int = 0

    def pack(self) -> bytes:
        return GUID_STRUCT.pack(self.rc, self.guid, self.net_id_magic, self.net_id_time)

    @classmethod
    def unpack(cls, buf: bytes) -> "GuidResult":
        rc, guid, magic, ts = GUID_STRUCT.unpack_from(buf)
        return cls(rc=rc, guid=guid, net_id_magic=magic, net_id_time=ts)


@dataclass(frozen=True)
class MdmInfoRecord:
    mdm_id: int
    sdc_id: int
    install_id: int = 0
    num_sock_addrs: int = 0
    addresses: bytes = field(default=bytes(NET_ADDRESS_SIZE * NET_ADDRESS_SLOTS), repr=False)

    def pack(self) -> bytes:
        mdm_l, mdm_h = _split64(self.mdm_id)
        sdc_l, sdc_h = _split64(self.sdc_id)
        inst_l, inst_h = _split64(self.install_id)
        return MDM_RECORD_STRUCT.pack(
            mdm_l, mdm_h, sdc_l, sdc_h, inst_l, inst_h, self.num_sock_addrs, self.addresses
        )

    @classmethod
    def unpack(cls, buf: bytes, offset: int = 0) -> "MdmInfoRecord":
        mdm_l, mdm_h, sdc_l, sdc_h, inst_l, inst_h, naddrs, addrs = MDM_RECORD_STRUCT.unpack_from(buf, offset)
        return cls(
            mdm_id=_join64(mdm_l, mdm_h),
            sdc_id=_join64(sdc_l, sdc_h),
            install_id=_join64(inst_l, inst_h),
            num_sock_addrs=naddrs,
            addresses=addrs,
        )

    def address_slots(self) -> List[bytes]:
        return [
            self.addresses[i * NET_ADDRESS_SIZE:(i + 1) * NET_ADDRESS_SIZE]
            for i in range(NET_ADDRESS_SLOTS)
        ]

    def to_cluster(self) -> ConfiguredCluster:
        mdm_l, mdm_h = _split64(self.mdm_id)
        sdc_l, sdc_h = _split64(self.sdc_id)
        return ConfiguredCluster(
            system_id=f"{mdm_h:08x}{mdm_l:08x}",
            sdc_id=f"{sdc_h:08x}{sdc_l:08x}",
        )


def encode_guid_request() -> bytearray:
    return bytearray(GUID_BUFFER_SIZE)


def decode_guid_response(buf: bytes) -> str:
    """Check the return code and format the GUID as an upper-case UUID"""
    check_return_code(buf, "query GUID")
    result = GuidResult.unpack(buf)
    return str(uuid.UUID(hex=result.guid.hex())).upper()


def encode_mdm_request(capacity: int = MDM_CAPACITY) -> bytearray:
    if not 0 <= capacity <= MDM_CAPACITY:
        raise ValueError(f"capacity must be in range 0..{MDM_CAPACITY}")
    buf = bytearray(MDM_BUFFER_SIZE)
    MDM_HEADER_STRUCT.pack_into(buf, 0, bytes(RC_SIZE), capacity)
    return buf


def encode_mdm_response(rc: int, records: List[MdmInfoRecord]) -> bytearray:
    """Build a driver-shaped cluster list buffer"""
    if len(records) > MDM_CAPACITY:
        raise ValueError(f"at most {MDM_CAPACITY} records fit in the buffer")
    buf = bytearray(MDM_BUFFER_SIZE)
    MDM_HEADER_STRUCT.pack_into(buf, 0, bytes([rc]) + bytes(RC_SIZE - 1), len(records))
    for index, record in enumerate(records):
        offset = MDM_HEADER_STRUCT.size + index * MDM_RECORD_SIZE
        buf[offset:offset + MDM_RECORD_SIZE] = record.pack()
    return buf


def decode_mdm_records(buf: bytes) -> List[MdmInfoRecord]:
    check_return_code(buf, "query MDM")
    if len(buf) < MDM_BUFFER_SIZE:
        raise ProtocolViolationError(f"Cluster list buffer truncated: {len(buf)} bytes")
    _, count = MDM_HEADER_STRUCT.unpack_from(buf, 0)
    if count > MDM_CAPACITY:
        raise ProtocolViolationError(f"Driver reported {count} MDMs, capacity is {MDM_CAPACITY}")
    return [
        MdmInfoRecord.unpack(buf, MDM_HEADER_STRUCT.size + index * MDM_RECORD_SIZE)
        for index in range(count)
    ]


def decode_mdm_response(buf: bytes) -> List[ConfiguredCluster]:
    return [record.to_cluster() for record in decode_mdm_records(buf)]


def encode_rescan_request() -> bytearray:
    return bytearray(RESCAN_BUFFER_SIZE)


def decode_rescan_response(buf: bytes) -> str:
    check_return_code(buf, "rescan")
    (rc,) = RESCAN_STRUCT.unpack_from(buf)
    return str(rc)
