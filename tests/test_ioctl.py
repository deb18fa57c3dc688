"""Tests for the scini driver query codec."""

import struct
import sys

import pytest

from sdc.ioctl import (
    GUID_BUFFER_SIZE,
    MDM_BUFFER_SIZE,
    MDM_CAPACITY,
    MDM_RECORD_SIZE,
    OP_QUERY_GUID,
    OP_QUERY_MDM,
    OP_RESCAN,
    RC_SUCCESS,
    GuidResult,
    MdmInfoRecord,
    decode_guid_response,
    decode_mdm_records,
    decode_mdm_response,
    decode_rescan_response,
    encode_guid_request,
    encode_mdm_request,
    encode_mdm_response,
    encode_rescan_request,
    ioc,
    return_code,
)
from sdc.models import ConfiguredCluster
from shared.errors import ProtocolViolationError

GUID_BYTES = bytes.fromhex("9e56672f2f4b4a42bff488b6846fbfda")


def _rc(value: int) -> bytes:
    return bytes([value]) + bytes(7)


def test_opcodes():
    assert OP_QUERY_GUID == 0x610E
    assert OP_QUERY_MDM == 0x610C
    assert OP_RESCAN == 0x610A


def test_ioc_encodes_direction_and_size():
    assert ioc(2, ord("a"), 1, 8) == (2 << 30) | (8 << 16) | 0x6101


def test_buffer_sizes():
    assert GUID_BUFFER_SIZE == 32
    assert MDM_RECORD_SIZE == 424
    assert MDM_BUFFER_SIZE == 16 + MDM_CAPACITY * 424 == 8496
    assert len(encode_guid_request()) == 32
    assert len(encode_rescan_request()) == 8


def test_mdm_request_announces_capacity():
    buf = encode_mdm_request()
    assert len(buf) == MDM_BUFFER_SIZE
    assert buf[:8] == bytes(8)
    assert struct.unpack_from("=H", buf, 8) == (MDM_CAPACITY,)


@pytest.mark.parametrize("capacity", [-1, MDM_CAPACITY + 1])
def test_mdm_request_capacity_out_of_range(capacity):
    with pytest.raises(ValueError):
        encode_mdm_request(capacity)


def test_return_code_reads_first_byte():
    assert return_code(_rc(65)) == 65
    assert return_code(bytes([0x41, 0xFF]) + bytes(6)) == 65
    with pytest.raises(ProtocolViolationError):
        return_code(b"\x41")


# GUID


def test_decode_guid_response():
    buf = GuidResult(rc=_rc(RC_SUCCESS), guid=GUID_BYTES, net_id_magic=7, net_id_time=9).pack()
    assert decode_guid_response(buf) == "9E56672F-2F4B-4A42-BFF4-88B6846FBFDA"


def test_guid_result_offsets():
    buf = GuidResult(rc=_rc(RC_SUCCESS), guid=GUID_BYTES, net_id_magic=0x11223344, net_id_time=5).pack()
    assert buf[8:24] == GUID_BYTES
    assert buf[24:28] == (0x11223344).to_bytes(4, sys.byteorder)
    assert GuidResult.unpack(buf).net_id_time == 5


def test_decode_guid_response_bad_rc():
    buf = GuidResult(rc=_rc(3), guid=GUID_BYTES).pack()
    with pytest.raises(ProtocolViolationError, match="RC=3"):
        decode_guid_response(buf)


# MDM list


def test_mdm_record_offsets():
    record = MdmInfoRecord(
        mdm_id=0x0000000100000002,
        sdc_id=0xAABBCCDD11223344,
        install_id=0x5,
        num_sock_addrs=2,
    )
    buf = record.pack()

    assert len(buf) == MDM_RECORD_SIZE
    assert buf[0:4] == bytes(4)
    assert struct.unpack_from("=II", buf, 4) == (2, 1)
    assert struct.unpack_from("=II", buf, 12) == (0x11223344, 0xAABBCCDD)
    assert struct.unpack_from("=Q", buf, 32) == (2,)
    assert MdmInfoRecord.unpack(buf) == record


def test_record_ids_use_host_byte_order():
    buf = MdmInfoRecord(mdm_id=0x0000000A00000001, sdc_id=0).pack()
    assert buf[4:8] == (1).to_bytes(4, sys.byteorder)
    assert buf[8:12] == (0xA).to_bytes(4, sys.byteorder)


def test_mdm_record_address_slots():
    addresses = b"".join(bytes([i]) * 24 for i in range(16))
    record = MdmInfoRecord(mdm_id=1, sdc_id=2, addresses=addresses)
    slots = MdmInfoRecord.unpack(record.pack()).address_slots()
    assert len(slots) == 16
    assert slots[3] == bytes([3]) * 24


def test_to_cluster_formats_high_then_low():
    record = MdmInfoRecord(mdm_id=0x0000000000000001, sdc_id=0x12345678ABCDEF01)
    assert record.to_cluster() == ConfiguredCluster(system_id="0000000000000001", sdc_id="12345678abcdef01")


def test_decode_mdm_response():
    records = [
        MdmInfoRecord(mdm_id=0x1A2B3C4D00000001, sdc_id=0x10),
        MdmInfoRecord(mdm_id=0x2, sdc_id=0x20),
    ]
    buf = encode_mdm_response(RC_SUCCESS, records)

    clusters = decode_mdm_response(buf)

    assert clusters == [
        ConfiguredCluster("1a2b3c4d00000001", "0000000000000010"),
        ConfiguredCluster("0000000000000002", "0000000000000020"),
    ]


def test_decode_mdm_response_empty():
    assert decode_mdm_response(encode_mdm_response(RC_SUCCESS, [])) == []


def test_bad_rc_fails_even_with_records():
    buf = encode_mdm_response(1, [MdmInfoRecord(mdm_id=1, sdc_id=2)])
    with pytest.raises(ProtocolViolationError, match="query MDM"):
        decode_mdm_records(buf)


def test_count_over_capacity_is_violation():
    buf = encode_mdm_response(RC_SUCCESS, [])
    struct.pack_into("=H", buf, 8, MDM_CAPACITY + 1)
    with pytest.raises(ProtocolViolationError, match="capacity"):
        decode_mdm_records(buf)


def test_truncated_mdm_buffer():
    buf = encode_mdm_response(RC_SUCCESS, [MdmInfoRecord(mdm_id=1, sdc_id=2)])
    with pytest.raises(ProtocolViolationError, match="truncated"):
        decode_mdm_records(bytes(buf[:100]))


def test_encode_mdm_response_rejects_overflow():
    with pytest.raises(ValueError):
        encode_mdm_response(RC_SUCCESS, [MdmInfoRecord(mdm_id=i, sdc_id=i) for i in range(MDM_CAPACITY + 1)])


# Rescan


def test_decode_rescan_response():
    assert decode_rescan_response(struct.pack("=q", RC_SUCCESS)) == "65"


def test_decode_rescan_response_failure():
    with pytest.raises(ProtocolViolationError, match="rescan"):
        decode_rescan_response(struct.pack("=q", 12))
