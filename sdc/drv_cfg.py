"""
SDC Driver Channel

Query the locally installed SDC kernel driver (scini) through its character
device. Each query is one blocking open -> ioctl -> close sequence; the device
descriptor is always released, whatever the outcome.

Queries:
- query_guid: GUID of the local SDC
- query_systems: MDM clusters the SDC is configured against
- query_rescan: ask the driver to rescan for mapped volumes

Mock mode answers query_guid/query_systems with fixed values so that upper
layers can be exercised on hosts without the driver.

Usage:
    device = SciniDevice()
    if device.is_sdc_installed():
        guid = device.query_guid()
        clusters = device.query_systems()
"""

import fcntl
import logging
import os
import subprocess
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sdc import ioctl
from sdc.models import ConfiguredCluster
from shared.config import DRV_CFG_BINARY, SCINI_MOCK_MODE, SDC_DEVICE
from shared.errors import DeviceIOError, DriverAbsentError
from shared.timing import time_spent

logger = logging.getLogger(__name__)

MOCK_GUID = "9E56672F-2F4B-4A42-BFF4-88B6846FBFDA"
MOCK_SYSTEM = "000000000001"


class SciniDevice:
    """Local SDC driver channel"""

    def __init__(self, device_path: Optional[str] = None, mock_mode: Optional[bool] = None):
        """
        Initialize the driver channel.

        Args:
            device_path: Driver device path (default: POWERFLEX_SDC_DEVICE or /dev/scini)
            mock_mode: Answer queries with fixed values instead of the driver
                (default: POWERFLEX_SCINI_MOCK)
        """
        self.device_path = device_path or SDC_DEVICE
        self.mock_mode = SCINI_MOCK_MODE if mock_mode is None else mock_mode

    def is_sdc_installed(self) -> bool:
        """True if the SDC driver device is available (always True in mock mode)"""
        if self.mock_mode:
            return True
        return os.path.exists(self.device_path) and not os.path.isdir(self.device_path)

    @contextmanager
    def _open(self) -> Iterator[int]:
        try:
            fd = os.open(self.device_path, os.O_RDONLY)
        except FileNotFoundError as exc:
            logger.error(f"SDC driver device {self.device_path} not found")
            raise DriverAbsentError(f"PowerFlex SDC is not installed ({self.device_path} missing)") from exc
        except OSError as exc:
            logger.error(f"Cannot open SDC driver device {self.device_path}: {exc}")
            raise DeviceIOError(f"Cannot open {self.device_path}: {exc}") from exc

        try:
            yield fd
        finally:
            os.close(fd)

    def _ioctl(self, fd: int, op_code: int, buf: bytearray, request: str) -> None:
        logger.debug(f"ioctl {request} op=0x{op_code:08x} len={len(buf)} on {self.device_path}")
        try:
            fcntl.ioctl(fd, op_code, buf, True)
        except OSError as exc:
            logger.error(f"{request} ioctl failed on {self.device_path}: {exc}")
            raise DeviceIOError(f"{request} error: {exc}") from exc

    def query_guid(self) -> str:
        """
        Return the GUID of the locally installed SDC.

        Returns:
            Upper-case canonical UUID string

        Raises:
            DriverAbsentError: device missing
            DeviceIOError: open/ioctl failed
            ProtocolViolationError: driver return code is not success
        """
        with time_spent("query_guid"):
            if self.mock_mode:
                return MOCK_GUID

            buf = ioctl.encode_guid_request()
            with self._open() as fd:
                self._ioctl(fd, ioctl.OP_QUERY_GUID, buf, "QueryGUID")
            guid = ioctl.decode_guid_response(buf)
            logger.debug(f"Local SDC GUID: {guid}")
            return guid

    def query_systems(self) -> List[ConfiguredCluster]:
        """
        Return the MDM clusters the local SDC is configured against.

        The request advertises the full record capacity; the driver reports
        at most that many.
        """
        with time_spent("query_systems"):
            if self.mock_mode:
                return [ConfiguredCluster(system_id=MOCK_SYSTEM, sdc_id=MOCK_GUID)]

            buf = ioctl.encode_mdm_request(ioctl.MDM_CAPACITY)
            with self._open() as fd:
                self._ioctl(fd, ioctl.OP_QUERY_MDM, buf, "QueryMDM")
            clusters = ioctl.decode_mdm_response(buf)
            logger.debug(f"SDC configured against {len(clusters)} system(s)")
            return clusters

    def query_rescan(self) -> str:
        """
        Trigger a volume rescan in the driver.

        There is no mock answer: a missing driver always fails.

        Returns:
            Scan result code as a decimal string
        """
        with time_spent("query_rescan"):
            buf = ioctl.encode_rescan_request()
            with self._open() as fd:
                self._ioctl(fd, ioctl.OP_RESCAN, buf, "Rescan")
            return ioctl.decode_rescan_response(buf)


def query_guid_via_cli(binary: str = DRV_CFG_BINARY, timeout_seconds: float = 30.0) -> str:
    """Ask the installed drv_cfg tool for the local SDC GUID"""
    with time_spent("query_guid_via_cli"):
        try:
            result = subprocess.run(
                [binary, "--query_guid"],
                capture_output=True,
                text=True,
                check=True,
                timeout=timeout_seconds,
            )
        except FileNotFoundError as exc:
            raise DriverAbsentError(f"drv_cfg not found at {binary}") from exc
        except OSError as exc:
            logger.error(f"Cannot run {binary}: {exc}")
            raise DeviceIOError(f"Cannot run {binary}: {exc}") from exc
        except subprocess.CalledProcessError as exc:
            logger.error(f"drv_cfg --query_guid exited with {exc.returncode}: {exc.stderr}")
            raise DeviceIOError(f"drv_cfg --query_guid failed: exit {exc.returncode}") from exc
        except subprocess.TimeoutExpired as exc:
            raise DeviceIOError(f"drv_cfg --query_guid timed out after {timeout_seconds}s") from exc

        return result.stdout.replace("\n", "")
