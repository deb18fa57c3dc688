"""
SDC Local Driver Models

Values decoded from the scini driver.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ConfiguredCluster:
    """One MDM cluster the local SDC is configured against"""
    system_id: str  # MDM cluster system ID, 16 hex digits
    sdc_id: str  # ID of this SDC as known to that cluster
