"""
Lease Value Object Module
"""
from typing import Any, Dict, Iterable, Optional
from pydantic import Field

from .base import ValueObject


class Lease(ValueObject):
    """A DHCP lease binding a MAC address to an IP address until expiry_time"""

    mac: str = Field(..., description="Hardware address of the lease holder")
    ip: str = Field(..., description="Leased IP address")
    expiry_time: int = Field(default=0, description="Lease expiry as a Unix timestamp")

    @classmethod
    def from_libvirt(cls, lease: Dict[str, Any]) -> 'Lease':
        """Build from a virNetwork.DHCPLeases() entry"""
        return cls(
            mac=lease.get('mac', ''),
            ip=lease['ipaddr'],
            expiry_time=int(lease.get('expirytime') or 0)
        )


def latest_lease(leases: Iterable[Lease]) -> Optional[Lease]:
    """Return the lease expiring last, assumed to carry the current address"""
    return max(leases, key=lambda lease: lease.expiry_time, default=None)
