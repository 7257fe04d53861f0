"""
LibVirt Domain Wrapper

Read-only view over a libvirt domain for the duration of one operation.
Wrappers are built from a freshly looked up domain and are not kept between
operations; the hypervisor may change the domain at any time.

Usage:
    domain = manager.lookup_domain(machine_id)
    wrapper = LibvirtDomainWrapper(domain)
    wrapper.state_str        # "running", "shutting-down", ...
    wrapper.mac              # "52:54:00:12:34:56"
"""

import xml.etree.ElementTree as ET
from enum import Enum
from typing import List, Optional

import libvirt

from ...core.unified_logger import get_logger

logger = get_logger(__name__, "libvirt_domain_wrapper")


class DomainState(Enum):
    """Domain state enumeration"""
    NOSTATE = libvirt.VIR_DOMAIN_NOSTATE
    RUNNING = libvirt.VIR_DOMAIN_RUNNING
    BLOCKED = libvirt.VIR_DOMAIN_BLOCKED
    PAUSED = libvirt.VIR_DOMAIN_PAUSED
    SHUTDOWN = libvirt.VIR_DOMAIN_SHUTDOWN
    SHUTOFF = libvirt.VIR_DOMAIN_SHUTOFF
    CRASHED = libvirt.VIR_DOMAIN_CRASHED
    PMSUSPENDED = libvirt.VIR_DOMAIN_PMSUSPENDED


# Names reported for each libvirt state
DOMAIN_STATE_NAMES = {
    DomainState.NOSTATE: "nostate",
    DomainState.RUNNING: "running",
    DomainState.BLOCKED: "blocked",
    DomainState.PAUSED: "paused",
    DomainState.SHUTDOWN: "shutting-down",
    DomainState.SHUTOFF: "shutoff",
    DomainState.CRASHED: "crashed",
    DomainState.PMSUSPENDED: "pmsuspended",
}


class LibvirtDomainWrapper:
    """Per-operation view of a libvirt domain: identity, raw state and MAC addresses"""

    def __init__(self, domain: libvirt.virDomain):
        self.domain = domain

    @property
    def uuid(self) -> str:
        return self.domain.UUIDString()

    @property
    def name(self) -> str:
        return self.domain.name()

    @property
    def state_str(self) -> Optional[str]:
        """
        Raw state name of the domain.

        Returns:
            The state name, or None when the state cannot be read or is not
            a state libvirt documents
        """
        try:
            state, _reason = self.domain.state()
        except libvirt.libvirtError as e:
            logger.debug(f"Unable to read state of domain {self.name}: {e}")
            return None

        try:
            return DOMAIN_STATE_NAMES[DomainState(state)]
        except ValueError:
            logger.debug(f"Domain {self.name} reported unrecognized state {state}")
            return None

    def get_mac_addresses(self) -> List[str]:
        """MAC addresses of all network interfaces, in XML order"""
        root = ET.fromstring(self.domain.XMLDesc(0))

        mac_addresses = []
        for interface in root.findall('./devices/interface'):
            mac_elem = interface.find('mac')
            if mac_elem is not None and mac_elem.get('address'):
                mac_addresses.append(mac_elem.get('address'))
        return mac_addresses

    @property
    def mac(self) -> Optional[str]:
        """
        MAC address of the first network interface.

        Returns:
            The address, or None when the domain has no interface or its XML
            cannot be read (for example because it was undefined meanwhile)
        """
        try:
            mac_addresses = self.get_mac_addresses()
        except libvirt.libvirtError as e:
            logger.debug(f"Unable to read interfaces of domain {self.domain.UUIDString()}: {e}")
            return None
        return mac_addresses[0] if mac_addresses else None

    def __repr__(self) -> str:
        return f"LibvirtDomainWrapper(name='{self.name}', uuid='{self.uuid}')"
