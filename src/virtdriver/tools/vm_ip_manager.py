"""
VM IP Address Resolution

Resolves the IP address of a running libvirt domain through one of three
sources, selected once from the provider settings:

- ``agent``:   the QEMU guest agent inside the machine
- ``session``: the DHCP leases of the libvirt networks
- ``arp``:     the ARP table of the hypervisor host (default)

Each strategy returns an AddressQueryResult that is either FOUND (with an IP),
NOT_FOUND or TIMEOUT. Only the ARP strategy polls and can time out.

Usage:
    strategy = build_address_strategy(settings, connection_manager)
    result = strategy.resolve(wrapper, machine.id, timeout=machine.boot_timeout)
    if result.is_found:
        print(result.ip)
"""

import ipaddress
import json
import re
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import libvirt
import libvirt_qemu

from ..config.settings import AddressSource, ProviderSettings
from ..core.unified_logger import get_logger
from ..domain.entities.lease import Lease, latest_lease
from ..infrastructure.providers.libvirt_connection_manager import LibvirtConnectionManager
from ..infrastructure.providers.libvirt_domain_wrapper import LibvirtDomainWrapper

logger = get_logger(__name__, "vm_ip_manager")

MAC_ADDRESS_PATTERN = re.compile(r'^[0-9a-f]{2}(:[0-9a-f]{2}){5}$')


class AddressStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class AddressQueryResult:
    """Terminal outcome of one address resolution"""
    status: AddressStatus
    ip: Optional[str] = None
    source: str = ""

    @classmethod
    def found(cls, ip: str, source: str = "") -> 'AddressQueryResult':
        return cls(AddressStatus.FOUND, ip, source)

    @classmethod
    def not_found(cls, source: str = "") -> 'AddressQueryResult':
        return cls(AddressStatus.NOT_FOUND, None, source)

    @classmethod
    def timeout(cls, source: str = "") -> 'AddressQueryResult':
        return cls(AddressStatus.TIMEOUT, None, source)

    @property
    def is_found(self) -> bool:
        return self.status is AddressStatus.FOUND

    @property
    def timed_out(self) -> bool:
        return self.status is AddressStatus.TIMEOUT


class AddressStrategy(ABC):
    """Resolves the address of a domain from one source"""

    name = ""

    def __init__(self, connection_manager: LibvirtConnectionManager):
        self.connection_manager = connection_manager
        self.logger = logger

    @abstractmethod
    def resolve(self, domain: LibvirtDomainWrapper, machine_id: str, timeout: float) -> AddressQueryResult:
        """
        Resolve the address of a domain.

        Args:
            domain: Freshly looked up domain
            machine_id: UUID of the domain
            timeout: Upper bound in seconds for sources that wait

        Returns:
            AddressQueryResult
        """

    def _found(self, ip: str) -> AddressQueryResult:
        return AddressQueryResult.found(ip, self.name)

    def _not_found(self) -> AddressQueryResult:
        return AddressQueryResult.not_found(self.name)


def select_agent_ipv4(interfaces: List[Dict[str, Any]], mac: str) -> Optional[str]:
    """
    Pick the address of a domain from a guest-network-get-interfaces reply.

    The first interface whose hardware address matches ``mac`` is used, and
    within it the first IPv4 address. IPv6 addresses are skipped, remote
    access tools such as WinRM cannot connect to them reliably.
    """
    for interface in interfaces:
        if not isinstance(interface, dict):
            continue
        if str(interface.get('hardware-address', '')).lower() != mac.lower():
            continue

        logger.debug(f"Found matching interface: [{interface.get('name')}]")
        for ip in interface.get('ip-addresses') or []:
            if isinstance(ip, dict) and ip.get('ip-address-type') == 'ipv4' and ip.get('ip-address'):
                logger.debug(f"Return IP: [{ip['ip-address']}]")
                return ip['ip-address']
        return None

    return None


class AgentAddressStrategy(AddressStrategy):
    """Ask the QEMU guest agent for the network interfaces of the guest"""

    name = AddressSource.AGENT
    GUEST_NETWORK_INTERFACES_COMMAND = '{"execute":"guest-network-get-interfaces"}'

    def resolve(self, domain: LibvirtDomainWrapper, machine_id: str, timeout: float) -> AddressQueryResult:
        mac = domain.mac
        if not mac:
            self.logger.debug(f"Domain {machine_id} has no network interface")
            return self._not_found()

        interfaces = self._query_interfaces(machine_id, timeout)
        if interfaces is None:
            return self._not_found()

        ip_address = select_agent_ipv4(interfaces, mac)
        return self._found(ip_address) if ip_address else self._not_found()

    def _query_interfaces(self, machine_id: str, timeout: float) -> Optional[List[Dict[str, Any]]]:
        """Interface list reported by the agent, or None when the agent is unusable"""
        libvirt_domain = self.connection_manager.lookup_domain(machine_id)
        if libvirt_domain is None:
            self.logger.debug(f"Domain {machine_id} disappeared before querying the guest agent")
            return None

        # The agent is optional inside the guest: any failure means "no address yet"
        try:
            response = libvirt_qemu.qemuAgentCommand(
                libvirt_domain, self.GUEST_NETWORK_INTERFACES_COMMAND, max(int(timeout), 1), 0
            )
            self.logger.debug('Got response from qemu agent', response=response)
            interfaces = json.loads(response)['return']
        except (libvirt.libvirtError, ValueError, KeyError, TypeError) as e:
            self.logger.debug(f"Unable to receive IP via qemu agent: [{e}]")
            return None

        if not isinstance(interfaces, list):
            self.logger.debug(f"Unexpected qemu agent reply for {machine_id}: {interfaces!r}")
            return None
        return interfaces


class SessionLeaseStrategy(AddressStrategy):
    """Look the MAC address up in the DHCP leases of the libvirt networks"""

    name = AddressSource.SESSION

    def resolve(self, domain: LibvirtDomainWrapper, machine_id: str, timeout: float) -> AddressQueryResult:
        mac = domain.mac
        if not mac:
            return self._not_found()

        conn = self.connection_manager.get_system_connection()
        for network in conn.listAllNetworks():
            try:
                entries = network.DHCPLeases(mac, 0)
            except libvirt.libvirtError as e:
                # Inactive networks and networks without DHCP refuse the query
                self.logger.debug(f"Skipping network {network.name()}: {e}")
                continue

            lease = latest_lease(self._parse_leases(network.name(), entries))
            if lease is not None:
                self.logger.debug(f"Lease {lease.ip} for {mac} found in network {network.name()}")
                return self._found(lease.ip)

        return self._not_found()

    def _parse_leases(self, network_name: str, entries: List[Dict[str, Any]]) -> List[Lease]:
        leases = []
        for entry in entries:
            # pydantic's ValidationError is a ValueError
            try:
                leases.append(Lease.from_libvirt(entry))
            except (KeyError, ValueError) as e:
                self.logger.debug(f"Skipping malformed lease in network {network_name}: {e}")
        return leases


class ArpTableStrategy(AddressStrategy):
    """
    Poll the ARP table of the hypervisor host for the MAC address of a domain.

    The lookup command comes from the connection parameters; ``$mac`` in it is
    replaced with the MAC address. For ``qemu+ssh`` URIs the command runs on
    the remote host through ssh.
    """

    name = AddressSource.ARP

    def __init__(
        self,
        connection_manager: LibvirtConnectionManager,
        poll_timeout: float = 2.0,
        poll_interval: float = 1.0
    ):
        super().__init__(connection_manager)
        self.poll_timeout = poll_timeout
        self.poll_interval = poll_interval

    def resolve(self, domain: LibvirtDomainWrapper, machine_id: str, timeout: float) -> AddressQueryResult:
        mac = (domain.mac or '').lower()
        if not MAC_ADDRESS_PATTERN.match(mac):
            self.logger.warning(f"Domain {machine_id} has no usable MAC address: {mac!r}")
            return self._not_found()

        window = min(self.poll_timeout, timeout) if timeout else self.poll_timeout
        deadline = time.monotonic() + window
        remaining = window

        # Every poll starts before the deadline and is bounded by the time left
        while remaining > 0:
            try:
                addresses = self._lookup_addresses(mac, remaining)
            except OSError as e:
                self.logger.warning(f"ARP lookup command cannot run: {e}")
                return self._not_found()

            ip_address = self._pick_address(addresses)
            if ip_address:
                return self._found(ip_address)

            remaining = deadline - time.monotonic()
            if remaining > 0:
                time.sleep(min(self.poll_interval, remaining))
                remaining = deadline - time.monotonic()

        self.logger.debug(f"No ARP entry for {mac} within {window}s")
        return AddressQueryResult.timeout(self.name)

    def build_command(self, mac: str) -> List[str]:
        """Argument vector running the lookup command for ``mac``"""
        params = self.connection_manager.connection_parameters
        command = params.ip_command.replace('$mac', mac)

        parsed = urlparse(params.uri)
        if parsed.scheme.endswith('+ssh') and parsed.hostname:
            target = f"{parsed.username}@{parsed.hostname}" if parsed.username else parsed.hostname
            argv = ['ssh', '-o', 'BatchMode=yes']
            if parsed.port:
                argv += ['-p', str(parsed.port)]
            return argv + [target, command]

        return ['sh', '-c', command]

    def _lookup_addresses(self, mac: str, timeout: float) -> Dict[str, List[str]]:
        """Addresses found for ``mac``, grouped by IP version, most recent first"""
        try:
            result = subprocess.run(
                self.build_command(mac),
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired:
            self.logger.debug(f"ARP lookup for {mac} timed out")
            return {}

        if result.returncode != 0:
            self.logger.debug(f"ARP lookup for {mac} failed: {result.stderr.strip()}")
            return {}

        addresses: Dict[str, List[str]] = {}
        # Multiple leases are separated with a newline
        for token in result.stdout.split('\n'):
            token = token.strip()
            if not token:
                continue
            try:
                family = f"ipv{ipaddress.ip_address(token).version}"
            except ValueError:
                self.logger.debug(f"Ignoring ARP lookup output {token!r}")
                continue
            addresses.setdefault(family, []).append(token)
        return addresses

    @staticmethod
    def _pick_address(addresses: Dict[str, List[str]]) -> Optional[str]:
        for family in ('ipv4', 'ipv6'):
            if addresses.get(family):
                return addresses[family][0]
        return None


def build_address_strategy(
    settings: ProviderSettings,
    connection_manager: LibvirtConnectionManager
) -> AddressStrategy:
    """Create the strategy selected by the settings (agent > session > arp)"""
    source = settings.address_source

    if source == AddressSource.AGENT:
        return AgentAddressStrategy(connection_manager)
    if source == AddressSource.SESSION:
        return SessionLeaseStrategy(connection_manager)
    return ArpTableStrategy(
        connection_manager,
        poll_timeout=settings.arp_poll_timeout,
        poll_interval=settings.arp_poll_interval
    )
