"""
LibVirt Connection Manager

Lazily opens and caches the two libvirt connections a driver needs:

- the primary read/write connection, used for domain lookups, snapshots and
  guest agent commands
- the read-only system connection, used to enumerate networks and their
  DHCP leases

A connection is opened at most once per manager and never reopened. A failed
attempt raises LibvirtConnectionError and leaves the slot empty, so the
caller decides whether to retry the whole operation.
"""

import threading
from dataclasses import dataclass
from typing import Callable, Optional

import libvirt

from ...config.settings import ProviderSettings
from ...core.exceptions import LibvirtConnectionError
from ...core.unified_logger import get_logger

logger = get_logger(__name__, "libvirt_connection_manager")

# Prints the first column (IP address) of /proc/net/arp rows holding $mac
ARP_IP_COMMAND = 'awk "/$mac/ {print \\$1}" /proc/net/arp'


@dataclass(frozen=True)
class ConnectionParameters:
    """Parameters used to open the primary connection"""
    uri: str
    ip_command: str
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def has_credentials(self) -> bool:
        return self.username is not None or self.password is not None


def is_no_domain_error(error: libvirt.libvirtError) -> bool:
    """Whether libvirt reported that the requested domain does not exist"""
    return error.get_error_code() == libvirt.VIR_ERR_NO_DOMAIN


class _LazyConnection:
    """Lock guarded slot holding one connection once it has been opened"""

    def __init__(self, opener: Callable[[], libvirt.virConnect]):
        self._opener = opener
        self._connection: Optional[libvirt.virConnect] = None
        self._lock = threading.Lock()

    def get(self) -> libvirt.virConnect:
        # Fast path, no locking once the connection exists
        if self._connection is not None:
            return self._connection

        with self._lock:
            if self._connection is None:
                self._connection = self._opener()
            return self._connection


class LibvirtConnectionManager:
    """
    Connection manager owned by a single driver instance.

    Usage:
        manager = LibvirtConnectionManager(ProviderSettings())
        conn = manager.get_connection()
        domain = manager.lookup_domain(machine_id)
    """

    def __init__(self, settings: ProviderSettings):
        self.settings = settings
        self.logger = logger
        self._parameters: Optional[ConnectionParameters] = None
        self._primary = _LazyConnection(self._open_primary)
        self._system = _LazyConnection(self._open_system)

    @property
    def connection_parameters(self) -> ConnectionParameters:
        """Parameters of the primary connection, built on first use"""
        if self._parameters is None:
            self._parameters = ConnectionParameters(
                uri=self.settings.uri,
                ip_command=ARP_IP_COMMAND,
                username=self.settings.username,
                password=self.settings.password
            )
        return self._parameters

    def get_connection(self) -> libvirt.virConnect:
        """Get the primary read/write connection, opening it on first call"""
        return self._primary.get()

    def get_system_connection(self) -> libvirt.virConnect:
        """Get the read-only connection, opening it on first call"""
        return self._system.get()

    def lookup_domain(self, machine_id: str) -> Optional[libvirt.virDomain]:
        """
        Resolve a domain by UUID on the primary connection.

        Returns:
            The domain, or None when libvirt reports that it does not exist

        Raises:
            LibvirtConnectionError: If the connection cannot be opened
            libvirt.libvirtError: For any lookup failure other than a missing domain
        """
        conn = self.get_connection()
        try:
            return conn.lookupByUUIDString(machine_id)
        except libvirt.libvirtError as e:
            if not is_no_domain_error(e):
                raise
            self.logger.debug(f"Domain {machine_id} not found: {e}")
            return None

    def _open_primary(self) -> libvirt.virConnect:
        params = self.connection_parameters
        self.logger.info(f"Connecting to libvirt ({params.uri}) ...")

        try:
            if params.has_credentials:
                conn = libvirt.openAuth(params.uri, self._auth_descriptor(params), 0)
            else:
                conn = libvirt.open(params.uri)
        except libvirt.libvirtError as e:
            self.logger.error(f"LibVirt connection failed: {e}")
            raise LibvirtConnectionError(
                f"LibVirt connection failed: {e}", operation="connect", uri=params.uri
            ) from e

        if conn is None:
            raise LibvirtConnectionError(
                f"Failed to connect to libvirt at {params.uri}", operation="connect", uri=params.uri
            )
        return conn

    def _open_system(self) -> libvirt.virConnect:
        uri = self.settings.system_uri
        self.logger.info(f"Opening read-only libvirt connection ({uri}) ...")

        try:
            conn = libvirt.openReadOnly(uri)
        except libvirt.libvirtError as e:
            self.logger.error(f"Read-only libvirt connection failed: {e}")
            raise LibvirtConnectionError(
                f"Read-only libvirt connection failed: {e}", operation="connect_read_only", uri=uri
            ) from e

        if conn is None:
            raise LibvirtConnectionError(
                f"Failed to open read-only connection to {uri}", operation="connect_read_only", uri=uri
            )
        return conn

    @staticmethod
    def _auth_descriptor(params: ConnectionParameters) -> list:
        """Credential list and callback in the form libvirt.openAuth expects"""

        def request_credentials(credentials, _user_data):
            for credential in credentials:
                if credential[0] == libvirt.VIR_CRED_AUTHNAME:
                    credential[4] = params.username
                elif credential[0] == libvirt.VIR_CRED_PASSPHRASE:
                    credential[4] = params.password
            return 0

        return [[libvirt.VIR_CRED_AUTHNAME, libvirt.VIR_CRED_PASSPHRASE], request_credentials, None]
