"""
Test configuration - pytest fixture definitions
"""
import pytest
import tempfile
from pathlib import Path
from unittest.mock import Mock, patch

import libvirt

from virtdriver.config.settings import ProviderSettings
from virtdriver.infrastructure.providers.libvirt_connection_manager import LibvirtConnectionManager


MACHINE_ID = "5f7c9a0e-1d2b-4c3d-8e9f-0a1b2c3d4e5f"
MAC_ADDRESS = "52:54:00:12:34:56"

DOMAIN_XML = """
<domain type='kvm'>
  <name>{name}</name>
  <uuid>{uuid}</uuid>
  <devices>
    {interfaces}
  </devices>
</domain>
"""

INTERFACE_XML = """
    <interface type='network'>
      <mac address='{mac}'/>
      <source network='default'/>
    </interface>
"""


def make_libvirt_error(code: int, message: str = "libvirt failure") -> libvirt.libvirtError:
    """libvirtError reporting the given error code"""
    error = libvirt.libvirtError(message)
    error.get_error_code = lambda: code
    return error


def make_domain(
    uuid: str = MACHINE_ID,
    state: int = libvirt.VIR_DOMAIN_RUNNING,
    macs=(MAC_ADDRESS,),
    name: str = "test-vm"
) -> Mock:
    """Mock virDomain with a state and network interfaces"""
    domain = Mock()
    domain.UUIDString.return_value = uuid
    domain.name.return_value = name
    domain.state.return_value = [state, 1]
    interfaces = "".join(INTERFACE_XML.format(mac=mac) for mac in macs)
    domain.XMLDesc.return_value = DOMAIN_XML.format(name=name, uuid=uuid, interfaces=interfaces)
    return domain


@pytest.fixture
def temp_dir():
    """Temporary directory fixture"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings():
    """Default provider settings"""
    return ProviderSettings(uri="qemu:///system", system_uri="qemu:///system")


@pytest.fixture
def mock_conn():
    """Mock libvirt.open to avoid actual connections"""
    with patch('libvirt.open') as mock_open:
        conn = Mock()
        mock_open.return_value = conn
        yield conn


@pytest.fixture
def mock_system_conn():
    """Mock libvirt.openReadOnly for the network lease connection"""
    with patch('libvirt.openReadOnly') as mock_open_read_only:
        conn = Mock()
        conn.listAllNetworks.return_value = []
        mock_open_read_only.return_value = conn
        yield conn


@pytest.fixture
def connection_manager(settings, mock_conn):
    """Connection manager whose primary connection is mock_conn"""
    return LibvirtConnectionManager(settings)


@pytest.fixture
def running_domain(mock_conn):
    """Running domain registered on the mock connection"""
    domain = make_domain()
    mock_conn.lookupByUUIDString.return_value = domain
    return domain


class FakeClock:
    """Stands in for the time module; sleep advances monotonic"""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds
