"""
Test LibvirtDomainWrapper state names and MAC address extraction
"""

import libvirt
import pytest

from virtdriver.infrastructure.providers.libvirt_domain_wrapper import LibvirtDomainWrapper

from tests.conftest import MAC_ADDRESS, MACHINE_ID, make_domain, make_libvirt_error


class TestDomainState:

    @pytest.mark.parametrize("libvirt_state,expected", [
        (libvirt.VIR_DOMAIN_NOSTATE, "nostate"),
        (libvirt.VIR_DOMAIN_RUNNING, "running"),
        (libvirt.VIR_DOMAIN_BLOCKED, "blocked"),
        (libvirt.VIR_DOMAIN_PAUSED, "paused"),
        (libvirt.VIR_DOMAIN_SHUTDOWN, "shutting-down"),
        (libvirt.VIR_DOMAIN_SHUTOFF, "shutoff"),
        (libvirt.VIR_DOMAIN_CRASHED, "crashed"),
        (libvirt.VIR_DOMAIN_PMSUSPENDED, "pmsuspended"),
    ])
    def test_state_names(self, libvirt_state, expected):
        wrapper = LibvirtDomainWrapper(make_domain(state=libvirt_state))
        assert wrapper.state_str == expected

    def test_unreadable_state(self):
        domain = make_domain()
        domain.state.side_effect = libvirt.libvirtError("state unavailable")

        assert LibvirtDomainWrapper(domain).state_str is None

    def test_unrecognized_state(self):
        domain = make_domain()
        domain.state.return_value = [99, 0]

        assert LibvirtDomainWrapper(domain).state_str is None


class TestMacAddresses:

    def test_first_interface_mac(self):
        wrapper = LibvirtDomainWrapper(make_domain(macs=(MAC_ADDRESS, "52:54:00:ab:cd:ef")))

        assert wrapper.mac == MAC_ADDRESS
        assert wrapper.get_mac_addresses() == [MAC_ADDRESS, "52:54:00:ab:cd:ef"]

    def test_unreadable_xml(self):
        domain = make_domain()
        domain.XMLDesc.side_effect = make_libvirt_error(libvirt.VIR_ERR_NO_DOMAIN, "Domain not found")

        assert LibvirtDomainWrapper(domain).mac is None

    def test_no_interfaces(self):
        wrapper = LibvirtDomainWrapper(make_domain(macs=()))

        assert wrapper.mac is None
        assert wrapper.get_mac_addresses() == []


def test_identity_and_repr():
    wrapper = LibvirtDomainWrapper(make_domain(name="web-1"))

    assert wrapper.uuid == MACHINE_ID
    assert wrapper.name == "web-1"
    assert "web-1" in repr(wrapper)
