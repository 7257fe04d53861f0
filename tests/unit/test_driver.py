"""
Test LibvirtDriver facade
"""

from unittest.mock import Mock

import libvirt
import pytest

from virtdriver.config.settings import ProviderSettings
from virtdriver.core.exceptions import AddressTimeoutError
from virtdriver.domain.entities.machine import MachineState
from virtdriver.services.driver import LibvirtDriver
from virtdriver.tools.vm_ip_manager import AddressQueryResult, AddressStrategy, ArpTableStrategy

from tests.conftest import MACHINE_ID, make_libvirt_error


@pytest.fixture
def address_strategy():
    return Mock(spec=AddressStrategy)


@pytest.fixture
def driver(settings, connection_manager, address_strategy):
    return LibvirtDriver(settings, connection_manager=connection_manager, address_strategy=address_strategy)


class TestDriverSetup:

    def test_defaults(self, mock_conn):
        driver = LibvirtDriver(ProviderSettings(boot_timeout=90))

        assert isinstance(driver.address_strategy, ArpTableStrategy)
        assert driver.machine(MACHINE_ID).boot_timeout == 90

    def test_components_share_connection_manager(self, driver, connection_manager):
        assert driver.state_reconciler.connection_manager is connection_manager
        assert driver.snapshots.connection_manager is connection_manager

    def test_machine(self, driver):
        machine = driver.machine(f"  {MACHINE_ID} ", name="web-1")

        assert machine.id == MACHINE_ID
        assert machine.display_name == "web-1"


class TestGetIpAddress:

    def test_found(self, driver, running_domain, address_strategy):
        address_strategy.resolve.return_value = AddressQueryResult.found("192.168.122.45", "arp")

        assert driver.get_ipaddress(driver.machine(MACHINE_ID)) == "192.168.122.45"

    def test_not_found(self, driver, running_domain, address_strategy):
        address_strategy.resolve.return_value = AddressQueryResult.not_found("agent")

        assert driver.get_ipaddress(driver.machine(MACHINE_ID)) is None

    def test_timeout_raises(self, driver, running_domain, address_strategy):
        address_strategy.resolve.return_value = AddressQueryResult.timeout("arp")

        with pytest.raises(AddressTimeoutError) as exc_info:
            driver.get_ipaddress(driver.machine(MACHINE_ID))
        assert exc_info.value.operation == "get_ipaddress"
        assert exc_info.value.context["machine_id"] == MACHINE_ID

    def test_missing_domain(self, driver, mock_conn, address_strategy):
        mock_conn.lookupByUUIDString.side_effect = make_libvirt_error(libvirt.VIR_ERR_NO_DOMAIN)

        assert driver.get_ipaddress(driver.machine(MACHINE_ID)) is None
        address_strategy.resolve.assert_not_called()


class TestDriverOperations:

    def test_created(self, driver, mock_conn):
        mock_conn.lookupByUUIDString.side_effect = [Mock(), make_libvirt_error(libvirt.VIR_ERR_NO_DOMAIN)]
        machine = driver.machine(MACHINE_ID)

        assert driver.created(machine)
        assert not driver.created(machine)

    def test_state(self, driver, mock_conn):
        mock_conn.lookupByUUIDString.side_effect = make_libvirt_error(libvirt.VIR_ERR_NO_DOMAIN)

        assert driver.state(driver.machine(MACHINE_ID)) is MachineState.NOT_CREATED

    def test_snapshot_operations_delegate(self, driver):
        driver.snapshots = Mock()
        machine = driver.machine(MACHINE_ID)
        driver.snapshots.list_snapshots.return_value = ["clean"]

        driver.create_snapshot(machine, "clean")
        driver.delete_snapshot(machine, "clean")
        driver.restore_snapshot(machine, "clean")

        assert driver.list_snapshots(machine) == ["clean"]
        driver.snapshots.create_snapshot.assert_called_once_with(machine, "clean")
        driver.snapshots.delete_snapshot.assert_called_once_with(machine, "clean")
        driver.snapshots.revert_snapshot.assert_called_once_with(machine, "clean")
