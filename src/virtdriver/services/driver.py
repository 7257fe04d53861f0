"""
Libvirt Driver

Entry point used by the orchestration tool. One driver owns one connection
manager, so the libvirt connections it opens are shared by every operation
issued through it.

Usage:
    driver = LibvirtDriver(ProviderSettings(qemu_use_session=True))
    machine = Machine(id="8c6f...", boot_timeout=120)
    driver.state(machine)            # MachineState.RUNNING
    driver.get_ipaddress(machine)    # "192.168.122.45"
    driver.create_snapshot(machine, "clean")
"""

from typing import List, Optional

import libvirt

from ..config.settings import ProviderSettings
from ..core.exceptions import AddressTimeoutError
from ..core.unified_logger import get_logger
from ..domain.entities.machine import Machine, MachineState
from ..infrastructure.providers.libvirt_connection_manager import LibvirtConnectionManager
from ..infrastructure.providers.libvirt_domain_wrapper import LibvirtDomainWrapper
from ..tools.vm_ip_manager import AddressStrategy, build_address_strategy
from .snapshot_manager import SnapshotManager
from .state_reconciler import StateReconciler

logger = get_logger(__name__, "driver")


class LibvirtDriver:
    """Machine state, address and snapshot operations against one libvirt host"""

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        connection_manager: Optional[LibvirtConnectionManager] = None,
        address_strategy: Optional[AddressStrategy] = None
    ):
        self.settings = settings or ProviderSettings()
        self.connection_manager = connection_manager or LibvirtConnectionManager(self.settings)
        self.address_strategy = address_strategy or build_address_strategy(self.settings, self.connection_manager)
        self.state_reconciler = StateReconciler(self.connection_manager, self.address_strategy)
        self.snapshots = SnapshotManager(self.connection_manager)
        self.logger = logger

    def machine(self, machine_id: str, name: Optional[str] = None) -> Machine:
        """Machine with the boot timeout configured for this driver"""
        return Machine(id=machine_id, name=name, boot_timeout=self.settings.boot_timeout)

    def get_domain(self, machine: Machine) -> Optional[libvirt.virDomain]:
        return self.connection_manager.lookup_domain(machine.id)

    def created(self, machine: Machine) -> bool:
        return self.get_domain(machine) is not None

    def state(self, machine: Machine) -> MachineState:
        return self.state_reconciler.get_state(machine)

    def get_ipaddress(self, machine: Machine) -> Optional[str]:
        """
        IP address of a machine.

        Returns:
            The address, or None when the domain does not exist or no address
            was found

        Raises:
            AddressTimeoutError: If the address source timed out
        """
        domain = self.get_domain(machine)
        if domain is None:
            return None

        result = self.address_strategy.resolve(LibvirtDomainWrapper(domain), machine.id, machine.boot_timeout)
        if result.timed_out:
            self.logger.info(f"Timeout at waiting for an ip address for machine {machine.display_name}")
            raise AddressTimeoutError(
                f"No IP address for {machine.display_name} via {result.source}",
                operation="get_ipaddress",
                machine_id=machine.id
            )

        if not result.is_found:
            self.logger.info(f"No {result.source} address found for machine {machine.display_name}")
            return None
        return result.ip

    def create_snapshot(self, machine: Machine, snapshot_name: str) -> None:
        self.snapshots.create_snapshot(machine, snapshot_name)

    def list_snapshots(self, machine: Machine) -> List[str]:
        return self.snapshots.list_snapshots(machine)

    def delete_snapshot(self, machine: Machine, snapshot_name: str) -> None:
        self.snapshots.delete_snapshot(machine, snapshot_name)

    def restore_snapshot(self, machine: Machine, snapshot_name: str) -> None:
        self.snapshots.revert_snapshot(machine, snapshot_name)
