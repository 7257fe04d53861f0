"""
Machine State Reconciliation

Derives the MachineState reported to the orchestration tool from the libvirt
domain state. A running domain is additionally probed for an address and
reported as inaccessible when that probe times out.
"""

from ..core.unified_logger import get_logger, MachineLoggingContext
from ..domain.entities.machine import Machine, MachineState
from ..infrastructure.providers.libvirt_connection_manager import LibvirtConnectionManager
from ..infrastructure.providers.libvirt_domain_wrapper import LibvirtDomainWrapper
from ..tools.vm_ip_manager import AddressStrategy

logger = get_logger(__name__, "state_reconciler")


def normalize_state(raw_state: str) -> str:
    """'Shutting-Down' -> 'shutting_down'"""
    return raw_state.strip().lower().replace('-', '_')


class StateReconciler:
    """Computes MachineState on every query; nothing is cached between calls"""

    def __init__(self, connection_manager: LibvirtConnectionManager, address_strategy: AddressStrategy):
        self.connection_manager = connection_manager
        self.address_strategy = address_strategy
        self.logger = logger

    def get_state(self, machine: Machine) -> MachineState:
        """
        Get the current state of a machine.

        Args:
            machine: Machine to inspect

        Returns:
            MachineState

        Raises:
            LibvirtConnectionError: If the primary connection cannot be opened
            libvirt.libvirtError: If the domain lookup fails for a reason other
                than a missing domain
        """
        with MachineLoggingContext(machine.id):
            domain = self.connection_manager.lookup_domain(machine.id)
            if domain is None:
                return MachineState.NOT_CREATED

            wrapper = LibvirtDomainWrapper(domain)
            raw_state = wrapper.state_str
            if raw_state is None:
                return MachineState.UNKNOWN

            state = normalize_state(raw_state)
            if state == 'terminated':
                return MachineState.NOT_CREATED

            if state == MachineState.RUNNING.value:
                result = self.address_strategy.resolve(wrapper, machine.id, machine.boot_timeout)
                if result.timed_out:
                    self.logger.debug(f"Machine {machine.id} running but no IP address available")
                    return MachineState.INACCESSIBLE
                return MachineState.RUNNING

            try:
                return MachineState(state)
            except ValueError:
                self.logger.warning(f"Machine {machine.id} reported unmapped state {raw_state!r}")
                return MachineState.UNKNOWN
