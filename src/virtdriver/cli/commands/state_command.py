"""
State and Address Command Handlers
"""

import libvirt
from rich.table import Table
from rich.text import Text

from .base_command import BaseCommandHandler
from virtdriver.core.exceptions import AddressTimeoutError, VirtDriverError
from virtdriver.domain.entities.machine import MachineState

# Console style per reported state
STATE_STYLES = {
    MachineState.RUNNING: "green",
    MachineState.INACCESSIBLE: "yellow",
    MachineState.NOT_CREATED: "dim",
    MachineState.UNKNOWN: "red",
    MachineState.CRASHED: "red",
}


class StateCommandHandler(BaseCommandHandler):
    """Print the state of one or more machines"""

    def execute(self, machine_ids=(), **kwargs) -> bool:
        if not machine_ids or not all(self.validate_machine_id(machine_id) for machine_id in machine_ids):
            return False

        table = Table(show_header=True, show_edge=False, padding=(0, 1))
        table.add_column("Machine")
        table.add_column("State")

        success = True
        for machine_id in machine_ids:
            try:
                state = self.driver.state(self.machine(machine_id))
            except (VirtDriverError, libvirt.libvirtError) as e:
                self.handle_error(e, f"state of {machine_id}")
                success = False
                continue
            table.add_row(machine_id, Text(state.value, style=STATE_STYLES.get(state, "")))

        if table.row_count:
            self.console.print(table)
        return success


class AddressCommandHandler(BaseCommandHandler):
    """Print the IP address of a machine"""

    def execute(self, machine_id: str = "", **kwargs) -> bool:
        if not self.validate_machine_id(machine_id):
            return False

        try:
            ip_address = self.driver.get_ipaddress(self.machine(machine_id))
        except AddressTimeoutError as e:
            self.handle_error(e, "address lookup timed out")
            return False
        except (VirtDriverError, libvirt.libvirtError) as e:
            self.handle_error(e, f"address of {machine_id}")
            return False

        if ip_address is None:
            self.error_console.print(Text(f"[ERROR] No IP address found for {machine_id}", style="bold red"))
            return False

        self.console.print(ip_address)
        return True
