"""
Snapshot Command Handler
Create, list, delete and revert machine snapshots
"""

import libvirt
from rich.text import Text

from .base_command import BaseCommandHandler
from virtdriver.core.exceptions import VirtDriverError


class SnapshotCommandHandler(BaseCommandHandler):
    """Dispatches the snapshot sub-commands to the driver"""

    ACTIONS = ('create', 'list', 'delete', 'revert')

    def execute(self, action: str = "", machine_id: str = "", snapshot_name: str = "", **kwargs) -> bool:
        if action not in self.ACTIONS:
            self.error_console.print(Text(f"[ERROR] Unknown snapshot action: {action}", style="bold red"))
            return False
        if not self.validate_machine_id(machine_id):
            return False

        machine = self.machine(machine_id)
        try:
            if action == 'list':
                names = self.driver.list_snapshots(machine)
                if not names:
                    self.console.print(f"No snapshots for {machine_id}")
                for name in names:
                    self.console.print(name, markup=False)
                return True

            if not snapshot_name:
                self.error_console.print(Text("[ERROR] Snapshot name is required", style="bold red"))
                return False

            if action == 'create':
                self.driver.create_snapshot(machine, snapshot_name)
                message = f"Snapshot {snapshot_name} created"
            elif action == 'delete':
                self.driver.delete_snapshot(machine, snapshot_name)
                message = f"Snapshot {snapshot_name} deleted"
            else:
                self.driver.restore_snapshot(machine, snapshot_name)
                message = f"Reverted to snapshot {snapshot_name}"

        except (VirtDriverError, libvirt.libvirtError) as e:
            self.handle_error(e, f"snapshot {action}")
            return False

        self.console.print(Text(message, style="green"))
        return True
