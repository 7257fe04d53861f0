"""
Snapshot Management Service

Create-or-replace, list, delete and revert libvirt domain snapshots. Every
operation looks the domain up again by machine id.
"""

import xml.etree.ElementTree as ET
from typing import List

import libvirt

from ..core.exceptions import (
    SnapshotCreationError,
    SnapshotDeletionError,
    SnapshotListError,
    SnapshotMissing,
    SnapshotReversionError
)
from ..core.unified_logger import get_logger
from ..domain.entities.machine import Machine
from ..infrastructure.providers.libvirt_connection_manager import LibvirtConnectionManager

logger = get_logger(__name__, "snapshot_manager")

SNAPSHOT_DESCRIPTION = "Snapshot for virtdriver sandbox"


def build_snapshot_xml(snapshot_name: str, description: str = SNAPSHOT_DESCRIPTION) -> str:
    """Snapshot descriptor accepted by virDomain.snapshotCreateXML"""
    root = ET.Element('domainsnapshot')
    ET.SubElement(root, 'name').text = snapshot_name
    ET.SubElement(root, 'description').text = description
    return ET.tostring(root, encoding='unicode')


class SnapshotManager:
    """Snapshot operations for the machines of one connection manager"""

    def __init__(self, connection_manager: LibvirtConnectionManager):
        self.connection_manager = connection_manager
        self.logger = logger

    def _get_domain(self, machine: Machine, error_class: type, operation: str) -> libvirt.virDomain:
        domain = self.connection_manager.lookup_domain(machine.id)
        if domain is None:
            raise error_class(f"Domain {machine.id} not found", operation=operation, machine_id=machine.id)
        return domain

    def get_snapshot_if_exists(self, machine: Machine, snapshot_name: str) -> libvirt.virDomainSnapshot:
        """
        Get a snapshot by name.

        A snapshot exists when its XML description can be read.

        Raises:
            SnapshotMissing: If the domain or the snapshot does not exist
        """
        domain = self._get_domain(machine, SnapshotMissing, "get_snapshot")
        try:
            snapshot = domain.snapshotLookupByName(snapshot_name, 0)
            description = snapshot.getXMLDesc(0)
        except libvirt.libvirtError as e:
            raise SnapshotMissing(str(e), operation="get_snapshot", snapshot=snapshot_name) from e

        if not description:
            raise SnapshotMissing(
                f"Snapshot {snapshot_name} has no description", operation="get_snapshot", snapshot=snapshot_name
            )
        return snapshot

    def list_snapshots(self, machine: Machine) -> List[str]:
        """Snapshot names of a machine, in the order libvirt reports them"""
        domain = self._get_domain(machine, SnapshotListError, "list_snapshots")
        try:
            return list(domain.snapshotListNames(0))
        except libvirt.libvirtError as e:
            raise SnapshotListError(str(e), operation="list_snapshots", machine_id=machine.id) from e

    def delete_snapshot(self, machine: Machine, snapshot_name: str) -> None:
        """
        Delete a snapshot.

        Raises:
            SnapshotDeletionError: If the snapshot does not exist or cannot be deleted
        """
        try:
            snapshot = self.get_snapshot_if_exists(machine, snapshot_name)
            snapshot.delete(0)
        except SnapshotMissing as e:
            raise SnapshotDeletionError(e.message, operation="delete_snapshot", snapshot=snapshot_name) from e
        except libvirt.libvirtError as e:
            raise SnapshotDeletionError(str(e), operation="delete_snapshot", snapshot=snapshot_name) from e

        self.logger.info(f"Deleted snapshot {snapshot_name} of {machine.display_name}")

    def create_new_snapshot(self, machine: Machine, snapshot_name: str) -> None:
        domain = self._get_domain(machine, SnapshotCreationError, "create_snapshot")
        try:
            domain.snapshotCreateXML(build_snapshot_xml(snapshot_name), 0)
        except libvirt.libvirtError as e:
            raise SnapshotCreationError(str(e), operation="create_snapshot", snapshot=snapshot_name) from e

        self.logger.info(f"Created snapshot {snapshot_name} of {machine.display_name}")

    def create_snapshot(self, machine: Machine, snapshot_name: str) -> None:
        """Create a snapshot, replacing an existing snapshot of the same name"""
        try:
            self.delete_snapshot(machine, snapshot_name)
        except SnapshotDeletionError:
            self.logger.debug(f"No previous snapshot {snapshot_name} to replace")
        self.create_new_snapshot(machine, snapshot_name)

    def revert_snapshot(self, machine: Machine, snapshot_name: str) -> None:
        """
        Revert a machine to a snapshot.

        The revert is always forced; without the force flag libvirt refuses
        some state transitions, see https://bugzilla.redhat.com/show_bug.cgi?id=1006886

        Raises:
            SnapshotReversionError: If the snapshot does not exist or the revert fails
        """
        try:
            snapshot = self.get_snapshot_if_exists(machine, snapshot_name)
        except SnapshotMissing as e:
            raise SnapshotReversionError(e.message, operation="revert_snapshot", snapshot=snapshot_name) from e

        domain = self._get_domain(machine, SnapshotReversionError, "revert_snapshot")
        try:
            domain.revertToSnapshot(snapshot, libvirt.VIR_DOMAIN_SNAPSHOT_REVERT_FORCE)
        except libvirt.libvirtError as e:
            raise SnapshotReversionError(str(e), operation="revert_snapshot", snapshot=snapshot_name) from e

        self.logger.info(f"Reverted {machine.display_name} to snapshot {snapshot_name}")
