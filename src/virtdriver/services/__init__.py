"""
Services Layer

Machine state reconciliation, snapshot management and the driver facade
combining them.
"""

from .state_reconciler import StateReconciler, normalize_state
from .snapshot_manager import SnapshotManager, build_snapshot_xml
from .driver import LibvirtDriver

__all__ = [
    'StateReconciler',
    'normalize_state',
    'SnapshotManager',
    'build_snapshot_xml',
    'LibvirtDriver'
]
