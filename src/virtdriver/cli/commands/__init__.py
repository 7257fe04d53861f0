"""
CLI Command Handlers
"""

from .base_command import BaseCommandHandler
from .state_command import StateCommandHandler, AddressCommandHandler
from .snapshot_command import SnapshotCommandHandler

__all__ = [
    'BaseCommandHandler',
    'StateCommandHandler',
    'AddressCommandHandler',
    'SnapshotCommandHandler'
]
