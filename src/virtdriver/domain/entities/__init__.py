"""Domain Entity Module"""

from .machine import Machine, MachineState
from .lease import Lease, latest_lease

__all__ = [
    'Machine',
    'MachineState',
    'Lease',
    'latest_lease'
]
