"""
virtdriver

Control layer for libvirt-hosted virtual machines: machine state
reconciliation, IP address resolution and snapshot management.
"""

__version__ = "0.1.0"

from .config.settings import ProviderSettings
from .domain.entities.machine import Machine, MachineState
from .services.driver import LibvirtDriver

__all__ = ['ProviderSettings', 'Machine', 'MachineState', 'LibvirtDriver', '__version__']
