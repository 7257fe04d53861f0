"""
Tools

Address resolution for running machines.
"""

from .vm_ip_manager import (
    AddressStatus,
    AddressQueryResult,
    AddressStrategy,
    AgentAddressStrategy,
    SessionLeaseStrategy,
    ArpTableStrategy,
    build_address_strategy
)

__all__ = [
    'AddressStatus',
    'AddressQueryResult',
    'AddressStrategy',
    'AgentAddressStrategy',
    'SessionLeaseStrategy',
    'ArpTableStrategy',
    'build_address_strategy'
]
