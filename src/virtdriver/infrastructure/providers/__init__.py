"""
Infrastructure Providers

Libvirt connection management and domain access.
"""

from .libvirt_connection_manager import (
    LibvirtConnectionManager,
    ConnectionParameters,
    is_no_domain_error
)
from .libvirt_domain_wrapper import LibvirtDomainWrapper, DomainState

__all__ = [
    "LibvirtConnectionManager",
    "ConnectionParameters",
    "is_no_domain_error",
    "LibvirtDomainWrapper",
    "DomainState"
]
