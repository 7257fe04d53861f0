"""
Provider Configuration Settings Module
Uses Pydantic for configuration validation and management
"""
from typing import Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from ..core.unified_logger import get_logger

logger = get_logger(__name__, "settings")


class AddressSource:
    """Names of the address resolution strategies"""
    AGENT = "agent"
    SESSION = "session"
    ARP = "arp"


class ProviderSettings(BaseSettings):
    """Libvirt provider configuration"""

    # Connection configuration
    uri: str = Field(
        default="qemu:///system",
        description="Libvirt URI of the primary (read/write) connection"
    )

    system_uri: str = Field(
        default="qemu:///system",
        description="Libvirt URI of the read-only connection used for network leases"
    )

    username: Optional[str] = Field(
        default=None,
        description="Username for libvirt authentication"
    )

    password: Optional[str] = Field(
        default=None,
        description="Password for libvirt authentication"
    )

    # Address resolution configuration
    qemu_use_agent: bool = Field(
        default=False,
        description="Resolve addresses through the QEMU guest agent"
    )

    qemu_use_session: bool = Field(
        default=False,
        description="Resolve addresses through the DHCP leases of libvirt networks"
    )

    boot_timeout: int = Field(
        default=300,
        gt=0,
        description="Seconds a machine may take to boot and obtain an address"
    )

    arp_poll_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Upper bound in seconds for polling the host ARP table"
    )

    arp_poll_interval: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between two ARP table polls"
    )

    @field_validator('uri', 'system_uri')
    @classmethod
    def ensure_uri_not_empty(cls, v):
        """Ensure URI is not empty"""
        if not v or not v.strip():
            raise ValueError("Libvirt URI cannot be empty")
        return v.strip()

    @model_validator(mode='after')
    def warn_on_conflicting_sources(self):
        if self.qemu_use_agent and self.qemu_use_session:
            logger.warning("Both qemu_use_agent and qemu_use_session are set; the guest agent takes precedence")
        return self

    @property
    def address_source(self) -> str:
        """Strategy selected by the flags: agent > session > arp"""
        if self.qemu_use_agent:
            return AddressSource.AGENT
        if self.qemu_use_session:
            return AddressSource.SESSION
        return AddressSource.ARP

    model_config = {
        "env_prefix": "VIRTDRIVER_",
        "case_sensitive": False
    }
