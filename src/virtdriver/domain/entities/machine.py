"""
Machine Entity Module
"""
from enum import Enum
from typing import Optional
from pydantic import Field, field_validator

from .base import Entity


class MachineState(str, Enum):
    """
    Machine state as reported to the orchestration tool.

    NOT_CREATED, UNKNOWN and INACCESSIBLE are derived by the state
    reconciler; the rest pass libvirt domain states through with hyphens
    replaced by underscores.
    """
    NOT_CREATED = "not_created"
    UNKNOWN = "unknown"
    RUNNING = "running"
    INACCESSIBLE = "inaccessible"

    NOSTATE = "nostate"
    BLOCKED = "blocked"
    PAUSED = "paused"
    SHUTTING_DOWN = "shutting_down"
    SHUTOFF = "shutoff"
    CRASHED = "crashed"
    PMSUSPENDED = "pmsuspended"


class Machine(Entity):
    """
    Machine Entity
    A virtual machine as seen by the orchestration tool, keyed by its
    libvirt domain UUID.
    """

    id: str = Field(..., description="Libvirt domain UUID")
    name: Optional[str] = Field(default=None, description="Human readable machine name")
    boot_timeout: int = Field(default=300, gt=0, description="Seconds allowed for boot and address acquisition")

    @field_validator('id', mode='before')
    @classmethod
    def validate_id(cls, v):
        """Validate machine id is not empty"""
        if not isinstance(v, str) or len(v.strip()) == 0:
            raise ValueError("Machine id cannot be empty")
        return v.strip()

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def __str__(self) -> str:
        return f"Machine(id={self.id}, name={self.name})"
