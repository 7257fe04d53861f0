"""
Core Module Exports

Exports the unified logging system and the exception hierarchy.
"""

from .unified_logger import (
    LoggerFactory,
    LoggerConfig,
    LogFormat,
    UnifiedLogger,
    get_logger,
    MachineLoggingContext
)

from .exceptions import (
    VirtDriverError,
    ConfigurationError,
    LibvirtConnectionError,
    AddressTimeoutError,
    SnapshotError,
    SnapshotMissing,
    SnapshotCreationError,
    SnapshotDeletionError,
    SnapshotListError,
    SnapshotReversionError
)

__all__ = [
    # Unified logging system
    'LoggerFactory',
    'LoggerConfig',
    'LogFormat',
    'UnifiedLogger',
    'get_logger',
    'MachineLoggingContext',

    # Exceptions
    'VirtDriverError',
    'ConfigurationError',
    'LibvirtConnectionError',
    'AddressTimeoutError',
    'SnapshotError',
    'SnapshotMissing',
    'SnapshotCreationError',
    'SnapshotDeletionError',
    'SnapshotListError',
    'SnapshotReversionError'
]
