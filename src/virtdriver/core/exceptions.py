"""
Exception Hierarchy

Every error raised by virtdriver derives from VirtDriverError, which records
the failing operation and any context passed by the raiser.
"""

from .unified_logger import get_logger

logger = get_logger(__name__, "exceptions")


class VirtDriverError(Exception):
    """Base exception class for virtdriver"""

    def __init__(self, message: str, operation: str = "unknown", **kwargs):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.context = kwargs

        logger.debug(f"{type(self).__name__} in {operation}: {message}")


class ConfigurationError(VirtDriverError):
    """Configuration file could not be read or validated"""
    pass


class LibvirtConnectionError(VirtDriverError):
    """Raised when establishing a libvirt connection fails"""
    pass


class AddressTimeoutError(VirtDriverError):
    """No address became available before the resolution timeout"""
    pass


class SnapshotError(VirtDriverError):
    """Base class for snapshot operation failures"""
    pass


class SnapshotMissing(SnapshotError):
    """Named snapshot does not exist on the domain"""
    pass


class SnapshotCreationError(SnapshotError):
    pass


class SnapshotDeletionError(SnapshotError):
    pass


class SnapshotListError(SnapshotError):
    pass


class SnapshotReversionError(SnapshotError):
    pass
