"""
Base Command Handler - Provides abstract base class for command handlers
"""

from abc import ABC, abstractmethod
from typing import Optional

from rich.text import Text

from virtdriver.config.settings import ProviderSettings
from virtdriver.cli.presentation import get_console, get_error_console
from virtdriver.core.unified_logger import get_logger
from virtdriver.domain.entities.machine import Machine
from virtdriver.services.driver import LibvirtDriver


class BaseCommandHandler(ABC):
    """Command handler base class - Implements common functionality, defines extension interface"""

    def __init__(self, config: ProviderSettings, verbose: bool = False, driver: Optional[LibvirtDriver] = None):
        self.logger = get_logger(__name__, "base_command")
        self.config = config
        self.verbose = verbose
        self.console = get_console()
        self.error_console = get_error_console()
        self._driver = driver

    @property
    def driver(self) -> LibvirtDriver:
        """Driver created on first use so that connections open only when needed"""
        if self._driver is None:
            self._driver = LibvirtDriver(self.config)
        return self._driver

    @abstractmethod
    def execute(self, **kwargs) -> bool:
        """Execute command - Subclasses must implement"""
        pass

    def validate_machine_id(self, machine_id: str) -> bool:
        if not machine_id or not machine_id.strip():
            self.error_console.print(Text("[ERROR] Machine id cannot be empty", style="bold red"))
            return False
        return True

    def machine(self, machine_id: str) -> Machine:
        return self.driver.machine(machine_id.strip())

    def handle_error(self, error: Exception, context: str = "") -> None:
        """Unified error handling"""
        message = f"{context}: {error}" if context else str(error)
        self.error_console.print(Text(f"[ERROR] {message}", style="bold red"))
        self.logger.debug(f"Command failed: {message}")

        if self.verbose:
            import traceback
            self.error_console.print(Text(traceback.format_exc()))
