"""
Unit tests for CLI commands with a mocked driver
"""

import pytest
from unittest.mock import Mock
from click.testing import CliRunner

from virtdriver.cli.main import cli
from virtdriver.config.settings import ProviderSettings
from virtdriver.core.exceptions import (
    AddressTimeoutError,
    LibvirtConnectionError,
    SnapshotReversionError
)
from virtdriver.core.unified_logger import LoggerConfig, LoggerFactory
from virtdriver.domain.entities.machine import Machine, MachineState

from tests.conftest import MACHINE_ID


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI binds log handlers to the runner's streams"""
    yield
    LoggerFactory.set_default_config(LoggerConfig(name="virtdriver"))


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_driver():
    driver = Mock()
    driver.machine.side_effect = lambda machine_id, name=None: Machine(id=machine_id, name=name)
    return driver


def invoke(runner, driver, args):
    return runner.invoke(cli, args, obj={'config': ProviderSettings(), 'driver': driver})


class TestStateCommand:

    def test_state_of_machines(self, runner, mock_driver):
        mock_driver.state.side_effect = [MachineState.RUNNING, MachineState.NOT_CREATED]

        result = invoke(runner, mock_driver, ['state', MACHINE_ID, 'vm-1'])

        assert result.exit_code == 0
        assert "running" in result.output
        assert "not_created" in result.output
        assert mock_driver.state.call_count == 2

    def test_state_connection_failure(self, runner, mock_driver):
        mock_driver.state.side_effect = LibvirtConnectionError("Failed to connect to qemu:///system")

        result = invoke(runner, mock_driver, ['state', 'vm-1'])

        assert result.exit_code == 1
        assert "[ERROR]" in result.output
        assert "Failed to connect" in result.output

    def test_state_requires_machine_id(self, runner, mock_driver):
        result = invoke(runner, mock_driver, ['state'])

        assert result.exit_code != 0
        mock_driver.state.assert_not_called()


class TestAddressCommand:

    def test_ip(self, runner, mock_driver):
        mock_driver.get_ipaddress.return_value = "192.168.122.45"

        result = invoke(runner, mock_driver, ['ip', MACHINE_ID])

        assert result.exit_code == 0
        assert "192.168.122.45" in result.output

    def test_ip_not_found(self, runner, mock_driver):
        mock_driver.get_ipaddress.return_value = None

        result = invoke(runner, mock_driver, ['ip', MACHINE_ID])

        assert result.exit_code == 1
        assert "No IP address found" in result.output

    def test_ip_timeout(self, runner, mock_driver):
        mock_driver.get_ipaddress.side_effect = AddressTimeoutError("No IP address via arp")

        result = invoke(runner, mock_driver, ['ip', MACHINE_ID])

        assert result.exit_code == 1
        assert "timed out" in result.output


class TestSnapshotCommands:

    def test_create(self, runner, mock_driver):
        result = invoke(runner, mock_driver, ['snapshot', 'create', MACHINE_ID, 'clean'])

        assert result.exit_code == 0
        assert "Snapshot clean created" in result.output
        machine, name = mock_driver.create_snapshot.call_args[0]
        assert machine.id == MACHINE_ID
        assert name == 'clean'

    def test_list(self, runner, mock_driver):
        mock_driver.list_snapshots.return_value = ['clean', '[tagged]']

        result = invoke(runner, mock_driver, ['snapshot', 'list', MACHINE_ID])

        assert result.exit_code == 0
        assert "clean" in result.output
        assert "[tagged]" in result.output

    def test_list_empty(self, runner, mock_driver):
        mock_driver.list_snapshots.return_value = []

        result = invoke(runner, mock_driver, ['snapshot', 'list', MACHINE_ID])

        assert result.exit_code == 0
        assert f"No snapshots for {MACHINE_ID}" in result.output

    def test_delete(self, runner, mock_driver):
        result = invoke(runner, mock_driver, ['snapshot', 'delete', MACHINE_ID, 'clean'])

        assert result.exit_code == 0
        assert "Snapshot clean deleted" in result.output

    def test_revert(self, runner, mock_driver):
        result = invoke(runner, mock_driver, ['snapshot', 'revert', MACHINE_ID, 'clean'])

        assert result.exit_code == 0
        assert "Reverted to snapshot clean" in result.output
        mock_driver.restore_snapshot.assert_called_once()

    def test_revert_missing_snapshot(self, runner, mock_driver):
        mock_driver.restore_snapshot.side_effect = SnapshotReversionError("Snapshot not found: clean")

        result = invoke(runner, mock_driver, ['snapshot', 'revert', MACHINE_ID, 'clean'])

        assert result.exit_code == 1
        assert "Snapshot not found" in result.output


def test_config_file_and_uri_override(runner, temp_dir, mock_driver):
    config_file = temp_dir / "config.yml"
    config_file.write_text("libvirt:\n  uri: qemu:///session\n  qemu_use_agent: true\n")
    mock_driver.state.return_value = MachineState.SHUTOFF

    obj = {'driver': mock_driver}
    result = runner.invoke(
        cli, ['--config', str(config_file), '--uri', 'qemu+ssh://root@kvm-host/system', 'state', MACHINE_ID], obj=obj
    )

    assert result.exit_code == 0
    assert obj['config'].uri == 'qemu+ssh://root@kvm-host/system'
    assert obj['config'].qemu_use_agent is True
