"""Tests for error handling across components."""

import io

import pytest
from rich.console import Console

from kube_bootstrap.config import NodeConfig
from kube_bootstrap.exceptions import (
    BootstrapError,
    CommandError,
    ConfigurationError,
    DownloadError,
    HostError,
    PrivilegeError,
    ValidationError,
)
from kube_bootstrap.logging_config import get_logger, set_step, setup_logging


def test_custom_exception_with_details():
    """Test that custom exceptions support message and details."""
    error = PrivilegeError("Please run as root", "Re-run with: sudo kube-bootstrap")

    assert error.message == "Please run as root"
    assert error.details == "Re-run with: sudo kube-bootstrap"
    assert "Please run as root" in str(error)
    assert "sudo kube-bootstrap" in str(error)


def test_custom_exception_without_details():
    """Test that custom exceptions work without details."""
    error = ValidationError("Invalid input")

    assert error.message == "Invalid input"
    assert error.details is None
    assert str(error) == "Invalid input"


def test_exception_hierarchy():
    """Test that all custom exceptions inherit from BootstrapError."""
    assert issubclass(PrivilegeError, BootstrapError)
    assert issubclass(ValidationError, BootstrapError)
    assert issubclass(ConfigurationError, BootstrapError)
    assert issubclass(DownloadError, BootstrapError)
    assert issubclass(CommandError, BootstrapError)
    assert issubclass(HostError, BootstrapError)


def test_exit_codes():
    """Privilege and validation errors exit 1; command errors keep their own code."""
    assert PrivilegeError("x").exit_code == 1
    assert ValidationError("x").exit_code == 1
    assert DownloadError("x").exit_code == 1
    assert CommandError(["apt-get", "update"], 100).exit_code == 100
    assert HostError("x").exit_code == 1


def test_signal_killed_command_exit_code():
    """A command killed by SIGKILL exits the way a shell reports it."""
    assert CommandError(["kubeadm", "init"], -9).exit_code == 137
    assert CommandError("kubeadm join 10.0.0.5:6443", -15).exit_code == 143


def test_command_error_renders_command():
    error = CommandError(["apt-get", "install", "-y", "kubelet"], 100, "E: Unable to locate\n")

    assert error.returncode == 100
    assert "apt-get install -y kubelet" in error.message
    assert error.details == "E: Unable to locate"


def test_command_error_accepts_shell_string():
    error = CommandError("kubeadm join 10.0.0.5:6443 --token abc", 1)

    assert "kubeadm join 10.0.0.5:6443" in error.message
    assert error.details is None


def test_logging_setup():
    """Test that logging can be configured."""
    setup_logging(verbose=False)

    logger = get_logger("test")
    assert logger is not None
    assert logger.name == "test"


def test_logging_with_log_file(tmp_path):
    """Test that a log file handler receives log output."""
    log_file = tmp_path / "logs" / "bootstrap.log"
    setup_logging(log_file=log_file)

    get_logger("test").info("written to file")

    assert log_file.exists()
    assert "written to file" in log_file.read_text()


def test_log_file_records_carry_step(tmp_path):
    log_file = tmp_path / "bootstrap.log"
    setup_logging(log_file=log_file)

    set_step("disable-swap")
    get_logger("test").debug("commenting fstab")
    set_step(None)
    get_logger("test").debug("between steps")

    lines = log_file.read_text().splitlines()
    assert "[disable-swap] test: commenting fstab" in lines[0]
    assert "[-] test: between steps" in lines[1]


def test_console_shows_only_warnings_unless_verbose():
    console = Console(file=io.StringIO(), width=200)
    setup_logging(console=console)

    get_logger("test").info("routine progress")
    get_logger("test").warning("Could not determine primary IP")

    output = console.file.getvalue()
    assert "Could not determine primary IP" in output
    assert "routine progress" not in output


def test_verbose_console_shows_debug():
    console = Console(file=io.StringIO(), width=200)
    setup_logging(verbose=True, console=console)

    get_logger("test").debug("Running: swapoff -a")

    assert "Running: swapoff -a" in console.file.getvalue()


def test_config_error_messages(tmp_path):
    """Test that configuration errors have helpful messages."""
    with pytest.raises(ConfigurationError) as exc_info:
        NodeConfig.load(tmp_path / "nonexistent.yml")

    error_msg = str(exc_info.value)
    assert "not found" in error_msg.lower()
    assert "nonexistent.yml" in error_msg


def test_exception_can_be_caught_as_base_class():
    """Test that specific exceptions can be caught as BootstrapError."""
    try:
        raise DownloadError("Test error")
    except BootstrapError as e:
        assert isinstance(e, DownloadError)
        assert e.message == "Test error"
