"""Custom exceptions for the node bootstrapper."""


class BootstrapError(Exception):
    """Base exception for all bootstrap errors."""

    exit_code = 1

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class PrivilegeError(BootstrapError):
    """Exception raised when the process lacks root privileges."""

    pass


class ValidationError(BootstrapError):
    """Exception raised for operator input that fails validation."""

    pass


class ConfigurationError(BootstrapError):
    """Exception raised for configuration errors."""

    pass


class DownloadError(BootstrapError):
    """Exception raised when a remote artifact cannot be fetched or verified."""

    pass


class HostError(BootstrapError):
    """Exception raised when a file or account on the host cannot be used."""

    pass


class CommandError(BootstrapError):
    """Exception raised when an external command exits non-zero."""

    def __init__(self, command: list[str] | str, returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        if isinstance(command, str):
            rendered = command
        else:
            rendered = " ".join(command)
        super().__init__(
            f"Command failed with exit code {returncode}: {rendered}",
            stderr.strip() or None,
        )

    @property
    def exit_code(self) -> int:
        # A child killed by signal N reports -N; shells report 128 + N
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode or 1
