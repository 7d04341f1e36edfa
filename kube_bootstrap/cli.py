"""Main CLI entry point for node bootstrap."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from kube_bootstrap.config import NodeConfig
from kube_bootstrap.context import BootstrapContext
from kube_bootstrap.exceptions import (
    BootstrapError,
    CommandError,
    ConfigurationError,
    DownloadError,
    HostError,
    PrivilegeError,
    ValidationError,
)
from kube_bootstrap.host import DryRunHost, HostEnvironment, SystemHost
from kube_bootstrap.logging_config import get_logger, setup_logging
from kube_bootstrap.prompts import ConsolePrompter, InputProvider

app = typer.Typer(
    name="kube-bootstrap",
    help="Turn a bare Ubuntu host into a kubeadm control-plane or worker node",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

ERROR_LABELS = {
    PrivilegeError: "Privilege Error",
    ValidationError: "Validation Error",
    CommandError: "Command Error",
    DownloadError: "Download Error",
    ConfigurationError: "Configuration Error",
    HostError: "Host Error",
}


def build_host(dry_run: bool) -> HostEnvironment:
    if dry_run:
        return DryRunHost(console)
    return SystemHost()


def build_prompter() -> InputProvider:
    return ConsolePrompter(console)


def report_error(error: BootstrapError, step: str | None = None) -> None:
    label = ERROR_LABELS.get(type(error), "Error")
    console.print(f"[red]{label}:[/red] {escape(error.message)}", highlight=False)
    if step:
        console.print(f"Failed step: {step}")
    if error.details:
        console.print(f"\n{error.details}", markup=False)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="YAML file overriding bootstrap defaults"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print commands and file writes instead of performing them"
    ),
) -> None:
    """
    Bootstrap this host as a Kubernetes node.

    Disables swap, prepares the kernel, installs containerd and the kubeadm
    toolchain, then either initializes a control plane (with Cilium as the
    CNI) or joins an existing cluster as a worker.
    """
    log_path = Path(log_file) if log_file else None
    setup_logging(verbose=verbose, log_file=log_path, console=console)
    logger.debug("Logging initialized")

    if ctx.invoked_subcommand is not None:
        return

    try:
        config = NodeConfig.load(config_file) if config_file else NodeConfig()
    except ConfigurationError as e:
        report_error(e)
        raise typer.Exit(code=1)

    from kube_bootstrap.workflow import run_workflow

    console.print("[bold cyan]Kubernetes node bootstrap started...[/bold cyan]")
    bootstrap = BootstrapContext(
        host=build_host(dry_run),
        config=config,
        prompter=build_prompter(),
        console=console,
    )

    try:
        result = run_workflow(bootstrap)
    except KeyboardInterrupt:
        console.print("\n[yellow]Bootstrap interrupted by user[/yellow]")
        raise typer.Exit(code=130)
    except Exception as e:
        logger.error(f"Unexpected error during bootstrap: {e}", exc_info=True)
        console.print(f"[red]Unexpected error:[/red] {e}")
        console.print("\nRun with --verbose --log-file debug.log for more details")
        raise typer.Exit(code=1)

    if not result.succeeded:
        report_error(result.error, result.failed_step)
        raise typer.Exit(code=result.exit_code)


@app.command()
def version() -> None:
    """Show version information."""
    from kube_bootstrap import __version__

    typer.echo(f"kube-bootstrap version {__version__}")


if __name__ == "__main__":
    app()
