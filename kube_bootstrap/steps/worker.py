"""Worker join steps."""

from pydantic import ValidationError as PydanticValidationError

from kube_bootstrap.context import BootstrapContext
from kube_bootstrap.exceptions import ValidationError
from kube_bootstrap.logging_config import get_logger
from kube_bootstrap.models.node import JOIN_PREFIX, JoinCommand

logger = get_logger(__name__)


def collect_join_command(ctx: BootstrapContext) -> None:
    raw = ctx.prompter.prompt("Paste the full kubeadm join command")
    try:
        ctx.join_command = JoinCommand(command=raw)
    except PydanticValidationError:
        logger.error("Rejected join command without the expected prefix")
        raise ValidationError(
            "Invalid join command",
            f"The command must start with '{JOIN_PREFIX}'. "
            "Print one on the control plane with: kubeadm token create --print-join-command",
        )


def join_cluster(ctx: BootstrapContext) -> None:
    """Execute the pasted join command as-is."""
    ctx.info("Joining the cluster...")
    ctx.host.run_shell(ctx.join_command.command)
