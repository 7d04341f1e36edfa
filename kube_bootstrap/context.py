"""Shared state handed to every bootstrap step."""

from dataclasses import dataclass, field

from rich.console import Console

from kube_bootstrap.config import NodeConfig
from kube_bootstrap.host import HostEnvironment
from kube_bootstrap.logging_config import get_logger
from kube_bootstrap.models.node import ControlPlaneInputs, JoinCommand, NodeRole
from kube_bootstrap.prompts import InputProvider

logger = get_logger(__name__)


@dataclass
class BootstrapContext:
    """Capabilities plus the values collected during a single run.

    Attributes:
        host: Where commands run and files are written
        config: Bootstrap constants
        prompter: Source of operator answers
        console: Operator-facing output
        role: Chosen node role, set by the role selection step
        control_plane: Validated kubeadm init values (control-plane path)
        join_command: Validated join command (worker path)
        worker_join_command: Join command printed for worker nodes (control-plane path)
    """

    host: HostEnvironment
    config: NodeConfig
    prompter: InputProvider
    console: Console = field(default_factory=Console)
    role: NodeRole | None = None
    control_plane: ControlPlaneInputs | None = None
    join_command: JoinCommand | None = None
    worker_join_command: str | None = None

    def info(self, message: str) -> None:
        self.console.print(f"[bold blue]\\[INFO][/bold blue] {message}")
        logger.info(message)
