"""Ordered bootstrap workflow and its fail-fast driver."""

from collections.abc import Callable
from dataclasses import dataclass, field

from kube_bootstrap import steps
from kube_bootstrap.context import BootstrapContext
from kube_bootstrap.exceptions import BootstrapError, ValidationError
from kube_bootstrap.logging_config import get_logger, set_step
from kube_bootstrap.models.node import NodeRole

logger = get_logger(__name__)


@dataclass(frozen=True)
class Step:
    """A named unit of work run against a BootstrapContext."""

    name: str
    action: Callable[[BootstrapContext], None]


@dataclass
class WorkflowResult:
    """Outcome of a workflow run.

    Attributes:
        completed: Names of steps that finished, in order
        failed_step: Name of the step that raised, if any
        error: The error that stopped the run, if any
    """

    completed: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: BootstrapError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else self.error.exit_code


def select_role(ctx: BootstrapContext) -> None:
    ctx.console.print("\n[bold]Select node role:[/bold]")
    ctx.console.print("  1) Control-plane")
    ctx.console.print("  2) Worker")
    choice = ctx.prompter.prompt("Enter choice [1-2]")
    try:
        ctx.role = NodeRole.parse(choice)
    except ValueError as e:
        raise ValidationError(f"Invalid choice: '{choice}'", str(e))
    logger.info(f"Selected role: {ctx.role.label}")


def show_summary(ctx: BootstrapContext) -> None:
    console = ctx.console
    console.print("-" * 38)
    console.print(f"[bold green]\\[SUCCESS][/bold green] Kubernetes {ctx.role.label} node is READY")
    if ctx.role is NodeRole.CONTROL_PLANE:
        console.print("\nNext steps:")
        console.print("  kubectl get nodes")
        if ctx.worker_join_command:
            console.print("  On each worker run:")
            console.print(f"    {ctx.worker_join_command}", markup=False)
    else:
        console.print("\nNext steps:")
        console.print("  On the control plane run: kubectl get nodes")
    console.print("-" * 38)


PREPARATION_STEPS = [
    Step("preflight", steps.check_privileges),
    Step("disable-swap", steps.disable_swap),
    Step("kernel-modules", steps.load_kernel_modules),
    Step("sysctl", steps.apply_sysctl),
    Step("dependencies", steps.install_dependencies),
    Step("containerd", steps.install_containerd),
    Step("kubernetes-repository", steps.add_kubernetes_repository),
    Step("kubernetes-binaries", steps.install_kubernetes_binaries),
    Step("shell-completion", steps.configure_shell),
    Step("verify", steps.verify_installation),
    Step("select-role", select_role),
]

ROLE_STEPS = {
    NodeRole.CONTROL_PLANE: [
        Step("control-plane-inputs", steps.collect_control_plane_inputs),
        Step("kubeadm-init", steps.initialize_cluster),
        Step("join-command", steps.print_join_command),
        Step("kubeconfig", steps.configure_kubeconfig),
        Step("cilium", steps.install_cilium),
    ],
    NodeRole.WORKER: [
        Step("join-command-input", steps.collect_join_command),
        Step("kubeadm-join", steps.join_cluster),
    ],
}

FINAL_STEPS = [Step("summary", show_summary)]


def run_steps(step_list: list[Step], ctx: BootstrapContext, result: WorkflowResult) -> bool:
    """Run steps in order, stopping at the first BootstrapError.

    Returns:
        True if every step completed
    """
    for step in step_list:
        set_step(step.name)
        logger.debug(f"Starting step: {step.name}")
        try:
            step.action(ctx)
        except BootstrapError as e:
            logger.error(f"Step '{step.name}' failed: {e.message}")
            result.failed_step = step.name
            result.error = e
            return False
        finally:
            set_step(None)
        result.completed.append(step.name)
    return True


def run_workflow(ctx: BootstrapContext) -> WorkflowResult:
    """Prepare the host, pick a role and finish the role-specific setup."""
    result = WorkflowResult()
    if not run_steps(PREPARATION_STEPS, ctx, result):
        return result
    run_steps(ROLE_STEPS[ctx.role] + FINAL_STEPS, ctx, result)
    return result
