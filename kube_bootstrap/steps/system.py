"""Preflight and kernel/system preparation steps."""

from kube_bootstrap.context import BootstrapContext
from kube_bootstrap.exceptions import PrivilegeError
from kube_bootstrap.logging_config import get_logger

logger = get_logger(__name__)


def comment_out_swap(fstab: str) -> str:
    """Comment every active fstab line that mounts swap."""
    lines = []
    for line in fstab.splitlines(keepends=True):
        if " swap " in line and not line.lstrip().startswith("#"):
            line = "#" + line
        lines.append(line)
    return "".join(lines)


def render_sysctl(params: dict[str, str]) -> str:
    width = max((len(key) for key in params), default=0)
    return "".join(f"{key.ljust(width)} = {value}\n" for key, value in params.items())


def check_privileges(ctx: BootstrapContext) -> None:
    """Abort unless running as root."""
    if not ctx.host.is_root():
        logger.error("Bootstrap started without root privileges")
        raise PrivilegeError("Please run as root", "Re-run with: sudo kube-bootstrap")


def disable_swap(ctx: BootstrapContext) -> None:
    """Turn swap off now and keep it off across reboots."""
    ctx.info("Disabling swap...")
    ctx.host.run(["swapoff", "-a"])

    fstab_path = ctx.config.fstab_path
    fstab = ctx.host.read_text(fstab_path)
    updated = comment_out_swap(fstab)
    if updated != fstab:
        ctx.host.write_text(fstab_path, updated)
    else:
        logger.debug(f"No active swap entries in {fstab_path}")


def load_kernel_modules(ctx: BootstrapContext) -> None:
    ctx.info("Loading kernel modules...")
    modules = ctx.config.kernel_modules
    ctx.host.write_text(ctx.config.modules_load_path, "".join(f"{m}\n" for m in modules))
    for module in modules:
        ctx.host.run(["modprobe", module])


def apply_sysctl(ctx: BootstrapContext) -> None:
    ctx.info("Applying sysctl settings...")
    ctx.host.write_text(ctx.config.sysctl_path, render_sysctl(ctx.config.sysctl_params))
    ctx.host.run(["sysctl", "--system"])
