"""Base package and container runtime installation."""

from kube_bootstrap.context import BootstrapContext
from kube_bootstrap.logging_config import get_logger

logger = get_logger(__name__)

CGROUP_DISABLED = "SystemdCgroup = false"
CGROUP_ENABLED = "SystemdCgroup = true"


def apt_install(ctx: BootstrapContext, packages: list[str]) -> None:
    ctx.host.run(["apt-get", "install", "-y", *packages])


def enable_systemd_cgroup(containerd_config: str) -> str:
    """Switch containerd's runc options to the systemd cgroup driver."""
    return containerd_config.replace(CGROUP_DISABLED, CGROUP_ENABLED)


def install_dependencies(ctx: BootstrapContext) -> None:
    ctx.info("Installing system dependencies...")
    ctx.host.run(["apt-get", "update", "-y"])
    apt_install(ctx, ctx.config.base_packages)


def install_containerd(ctx: BootstrapContext) -> None:
    """Install containerd and make it use the systemd cgroup driver.

    kubelet defaults to the systemd driver since 1.22, and the runtime has to
    agree with it or pods crash-loop.
    """
    ctx.info("Installing containerd...")
    apt_install(ctx, ["containerd"])

    config_path = ctx.config.containerd_config
    ctx.host.make_dirs(config_path.parent)
    default_config = ctx.host.run(["containerd", "config", "default"], capture=True)
    patched = enable_systemd_cgroup(default_config)
    if patched == default_config:
        logger.warning(f"'{CGROUP_DISABLED}' not found in generated containerd config")
    ctx.host.write_text(config_path, patched)

    ctx.host.run(["systemctl", "restart", "containerd"])
    ctx.host.run(["systemctl", "enable", "containerd"])
