"""Kubernetes apt repository, binaries and post-install checks."""

from kube_bootstrap.context import BootstrapContext
from kube_bootstrap.logging_config import get_logger

logger = get_logger(__name__)

BASHRC_LINES = [
    "source <(kubectl completion bash)",
    "alias k=kubectl",
]

VERSION_COMMANDS = [
    ["containerd", "--version"],
    ["kubeadm", "version"],
    ["kubelet", "--version"],
]


def apt_source_entry(keyring: str, repository_url: str) -> str:
    return f"deb [signed-by={keyring}] {repository_url} /\n"


def add_kubernetes_repository(ctx: BootstrapContext) -> None:
    """Register the signed pkgs.k8s.io repository for the configured version."""
    ctx.info(f"Adding Kubernetes v{ctx.config.kubernetes_version} APT repository...")
    keyring = ctx.config.keyring_path
    ctx.host.make_dirs(keyring.parent)

    key = ctx.host.fetch(ctx.config.repository_key_url)
    ctx.host.run(["gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring)], input=key)

    ctx.host.write_text(
        ctx.config.apt_source_path, apt_source_entry(str(keyring), ctx.config.repository_url)
    )
    ctx.host.run(["apt-get", "update", "-y"])


def install_kubernetes_binaries(ctx: BootstrapContext) -> None:
    packages = ctx.config.kubernetes_packages
    ctx.info(f"Installing {', '.join(packages)}...")
    ctx.host.run(["apt-get", "install", "-y", *packages])
    ctx.host.run(["apt-mark", "hold", *packages])
    ctx.host.run(["systemctl", "enable", "kubelet"])


def configure_shell(ctx: BootstrapContext) -> None:
    """Add kubectl completion and the `k` alias to the invoking user's bashrc."""
    user = ctx.host.invoking_user()
    bashrc = ctx.host.user_home(user) / ".bashrc"

    existing = ctx.host.read_text(bashrc, default="")

    missing = [line for line in BASHRC_LINES if line not in existing.splitlines()]
    if not missing:
        logger.debug(f"{bashrc} already configured for kubectl")
        return

    ctx.info(f"Configuring kubectl completion for {user}...")
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    ctx.host.write_text(bashrc, prefix + "".join(f"{line}\n" for line in missing), append=True)
    if not existing:
        ctx.host.chown(bashrc, user)


def verify_installation(ctx: BootstrapContext) -> None:
    ctx.info("Verifying installations...")
    for cmd in VERSION_COMMANDS:
        output = ctx.host.run(cmd, capture=True).strip()
        ctx.console.print(f"  [green]✓[/green] {' '.join(cmd)}: {output}")
        logger.info(f"{cmd[0]} version: {output}")
