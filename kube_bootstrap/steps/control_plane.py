"""Control-plane initialization and Cilium installation."""

import hashlib

from rich.panel import Panel

from kube_bootstrap.context import BootstrapContext
from kube_bootstrap.exceptions import DownloadError, ValidationError
from kube_bootstrap.logging_config import get_logger
from kube_bootstrap.models.node import ControlPlaneInputs, is_valid_cidr, is_valid_ip

logger = get_logger(__name__)

ARM64_MACHINES = {"aarch64", "arm64"}

_EXAMPLES = {
    "IP address": "192.168.1.10",
    "CIDR": "10.0.0.0/16",
}


def cilium_arch(machine: str) -> str:
    """Map `uname -m` output to a cilium-cli release architecture."""
    return "arm64" if machine.lower() in ARM64_MACHINES else "amd64"


def verify_checksum(data: bytes, checksum_file: str, filename: str) -> None:
    """Check data against a sha256sum-style checksum file.

    Raises:
        DownloadError: If the file is empty or the digest does not match
    """
    fields = checksum_file.split()
    if not fields:
        raise DownloadError(f"Checksum file for {filename} is empty")

    expected = fields[0].lower()
    actual = hashlib.sha256(data).hexdigest()
    if actual != expected:
        logger.error(f"Checksum mismatch for {filename}: expected {expected}, got {actual}")
        raise DownloadError(
            f"Checksum mismatch for {filename}",
            f"Expected {expected}\nActual   {actual}",
        )
    logger.debug(f"{filename}: OK")


def _ask(ctx: BootstrapContext, label: str, default: str | None, check, kind: str) -> str:
    value = ctx.prompter.prompt(label, default)
    if not check(value):
        logger.error(f"Rejected {label}: {value!r}")
        raise ValidationError(
            f"Invalid {kind}: '{value}'", f"{label} must look like {_EXAMPLES[kind]}"
        )
    return value


def collect_control_plane_inputs(ctx: BootstrapContext) -> None:
    """Ask for the advertise address and network ranges, failing on the first bad answer."""
    default_ip = ctx.host.primary_ip()
    logger.debug(f"Detected primary IP: {default_ip}")

    advertise_ip = _ask(ctx, "API server advertise address", default_ip, is_valid_ip, "IP address")
    pod_cidr = _ask(ctx, "Pod network CIDR", ctx.config.default_pod_cidr, is_valid_cidr, "CIDR")
    service_cidr = _ask(
        ctx, "Service CIDR", ctx.config.default_service_cidr, is_valid_cidr, "CIDR"
    )

    ctx.control_plane = ControlPlaneInputs(
        advertise_ip=advertise_ip, pod_cidr=pod_cidr, service_cidr=service_cidr
    )


def initialize_cluster(ctx: BootstrapContext) -> None:
    """Run kubeadm init without kube-proxy; Cilium replaces it."""
    inputs = ctx.control_plane
    ctx.info(
        f"Initializing control plane on {inputs.advertise_ip} "
        f"(pods {inputs.pod_cidr}, services {inputs.service_cidr})..."
    )
    ctx.host.run(["kubeadm", "init", "--skip-phases=addon/kube-proxy", *inputs.to_init_args()])


def print_join_command(ctx: BootstrapContext) -> None:
    """Create a non-expiring bootstrap token and show the matching join command."""
    output = ctx.host.run(
        ["kubeadm", "token", "create", "--ttl", "0", "--print-join-command"], capture=True
    )
    ctx.worker_join_command = output.strip()
    ctx.console.print(
        Panel(
            ctx.worker_join_command or "(not available)",
            title="Run this on each worker node",
            border_style="green",
        )
    )


def configure_kubeconfig(ctx: BootstrapContext) -> None:
    user = ctx.host.invoking_user()
    kube_dir = ctx.host.user_home(user) / ".kube"
    kubeconfig = kube_dir / "config"
    ctx.info(f"Writing kubeconfig for {user} to {kubeconfig}...")

    ctx.host.make_dirs(kube_dir)
    ctx.host.copy_file(ctx.config.admin_kubeconfig, kubeconfig)
    ctx.host.chown(kube_dir, user)
    ctx.host.chown(kubeconfig, user)


def install_cilium(ctx: BootstrapContext) -> None:
    """Install the cilium CLI, deploy Cilium and wait for it to become ready."""
    config = ctx.config
    ctx.info("Installing Cilium CLI...")

    version = ctx.host.fetch(config.cilium_stable_url).decode().strip()
    arch = cilium_arch(ctx.host.machine())
    archive_name = f"cilium-linux-{arch}.tar.gz"
    base_url = f"{config.cilium_release_url}/{version}"
    logger.info(f"Using cilium-cli {version} for {arch}")

    archive = ctx.host.fetch(f"{base_url}/{archive_name}")
    checksum = ctx.host.fetch(f"{base_url}/{archive_name}.sha256sum").decode()
    verify_checksum(archive, checksum, archive_name)
    ctx.host.extract_member(archive, "cilium", config.binary_dir)

    cilium = str(config.binary_dir / "cilium")
    env = {"KUBECONFIG": str(config.admin_kubeconfig)}

    ctx.info("Installing Cilium into the cluster...")
    ctx.host.run(
        [
            cilium,
            "install",
            "--set",
            "kubeProxyReplacement=true",
            "--set",
            f"k8sServiceHost={ctx.control_plane.advertise_ip}",
            "--set",
            f"k8sServicePort={config.api_server_port}",
        ],
        env=env,
    )

    ctx.info("Waiting for Cilium to become ready...")
    ctx.host.run([cilium, "status", "--wait"], env=env)
