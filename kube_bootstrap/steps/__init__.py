"""Individual bootstrap steps, each taking a BootstrapContext."""

from kube_bootstrap.steps.control_plane import (
    collect_control_plane_inputs,
    configure_kubeconfig,
    initialize_cluster,
    install_cilium,
    print_join_command,
)
from kube_bootstrap.steps.kubernetes import (
    add_kubernetes_repository,
    configure_shell,
    install_kubernetes_binaries,
    verify_installation,
)
from kube_bootstrap.steps.packages import install_containerd, install_dependencies
from kube_bootstrap.steps.system import (
    apply_sysctl,
    check_privileges,
    disable_swap,
    load_kernel_modules,
)
from kube_bootstrap.steps.worker import collect_join_command, join_cluster

__all__ = [
    "add_kubernetes_repository",
    "apply_sysctl",
    "check_privileges",
    "collect_control_plane_inputs",
    "collect_join_command",
    "configure_kubeconfig",
    "configure_shell",
    "disable_swap",
    "initialize_cluster",
    "install_cilium",
    "install_containerd",
    "install_dependencies",
    "install_kubernetes_binaries",
    "join_cluster",
    "load_kernel_modules",
    "print_join_command",
    "verify_installation",
]
