"""Node bootstrap configuration.

Every value has a default matching a stock Ubuntu kubeadm install. A YAML
file can override any of them; it is read with ruamel.yaml the same way
the rest of the tooling reads YAML.
"""

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML

from kube_bootstrap.exceptions import ConfigurationError
from kube_bootstrap.logging_config import get_logger

logger = get_logger(__name__)

KUBERNETES_VERSION = "1.33"
CONTAINERD_CONFIG = "/etc/containerd/config.toml"

DEFAULT_POD_CIDR = "10.0.0.0/16"
DEFAULT_SERVICE_CIDR = "10.96.0.0/12"


class NodeConfig(BaseModel):
    """Constants that drive the bootstrap workflow."""

    model_config = ConfigDict(extra="forbid")

    kubernetes_version: str = KUBERNETES_VERSION
    containerd_config: Path = Path(CONTAINERD_CONFIG)

    kernel_modules: list[str] = Field(default_factory=lambda: ["overlay", "br_netfilter"])
    sysctl_params: dict[str, str] = Field(
        default_factory=lambda: {
            "net.bridge.bridge-nf-call-iptables": "1",
            "net.bridge.bridge-nf-call-ip6tables": "1",
            "net.ipv4.ip_forward": "1",
        }
    )
    base_packages: list[str] = Field(
        default_factory=lambda: [
            "ca-certificates",
            "curl",
            "gnupg",
            "lsb-release",
            "apt-transport-https",
        ]
    )
    kubernetes_packages: list[str] = Field(
        default_factory=lambda: ["kubelet", "kubeadm", "kubectl"]
    )

    fstab_path: Path = Path("/etc/fstab")
    modules_load_path: Path = Path("/etc/modules-load.d/k8s.conf")
    sysctl_path: Path = Path("/etc/sysctl.d/k8s.conf")
    keyring_path: Path = Path("/etc/apt/keyrings/kubernetes-apt-keyring.gpg")
    apt_source_path: Path = Path("/etc/apt/sources.list.d/kubernetes.list")
    admin_kubeconfig: Path = Path("/etc/kubernetes/admin.conf")
    binary_dir: Path = Path("/usr/local/bin")

    default_pod_cidr: str = DEFAULT_POD_CIDR
    default_service_cidr: str = DEFAULT_SERVICE_CIDR
    api_server_port: int = 6443

    cilium_stable_url: str = "https://raw.githubusercontent.com/cilium/cilium-cli/main/stable.txt"
    cilium_release_url: str = "https://github.com/cilium/cilium-cli/releases/download"

    @field_validator("kubernetes_version")
    @classmethod
    def validate_kubernetes_version(cls, v: str) -> str:
        """Validate the version names a minor release stream (e.g. 1.33)."""
        if not re.match(r"^\d+\.\d+$", v):
            raise ValueError(f"kubernetes_version '{v}' must look like '1.33'")
        return v

    @property
    def repository_url(self) -> str:
        """Version-pinned pkgs.k8s.io apt repository."""
        return f"https://pkgs.k8s.io/core:/stable:/v{self.kubernetes_version}/deb/"

    @property
    def repository_key_url(self) -> str:
        return f"{self.repository_url}Release.key"

    @classmethod
    def load(cls, path: str | Path) -> "NodeConfig":
        """Load configuration overrides from a YAML file.

        Args:
            path: Path to a YAML mapping of NodeConfig fields

        Returns:
            NodeConfig with the file's values applied over the defaults

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid
        """
        config_path = Path(path)
        logger.debug(f"Loading configuration from {config_path}")

        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                "Pass an existing YAML file with --config or omit the option to use defaults",
            )

        yaml = YAML(typ="safe")
        try:
            with open(config_path) as f:
                data = yaml.load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to parse configuration file: {e}", str(config_path))

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping", f"Got {type(data).__name__}"
            )

        try:
            return cls(**data)
        except PydanticValidationError as e:
            problems = "\n".join(
                f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError("Invalid configuration", problems)
