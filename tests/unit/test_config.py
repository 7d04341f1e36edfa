"""Tests for NodeConfig defaults and YAML overrides."""

from pathlib import Path

import pytest

from kube_bootstrap.config import NodeConfig
from kube_bootstrap.exceptions import ConfigurationError


def test_defaults():
    config = NodeConfig()

    assert config.kubernetes_version == "1.33"
    assert config.containerd_config == Path("/etc/containerd/config.toml")
    assert config.kernel_modules == ["overlay", "br_netfilter"]
    assert config.kubernetes_packages == ["kubelet", "kubeadm", "kubectl"]
    assert config.default_pod_cidr == "10.0.0.0/16"
    assert config.default_service_cidr == "10.96.0.0/12"


def test_repository_urls_follow_version():
    config = NodeConfig(kubernetes_version="1.31")

    assert config.repository_url == "https://pkgs.k8s.io/core:/stable:/v1.31/deb/"
    assert config.repository_key_url == "https://pkgs.k8s.io/core:/stable:/v1.31/deb/Release.key"


@pytest.mark.parametrize("version", ["v1.33", "1", "1.33.0", "latest", ""])
def test_invalid_version_rejected(version):
    with pytest.raises(ValueError):
        NodeConfig(kubernetes_version=version)


def test_load_overrides(tmp_path):
    config_file = tmp_path / "bootstrap.yml"
    config_file.write_text(
        "# pin an older stream\n"
        "kubernetes_version: '1.32'\n"
        "default_pod_cidr: 172.16.0.0/16\n"
        "kernel_modules:\n"
        "  - overlay\n"
        "  - br_netfilter\n"
        "  - ip_vs\n"
    )

    config = NodeConfig.load(config_file)

    assert config.kubernetes_version == "1.32"
    assert config.default_pod_cidr == "172.16.0.0/16"
    assert config.kernel_modules[-1] == "ip_vs"
    assert config.default_service_cidr == "10.96.0.0/12"


def test_load_empty_file_uses_defaults(tmp_path):
    config_file = tmp_path / "empty.yml"
    config_file.write_text("")

    assert NodeConfig.load(config_file) == NodeConfig()


def test_load_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / "bootstrap.yml"
    config_file.write_text("kubernetes_versoin: '1.32'\n")

    with pytest.raises(ConfigurationError) as exc_info:
        NodeConfig.load(config_file)

    assert "kubernetes_versoin" in str(exc_info.value)


def test_load_rejects_non_mapping(tmp_path):
    config_file = tmp_path / "bootstrap.yml"
    config_file.write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError, match="mapping"):
        NodeConfig.load(config_file)


def test_load_rejects_bad_yaml(tmp_path):
    config_file = tmp_path / "bootstrap.yml"
    config_file.write_text("kubernetes_version: [unclosed\n")

    with pytest.raises(ConfigurationError, match="parse"):
        NodeConfig.load(config_file)
