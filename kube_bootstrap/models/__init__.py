"""Data models for node bootstrap inputs."""

from kube_bootstrap.models.node import (
    ControlPlaneInputs,
    JoinCommand,
    NodeRole,
    is_valid_cidr,
    is_valid_ip,
)

__all__ = [
    "ControlPlaneInputs",
    "JoinCommand",
    "NodeRole",
    "is_valid_cidr",
    "is_valid_ip",
]
