"""Data models for operator-supplied node settings."""

import re
from enum import Enum

from pydantic import BaseModel, field_validator

# Shape checks only: octet ranges and prefix lengths are not bounded.
IP_PATTERN = re.compile(r"^(\d{1,3}\.){3}\d{1,3}$", re.ASCII)
CIDR_PATTERN = re.compile(r"^(\d{1,3}\.){3}\d{1,3}/\d+$", re.ASCII)

JOIN_PREFIX = "kubeadm join"


def is_valid_ip(value: str) -> bool:
    """Return True if value looks like a dotted-quad address."""
    return bool(IP_PATTERN.fullmatch(value))


def is_valid_cidr(value: str) -> bool:
    """Return True if value looks like a dotted-quad address with a prefix length."""
    return bool(CIDR_PATTERN.fullmatch(value))


class NodeRole(str, Enum):
    """Role this host takes in the cluster."""

    CONTROL_PLANE = "1"
    WORKER = "2"

    @property
    def label(self) -> str:
        return "control-plane" if self is NodeRole.CONTROL_PLANE else "worker"

    @classmethod
    def parse(cls, choice: str) -> "NodeRole":
        """Parse the operator's menu choice.

        Raises:
            ValueError: If the choice is neither 1 nor 2
        """
        try:
            return cls(choice.strip())
        except ValueError:
            raise ValueError(f"role must be 1 (control-plane) or 2 (worker), got '{choice}'")


class ControlPlaneInputs(BaseModel):
    """Values passed to kubeadm init."""

    advertise_ip: str
    pod_cidr: str
    service_cidr: str

    @field_validator("advertise_ip")
    @classmethod
    def validate_advertise_ip(cls, v: str) -> str:
        """Validate advertise_ip is a dotted-quad address."""
        if not is_valid_ip(v):
            raise ValueError(f"advertise_ip '{v}' must be an IPv4 address (e.g., 192.168.1.10)")
        return v

    @field_validator("pod_cidr", "service_cidr")
    @classmethod
    def validate_cidr(cls, v: str, info) -> str:
        """Validate CIDR fields are dotted-quad/prefix."""
        if not is_valid_cidr(v):
            raise ValueError(f"{info.field_name} '{v}' must be a CIDR (e.g., 10.0.0.0/16)")
        return v

    def to_init_args(self) -> list[str]:
        """Render as kubeadm init flags."""
        return [
            f"--apiserver-advertise-address={self.advertise_ip}",
            f"--pod-network-cidr={self.pod_cidr}",
            f"--service-cidr={self.service_cidr}",
        ]


class JoinCommand(BaseModel):
    """A kubeadm join command pasted from the control plane."""

    command: str

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        """Validate the command starts with 'kubeadm join'.

        Token, endpoint and CA hash are not inspected.
        """
        if v != JOIN_PREFIX and not v.startswith(JOIN_PREFIX + " "):
            raise ValueError(f"join command must start with '{JOIN_PREFIX}'")
        return v
