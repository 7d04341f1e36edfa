"""Kubernetes node bootstrap for Ubuntu hosts."""

__version__ = "0.1.0"
