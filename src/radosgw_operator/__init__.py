"""Kubernetes operator reconciling Ceph RADOS Gateway identities."""

__version__ = "0.1.0"
