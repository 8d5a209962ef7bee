"""Adapters — Lookup Gateway implementations.

Public re-exports for convenient access.
"""

from restore_admission.adapters.base import ClusterLookups, LookupResult, LookupStatus
from restore_admission.adapters.kubectl import KubectlCluster
from restore_admission.adapters.memory import InMemoryCluster

__all__ = [
    "ClusterLookups",
    "InMemoryCluster",
    "KubectlCluster",
    "LookupResult",
    "LookupStatus",
]
