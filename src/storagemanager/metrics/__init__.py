"""Prometheus metrics for the storage manager."""

from storagemanager.metrics.collector import (
    POLICY_OPERATIONS,
    PROVIDER_DURATION,
    PROVIDER_ERRORS,
    RETRY_ATTEMPTS,
)

__all__ = [
    "POLICY_OPERATIONS",
    "PROVIDER_DURATION",
    "PROVIDER_ERRORS",
    "RETRY_ATTEMPTS",
]
