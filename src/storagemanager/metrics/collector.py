"""Prometheus metrics definitions for the storage manager.

Tracks backend-level work:
- Provider operations (organization/space create and delete)
- Retry attempts against asynchronously provisioned backends
- Policy document operations
"""

from prometheus_client import Counter, Histogram

# =============================================================================
# Histogram Buckets
# =============================================================================
# Account provisioning and container retry loops are slow (100ms ~ 5min)
_BUCKETS_SLOW = (
    0.1, 0.2, 0.4, 0.8, 1.5,
    3, 6, 12, 24, 48,
    96, 180, 300,
)

_OPERATIONS = (
    "create_organization",
    "create_loadingzone",
    "create_space",
    "delete_organization",
    "delete_space",
)

# =============================================================================
# Provider Operation Metrics
# =============================================================================

PROVIDER_DURATION = Histogram(
    "storagemanager_provider_duration_seconds",
    "Duration of storage provider operations",
    ["provider", "operation"],
    buckets=_BUCKETS_SLOW,
)

PROVIDER_ERRORS = Counter(
    "storagemanager_provider_errors_total",
    "Total storage provider operation errors",
    ["provider", "operation", "error_type"],
)

# =============================================================================
# Retry Metrics
# =============================================================================

RETRY_ATTEMPTS = Counter(
    "storagemanager_retry_attempts_total",
    "Total retry executor attempts",
    ["outcome"],  # succeeded, not_ready, failed
)

# =============================================================================
# Policy Metrics
# =============================================================================

POLICY_OPERATIONS = Counter(
    "storagemanager_policy_operations_total",
    "Total policy document operations",
    ["operation"],  # create, delete, add_public, remove_public
)


def _init_metrics() -> None:
    """Initialize labeled metrics with zero values."""
    for provider in ("azure", "s3", "local"):
        for op in _OPERATIONS:
            PROVIDER_DURATION.labels(provider=provider, operation=op)

    for outcome in ("succeeded", "not_ready", "failed"):
        RETRY_ATTEMPTS.labels(outcome=outcome)

    for op in ("create", "delete", "add_public", "remove_public"):
        POLICY_OPERATIONS.labels(operation=op)


_init_metrics()
