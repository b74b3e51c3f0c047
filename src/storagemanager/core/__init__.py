"""Core building blocks: domain models, naming, locking and retry."""

from storagemanager.core.models import Confidentiality, Organization, Space
from storagemanager.core.naming import (
    LOADINGZONE,
    POLICY_ROLES,
    PUBLIC_POLICY_NAME,
    ResourceNaming,
)
from storagemanager.core.retry import (
    RetryExecutor,
    RetryExhaustedError,
    RetryOutcome,
    RetryStatus,
)

__all__ = [
    "Confidentiality",
    "Organization",
    "Space",
    "LOADINGZONE",
    "POLICY_ROLES",
    "PUBLIC_POLICY_NAME",
    "ResourceNaming",
    "RetryExecutor",
    "RetryExhaustedError",
    "RetryOutcome",
    "RetryStatus",
]
