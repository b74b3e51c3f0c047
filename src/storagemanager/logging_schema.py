"""Log event types for structured logging."""

from enum import StrEnum


class LogEvent(StrEnum):
    """Log event types for the storage manager.

    Used with logger.info/warning/error extra dict:
        logger.info("message", extra={"event": LogEvent.ORGANIZATION_CREATED, ...})
    """

    # Application lifecycle
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"

    # Organization storage
    ORGANIZATION_CREATED = "organization_created"
    ORGANIZATION_EXISTS = "organization_exists"
    ORGANIZATION_DELETED = "organization_deleted"
    ORGANIZATION_MISSING = "organization_missing"
    ACCOUNT_CONFIGURED = "account_configured"

    # Space storage
    SPACE_CREATED = "space_created"
    SPACE_EXISTS = "space_exists"
    SPACE_DELETED = "space_deleted"
    LOADINGZONE_CREATED = "loadingzone_created"

    # Policies
    POLICY_CREATED = "policy_created"
    POLICY_DELETED = "policy_deleted"
    POLICY_PARTIAL_FAILURE = "policy_partial_failure"
    PUBLIC_ACCESS_ADDED = "public_access_added"
    PUBLIC_ACCESS_REMOVED = "public_access_removed"

    # Retry
    RETRY_ATTEMPT_FAILED = "retry_attempt_failed"
    RETRY_EXHAUSTED = "retry_exhausted"
    RETRY_CANCELLED = "retry_cancelled"

    # S3 events
    S3_OBJECT_CREATED = "s3_object_created"
    S3_OBJECTS_DELETED = "s3_objects_deleted"
    S3_DELETE_FAILED = "s3_delete_failed"

    # Backend errors
    BACKEND_ERROR = "backend_error"

    # Error events
    UNHANDLED_EXCEPTION = "unhandled_exception"
    MANAGER_ERROR = "manager_error"
    ACCESS_DENIED = "access_denied"
