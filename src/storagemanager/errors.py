"""Error handling module for the storage manager.

This module defines error codes, categories, exception classes, and response
models. Every error carries exactly one numeric code, one category and one
message; the category decides the HTTP status.

Error Response Format:
{
    "error": {
        "code": 40001,
        "category": "conflict",
        "message": "40001: storage account name already taken StorageAccountAlreadyTaken - ..."
    }
}

Usage:
    from storagemanager.errors import NameTakenError, PolicyNotFoundError

    raise NameTakenError("StorageAccountAlreadyTaken - The name is taken")
    raise PolicyNotFoundError("spc_all_public")
"""

from enum import Enum, IntEnum

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    """Error categories and their HTTP status codes."""

    BAD_REQUEST = "bad_request"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    BAD_GATEWAY = "bad_gateway"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorCategory.BAD_REQUEST: 400,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.BAD_GATEWAY: 502,
    ErrorCategory.INTERNAL: 500,
}


class ErrorCode(IntEnum):
    """Numeric error codes."""

    UNABLE_CREATE_STORAGE_ACCOUNT = 20002
    UNABLE_CREATE_STORAGE_CONTAINER = 20003
    UNABLE_DELETE_STORAGE_ACCOUNT = 20012
    UNABLE_GET_ORGANIZATION = 20023
    INSUFFICIENT_PRIVILEGE = 20031
    UNABLE_LOAD_INTERNAL_RESOURCE = 20041
    UNABLE_FIND_SPC_POLICY = 20051
    MULTIPLE_POLICIES_FOUND = 20052
    STORAGE_ACCOUNT_NAME_TAKEN = 40001
    BAD_PERMISSION_SERVICE_PRINCIPAL = 50000
    UNKNOWN_ERROR = 50001


class ErrorDetail(BaseModel):
    """Error detail containing code, category and message."""

    code: int
    category: ErrorCategory
    message: str


class ErrorResponse(BaseModel):
    """Error response format."""

    error: ErrorDetail


class StorageManagerError(Exception):
    """Base exception for the storage manager.

    All storage manager exceptions inherit from this class. This enables
    centralized exception handling in FastAPI.

    Attributes:
        code: The numeric error code.
        category: Severity category, maps to the HTTP status.
        message: Human-readable message, prefixed with the numeric code.
    """

    def __init__(
        self,
        code: ErrorCode,
        category: ErrorCategory,
        summary: str,
        detail: str = "",
    ) -> None:
        self.code = code
        self.category = category
        self.detail = detail
        text = " ".join(part for part in (summary, detail) if part)
        self.message = f"{code.value}: {text}"
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.category.status_code

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse model."""
        return ErrorResponse(
            error=ErrorDetail(
                code=self.code.value,
                category=self.category,
                message=self.message,
            )
        )


class OrganizationStorageMissingError(StorageManagerError):
    """400 Bad Request - Parent organization storage does not exist."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.UNABLE_GET_ORGANIZATION,
            ErrorCategory.BAD_REQUEST,
            "unable to retrieve organization",
            detail,
        )


class InsufficientPrivilegeError(StorageManagerError):
    """403 Forbidden - Caller lacks the required role."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.INSUFFICIENT_PRIVILEGE,
            ErrorCategory.FORBIDDEN,
            "insufficient privilege",
            detail,
        )


class ResourceLoadError(StorageManagerError):
    """500 Internal Server Error - Bundled resource could not be loaded."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.UNABLE_LOAD_INTERNAL_RESOURCE,
            ErrorCategory.INTERNAL,
            "unable to load internal resource",
            detail,
        )


class PolicyNotFoundError(StorageManagerError):
    """409 Conflict - Policy lookup returned no match where one was required."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.UNABLE_FIND_SPC_POLICY,
            ErrorCategory.CONFLICT,
            "unable to find policy",
            detail,
        )


class MultiplePoliciesError(StorageManagerError):
    """409 Conflict - Policy lookup returned more than one match."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.MULTIPLE_POLICIES_FOUND,
            ErrorCategory.CONFLICT,
            "multiple policies found",
            detail,
        )


class NameTakenError(StorageManagerError):
    """409 Conflict - Storage name already taken at the provider level."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.STORAGE_ACCOUNT_NAME_TAKEN,
            ErrorCategory.CONFLICT,
            "storage account name already taken",
            detail,
        )


class PermissionDeniedError(StorageManagerError):
    """502 Bad Gateway - Backend rejected the service credentials."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.BAD_PERMISSION_SERVICE_PRINCIPAL,
            ErrorCategory.BAD_GATEWAY,
            "insufficient permission of the storage service principal",
            detail,
        )


class ContainerProvisioningError(StorageManagerError):
    """502 Bad Gateway - Container could not be created within the retry budget."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.UNABLE_CREATE_STORAGE_CONTAINER,
            ErrorCategory.BAD_GATEWAY,
            "unable to create storage container",
            detail,
        )


class UnknownStorageError(StorageManagerError):
    """500 Internal Server Error - Unclassified backend failure."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            ErrorCode.UNKNOWN_ERROR,
            ErrorCategory.INTERNAL,
            "unknown error.",
            detail,
        )
