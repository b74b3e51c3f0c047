"""Translation of Azure management errors into storage manager errors.

Azure reports failures in several shapes depending on the SDK layer:

    (StorageAccountAlreadyTaken) The storage account named acme is already taken.
    Status code 403, {"code":"AuthorizationFailed","message":"The client ..."}
    Code: StorageAccountAlreadyTaken Message: The storage account named ...

Structured attributes (status_code, error.code, error.message) are used
first; the message text is only parsed for what they do not provide.
"""

import re
from dataclasses import dataclass

from storagemanager.errors import (
    NameTakenError,
    PermissionDeniedError,
    StorageManagerError,
    UnknownStorageError,
)

_JSON_ERROR = re.compile(r'\{"code":"([^"]+)","message":"([^"]+)"\}')
_PAREN_ERROR = re.compile(r"^\((?P<code>[^)\s]+)\)\s*(?P<message>[^\n]*)")
_CODE_MESSAGE = re.compile(r"Code:\s*(?P<code>\S+)\s+Message:\s*(?P<message>[^\n]*)")
_STATUS_CODE = re.compile(r"status(?:\s*code)?\s*:?\s*(\d{3})", re.IGNORECASE)
_FIRST_STATUS = re.compile(r"\b([1-5]\d{2})\b")

PERMISSION_STATUS_CODES = frozenset({401, 403})

_PERMISSION_CODES = frozenset(
    {
        "AuthorizationFailed",
        "AuthorizationPermissionMismatch",
        "LinkedAuthorizationFailed",
    }
)
_NAME_TAKEN_CODES = frozenset(
    {
        "StorageAccountAlreadyTaken",
        "StorageAccountAlreadyExists",
        "AccountNameInvalid",
    }
)


@dataclass
class BackendError:
    """Fields extracted from an Azure error."""

    status_code: int | None
    code: str
    message: str

    def describe(self) -> str:
        if self.code and self.message:
            return f"{self.code} - {self.message}"
        return self.code or self.message


def parse_error(exc: Exception) -> BackendError:
    """Extract status code, error code and message from an Azure error."""
    status = getattr(exc, "status_code", None)
    error = getattr(exc, "error", None)
    code = getattr(error, "code", None) or ""
    message = getattr(error, "message", None) or ""
    text = str(getattr(exc, "message", None) or exc)

    if not code:
        for pattern in (_JSON_ERROR, _PAREN_ERROR, _CODE_MESSAGE):
            match = pattern.search(text)
            if match:
                code, message = match.group(1), message or match.group(2)
                break

    if not isinstance(status, int):
        match = _STATUS_CODE.search(text) or _FIRST_STATUS.search(text)
        status = int(match.group(1)) if match else None

    return BackendError(status_code=status, code=code, message=message or text)


def is_permission_error(exc: Exception) -> bool:
    """Check if an Azure error means the service principal lacks permissions."""
    parsed = parse_error(exc)
    return parsed.status_code in PERMISSION_STATUS_CODES or parsed.code in _PERMISSION_CODES


def translate_error(exc: Exception) -> StorageManagerError:
    """Classify an Azure error.

    Returns:
        PermissionDeniedError for 403, NameTakenError for 409 and name
        conflicts, UnknownStorageError otherwise.
    """
    if isinstance(exc, StorageManagerError):
        return exc

    parsed = parse_error(exc)
    if parsed.status_code == 403 or parsed.code in _PERMISSION_CODES:
        return PermissionDeniedError(parsed.describe())
    if parsed.status_code == 409 or parsed.code in _NAME_TAKEN_CODES:
        return NameTakenError(parsed.describe())
    return UnknownStorageError(parsed.describe())
