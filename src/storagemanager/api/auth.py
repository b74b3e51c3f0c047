"""Bearer token role extraction and authorization.

Roles are read from the realm_access.roles claim of the bearer JWT and
compared case-insensitively.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storagemanager.config import AuthConfig, get_config
from storagemanager.errors import InsufficientPrivilegeError
from storagemanager.logging_schema import LogEvent

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller."""

    subject: str | None
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role.lower() in self.roles


def get_auth_config() -> AuthConfig:
    return get_config().auth


def decode_token(token: str, config: AuthConfig) -> Principal:
    """Verify a bearer token and extract its roles.

    Raises:
        jwt.PyJWTError: Token is invalid or expired.
    """
    options: dict[str, Any] = {}
    if not config.audience:
        options["verify_aud"] = False
    payload = jwt.decode(
        token,
        config.jwt_key,
        algorithms=config.algorithms,
        audience=config.audience or None,
        options=options,
    )
    realm_access = payload.get("realm_access") or {}
    roles = realm_access.get("roles") or []
    return Principal(
        subject=payload.get("sub"),
        roles=frozenset(str(role).lower() for role in roles),
    )


async def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> Principal:
    """Resolve the authenticated caller from the bearer token."""
    if credentials is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    try:
        return decode_token(credentials.credentials, config)
    except jwt.PyJWTError as exc:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc


def is_superuser(principal: Principal, config: AuthConfig) -> bool:
    return principal.has_role(config.superuser_role)


def can_create_organization(principal: Principal, config: AuthConfig) -> bool:
    return is_superuser(principal, config) or principal.has_role(config.org_create_role)


async def require_superuser(
    principal: Annotated[Principal, Depends(get_principal)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> Principal:
    """Ensure the caller holds the superuser role."""
    if not is_superuser(principal, config):
        logger.error(
            "Insufficient permissions, superuser role required",
            extra={"event": LogEvent.ACCESS_DENIED, "subject": principal.subject},
        )
        raise InsufficientPrivilegeError(f"role '{config.superuser_role}' required")
    return principal


async def require_org_create(
    principal: Annotated[Principal, Depends(get_principal)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> Principal:
    """Ensure the caller may create organizations."""
    if not can_create_organization(principal, config):
        logger.error(
            "Insufficient permissions to create organization",
            extra={"event": LogEvent.ACCESS_DENIED, "subject": principal.subject},
        )
        raise InsufficientPrivilegeError(f"role '{config.org_create_role}' required")
    return principal
