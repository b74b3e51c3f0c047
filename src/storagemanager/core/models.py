"""Domain models for organizations and spaces."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# Letters, digits, dot, underscore and dash; must not start with a separator.
NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"


class Confidentiality(StrEnum):
    """Confidentiality level of a space.

    Only PUBLIC spaces contribute statements to the public access policy.
    """

    PUBLIC = "PUBLIC"
    INTERNAL = "INTERNAL"
    PRIVATE = "PRIVATE"


class Organization(BaseModel):
    """Top-level tenant owning spaces."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=63, pattern=NAME_PATTERN)


class Space(BaseModel):
    """Named sub-scope of an organization."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=63, pattern=NAME_PATTERN)
    organization: Organization
    confidentiality: Confidentiality | None = None

    @property
    def is_public(self) -> bool:
        return self.confidentiality == Confidentiality.PUBLIC
