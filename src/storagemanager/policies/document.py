"""Typed IAM-style policy documents."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Statement = dict[str, Any]


class PolicyDocument(BaseModel):
    """Policy document with an ordered statement collection.

    Statements are opaque access-control entries compared by value. Top-level
    keys other than Version and Statement are kept as-is.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    version: str | None = Field(default=None, alias="Version")
    statements: list[Statement] = Field(default_factory=list, alias="Statement")

    @classmethod
    def from_json(cls, text: str) -> PolicyDocument:
        return cls.model_validate_json(text)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def merge(self, statements: Iterable[Statement]) -> PolicyDocument:
        """Return a copy with statements appended (already present ones skipped)."""
        merged = list(self.statements)
        for statement in statements:
            if statement not in merged:
                merged.append(statement)
        return self.model_copy(update={"statements": merged})

    def subtract(self, statements: Iterable[Statement]) -> PolicyDocument:
        """Return a copy without every statement equal to one of statements."""
        removed = list(statements)
        remaining = [s for s in self.statements if s not in removed]
        return self.model_copy(update={"statements": remaining})

    def contains_all(self, statements: Iterable[Statement]) -> bool:
        wanted = list(statements)
        return bool(wanted) and all(s in self.statements for s in wanted)
