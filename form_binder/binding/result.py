"""BindingResult and BindingIssue: what a bind call hands back.

Errors met during a bind are local and non-fatal. They are collected as
issues, each carrying the offending key, next to the best-effort instance.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from form_binder.errors import BindingFailedError


class IssueCode(str, Enum):
    MALFORMED_KEY = "malformed_key"
    CONVERSION_ERROR = "conversion_error"
    IDENTITY_NOT_FOUND = "identity_not_found"
    UNSUPPORTED_PROPERTY_KIND = "unsupported_property_kind"
    RECURSION_LIMIT = "recursion_limit"
    MISPLACED_KEY = "misplaced_key"


class BindingIssue(BaseModel):
    """One per-property failure recorded during a bind."""

    model_config = {"frozen": True}

    code: IssueCode
    key: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class BindingResult(BaseModel):
    """Populated instance plus every issue recorded while building it.

    Attributes:
        instance: The (possibly partially) populated target instance.
        issues: Recorded issues, in the order they were met.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    instance: Any
    issues: tuple[BindingIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    def issues_for(self, key: str) -> list[BindingIssue]:
        """Return the issues recorded against key."""
        return [issue for issue in self.issues if issue.key == key]

    def unwrap(self) -> Any:
        """Return the instance, raising ``BindingFailedError`` if issues were recorded."""
        if self.issues:
            raise BindingFailedError(self.issues)
        return self.instance
