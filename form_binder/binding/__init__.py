"""Binder orchestrator, collection binding and binding results."""

from .binder import FormBinder
from .frames import UNBOUND, BindingFrame, RecursionGuard
from .result import BindingIssue, BindingResult, IssueCode


__all__ = [
    "UNBOUND",
    "BindingFrame",
    "BindingIssue",
    "BindingResult",
    "FormBinder",
    "IssueCode",
    "RecursionGuard",
]
