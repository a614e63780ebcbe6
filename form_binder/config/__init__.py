"""Settings and logging setup."""

from .logging import configure_logging
from .settings import BinderSettings


__all__ = ["BinderSettings", "configure_logging"]
