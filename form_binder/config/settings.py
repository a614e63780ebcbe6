"""Binder settings: code defaults overridable through ``FORM_BINDER_*`` env vars.

Priority chain (highest to lowest):
  1. Init kwargs
  2. Env vars  -- ``FORM_BINDER_`` prefix
  3. Code defaults
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class BinderSettings(BaseSettings):
    """Settings for one ``FormBinder``.

    Attributes:
        identity_name: Attribute name that marks an entity's identity by convention.
        key_style: ``exact`` uses attribute names as key segments, ``pascal``
            maps ``first_name`` to ``FirstName``.
        max_depth: Deepest nesting the recursion guard admits.
        strict_keys: Raise on the first malformed key instead of recording it.
        fallback_to_empty_prefix: Retry with the empty prefix when no key
            starts with the requested one.
        resolve_root_entity: Resolve the root instance through the lookup when
            its identity token is present.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FORM_BINDER_",
    }

    identity_name: str = "id"
    key_style: Literal["exact", "pascal"] = "exact"
    max_depth: int = Field(default=32, ge=1)
    strict_keys: bool = False
    fallback_to_empty_prefix: bool = True
    resolve_root_entity: bool = False
