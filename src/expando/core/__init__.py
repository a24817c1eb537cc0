from __future__ import annotations

"""Public surface for expando.core.

Stable import location for the primitives every other layer builds on:

    from expando.core import Buffer, FieldRequest, FieldResult, RenderOptions
"""

from expando.core.buffer import Buffer, ResourceExhausted
from expando.core.models import (
    CommandResult,
    FieldRequest,
    FieldResult,
    FormatFlag,
    RenderOptions,
    SpamMatch,
)

__all__ = [
    "Buffer",
    "ResourceExhausted",
    "CommandResult",
    "FieldRequest",
    "FieldResult",
    "FormatFlag",
    "RenderOptions",
    "SpamMatch",
]
