from __future__ import annotations

"""
fields – Helpers for writing field callbacks.

`format_field` applies expando prefix flags to a value the way a printf
``%-10.5s`` would, but counting screen columns instead of characters:

  • ``-``        left-justify (default is right-justify)
  • ``=``        centre
  • ``N``        minimum width in columns
  • ``.P``       maximum width in columns

`MappingCallback` turns a plain mapping of code → value into a field
callback, which covers most callers that just want to fill in a row.
"""

import re
from typing import Callable, Mapping, Optional, Union

from expando.core.models import FieldRequest, FieldResult
from expando.rendering.width import strwidth, wstr_trunc

_PREFIX_RX = re.compile(r"^([-=]?)(\d*)(?:\.(\d*))?$")

FieldValue = Union[str, int, float, None, FieldResult, Callable[[FieldRequest], object]]


def format_field(prefix: str, text: str) -> str:
    """Apply *prefix* justification/width/precision to *text*."""
    if not prefix:
        return text
    m = _PREFIX_RX.match(prefix)
    if m is None:
        return text
    justify, width_s, precision_s = m.groups()

    if precision_s is not None:
        precision = int(precision_s) if precision_s else 0
        chars, _nbytes, _ncols = wstr_trunc(text, 4 * len(text), precision)
        text = text[:chars]

    if not width_s:
        return text
    gap = int(width_s) - strwidth(text)
    if gap <= 0:
        return text
    if justify == "-":
        return text + " " * gap
    if justify == "=":
        left = gap // 2
        return " " * left + text + " " * (gap - left)
    return " " * gap + text


class MappingCallback:
    """Field callback backed by a mapping of code → value.

    Values may be plain strings (or anything ``str()`` accepts), a
    ready-made FieldResult, or a callable receiving the FieldRequest. Unknown
    codes expand to nothing. Presence for conditionals is decided on the raw
    value, before any padding from the prefix.
    """

    def __init__(
        self,
        mapping: Mapping[str, FieldValue],
        *,
        formatter: Optional[Callable[[str, str], str]] = None,
    ) -> None:
        self._mapping = mapping
        self._fmt = formatter or format_field

    def __call__(self, request: FieldRequest) -> FieldResult:
        value = self._mapping.get(request.code)
        if callable(value):
            value = value(request)
        if isinstance(value, FieldResult):
            return value
        raw = "" if value is None else str(value)
        return FieldResult(text=self._fmt(request.prefix, raw), present=bool(raw))
