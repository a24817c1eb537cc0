from __future__ import annotations
from typing import Callable, Optional, Protocol, Union, runtime_checkable

from expando.core.models import FieldRequest, FieldResult, FormatFlag

FieldCallbackResult = Union[FieldResult, str, None]
FieldCallback = Callable[[FieldRequest], FieldCallbackResult]


@runtime_checkable
class FormatInterpreterProtocol(Protocol):
    """Protocol for expando format interpreters."""

    def render(
        self,
        template: str,
        callback: FieldCallback,
        *,
        col: int = 0,
        cols: Optional[int] = None,
        buflen: Optional[int] = None,
        flags: FormatFlag = FormatFlag.NONE,
    ) -> str:
        ...
