from __future__ import annotations
from typing import Protocol, runtime_checkable


@runtime_checkable
class LoggerLikeProtocol(Protocol):
    """Logging surface the engines write to (a plain logging.Logger fits)."""

    def debug(self, msg: str, *args, **kwargs) -> None: ...

    def warning(self, msg: str, *args, **kwargs) -> None: ...

    def error(self, msg: str, *args, **kwargs) -> None: ...

    def isEnabledFor(self, level: int) -> bool: ...


@runtime_checkable
class LoggerFactoryProtocol(Protocol):
    """Hands out 'expando.*' scoped loggers once base logging is configured."""

    def get_logger(self, name: str) -> LoggerLikeProtocol:
        ...
