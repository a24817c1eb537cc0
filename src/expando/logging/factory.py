from __future__ import annotations

import logging
from typing import Dict, Optional, TextIO

from expando.logging.helpers import get_logger, setup_base_logger


class DefaultLoggerFactory:
    """Configure the ``expando`` base logger on first use and hand out children.

    The CLI builds one factory per invocation; handing the same name out
    twice returns the same logger object.
    """

    def __init__(self, *, json_logs: bool = False, level: int = logging.INFO, stream: Optional[TextIO] = None) -> None:
        self._json = bool(json_logs)
        self._level = int(level)
        self._stream: Optional[TextIO] = stream
        self._base: Optional[logging.Logger] = None
        self._issued: Dict[str, logging.Logger] = {}

    @property
    def base(self) -> logging.Logger:
        if self._base is None:
            self._base = setup_base_logger(json_logs=self._json, level=self._level, stream=self._stream)
        return self._base

    def get_logger(self, name: str) -> logging.Logger:
        if name not in self._issued:
            _ = self.base
            self._issued[name] = get_logger(name)
        return self._issued[name]
