from __future__ import annotations

"""Project-wide size constants shared by the buffer, substitution and format layers.

Scratch sizes mirror the classic mail-client string classes so rendered rows
and rewritten names keep the same bounds everywhere.
"""

SHORT_STRING: int = 128
STRING: int = 256
LONG_STRING: int = 1024

# Minimum number of bytes a Buffer grows by on reallocation.
BUFFER_GROWTH: int = 128

# Columns reserved in front of a row when the arrow cursor is drawn.
ARROW_CURSOR_WIDTH: int = 3

DEFAULT_COLUMNS: int = 80
DEFAULT_PIPE_TIMEOUT: float = 10.0
DEFAULT_MAX_RECYCLE: int = 8
