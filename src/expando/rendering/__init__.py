"""Public API surface for expando.rendering."""
__all__ = [
    "fields",
    "interpreter",
    "parser",
    "pipe",
    "width",
]
