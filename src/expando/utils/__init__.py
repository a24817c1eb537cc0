"""
expando.utils – Small shared string helpers (sizes, quoting, %s templates).
"""
from .pretty import expand_file_fmt, expand_fmt, open_read, pretty_size, quote_filename

__all__ = ["expand_file_fmt", "expand_fmt", "open_read", "pretty_size", "quote_filename"]
