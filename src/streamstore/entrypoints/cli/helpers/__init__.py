"""CLI helpers for STREAMSTORE.

Utilities used by the command-line interface: database URL resolution and
redaction, message emitters that write to stderr, and the ``-L`` option
parser.
"""

from .db_url import open_engine, sanitize_url
from .messages import error, success, warn

__all__ = ["error", "open_engine", "sanitize_url", "success", "warn"]
