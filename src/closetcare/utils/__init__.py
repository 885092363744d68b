"""Small helpers shared across closetcare."""

from .redact import redact

__all__ = ["redact"]
