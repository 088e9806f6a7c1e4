"""In-memory execution traces: spans, elementary spans, dependencies and categories."""

__version__ = "0.1.0"

__all__ = ["elements", "enumeration", "options", "spans", "timeline", "trace"]