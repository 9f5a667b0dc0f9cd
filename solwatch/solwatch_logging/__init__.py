"""
Structured logging for solwatch.

Use get_logger(__name__) in every module; configure_logging() switches level,
format or output stream at runtime.
"""

from solwatch.solwatch_logging.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
