"""
Утилиты для переноса репозиториев.
"""

from .logger import get_logger, setup_logging, StructuredLogger

__all__ = [
    "get_logger",
    "setup_logging",
    "StructuredLogger"
]
