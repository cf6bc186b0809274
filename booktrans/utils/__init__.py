"""
Utility modules

Import helpers directly from their module:

    from booktrans.utils.unified_logger import get_logger, LogType
"""

__all__ = []
