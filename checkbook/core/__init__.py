"""
Core module for the Checkbook permissions service.

Exports the main configuration component.
"""

from checkbook.core.config import settings

__all__ = [
    # Config
    "settings",
]
