"""Application support code shared by the SDK entry points: logging.

This package is framework-agnostic. It must NEVER import from ``courier/``.
"""

from core.logger import CourierLogger

__all__ = [
    "CourierLogger",
]
