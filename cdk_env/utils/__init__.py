"""
Utility modules for the CDK environment toolkit.
"""

from .logging import setup_root_logger
from .console import Reporter

__all__ = ["setup_root_logger", "Reporter"]
