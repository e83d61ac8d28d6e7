"""
Welut - Utilities Module
Utilities module
"""

from .lut_manager import LUTManager, LutItem

__all__ = ['LUTManager', 'LutItem']
