"""Script transpilers.

Format-specific implementations live in the platforms/ directory.
"""

from .base import Transpiler

__all__ = ["Transpiler"]
