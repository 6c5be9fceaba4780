"""Source adapters for the conversion pipeline.

This package contains base classes and interfaces for source formats.
Format-specific implementations live in the platforms/ directory.
"""

from .base import Deserializer, ScriptSource

__all__ = ["Deserializer", "ScriptSource"]
