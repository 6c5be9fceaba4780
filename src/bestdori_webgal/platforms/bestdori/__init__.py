"""Bestdori platform for the conversion pipeline.

This platform reads Bestdori story scripts, resolves their assets on the
Bestdori content host and transpiles them to WebGAL scenes.
"""

from ...config import Config
from ...registry import PlatformRegistry
from .naming import AssetNaming
from .resolver import BestdoriResolver
from .source import BestdoriDeserializer, BestdoriSource
from .transpiler import WebgalTranspiler


def _create_bestdori_source(config: Config, **kwargs) -> BestdoriSource:
    """Factory function for creating Bestdori sources.

    Args:
        config: Run configuration
        **kwargs: Additional parameters (unused for Bestdori)

    Returns:
        BestdoriSource instance
    """
    return BestdoriSource(config)


# Auto-register at module import
PlatformRegistry.register_factory("bestdori", _create_bestdori_source)

__all__ = [
    "AssetNaming",
    "BestdoriDeserializer",
    "BestdoriResolver",
    "BestdoriSource",
    "WebgalTranspiler",
]
