"""Resource resolvers.

Format-specific implementations live in the platforms/ directory.
"""

from .base import Resolver

__all__ = ["Resolver"]
