"""Core model for the conversion pipeline.

This package contains the parsed source script model, the WebGAL
instruction model, resource references, JSON document types and
schema validation used across all platform implementations.
"""

from .instructions import Scene, TargetInstruction, TargetScript
from .resources import AssetKind, ResourceManifest, ResourceRef
from .script import AssetReference, ParsedScript, SourceCommand
from .validator import validate_story, validate_with_error_details

__all__ = [
    "AssetKind",
    "AssetReference",
    "ParsedScript",
    "ResourceManifest",
    "ResourceRef",
    "Scene",
    "SourceCommand",
    "TargetInstruction",
    "TargetScript",
    "validate_story",
    "validate_with_error_details",
]
