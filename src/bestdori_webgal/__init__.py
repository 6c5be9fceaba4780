"""Bestdori to WebGAL converter.

This package converts Bestdori story scripts into WebGAL projects: it
parses the script, resolves and downloads every referenced asset
(including multi-file Live2D costumes), transpiles the script into WebGAL
scenes and packages everything into a WebGAL game directory.
"""

# Core library interface
from .pipeline import ConversionPipeline, DownloadPipeline, TranspilePipeline
from .registry import PlatformRegistry
from .sources.base import Deserializer, ScriptSource

# Core utilities
from .config import Config, load_config
from .core import AssetKind, ParsedScript, ResourceManifest, ResourceRef, TargetScript
from .errors import (
    ConversionError,
    FetchFailure,
    InvalidTargetPath,
    MalformedScript,
    PackagingIOFailure,
    UnresolvableAsset,
    UnsupportedCommand,
)
from .report import Event, Reporter, RunReport

# CLI interface
from .cli import convert, main

__version__ = "0.1.0"

# Auto-discover and register all platforms
PlatformRegistry.discover_platforms()

__all__ = [
    # Primary library interface
    "ConversionPipeline",
    "DownloadPipeline",
    "TranspilePipeline",
    "PlatformRegistry",
    "Deserializer",
    "ScriptSource",
    # Core utilities
    "AssetKind",
    "Config",
    "ParsedScript",
    "ResourceManifest",
    "ResourceRef",
    "TargetScript",
    "load_config",
    "Event",
    "Reporter",
    "RunReport",
    # Errors
    "ConversionError",
    "FetchFailure",
    "InvalidTargetPath",
    "MalformedScript",
    "PackagingIOFailure",
    "UnresolvableAsset",
    "UnsupportedCommand",
    # CLI
    "convert",
    "main",
]
