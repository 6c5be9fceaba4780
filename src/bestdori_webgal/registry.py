"""Platform registry for factory-based pipeline creation.

This module provides a central registry for script source factories,
enabling format-agnostic pipeline creation and automatic platform
discovery.
"""

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Callable

import httpx

if TYPE_CHECKING:
    from .config import Config
    from .pipeline import ConversionPipeline
    from .report import Reporter
    from .sources.base import ScriptSource


class PlatformRegistry:
    """Central registry for script source factories.

    Platforms register themselves when imported, and the registry can
    automatically discover all available platforms.

    This design keeps the core pipeline format-agnostic while allowing
    dynamic platform loading.
    """

    _factories: dict[str, Callable[..., "ScriptSource"]] = {}

    @classmethod
    def register_factory(cls, name: str, factory: Callable[..., "ScriptSource"]) -> None:
        """Register a factory function for creating sources.

        Args:
            name: Name of the platform (e.g., 'bestdori')
            factory: Callable taking a Config and returning a ScriptSource

        Example:
            >>> def create_bestdori_source(config: Config) -> BestdoriSource:
            ...     return BestdoriSource(config)
            >>> PlatformRegistry.register_factory('bestdori', create_bestdori_source)
        """
        cls._factories[name] = factory

    @classmethod
    def create_source(cls, name: str, config: "Config") -> "ScriptSource":
        """Create a source from a registered platform.

        Raises:
            ValueError: If name is not registered
        """
        if name not in cls._factories:
            available = ", ".join(cls._factories.keys()) or "none"
            raise ValueError(f"Unknown platform: '{name}'. Available platforms: {available}")
        return cls._factories[name](config=config)

    @classmethod
    def create_pipeline(
        cls,
        name: str,
        config: "Config | None" = None,
        reporter: "Reporter | None" = None,
        client: httpx.Client | None = None,
        keep_staging: bool = False,
    ) -> "ConversionPipeline":
        """Create a conversion pipeline for a registered platform.

        Args:
            name: Name of the registered platform
            config: Run configuration; loaded from the bundled data files
                    when omitted
            reporter: Receives progress events and warnings
            client: HTTP client to use instead of one built from config
            keep_staging: Keep the download staging directory after packaging

        Returns:
            ConversionPipeline wired with the platform's components

        Raises:
            ValueError: If name is not registered
            ConfigError: If the configuration cannot be loaded

        Example:
            >>> pipeline = PlatformRegistry.create_pipeline(
            ...     'bestdori',
            ...     config=load_config(max_workers=8),
            ... )
        """
        # Import here to avoid circular dependency
        from .config import load_config
        from .downloader import HttpDownloader, HttpFetcher
        from .packager import WebgalPackager
        from .pipeline import ConversionPipeline, DownloadPipeline, TranspilePipeline
        from .report import Reporter

        config = config or load_config()
        reporter = reporter or Reporter()
        source = cls.create_source(name, config)
        fetcher = HttpFetcher(config, client=client)

        return ConversionPipeline(
            source=source,
            transpile=TranspilePipeline(source.get_deserializer(), source.get_transpiler(reporter)),
            download=DownloadPipeline(
                source.get_resolver(fetcher, reporter),
                HttpDownloader(fetcher, reporter),
            ),
            packager=WebgalPackager(reporter),
            reporter=reporter,
            keep_staging=keep_staging,
        )

    @classmethod
    def list_platforms(cls) -> list[str]:
        """List all registered platform names.

        Example:
            >>> PlatformRegistry.list_platforms()
            ['bestdori']
        """
        return list(cls._factories.keys())

    @classmethod
    def discover_platforms(cls) -> None:
        """Auto-discover and import all platforms.

        This method iterates through the platforms/ directory and attempts
        to import each platform module. Platforms with missing dependencies
        are skipped.

        Platforms automatically register themselves when imported via their
        __init__.py files.
        """
        platforms_dir = Path(__file__).parent / "platforms"

        if not platforms_dir.exists():
            return

        for platform_path in platforms_dir.iterdir():
            if not platform_path.is_dir():
                continue

            if not (platform_path / "__init__.py").exists():
                continue

            try:
                # This triggers auto-registration via the platform's __init__.py
                importlib.import_module(f".platforms.{platform_path.name}", package=__package__)
            except ImportError:
                # Platform dependencies not installed
                continue
