"""Base resolver for turning asset references into downloads.

A resolver maps every asset a command references to ResourceRef values
(remote URL + local path). build_manifest() walks a whole script and
collects the deduplicated ResourceManifest the downloader consumes.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..core.resources import ResourceManifest, ResourceRef
from ..core.script import ParsedScript, SourceCommand
from ..errors import UnresolvableAsset
from ..report import Reporter


class Resolver(ABC):
    """Abstract base class for resource resolvers."""

    def __init__(self, reporter: Reporter | None = None):
        self.reporter = reporter or Reporter()
        # model.json documents produced while resolving, keyed by path
        self.model_configs: dict[str, dict[str, Any]] = {}

    @abstractmethod
    def resolve(self, command: SourceCommand) -> list[ResourceRef]:
        """Resolve the assets referenced by one command.

        Implementations report per-reference problems through the reporter
        and return the refs they could compute. Commands without assets
        return an empty list.

        Raises:
            UnresolvableAsset: If the command's only asset cannot be named
        """
        pass

    def build_manifest(self, script: ParsedScript) -> ResourceManifest:
        """Resolve every command of a script into one manifest.

        Refs are kept in script order; when two refs compute the same path
        the first one wins.

        Args:
            script: Parsed source script

        Returns:
            ResourceManifest with the model configs of expanded bundles
        """
        manifest = ResourceManifest()
        for command in script:
            try:
                refs = self.resolve(command)
            except UnresolvableAsset as e:
                self.reporter.warn(e)
                continue
            manifest.extend(refs)

        manifest.model_configs.update(self.model_configs)
        return manifest
