"""Bestdori resource resolver.

Single-file assets are named directly by AssetNaming. Live2D costumes are
expanded in two phases: the costume's buildData.asset manifest is fetched
and parsed first, then every file it lists becomes its own ResourceRef and
a WebGAL model.json document is generated for the costume.
"""

from dataclasses import replace
from typing import TYPE_CHECKING

from ...core.resources import AssetKind, ResourceRef
from ...core.script import (
    BackgroundCommand,
    CardStillCommand,
    LayoutCommand,
    LayoutType,
    MotionCommand,
    SoundCommand,
    SourceCommand,
)
from ...errors import FetchFailure, UnresolvableAsset
from ...report import Reporter
from ...resolvers.base import Resolver
from .live2d import BuildData, build_model
from .naming import AssetNaming, CostumeTracker

if TYPE_CHECKING:
    from ...downloader import HttpFetcher


class BestdoriResolver(Resolver):
    """Resolver for Bestdori asset references.

    Args:
        naming: Naming rules built from the run's URL tables
        fetcher: Used to read Live2D manifests during resolution
        reporter: Receives non-fatal resolution errors
    """

    def __init__(self, naming: AssetNaming, fetcher: "HttpFetcher", reporter: Reporter | None = None):
        super().__init__(reporter)
        self.naming = naming
        self.fetcher = fetcher
        self.costumes = CostumeTracker()
        self._expanded: set[str] = set()

    def resolve(self, command: SourceCommand) -> list[ResourceRef]:
        if isinstance(command, (BackgroundCommand, CardStillCommand)):
            return [self.naming.background(command.image)]

        if isinstance(command, SoundCommand):
            refs = []
            for reference, rule in ((command.bgm, self.naming.bgm), (command.se, self.naming.sound_effect)):
                if reference is None:
                    continue
                try:
                    refs.append(rule(reference))
                except UnresolvableAsset as e:
                    self.reporter.warn(e)
            return refs

        if isinstance(command, (LayoutCommand, MotionCommand)):
            character = command.motion.character
            costume = self.costumes.costume_for(character, command.costume)
            # Only appearing figures load a model; move and hide reuse it
            if isinstance(command, LayoutCommand) and command.layout is not LayoutType.APPEAR:
                return []
            if costume is None:
                raise UnresolvableAsset(
                    AssetKind.FIGURE.value, f"character {character}", "no costume given or seen before"
                )
            return self.expand_costume(costume)

        return []

    def expand_costume(self, costume: str) -> list[ResourceRef]:
        """Fetch a costume's build manifest and list every file it needs.

        Each costume is expanded once per resolver; later calls return an
        empty list.

        Args:
            costume: Costume name (e.g. "039_casual-2023")

        Returns:
            The manifest ref (with its bytes as payload when the fetch
            succeeded) followed by one ref per model file
        """
        if costume in self._expanded:
            return []
        self._expanded.add(costume)

        manifest_ref = self.naming.figure_manifest(costume)
        try:
            payload = self.fetcher.fetch(manifest_ref.url)
        except FetchFailure as e:
            # Emitted without payload; the downloader fetches it again
            e.path = manifest_ref.path
            self.reporter.warn(e)
            return [manifest_ref]

        manifest_ref = replace(manifest_ref, payload=payload)
        try:
            build = BuildData.from_bytes(payload)
        except ValueError as e:
            self.reporter.warn(
                UnresolvableAsset(AssetKind.FIGURE.value, costume, f"invalid {manifest_ref.url}: {e}")
            )
            return [manifest_ref]

        config, files = build_model(build)
        self.model_configs[self.naming.model_config_path(costume)] = dict(config)

        refs = [manifest_ref]
        for entry, local in files:
            refs.append(self.naming.figure_file(costume, entry.bundle, entry.file, local))

        self.reporter.info(f"Expanded Live2D costume {costume} ({len(files)} files)")
        return refs
