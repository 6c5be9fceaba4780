"""Assembly of the WebGAL game directory.

The packager writes the transpiled scenes, moves downloaded assets from the
staging directory into their final place and writes a model.json for every
Live2D costume that received files.
"""

import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from .core.instructions import ChangeFigure, TargetScript
from .core.resources import AssetKind, ResourceRef
from .errors import InvalidTargetPath, PackagingIOFailure, UnsupportedCommand
from .paths import validate_path_safety
from .report import DownloadReport, Reporter


def model_names(config: dict[str, Any]) -> tuple[set[str], set[str]]:
    """Motion and expression names a model.json makes available."""
    motions = set(config.get("motions", {}))
    expressions = {e["name"] for e in config.get("expressions", [])}
    return motions, expressions


@dataclass
class PackageResult:
    """What the packager wrote.

    Attributes:
        scenes: Scene files written
        model_configs: model.json files written
        packaged: Number of assets moved into the target
        missing: Refs that are not present in the target
    """

    scenes: list[Path] = field(default_factory=list)
    model_configs: list[Path] = field(default_factory=list)
    packaged: int = 0
    missing: list[ResourceRef] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.missing)


class Packager(ABC):
    """Abstract base class for target project packagers."""

    def prepare_target(self, target_dir: Path) -> Path:
        """Check and create the target directory.

        Raises:
            InvalidTargetPath: If the path exists and is not a directory, or
                               cannot be created
        """
        target = Path(target_dir)
        if target.exists() and not target.is_dir():
            raise InvalidTargetPath(f"Target is not a directory: {target}")
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InvalidTargetPath(f"Cannot create target directory {target}: {e}") from e
        return target

    @abstractmethod
    def package(
        self,
        script: TargetScript,
        downloads: DownloadReport,
        target_dir: Path,
        staging_dir: Path,
    ) -> PackageResult:
        """Write the target project.

        Args:
            script: Transpiled scenes
            downloads: Download results; successful files sit in staging_dir
            target_dir: Game directory to write
            staging_dir: Directory the downloader wrote to

        Returns:
            PackageResult

        Raises:
            InvalidTargetPath: If target_dir cannot be used
            PackagingIOFailure: If a scene file cannot be written
        """
        pass


class WebgalPackager(Packager):
    """Packager for the WebGAL game directory layout."""

    def __init__(self, reporter: Reporter | None = None):
        self.reporter = reporter or Reporter()

    def package(
        self,
        script: TargetScript,
        downloads: DownloadReport,
        target_dir: Path,
        staging_dir: Path,
    ) -> PackageResult:
        target = self.prepare_target(target_dir)
        result = PackageResult(missing=list(downloads.missing))

        for scene in script:
            result.scenes.append(self.write_scene(target, scene.relative_path, scene.render()))

        packaged_dirs: set[PurePosixPath] = set()
        for download in downloads.succeeded:
            if self.move_asset(download.ref, Path(staging_dir), target):
                result.packaged += 1
                packaged_dirs.add(PurePosixPath(download.ref.path).parent)
            else:
                result.missing.append(download.ref)

        model_configs = downloads.manifest.model_configs
        for path, config in model_configs.items():
            if PurePosixPath(path).parent not in packaged_dirs:
                continue
            written = self.write_model_config(target, path, config)
            if written is not None:
                result.model_configs.append(written)

        self.check_figures(script, model_configs)
        return result

    def write_scene(self, target: Path, relative_path: str, text: str) -> Path:
        destination = target / relative_path
        try:
            validate_path_safety(destination, target)
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(text, encoding="utf-8")
        except (OSError, ValueError) as e:
            raise PackagingIOFailure(relative_path, str(e)) from e
        return destination

    def move_asset(self, ref: ResourceRef, staging: Path, target: Path) -> bool:
        source = ref.absolute_path(staging)
        destination = ref.absolute_path(target)
        try:
            validate_path_safety(destination, target)
            destination.parent.mkdir(parents=True, exist_ok=True)
            os.replace(source, destination)
        except (OSError, ValueError) as e:
            self.reporter.warn(PackagingIOFailure(ref.path, str(e)))
            return False
        return True

    def write_model_config(self, target: Path, path: str, config: dict[str, Any]) -> Path | None:
        destination = target.joinpath(*PurePosixPath(path).parts)
        try:
            validate_path_safety(destination, target)
            destination.parent.mkdir(parents=True, exist_ok=True)
            with destination.open("w", encoding="utf-8") as f:
                json.dump(config, f, indent=2, ensure_ascii=False)
        except (OSError, ValueError) as e:
            self.reporter.warn(PackagingIOFailure(path, str(e)))
            return None
        return destination

    def check_figures(self, script: TargetScript, model_configs: dict[str, dict[str, Any]]) -> None:
        """Warn about motions and expressions a model does not provide."""
        reported: set[tuple[str, str, str]] = set()
        for instruction in script.instructions:
            if not isinstance(instruction, ChangeFigure) or instruction.model is None:
                continue
            config = model_configs.get(f"{AssetKind.FIGURE.directory}/{instruction.model}")
            if config is None:
                continue
            motions, expressions = model_names(config)
            for label, name, available in (
                ("motion", instruction.motion, motions),
                ("expression", instruction.expression, expressions),
            ):
                if name is None or name in available:
                    continue
                key = (instruction.model, label, name)
                if key in reported:
                    continue
                reported.add(key)
                self.reporter.warn(
                    UnsupportedCommand(None, "changeFigure", f"{label} {name!r} is not part of {instruction.model}")
                )
