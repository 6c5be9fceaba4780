"""Conversion pipeline.

This module provides the main interface for converting a source script into
a WebGAL game directory. The pipeline is format-agnostic and delegates to
the components of a ScriptSource.

Two pipelines run side by side: the TranspilePipeline turns the parsed
script into scenes on a worker thread, while the DownloadPipeline resolves
and fetches assets in the calling thread. The packager joins both results.
"""

import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .core.instructions import TargetScript
from .core.resources import ResourceManifest
from .core.script import ParsedScript
from .downloader import Downloader
from .errors import MalformedScript
from .packager import Packager
from .report import DownloadReport, Reporter, RunReport
from .resolvers.base import Resolver
from .sources.base import Deserializer, ScriptSource
from .transpilers.base import Transpiler

STAGING_DIR_NAME = ".bd2wg-staging"


class TranspilePipeline:
    """Deserialize and transpile a script."""

    def __init__(self, deserializer: Deserializer, transpiler: Transpiler):
        self.deserializer = deserializer
        self.transpiler = transpiler

    def deserialize(self, text: str | bytes, origin: str | None = None) -> ParsedScript:
        return self.deserializer.deserialize(text, origin)

    def transpile(self, script: ParsedScript) -> TargetScript:
        self.transpiler.reporter.enter_stage("transpile", f"Transpiling {len(script)} commands...")
        return self.transpiler.transpile(script)

    def run(self, text: str | bytes, origin: str | None = None) -> TargetScript:
        return self.transpile(self.deserialize(text, origin))


class DownloadPipeline:
    """Resolve the assets of a script and download them."""

    def __init__(self, resolver: Resolver, downloader: Downloader):
        self.resolver = resolver
        self.downloader = downloader

    def resolve(self, script: ParsedScript) -> ResourceManifest:
        reporter = self.resolver.reporter
        reporter.enter_stage("resolve", "Resolving assets...")
        manifest = self.resolver.build_manifest(script)
        reporter.info(f"Found {len(manifest)} assets ({manifest.duplicates} duplicate references)")
        return manifest

    def run(self, script: ParsedScript, staging_dir: Path) -> DownloadReport:
        manifest = self.resolve(script)
        self.resolver.reporter.enter_stage("download", f"Downloading {len(manifest)} assets...")
        return self.downloader.download(manifest, staging_dir)

    def cancel(self) -> None:
        self.downloader.cancel()

    def close(self) -> None:
        self.downloader.close()


class ConversionPipeline:
    """Main interface for script conversion.

    Example:
        >>> # Via registry (recommended)
        >>> from bestdori_webgal import PlatformRegistry
        >>> with PlatformRegistry.create_pipeline('bestdori') as pipeline:
        ...     report = pipeline.run(Path('story.json'), Path('game'))
        >>> report.summary()['assets_failed']
        0
    """

    def __init__(
        self,
        source: ScriptSource,
        transpile: TranspilePipeline,
        download: DownloadPipeline,
        packager: Packager,
        reporter: Reporter | None = None,
        keep_staging: bool = False,
    ):
        """Initialize the pipeline.

        Args:
            source: Source the components were created from
            transpile: Deserialize/transpile half
            download: Resolve/download half
            packager: Writes the target directory
            reporter: Collects warnings of every stage
            keep_staging: Leave the staging directory in place after packaging
        """
        self.source = source
        self.transpile = transpile
        self.download = download
        self.packager = packager
        self.reporter = reporter or Reporter()
        self.keep_staging = keep_staging

    def __enter__(self) -> "ConversionPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.download.close()

    def cancel(self) -> None:
        """Stop downloading; files already in place are kept."""
        self.download.cancel()

    def read_script(self, script_path: Path) -> ParsedScript:
        """Read and deserialize a script file.

        Raises:
            MalformedScript: If the file cannot be read or parsed
        """
        self.reporter.enter_stage("read", f"Reading script: {script_path}")
        try:
            text = Path(script_path).read_bytes()
        except OSError as e:
            raise MalformedScript(f"Cannot read script: {e.strerror or e}", str(script_path)) from e
        return self.transpile.deserialize(text, origin=str(script_path))

    def run(self, script_path: Path, target_dir: Path, staging_dir: Path | None = None) -> RunReport:
        """Convert one script into a WebGAL game directory.

        Args:
            script_path: Source script file
            target_dir: Game directory to write (created if missing)
            staging_dir: Download directory; defaults to a hidden directory
                         inside target_dir

        Returns:
            RunReport; asset failures make it partial but never raise

        Raises:
            MalformedScript: If the script cannot be parsed
            InvalidTargetPath: If target_dir cannot be used
            PackagingIOFailure: If a scene file cannot be written
            KeyboardInterrupt: Re-raised after downloads were cancelled
        """
        parsed = self.read_script(script_path)
        target = self.packager.prepare_target(Path(target_dir))
        staging = Path(staging_dir) if staging_dir is not None else target / STAGING_DIR_NAME

        try:
            with ThreadPoolExecutor(max_workers=1, thread_name_prefix="bd2wg-transpile") as executor:
                scenes = executor.submit(self.transpile.transpile, parsed)
                downloads = self.download.run(parsed, staging)
                script = scenes.result()

            self.reporter.enter_stage("package", f"Writing WebGAL project: {target}")
            result = self.packager.package(script, downloads, target, staging)
        finally:
            if not self.keep_staging:
                shutil.rmtree(staging, ignore_errors=True)

        warnings = list(self.reporter.warnings)
        reported = {id(w) for w in warnings}
        warnings.extend(r.error for r in downloads.failed if r.error is not None and id(r.error) not in reported)

        return RunReport(
            script=str(script_path),
            target=str(target),
            commands=len(parsed),
            scenes=len(script),
            instructions=len(script.instructions),
            downloads=downloads,
            packaged=result.packaged,
            missing=result.missing,
            warnings=warnings,
        )
