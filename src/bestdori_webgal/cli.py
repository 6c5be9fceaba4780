"""Command-line interface for the converter.

This module provides the CLI entry point for converting a Bestdori story
script into a WebGAL game directory.
"""

import argparse
import json
import sys
from pathlib import Path

from .config import Config, load_config
from .errors import ConversionError
from .registry import PlatformRegistry
from .report import Reporter, RunReport, print_event, silent

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CANCELLED = 130


def convert(
    script_path: Path,
    output_dir: Path,
    config: Config | None = None,
    platform: str = "bestdori",
    keep_staging: bool = False,
    reporter: Reporter | None = None,
) -> RunReport:
    """Convert one story script into a WebGAL game directory.

    Args:
        script_path: Source script file
        output_dir: WebGAL game directory to write
        config: Run configuration (bundled defaults when omitted)
        platform: Registered source platform
        keep_staging: Keep downloaded files in the staging directory
        reporter: Receives progress events

    Returns:
        RunReport of the conversion

    Raises:
        ConversionError: On fatal errors (malformed script, unusable target)
    """
    with PlatformRegistry.create_pipeline(
        platform,
        config=config,
        reporter=reporter,
        keep_staging=keep_staging,
    ) as pipeline:
        try:
            return pipeline.run(script_path, output_dir)
        except KeyboardInterrupt:
            pipeline.cancel()
            raise


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bd2wg",
        description="Convert a Bestdori story script into a WebGAL project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  bd2wg --script story.json --output WebGAL/game

  # Fewer parallel downloads, longer timeout
  bd2wg --script story.json --output game --max-workers 8 --timeout 60

  # Save the summary
  bd2wg --script story.json --output game --quiet > summary.json
        """,
    )

    parser.add_argument("--script", required=True, help="Bestdori story script (JSON)")

    parser.add_argument("--output", required=True, help="WebGAL game directory to write")

    parser.add_argument(
        "--platform",
        default="bestdori",
        help="Source script platform (default: bestdori)",
    )

    parser.add_argument("--urls", help="URL table JSON to use instead of the bundled one")

    parser.add_argument("--headers", help="HTTP headers JSON to use instead of the bundled ones")

    parser.add_argument("--max-workers", type=int, help="Maximum parallel downloads (default: 32)")

    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default: 24)")

    parser.add_argument("--retries", type=int, help="Retries for transient fetch errors (default: 3)")

    parser.add_argument(
        "--keep-staging",
        action="store_true",
        help="Keep the download staging directory after packaging",
    )

    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the converter."""
    args = build_parser().parse_args(argv)

    # Validate script exists
    script = Path(args.script)
    if not script.is_file():
        print(f"Error: Script does not exist: {script}", file=sys.stderr)
        sys.exit(EXIT_FATAL)

    try:
        config = load_config(
            urls_path=args.urls,
            headers_path=args.headers,
            max_workers=args.max_workers,
            timeout=args.timeout,
            retries=args.retries,
        )
        reporter = Reporter(silent if args.quiet else print_event)

        report = convert(
            script,
            Path(args.output),
            config=config,
            platform=args.platform,
            keep_staging=args.keep_staging,
            reporter=reporter,
        )
    except KeyboardInterrupt:
        print("Cancelled: downloads stopped, partial files removed", file=sys.stderr)
        sys.exit(EXIT_CANCELLED)
    except (ConversionError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_FATAL)

    summary = report.summary()
    if report.partial:
        print(f"Finished with {len(report.missing)} missing assets", file=sys.stderr)
    elif not args.quiet:
        print("Conversion successful!", file=sys.stderr)

    # Output JSON to stdout
    json.dump(summary, sys.stdout, indent=2, ensure_ascii=False)
    print()  # Add newline at end
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
