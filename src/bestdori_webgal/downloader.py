"""Concurrent asset downloading.

HttpFetcher wraps one shared httpx.Client with retries and cancellation.
HttpDownloader fans a ResourceManifest out over a thread pool and collects
one DownloadResult per ref. A failed ref never aborts its siblings, and a
destination file is either fully written or left untouched: bodies are
streamed to "<dest>.part" and moved into place only when complete.
"""

import os
import random
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TypeVar

import httpx

from .config import Config
from .core.resources import ResourceManifest, ResourceRef
from .errors import FetchFailure
from .paths import validate_path_safety
from .report import DownloadReport, DownloadResult, Reporter

T = TypeVar("T")

# Responses worth retrying; other 4xx fail immediately
RETRY_STATUS = {429, 500, 502, 503, 504}

PART_SUFFIX = ".part"


def create_client(config: Config) -> httpx.Client:
    """Create the shared HTTP client for one run."""
    return httpx.Client(
        headers=dict(config.headers),
        timeout=httpx.Timeout(config.timeout),
        follow_redirects=True,
    )


class HttpFetcher:
    """Fetches URLs with retries, exponential backoff and cancellation.

    Args:
        config: Run configuration (headers, timeout, retries)
        client: Client to use instead of one built from config; the fetcher
                does not close clients it did not create
        backoff: Base delay in seconds; attempt n waits backoff * 2**n
    """

    def __init__(self, config: Config, client: httpx.Client | None = None, backoff: float = 0.5):
        self.config = config
        self.client = client if client is not None else create_client(config)
        self._owns_client = client is None
        self.backoff = backoff
        self.cancelled = threading.Event()

    def cancel(self) -> None:
        """Stop starting new fetches and abort streams in progress."""
        self.cancelled.set()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch(self, url: str) -> bytes:
        """Fetch a whole response body.

        Raises:
            FetchFailure: After the last failed attempt, or when cancelled
        """

        def get() -> bytes:
            response = self.client.get(url)
            response.raise_for_status()
            return response.content

        return self._with_retries(url, None, get)

    def fetch_to(self, url: str, destination: Path, path: str | None = None) -> int:
        """Stream a response body into destination.

        The caller owns destination; on failure it may hold a partial body.

        Returns:
            Number of bytes written

        Raises:
            FetchFailure: After the last failed attempt, or when cancelled
        """

        def stream() -> int:
            written = 0
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                with destination.open("wb") as f:
                    for chunk in response.iter_bytes():
                        if self.cancelled.is_set():
                            raise FetchFailure(url, "cancelled", path=path)
                        f.write(chunk)
                        written += len(chunk)
            return written

        return self._with_retries(url, path, stream)

    def _with_retries(self, url: str, path: str | None, operation: Callable[[], T]) -> T:
        attempts = self.config.retries + 1
        for attempt in range(attempts):
            if self.cancelled.is_set():
                raise FetchFailure(url, "cancelled", path=path)

            try:
                return operation()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                failure = FetchFailure(url, "http", f"HTTP {status}", path)
                if status not in RETRY_STATUS:
                    raise failure from exc
            except httpx.TimeoutException as exc:
                failure = FetchFailure(url, "timeout", str(exc) or "timed out", path)
            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
                raise FetchFailure(url, "network", str(exc), path) from exc
            except httpx.TransportError as exc:
                failure = FetchFailure(url, "network", str(exc) or type(exc).__name__, path)

            if attempt + 1 < attempts:
                # Returns early when cancelled
                delay = self.backoff * (2**attempt) + random.uniform(0.0, self.backoff / 2)
                self.cancelled.wait(delay)

        raise failure


class Downloader(ABC):
    """Abstract base class for manifest downloaders."""

    @abstractmethod
    def download(self, manifest: ResourceManifest, root: Path) -> DownloadReport:
        """Download every ref of a manifest below root.

        Args:
            manifest: Refs to fetch; not modified
            root: Directory the refs' paths are relative to

        Returns:
            DownloadReport with exactly one result per ref
        """
        pass

    def cancel(self) -> None:
        """Request cancellation of a running download."""

    def close(self) -> None:
        """Release network resources."""


class HttpDownloader(Downloader):
    """Downloads a manifest over HTTP using a bounded thread pool.

    Example:
        >>> with HttpFetcher(config) as fetcher:
        ...     report = HttpDownloader(fetcher).download(manifest, Path("staging"))
        >>> report.failed_urls
        set()
    """

    def __init__(self, fetcher: HttpFetcher, reporter: Reporter | None = None, max_workers: int | None = None):
        self.fetcher = fetcher
        self.reporter = reporter or Reporter()
        self.max_workers = max_workers or fetcher.config.max_workers

    def cancel(self) -> None:
        self.fetcher.cancel()

    def close(self) -> None:
        self.fetcher.close()

    def download(self, manifest: ResourceManifest, root: Path) -> DownloadReport:
        report = DownloadReport(manifest)
        root = Path(root)
        root.mkdir(parents=True, exist_ok=True)

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="bd2wg-download")
        try:
            futures = [executor.submit(self.download_one, ref, root) for ref in manifest]
            for future in as_completed(futures):
                result = future.result()
                report.add(result)
                self.reporter.resource(result)
        except KeyboardInterrupt:
            self.cancel()
            raise
        finally:
            # Once cancelled, queued refs are dropped and running ones stop at the next chunk
            executor.shutdown(wait=True, cancel_futures=self.fetcher.cancelled.is_set())

        return report

    def download_one(self, ref: ResourceRef, root: Path) -> DownloadResult:
        """Fetch one ref into root; never raises for per-ref failures."""
        destination = ref.absolute_path(root)
        part = destination.with_name(destination.name + PART_SUFFIX)
        try:
            validate_path_safety(destination, root)
            destination.parent.mkdir(parents=True, exist_ok=True)

            if ref.payload is not None:
                if self.fetcher.cancelled.is_set():
                    raise FetchFailure(ref.url, "cancelled", path=ref.path)
                part.write_bytes(ref.payload)
                written = len(ref.payload)
            else:
                written = self.fetcher.fetch_to(ref.url, part, ref.path)

            os.replace(part, destination)
            return DownloadResult(ref, bytes_written=written)
        except FetchFailure as e:
            e.path = ref.path
            return DownloadResult(ref, error=e)
        except (OSError, ValueError) as e:
            return DownloadResult(ref, error=FetchFailure(ref.url, "io", str(e), ref.path))
        finally:
            part.unlink(missing_ok=True)
