"""Run configuration.

URL tables and HTTP headers ship as JSON files in data/ and are loaded once
per run into a frozen Config that is passed to every component explicitly.
Either file can be replaced by a path given on the command line or through
the BD2WG_URLS / BD2WG_HEADERS environment variables.
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from .errors import ConfigError
from .paths import validate_url

# Path to the bundled data directory (relative to this module)
# src/bestdori_webgal/config.py -> src/bestdori_webgal/data/
DATA_DIR = Path(__file__).parent / "data"

URLS_FILE = DATA_DIR / "urls.json"
HEADERS_FILE = DATA_DIR / "headers.json"

URLS_ENV = "BD2WG_URLS"
HEADERS_ENV = "BD2WG_HEADERS"

DEFAULT_MAX_WORKERS = 32
DEFAULT_TIMEOUT = 24.0
DEFAULT_RETRIES = 3

URL_KEYS = ("bundle_root", "bgm_bundle", "se_common", "live2d_bundle")


@dataclass(frozen=True)
class AssetUrls:
    """Base URLs of the content host.

    Attributes:
        bundle_root: Root of all asset bundles
        bgm_bundle: Bundle prefix of scenario music, relative to bundle_root
        se_common: Absolute URL of the shared sound-effect folder
        live2d_bundle: Bundle prefix of Live2D costumes, relative to bundle_root
    """

    bundle_root: str
    bgm_bundle: str
    se_common: str
    live2d_bundle: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AssetUrls":
        """Build from a urls.json document.

        Raises:
            ConfigError: If a key is missing or a URL is not http(s)
        """
        missing = [name for name in URL_KEYS if name not in data]
        if missing:
            raise ConfigError(f"URL table is missing: {', '.join(missing)}")

        values = {name: _directory(str(data[name])) for name in URL_KEYS}
        for name in ("bundle_root", "se_common"):
            try:
                validate_url(values[name])
            except ValueError as e:
                raise ConfigError(f"Invalid {name}: {e}") from e
        return cls(**values)


def _directory(url: str) -> str:
    # Table entries are prefixes and always end with a slash
    return url if url.endswith("/") else url + "/"


@dataclass(frozen=True)
class Config:
    """Immutable settings of one conversion run."""

    urls: AssetUrls
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    max_workers: int = DEFAULT_MAX_WORKERS
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES

    def with_overrides(self, **overrides: Any) -> "Config":
        """Return a copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return _checked(replace(self, **changes))


def _checked(config: Config) -> Config:
    if config.max_workers < 1:
        raise ConfigError(f"max_workers must be at least 1, got {config.max_workers}")
    if config.timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {config.timeout}")
    if config.retries < 0:
        raise ConfigError(f"retries must not be negative, got {config.retries}")
    return config


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def _choose(explicit: Path | str | None, env_name: str, default: Path) -> Path:
    if explicit is not None:
        return Path(explicit)
    from_env = os.environ.get(env_name)
    if from_env:
        return Path(from_env)
    return default


def load_config(
    urls_path: Path | str | None = None,
    headers_path: Path | str | None = None,
    **overrides: Any,
) -> Config:
    """Load the run configuration.

    Args:
        urls_path: URL table to use instead of the bundled one
        headers_path: HTTP headers to use instead of the bundled ones
        **overrides: max_workers, timeout or retries; None values are ignored

    Returns:
        Frozen Config

    Raises:
        ConfigError: If a file is missing, malformed or holds invalid values
    """
    urls_data = _read_json(_choose(urls_path, URLS_ENV, URLS_FILE))
    if not isinstance(urls_data, dict):
        raise ConfigError("URL table must be a JSON object")

    headers_data = _read_json(_choose(headers_path, HEADERS_ENV, HEADERS_FILE))
    if not isinstance(headers_data, dict) or not all(isinstance(v, str) for v in headers_data.values()):
        raise ConfigError("Headers must be a JSON object of strings")

    config = Config(
        urls=AssetUrls.from_mapping(urls_data),
        headers=MappingProxyType(dict(headers_data)),
    )
    return config.with_overrides(**overrides)
