"""Local path naming and safety checks.

Remote identifiers (bundle names, uploaded-asset URLs, file names listed in
Live2D manifests) end up as local file names, so everything that becomes a
path goes through here.
"""

import re
from pathlib import Path
from urllib.parse import urlparse

# Dangerous characters to remove from filenames
DANGEROUS_FILENAME_CHARS = r'[<>:"|?*\x00-\x1f]'

# Characters replaced when a URL is flattened into a file name
URL_FILENAME_CHARS = r'[:?*"<>|\\/ ]'

# Keep generated names well under common filesystem limits
MAX_FILENAME_LENGTH = 180


def sanitize_filename(filename: str) -> str:
    """Sanitize filename by removing dangerous characters.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename safe for storage
    """
    # Remove dangerous characters
    sanitized = re.sub(DANGEROUS_FILENAME_CHARS, "", filename)
    # Remove path separators
    sanitized = sanitized.replace("/", "").replace("\\", "")
    return sanitized


def flatten_identifier(identifier: str) -> str:
    """Turn a slash separated identifier into a single file name component.

    Example:
        "bg/scenario15" -> "bg_scenario15"
    """
    flattened = re.sub(URL_FILENAME_CHARS, "_", identifier).strip("._")
    return flattened[-MAX_FILENAME_LENGTH:] or "_"


def url_to_filename(url: str, extension: str = "") -> str:
    """Derive a stable file name from a URL.

    Example:
        "https://example.com/a/b.png?x=1", ".png" -> "example.com_a_b.png_x=1.png"
    """
    parsed = urlparse(url)
    stem = parsed.netloc + parsed.path
    if parsed.query:
        stem += "?" + parsed.query
    name = flatten_identifier(stem)
    if extension and not name.lower().endswith(extension.lower()):
        name += extension
    return name


def lower_first_alphabetic(text: str) -> str:
    """Lower-case the first ASCII letter of text.

    Example:
        "BGM01" -> "bGM01", "01_Nobiri" -> "01_nobiri"
    """
    for i, c in enumerate(text):
        if c.isascii() and c.isalpha():
            return text[:i] + c.lower() + text[i + 1 :]
    return text


def validate_path_safety(path: Path, base_dir: Path) -> None:
    """Validate that a path stays within the base directory.

    This prevents path traversal attacks.

    Args:
        path: Path to validate
        base_dir: Base directory that path must be within

    Raises:
        ValueError: If path escapes the base directory
    """
    resolved_path = path.resolve()
    resolved_base = base_dir.resolve()

    if not resolved_path.is_relative_to(resolved_base):
        raise ValueError(f"Path {path} escapes base directory {base_dir}")


def validate_url(url: str) -> None:
    """Validate URL format and scheme.

    Only allows http:// and https:// schemes.

    Args:
        url: URL to validate

    Raises:
        ValueError: If URL has invalid format or dangerous scheme
    """
    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Invalid URL scheme: {parsed.scheme!r}. Only http and https are allowed.")
    if not parsed.netloc:
        raise ValueError(f"URL has no host: {url}")
