"""Error taxonomy for the conversion pipeline.

Fatal errors (MalformedScript, InvalidTargetPath, ConfigError and a
PackagingIOFailure raised while writing scenes) are raised and stop the run.
Everything else is recorded as a value in the run report and streamed to the
reporter, so a long conversion always finishes with a usable project.
"""


class ConversionError(Exception):
    """Base class for every error produced by the pipeline."""


class ConfigError(ConversionError):
    """Configuration data (URL tables, headers) could not be loaded."""


class MalformedScript(ConversionError):
    """The source script cannot be turned into a parsed model.

    Attributes:
        origin: Path or name of the script, when known
        line: 1-based line of a JSON syntax error
        column: 1-based column of a JSON syntax error
        location: JSON path of a schema violation (e.g. "actions -> 3 -> body")
    """

    def __init__(
        self,
        message: str,
        origin: str | None = None,
        line: int | None = None,
        column: int | None = None,
        location: str | None = None,
    ):
        self.message = message
        self.origin = origin
        self.line = line
        self.column = column
        self.location = location
        super().__init__(str(self))

    def __str__(self) -> str:
        where = self.origin or "<script>"
        if self.line is not None:
            where += f":{self.line}:{self.column}"
        if self.location:
            where += f" at {self.location}"
        return f"{where}: {self.message}"


class UnresolvableAsset(ConversionError):
    """An asset reference could not be mapped to a remote location."""

    def __init__(self, kind: str, reference: str, reason: str = "no naming rule matches"):
        self.kind = kind
        self.reference = reference
        self.reason = reason
        super().__init__(f"Cannot resolve {kind} asset {reference}: {reason}")


class FetchFailure(ConversionError):
    """A single remote fetch failed.

    Attributes:
        url: The URL that was requested
        cause: One of 'timeout', 'http', 'network', 'io', 'cancelled'
        detail: Human readable detail (status code, exception text)
        path: Destination path, when the fetch was a download
    """

    def __init__(self, url: str, cause: str, detail: str = "", path: str | None = None):
        self.url = url
        self.cause = cause
        self.detail = detail
        self.path = path
        message = f"{cause} error fetching {url}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnsupportedCommand(ConversionError):
    """A source command was skipped or only approximated."""

    def __init__(self, index: int | None, command_type: str, reason: str):
        self.index = index
        self.command_type = command_type
        self.reason = reason
        position = f"#{index} " if index is not None else ""
        super().__init__(f"Action {position}({command_type}): {reason}")


class PackagingIOFailure(ConversionError):
    """Writing part of the target project failed."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to write {path}: {detail}")


class InvalidTargetPath(ConversionError):
    """The target project directory cannot be used."""
