"""Base abstractions for script sources.

This module defines the interfaces every source format implements to
integrate with the conversion pipeline: a Deserializer that turns raw text
into a ParsedScript, and a ScriptSource that bundles the deserializer with
the resolver and transpiler that understand the same format.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..config import Config
from ..core.script import ParsedScript

if TYPE_CHECKING:
    from ..downloader import HttpFetcher
    from ..report import Reporter
    from ..resolvers.base import Resolver
    from ..transpilers.base import Transpiler


class Deserializer(ABC):
    """Turns source script text into a ParsedScript."""

    @abstractmethod
    def deserialize(self, text: str | bytes, origin: str | None = None) -> ParsedScript:
        """Parse a source script.

        Args:
            text: Raw script content
            origin: Path or name of the script, used in error messages

        Returns:
            ParsedScript with one command per script entry

        Raises:
            MalformedScript: If the text is not a well-formed script
        """
        pass


class ScriptSource(ABC):
    """Abstract base class for all source script formats.

    A source knows how to read one format and hands out the components that
    understand it. This keeps the pipeline format-agnostic: it only talks to
    the Deserializer, Resolver and Transpiler interfaces.
    """

    name: str = ""

    def __init__(self, config: Config):
        self.config = config

    @abstractmethod
    def get_deserializer(self) -> Deserializer:
        """Get the deserializer for this format."""
        pass

    @abstractmethod
    def get_resolver(self, fetcher: "HttpFetcher", reporter: "Reporter") -> "Resolver":
        """Get a resolver for one run.

        Args:
            fetcher: Fetcher used for assets that must be read during
                     resolution (composite-asset manifests)
            reporter: Receives non-fatal resolution errors
        """
        pass

    @abstractmethod
    def get_transpiler(self, reporter: "Reporter") -> "Transpiler":
        """Get a transpiler for one run."""
        pass
