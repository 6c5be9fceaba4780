"""Base transpiler class for converting parsed scripts to WebGAL scenes.

This module defines the interface for transpilers that turn a ParsedScript
into a TargetScript. Transpilers never touch asset bytes; they only need
the local names the resolver would give each asset.
"""

from abc import ABC, abstractmethod

from ..core.instructions import TargetScript
from ..core.script import ParsedScript
from ..report import Reporter


class Transpiler(ABC):
    """Abstract base class for script transpilers."""

    def __init__(self, reporter: Reporter | None = None):
        self.reporter = reporter or Reporter()

    @abstractmethod
    def transpile(self, script: ParsedScript) -> TargetScript:
        """Transpile a parsed script.

        The output depends only on the command sequence. Commands that cannot
        be expressed are reported as UnsupportedCommand warnings and skipped.

        Args:
            script: Parsed source script

        Returns:
            TargetScript whose first scene is the entry scene
        """
        pass
