"""Exception types raised by the modeler.

Every error that leaves :meth:`XsdDependencyProcessor.process` is a
:class:`ModelerError`; the narrower subclasses identify the failing stage so
callers (CLI, REST layer, tests) can react without string matching.

Hierarchy::

    ModelerError
    ├── MalformedReferenceError   (also a ValueError)
    ├── PathEscapesRootError
    ├── SchemaNodeNotFoundError
    ├── ArtifactImportError
    ├── ModelGenerationError
    └── NodeNotFoundError         (also a KeyError)
"""

from __future__ import annotations

from typing import Optional


class ModelerError(Exception):
    """Base class for all modeler failures."""


class MalformedReferenceError(ModelerError, ValueError):
    """A schema location reference could not be parsed as a URI reference."""

    def __init__(self, reference: Optional[str], reason: str = "") -> None:
        self.reference = reference
        message = f"Malformed schema location reference: {reference!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class PathEscapesRootError(ModelerError):
    """A relative reference climbs above the root of the store."""

    def __init__(self, path: str, start_path: str) -> None:
        self.path = path
        self.start_path = start_path
        super().__init__(
            f"Relative path '{path}' escapes the store root when resolved from '{start_path}'"
        )


class SchemaNodeNotFoundError(ModelerError):
    """The model node has no schema document node to scan."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"Schema node not found for model '{model_name}'")


class ArtifactImportError(ModelerError):
    """Fetching or storing an external artifact failed."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"Failed to import artifact from '{url}': {reason}")


class ModelGenerationError(ModelerError):
    """A model could not be generated from an artifact."""


class NodeNotFoundError(ModelerError, KeyError):
    """No node exists at the requested store path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(path)

    def __str__(self) -> str:
        return f"Node not found: {self.path}"
