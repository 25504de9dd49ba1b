"""Resolve relative references against the store hierarchy.

A relative schema location such as ``../data/types/Foo.xsd`` is interpreted
against a starting store node (the parent of the referencing model): each
leading ``../`` moves one level up, each leading ``./`` is ignored, and the
remaining tail is looked up below the node reached.

The number of ``../`` hops consumed is reported alongside the result because
the same number of hops must later be applied to the referencing document's
external location when the dependency has to be fetched.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import PathEscapesRootError
from .store import Node, join_path

SELF_SEGMENT = "./"
PARENT_SEGMENT = "../"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a relative path.

    Attributes:
        remainder: Path left after all leading ``./`` and ``../`` were consumed.
        hop_count: Number of ``../`` segments consumed.
        ancestor: Node reached after walking ``hop_count`` levels up.
    """

    remainder: str
    hop_count: int
    ancestor: Node

    @property
    def resolved_path(self) -> str:
        return join_path(self.ancestor.path, self.remainder)

    @property
    def parent_path(self) -> str:
        """Ancestor path with a trailing separator."""
        path = self.ancestor.path
        return path if path.endswith("/") else path + "/"

    def exists(self) -> bool:
        return self.ancestor.has_child_at_path(self.remainder)


def resolve_relative(path: str, start: Node) -> Resolution:
    """Walk leading ``./`` and ``../`` segments of ``path`` from ``start``.

    Args:
        path: Normalized relative reference.
        start: Node the reference is relative to.

    Returns:
        The :class:`Resolution` for ``path``.

    Raises:
        PathEscapesRootError: If ``path`` needs more ``../`` hops than
            ``start`` has ancestors.

    Example:
        >>> store = NodeStore()
        >>> resolution = resolve_relative("../Foo.xsd", store.create_path("/Model/Books"))
        >>> resolution.hop_count, resolution.ancestor.path
        (1, '/Model')
    """
    node = start
    remainder = path
    hops = 0
    while True:
        if remainder.startswith(SELF_SEGMENT):
            remainder = remainder[len(SELF_SEGMENT):]
        elif remainder.startswith(PARENT_SEGMENT):
            if node.depth == 0:
                raise PathEscapesRootError(path, start.path)
            node = node.parent()
            remainder = remainder[len(PARENT_SEGMENT):]
            hops += 1
        else:
            break
    return Resolution(remainder=remainder, hop_count=hops, ancestor=node)
