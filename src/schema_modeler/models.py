"""Value types describing schema dependencies.

These lightweight dataclasses are produced by the dependency processor and the
:class:`~schema_modeler.modeler.Modeler` facade. They intentionally avoid any
reference to store nodes so they can be returned from the REST API, printed by
the CLI, or compared in tests.

Overview:
        * ``Dependency`` is the caller-facing view of one persisted dependency
            record: the resolved store path, whether a node exists there, and the
            raw location strings that produced it.
        * ``MissingDependency`` is transient bookkeeping used between the
            discovery scan and materialization of absent dependencies. It is never
            persisted.

Typical construction::

        from schema_modeler.models import Dependency

        dep = Dependency(path="/Model/Books/data/types/BookDatatypes.xsd", exists=True)
        dep.add_source_reference("./data/types/BookDatatypes.xsd")
        payload = dep.to_dict()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Dependency:
    """A model dependency.

    Attributes:
        path: Absolute store path of the dependency model. ``None`` or empty when
            the reference could not be resolved to a store path (absolute URLs).
        exists: ``True`` if a node exists at ``path``.
        source_references: Raw location strings that resolved to ``path``.

    Example:
        >>> dep = Dependency("/my/path", False)
        >>> dep.source_references
        []
    """

    path: Optional[str]
    exists: bool = False
    source_references: List[str] = field(default_factory=list)

    def add_source_reference(self, source_reference: str) -> None:
        """Append a raw location string.

        Raises:
            ValueError: If ``source_reference`` is ``None`` or empty.
        """
        if not source_reference:
            raise ValueError("source_reference must not be empty")
        self.source_references.append(source_reference)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "exists": self.exists,
            "source_references": list(self.source_references),
        }


@dataclass(frozen=True)
class MissingDependency:
    """A dependency found absent from the store during a scan.

    Attributes:
        relative_path: Reference tail left after stripping ``./`` and ``../``.
        parent_hop_count: Number of ``../`` segments consumed.
        model_parent_path: Store path (ending with ``/``) the remainder is
            appended to when generating the dependency model.
    """

    relative_path: str
    parent_hop_count: int
    model_parent_path: str

    @property
    def model_path(self) -> str:
        return self.model_parent_path + self.relative_path
