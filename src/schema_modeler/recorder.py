"""Record the dependencies declared by a schema document.

The recorder walks the ``xs:import`` / ``xs:include`` / ``xs:redefine``
children of a schema node and writes one ``modeler:dependency`` record per
reference under a lazily created ``modeler:dependencies`` container of the
model node. References whose target is not in the store yet are returned as
:class:`~schema_modeler.models.MissingDependency` entries for the
materializer.

Resolution rules:
* Relative references are resolved against the parent of the model node.
* A relative reference that climbs above the store root is skipped: no record
    is written and the scan continues with the next reference.
* Absolute references (``http://...``) are recorded without a
    ``modeler:path``; mapping them to a store location is not supported, so
    they never take part in materialization.
* Dependency children without a ``schemaLocation`` (namespace-only imports)
    are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from . import lexicon
from .exceptions import PathEscapesRootError
from .locator import is_relative, normalize
from .models import Dependency, MissingDependency
from .resolver import Resolution, resolve_relative
from .store import Node


def is_dependency_node(node: Node) -> bool:
    return node.kind in lexicon.DEPENDENCY_KINDS


@dataclass
class ScanResult:
    """Outcome of one dependency scan.

    Attributes:
        container: The ``modeler:dependencies`` node, or ``None`` if no record
            was written.
        dependencies: One :class:`Dependency` per record written.
        missing: Records whose target does not exist in the store yet.
    """

    container: Optional[Node] = None
    dependencies: List[Dependency] = field(default_factory=list)
    missing: List[MissingDependency] = field(default_factory=list)


class DependencyRecorder:
    """Write dependency records for a schema node's references."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def scan(self, schema_node: Node, model_node: Node) -> ScanResult:
        """Record every dependency child of ``schema_node`` under ``model_node``.

        Raises:
            MalformedReferenceError: If a ``schemaLocation`` is not a URI reference.
        """
        result = ScanResult()
        model_name = model_node.name
        start = model_node.parent()

        for kid in [k for k in schema_node.children() if is_dependency_node(k)]:
            self.logger.debug(f"Processing dependency node '{kid.name}'")
            location = kid.get_property(lexicon.SCHEMA_LOCATION)
            if not location:
                self.logger.debug(
                    f"Dependency node '{kid.path}' of model '{model_name}' has no schema location"
                )
                continue

            path = normalize(location)
            resolution: Optional[Resolution] = None
            if is_relative(path):
                try:
                    resolution = resolve_relative(path, start)
                except PathEscapesRootError:
                    self.logger.debug(
                        f"The relative path of '{path}' is not valid for a dependency node of model '{model_name}'"
                    )
                    continue
            else:
                self.logger.debug(
                    f"Absolute dependency location '{location}' of model '{model_name}' is not mapped to a store path"
                )

            if result.container is None:
                result.container = model_node.add_child(
                    lexicon.DEPENDENCIES_NODE_NAME, lexicon.DEPENDENCIES
                )
                self.logger.debug(
                    f"Created dependencies folder node '{result.container.path}'"
                )

            record = result.container.add_child(
                lexicon.DEPENDENCY_NODE_NAME, lexicon.DEPENDENCY
            )
            record.set_property(lexicon.SOURCE_REFERENCES, [location])
            self.logger.debug(f"Setting dependency source reference property to '{location}'")

            if resolution is None:
                dependency = Dependency(path=None, exists=False)
            else:
                exists = resolution.exists()
                record.set_property(lexicon.PATH, resolution.resolved_path)
                self.logger.debug(
                    f"Setting dependency path property to '{resolution.resolved_path}'"
                )
                dependency = Dependency(path=resolution.resolved_path, exists=exists)
                if not exists:
                    result.missing.append(
                        MissingDependency(
                            relative_path=resolution.remainder,
                            parent_hop_count=resolution.hop_count,
                            model_parent_path=resolution.parent_path,
                        )
                    )
            dependency.add_source_reference(location)
            result.dependencies.append(dependency)

        return result
