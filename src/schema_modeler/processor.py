"""Dependency processing for generated XSD models.

:class:`XsdDependencyProcessor` is invoked by the modeler after an XSD model
has been generated. It finds the model's schema node, records one dependency
per ``import`` / ``include`` / ``redefine`` reference, imports and generates
models for referenced documents that are not in the store yet, and commits
the store session.

Processing stages::

        LocateSchema -> ScanChildren -> MaterializeMissing -> Commit

* A missing schema node is the only unconditionally fatal condition.
* A schema node without dependency children ends processing immediately:
    nothing is written, nothing is saved, and ``None`` is returned.
* Materialization failures are logged per dependency and never propagate.
* A dependencies container left by a previous pass is replaced, so processing
    the same model twice leaves exactly one container.

Example:
        from pathlib import Path

        from schema_modeler.modeler import Modeler
        from schema_modeler.processor import XsdDependencyProcessor

        modeler = Modeler()
        artifact_path = modeler.import_file(Path("Books/Books.xsd"), "Artifact/Books")
        modeler.generate_model(artifact_path, "Model/Books/Books.xsd", "xsd")
        model = modeler.store.node("/Model/Books/Books.xsd")
        XsdDependencyProcessor().process(artifact_path, model, modeler)
        # -> '/Model/Books/Books.xsd/dependencies'
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Set

from . import lexicon
from .exceptions import ModelerError, SchemaNodeNotFoundError
from .materializer import MissingDependencyMaterializer
from .recorder import DependencyRecorder, is_dependency_node
from .store import Node

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from .modeler import Modeler


def find_schema_node(model_node: Node) -> Optional[Node]:
    """Return the schema-document node for ``model_node``.

    The model node itself is used when it is a schema document; otherwise its
    siblings are searched in order.
    """
    if model_node.kind == lexicon.SCHEMA_DOCUMENT:
        return model_node
    if model_node.is_root():
        return None
    for sibling in model_node.parent().children():
        if sibling.kind == lexicon.SCHEMA_DOCUMENT:
            return sibling
    return None


class XsdDependencyProcessor:
    """The XSD dependency processor."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.recorder = DependencyRecorder(logger=self.logger)
        self.materializer = MissingDependencyMaterializer(logger=self.logger)

    def process(
        self,
        artifact_path: str,
        model_node: Node,
        modeler: "Modeler",
        persist_artifacts: bool = True,
        in_progress: Optional[Set[str]] = None,
    ) -> Optional[str]:
        """Record and materialize the dependencies of ``model_node``.

        Args:
            artifact_path: Store path of the artifact the model was generated from.
            model_node: The generated model.
            modeler: Collaborator used to import and generate missing dependencies.
            persist_artifacts: Whether dependency artifacts are kept after
                their models are generated.
            in_progress: Model paths being generated by the enclosing top-level
                call (recursion guard).

        Returns:
            Path of the dependencies container, or ``None`` if the schema has
            no dependencies.

        Raises:
            ModelerError: Wrapping any failure; :class:`SchemaNodeNotFoundError`
                when the model has no schema node.
        """
        try:
            model_name = model_node.name
            self.logger.debug(f"Processing model node '{model_name}'")

            schema_node = find_schema_node(model_node)
            if schema_node is None:
                raise SchemaNodeNotFoundError(model_name)

            if not any(is_dependency_node(kid) for kid in schema_node.children()):
                return None  # dependencies node not created

            for previous in model_node.children():
                if previous.kind == lexicon.DEPENDENCIES:
                    self.logger.debug(f"Replacing dependencies node '{previous.path}'")
                    previous.remove()

            result = self.recorder.scan(schema_node, model_node)

            if result.container is not None and result.missing:
                self.materializer.materialize(
                    artifact_path,
                    model_node,
                    result.missing,
                    modeler,
                    persist_artifacts=persist_artifacts,
                    in_progress=in_progress,
                )

            model_node.store.save()
            return result.container.path if result.container is not None else None
        except ModelerError:
            raise
        except Exception as e:
            raise ModelerError(f"Dependency processing failed for '{model_node.path}': {e}") from e
