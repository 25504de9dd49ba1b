"""Modeler facade: import artifacts and generate models.

The :class:`Modeler` owns a :class:`~schema_modeler.store.NodeStore`, an
:class:`~schema_modeler.importer.ArtifactImporter` and a
:class:`~schema_modeler.model_types.ModelTypeManager`. It is also the
collaborator handed to dependency processors, which call back into
:meth:`Modeler.import_url` and :meth:`Modeler.generate_model` to materialize
missing dependencies. Those calls recurse: generating a dependency's model
runs dependency processing for it in turn.

Recursion guard:
        The top-level :meth:`generate_model` call creates an ``in_progress`` set
        of model paths and passes it down through dependency processing and every
        nested generation. A dependency whose model path is already in the set is
        not generated again, so mutually importing documents terminate even if
        the store existence check alone would not stop them.

Example:
        from pathlib import Path
        from schema_modeler.modeler import Modeler

        modeler = Modeler()
        artifact = modeler.import_file(Path("Books/Books.xsd"), "Artifact/Books")
        model = modeler.generate_model(artifact, "Model/Books/Books.xsd", "xsd")
        for dep in modeler.dependencies(model):
            print(dep.path, dep.exists, dep.source_references)
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List, Optional, Set, Union

from . import lexicon
from .config import ModelerConfig
from .exceptions import ModelGenerationError, ModelerError
from .importer import ArtifactImporter
from .model_types import ModelType, ModelTypeManager
from .models import Dependency
from .store import Node, NodeStore, normalize_store_path

logger = logging.getLogger(__name__)


class Modeler:
    """Entry point for importing artifacts and generating models.

    Args:
        store: Node store to use; created from ``config.store_path`` if omitted.
        config: Runtime configuration (defaults to :class:`ModelerConfig`).
        model_type_manager: Model type registry (defaults to built-in types).

    Store mutations made through one modeler are serialized by a re-entrant
    lock, so a single instance can be shared by concurrent request handlers.
    """

    def __init__(
        self,
        store: Optional[NodeStore] = None,
        config: Optional[ModelerConfig] = None,
        model_type_manager: Optional[ModelTypeManager] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or ModelerConfig()
        self.store = store if store is not None else NodeStore(self.config.store_path)
        self.model_type_manager = model_type_manager or ModelTypeManager()
        self._lock = threading.RLock()
        self.logger = logger or logging.getLogger(__name__)
        self.importer = ArtifactImporter(
            self.store, timeout=self.config.fetch_timeout, logger=self.logger
        )

    # ---------------- Artifacts ---------------- #

    def import_artifact(
        self, content: bytes, path: str, external_location: Optional[str] = None
    ) -> str:
        """Store ``content`` as an artifact at ``path`` and save."""
        with self._lock:
            artifact_path = self.importer.import_content(
                content, path, external_location=external_location
            )
            self.store.save()
            return artifact_path

    def import_url(self, url: str, artifact_path: str) -> str:
        """Fetch ``url`` into an artifact at ``artifact_path`` and save.

        Raises:
            ArtifactImportError: If the fetch fails.
        """
        with self._lock:
            path = self.importer.import_url(url, artifact_path)
            self.store.save()
            return path

    def import_file(self, file_path: Union[str, Path], folder: Optional[str] = None) -> str:
        """Import a local file into ``folder`` (store root when omitted).

        The artifact's external location is the file's ``file://`` URI so
        relative dependencies can be read from neighbouring files.
        """
        path = Path(file_path).expanduser().resolve()
        if not path.is_file():
            raise ValueError(f"Not a file: {path}")
        target = f"/{folder.strip('/')}/{path.name}" if folder and folder.strip("/") else f"/{path.name}"
        return self.import_artifact(path.read_bytes(), target, external_location=path.as_uri())

    # ---------------- Models ---------------- #

    def generate_model(
        self,
        artifact_path: str,
        model_path: str,
        model_type: Optional[Union[str, ModelType]] = None,
        persist_artifacts: Optional[bool] = None,
        in_progress: Optional[Set[str]] = None,
    ) -> str:
        """Generate a model for an artifact and process its dependencies.

        Args:
            artifact_path: Store path of an existing artifact.
            model_path: Store path for the new model (folders are created).
            model_type: Model type or its id; chosen from the artifact's
                extension when omitted.
            persist_artifacts: Keep the artifact after generation (defaults to
                the configured value).
            in_progress: Recursion guard shared with nested generations.

        Returns:
            Absolute store path of the generated model.

        Raises:
            ModelGenerationError: If the artifact or model type is unusable, the
                model path is taken, or the generator fails.
            ModelerError: If dependency processing fails fatally.
        """
        if persist_artifacts is None:
            persist_artifacts = self.config.persist_artifacts
        if in_progress is None:
            in_progress = set()

        with self._lock:
            artifact = self._artifact_node(artifact_path)
            resolved_type = self._resolve_model_type(model_type, artifact.path)
            normalized = normalize_store_path(model_path)
            if self.store.has_node(normalized):
                raise ModelGenerationError(f"A node already exists at {normalized}")

            in_progress.add(normalized)
            parent_path, name = normalized.rsplit("/", 1)
            parent = self.store.create_path(parent_path) if parent_path else self.store.root
            model = parent.add_child(name, resolved_type.node_kind)
            model.set_property(lexicon.MODEL_TYPE, resolved_type.id)
            model.set_property(lexicon.ARTIFACT_PATH, artifact.path)
            model.set_property(
                lexicon.EXTERNAL_LOCATION, artifact.get_property(lexicon.EXTERNAL_LOCATION)
            )

            try:
                resolved_type.generator.generate(
                    artifact.get_property(lexicon.CONTENT, b""), model
                )
                self.logger.info(
                    f"Generated {resolved_type.id} model {model.path} from {artifact.path}"
                )

                processor = resolved_type.dependency_processor
                if processor is not None:
                    processor.process(
                        artifact.path,
                        model,
                        self,
                        persist_artifacts=persist_artifacts,
                        in_progress=in_progress,
                    )
            except ModelerError:
                self._discard_model(model, in_progress)
                raise
            except Exception as e:
                self._discard_model(model, in_progress)
                raise ModelGenerationError(f"Failed to generate model {normalized}: {e}") from e

            if not persist_artifacts:
                artifact.remove()
                self.logger.debug(
                    f"Removed artifact {artifact.path} after generating {model.path}"
                )

            self.store.save()
            return model.path

    def process_dependencies(
        self, model_path: str, persist_artifacts: Optional[bool] = None
    ) -> Optional[str]:
        """Re-run dependency processing for an existing model.

        Returns:
            Path of the dependencies container, or ``None`` if the model has no
            dependencies.
        """
        model = self.store.node(model_path)
        type_id = model.get_property(lexicon.MODEL_TYPE)
        model_type = self.model_type_manager.model_type(type_id) if type_id else None
        if model_type is None or model_type.dependency_processor is None:
            raise ModelerError(f"Model {model.path} has no dependency processor")
        if persist_artifacts is None:
            persist_artifacts = self.config.persist_artifacts
        with self._lock:
            return model_type.dependency_processor.process(
                model.get_property(lexicon.ARTIFACT_PATH, ""),
                model,
                self,
                persist_artifacts=persist_artifacts,
                in_progress={model.path},
            )

    def dependencies(self, model_path: str) -> List[Dependency]:
        """Return the recorded dependencies of a model.

        ``exists`` reflects the store at call time, so dependencies that could
        not be materialized show up with ``exists == False``.
        """
        model = self.store.node(model_path)
        container = next(
            (c for c in model.children() if c.kind == lexicon.DEPENDENCIES), None
        )
        if container is None:
            return []
        result: List[Dependency] = []
        for record in container.children():
            path = record.get_property(lexicon.PATH)
            dependency = Dependency(path=path, exists=bool(path) and self.store.has_node(path))
            for reference in record.get_property(lexicon.SOURCE_REFERENCES, []):
                dependency.add_source_reference(reference)
            result.append(dependency)
        return result

    # ---------------- Internal helpers ---------------- #

    def _discard_model(self, model: Node, in_progress: Set[str]) -> None:
        in_progress.discard(model.path)
        if self.store.has_node(model.path):
            model.remove()

    def _artifact_node(self, artifact_path: str) -> Node:
        if not artifact_path or not self.store.has_node(artifact_path):
            raise ModelGenerationError(f"Artifact not found: {artifact_path}")
        node = self.store.node(artifact_path)
        if node.kind != lexicon.ARTIFACT:
            raise ModelGenerationError(f"Node {node.path} is not an artifact")
        return node

    def _resolve_model_type(
        self, model_type: Optional[Union[str, ModelType]], artifact_path: str
    ) -> ModelType:
        if isinstance(model_type, ModelType):
            return model_type
        if model_type:
            resolved = self.model_type_manager.model_type(model_type)
            if resolved is None:
                raise ModelGenerationError(f"Unknown model type: {model_type}")
            return resolved
        resolved = self.model_type_manager.default_model_type(artifact_path)
        if resolved is None:
            raise ModelGenerationError(f"No model type applies to {artifact_path}")
        return resolved
