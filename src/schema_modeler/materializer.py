"""Fetch, import and generate models for dependencies absent from the store.

When a schema document at ``http://example.org/schemas/Root.xsd`` includes
``../common/Types.xsd`` and no model exists for it yet, the materializer:

1. Starts two cursors at the directory of the model's external location
   (``http://example.org/schemas``) and of its artifact path.
2. Strips one trailing segment from *both* cursors per ``../`` hop the
   reference needed (``http://example.org``).
3. Appends the remaining relative path to both cursors to obtain the fetch URL
   and the artifact storage path.
4. Imports the fetched artifact and generates its model next to the
   referencing model, with the same model type.

This assumes the external location and the artifact store mirror each other's
directory nesting; if they do not, the computed URL is wrong and the fetch
fails.

Every failure (URL computation, fetch, import, generation) is logged with the
fetch URL and the owning model name, and processing continues with the next
dependency.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Set, Tuple
from urllib.parse import urlsplit, urlunsplit

from . import lexicon
from .models import MissingDependency
from .store import Node

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from .modeler import Modeler


def strip_last_segment(location: str) -> str:
    """Return ``location`` without its last path segment.

    Works on both URLs (only the path component is touched) and store paths.

    Raises:
        ValueError: If there is no segment left to strip.
    """
    parts = urlsplit(location)
    if parts.scheme:
        if "/" not in parts.path:
            raise ValueError(f"Cannot go above the root of '{location}'")
        return urlunsplit(
            parts._replace(path=parts.path.rsplit("/", 1)[0], query="", fragment="")
        )
    if "/" not in location:
        raise ValueError(f"Cannot go above the root of '{location}'")
    return location.rsplit("/", 1)[0]


def append_segment(location: str, relative_path: str) -> str:
    if location.endswith("/"):
        return location + relative_path
    return location + "/" + relative_path


def mirror_locations(
    external_dir: str, artifact_dir: str, dependency: MissingDependency
) -> Tuple[str, str]:
    """Return ``(fetch_url, artifact_path)`` for a missing dependency.

    Args:
        external_dir: Directory of the referencing model's external location.
        artifact_dir: Directory of the referencing model's artifact.
        dependency: The dependency being materialized.

    Raises:
        ValueError: If the hop count exceeds the depth of either location.
    """
    location = external_dir
    artifact_location = artifact_dir
    for _ in range(dependency.parent_hop_count):
        location = strip_last_segment(location)
        artifact_location = strip_last_segment(artifact_location)
    return (
        append_segment(location, dependency.relative_path),
        append_segment(artifact_location, dependency.relative_path),
    )


class MissingDependencyMaterializer:
    """Import and generate models for missing dependencies."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def materialize(
        self,
        artifact_path: str,
        model_node: Node,
        missing: Iterable[MissingDependency],
        modeler: "Modeler",
        persist_artifacts: bool = True,
        in_progress: Optional[Set[str]] = None,
    ) -> List[str]:
        """Materialize ``missing`` dependencies of ``model_node``.

        Args:
            artifact_path: Store path of the referencing model's artifact.
            model_node: The referencing model.
            missing: Dependencies found absent by the scan.
            modeler: Collaborator used to import artifacts and generate models.
            persist_artifacts: Passed through to model generation.
            in_progress: Model paths being generated by the current top-level
                call; dependencies whose model path is listed are skipped.

        Returns:
            Store paths of the models generated.
        """
        missing = list(missing)
        if not missing:
            return []

        model_name = model_node.name
        if not (
            model_node.has_property(lexicon.EXTERNAL_LOCATION)
            and model_node.has_property(lexicon.MODEL_TYPE)
        ):
            self.logger.debug(
                f"Model '{model_name}' has no external location or model type; "
                f"{len(missing)} missing dependencies will not be imported"
            )
            return []

        type_id = model_node.get_property(lexicon.MODEL_TYPE)
        model_type = modeler.model_type_manager.model_type(type_id)
        if model_type is None:
            self.logger.warning(
                f"Unknown model type '{type_id}' on model '{model_name}'; missing dependencies not imported"
            )
            return []

        generated: List[str] = []
        external_location = model_node.get_property(lexicon.EXTERNAL_LOCATION)
        for dependency in missing:
            url: Optional[str] = None
            try:
                url, dependency_artifact_path = mirror_locations(
                    strip_last_segment(external_location),
                    strip_last_segment(artifact_path),
                    dependency,
                )
                model_path = dependency.model_path
                if in_progress is not None and model_path in in_progress:
                    self.logger.debug(
                        f"Model '{model_path}' is already being generated; skipping dependency of '{model_name}'"
                    )
                    continue

                self.logger.debug(
                    f"Importing XSD dependency from external path '{url}' for source '{model_name}' and path '{dependency_artifact_path}'"
                )
                imported_path = modeler.import_url(url, dependency_artifact_path)

                self.logger.debug(
                    f"Generating model for XSD dependency of model '{model_name}' from path '{model_path}'"
                )
                modeler.generate_model(
                    imported_path,
                    model_path,
                    model_type,
                    persist_artifacts=persist_artifacts,
                    in_progress=in_progress,
                )
                generated.append(model_path)
            except Exception as e:
                self.logger.error(
                    f"Error importing XSD dependency artifact from '{url}' for model '{model_name}': {e}",
                    exc_info=True,
                )
        return generated
