"""Registry of model types.

A model type ties together how a model is generated from an artifact and how
its dependencies are processed afterwards. The registry ships with the
built-in ``xsd`` type; other types can be registered at runtime.

Example:
        from schema_modeler.model_types import ModelTypeManager

        manager = ModelTypeManager()
        xsd = manager.default_model_type("/Artifact/Books/Books.xsd")
        xsd.id          # 'xsd'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from . import lexicon
from .processor import XsdDependencyProcessor
from .xsd_generator import XsdModelGenerator

XSD_MODEL_TYPE_ID = "xsd"


@dataclass
class ModelType:
    """A kind of model the modeler can generate.

    Attributes:
        id: Unique identifier stored on generated models (``modeler:modelType``).
        category: Grouping name (e.g. ``xsd``).
        file_extensions: Artifact extensions this type applies to.
        generator: Object with ``generate(content, model_node)``.
        dependency_processor: Optional object with a ``process`` method
            compatible with :meth:`XsdDependencyProcessor.process`.
        node_kind: Kind of the model node created for generated models.
    """

    id: str
    category: str
    file_extensions: Tuple[str, ...]
    generator: object
    dependency_processor: Optional[object] = None
    description: str = ""
    node_kind: str = lexicon.SCHEMA_DOCUMENT

    def applies_to(self, artifact_path: str) -> bool:
        lowered = artifact_path.lower()
        return any(lowered.endswith(ext) for ext in self.file_extensions)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "file_extensions": list(self.file_extensions),
            "description": self.description,
            "has_dependency_processor": self.dependency_processor is not None,
        }


def xsd_model_type() -> ModelType:
    return ModelType(
        id=XSD_MODEL_TYPE_ID,
        category="xsd",
        file_extensions=(".xsd",),
        generator=XsdModelGenerator(),
        dependency_processor=XsdDependencyProcessor(),
        description="XML Schema documents with import/include/redefine dependencies",
    )


class ModelTypeManager:
    """Look up model types by id, category or artifact path."""

    def __init__(self, register_defaults: bool = True) -> None:
        self._types: Dict[str, ModelType] = {}
        if register_defaults:
            self.register(xsd_model_type())

    def register(self, model_type: ModelType) -> ModelType:
        if model_type is None:
            raise ValueError("model_type must not be None")
        _require_text(model_type.id, "model_type.id")
        self._types[model_type.id] = model_type
        return model_type

    def model_type(self, type_id: str) -> Optional[ModelType]:
        _require_text(type_id, "type_id")
        return self._types.get(type_id)

    def model_types(self) -> List[ModelType]:
        return list(self._types.values())

    def model_types_for_category(self, category: str) -> List[ModelType]:
        _require_text(category, "category")
        return [t for t in self._types.values() if t.category == category]

    def model_types_for_artifact(self, artifact_path: str) -> List[ModelType]:
        _require_text(artifact_path, "artifact_path")
        return [t for t in self._types.values() if t.applies_to(artifact_path)]

    def default_model_type(self, artifact_path: str) -> Optional[ModelType]:
        applicable = self.model_types_for_artifact(artifact_path)
        return applicable[0] if applicable else None


def _require_text(value: Optional[str], name: str) -> None:
    if value is None or not str(value).strip():
        raise ValueError(f"{name} must not be empty")
