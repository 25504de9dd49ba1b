"""Generate structural models from XML Schema (XSD) artifacts.

This module turns the raw bytes of an XSD artifact into nodes below a model
node in the :class:`~schema_modeler.store.NodeStore`. The resulting model is
deliberately shallow: it captures what dependency processing and browsing
need rather than the full XML Schema component model.

Generated structure::

        <model node>                      kind xs:schemaDocument
            @xs:targetNamespace
            import                        kind xs:import
                @xs:namespace
                @xs:schemaLocation
            include                       kind xs:include
                @xs:schemaLocation
            redefine                      kind xs:redefine
                @xs:schemaLocation
            Book                          kind xs:elementDeclaration
                @xs:name
            ...

Children appear in document order. Only top-level components are modeled;
anonymous components are skipped.

Typical usage:
        from pathlib import Path

        from schema_modeler.store import NodeStore
        from schema_modeler.xsd_generator import XsdModelGenerator

        store = NodeStore()
        model = store.create_path("/Model/Books.xsd", kind="xs:schemaDocument")
        XsdModelGenerator().generate(Path("Books.xsd").read_bytes(), model)
        [child.kind for child in model.children()]
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Dict, Optional

from . import lexicon
from .exceptions import ModelGenerationError
from .store import Node

logger = logging.getLogger(__name__)

XS_NS = lexicon.XS_NS

_DEPENDENCY_TAGS: Dict[str, str] = {
    f"{XS_NS}import": lexicon.IMPORT,
    f"{XS_NS}include": lexicon.INCLUDE,
    f"{XS_NS}redefine": lexicon.REDEFINE,
}


class XsdModelGenerator:
    """Populate a schema-document node from XSD content."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, content: bytes, model_node: Node) -> Node:
        """Parse ``content`` and create child nodes under ``model_node``.

        Args:
            content: Raw XSD document bytes.
            model_node: Node of kind ``xs:schemaDocument`` to populate.

        Returns:
            ``model_node``.

        Raises:
            ModelGenerationError: If the content is not well-formed XML or its
                root element is not ``xs:schema``.
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise ModelGenerationError(f"Invalid XML in {model_node.path}: {e}") from e

        if root.tag != f"{XS_NS}schema":
            raise ModelGenerationError(
                f"Root element of {model_node.path} is {root.tag}, expected xs:schema"
            )

        model_node.set_property(lexicon.TARGET_NAMESPACE, root.get("targetNamespace"))

        for child in root:
            if not isinstance(child.tag, str):
                continue  # comments, processing instructions
            if child.tag in _DEPENDENCY_TAGS:
                self._add_dependency(model_node, child)
                continue
            local = _local_name(child.tag)
            kind = lexicon.DECLARATION_KINDS.get(local)
            name = child.get("name")
            if kind and name:
                node = model_node.add_child(name, kind)
                node.set_property(lexicon.NAME, name)

        self.logger.debug(
            f"Generated {len(model_node.children())} child nodes for model {model_node.path}"
        )
        return model_node

    def _add_dependency(self, model_node: Node, element: ET.Element) -> None:
        kind = _DEPENDENCY_TAGS[element.tag]
        node = model_node.add_child(_local_name(element.tag), kind)
        node.set_property(lexicon.SCHEMA_LOCATION, element.get("schemaLocation"))
        if kind == lexicon.IMPORT:
            node.set_property(lexicon.NAMESPACE, element.get("namespace"))


def _local_name(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag
