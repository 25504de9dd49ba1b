"""Fetch external artifacts and store them in the node store.

Artifacts are raw documents (typically XSD files) kept as ``modeler:artifact``
nodes. Each artifact remembers the URL it was fetched from in
``modeler:externalLocation``; model generation copies that value to the model
node so that relative dependencies can later be fetched from the same place.

Supported URL schemes are the ones ``urllib.request`` handles out of the box:
``http``, ``https`` and ``file``.

Example:
        from schema_modeler.importer import ArtifactImporter
        from schema_modeler.store import NodeStore

        importer = ArtifactImporter(NodeStore(), timeout=10)
        path = importer.import_url(
            "https://www.w3.org/2001/xml.xsd", "/Artifact/w3c/xml.xsd"
        )
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from typing import Optional

from . import lexicon
from .exceptions import ArtifactImportError
from .store import NodeStore, normalize_store_path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def fetch(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Read the resource at ``url``.

    Raises:
        ArtifactImportError: On any network, file or URL format failure.
    """
    logger.debug(f"Fetching {url}")
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            return response.read()
    except urllib.error.URLError as e:
        raise ArtifactImportError(url, str(e.reason)) from e
    except (OSError, ValueError) as e:
        raise ArtifactImportError(url, str(e)) from e


class ArtifactImporter:
    """Store artifact bytes at a store path.

    Args:
        store: Target node store.
        timeout: Timeout in seconds for each fetch.
    """

    def __init__(
        self,
        store: NodeStore,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.store = store
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def import_content(
        self, content: bytes, path: str, external_location: Optional[str] = None
    ) -> str:
        """Create (or replace the content of) the artifact at ``path``.

        Returns:
            Absolute store path of the artifact.

        Raises:
            ValueError: If ``path`` is occupied by a node that is not an artifact.
        """
        normalized = normalize_store_path(path)
        if self.store.has_node(normalized):
            node = self.store.node(normalized)
            if node.kind != lexicon.ARTIFACT:
                raise ValueError(f"Node at {normalized} is not an artifact ({node.kind})")
        else:
            parent_path, name = normalized.rsplit("/", 1)
            parent = self.store.create_path(parent_path) if parent_path else self.store.root
            node = parent.add_child(name, lexicon.ARTIFACT)

        node.set_property(lexicon.CONTENT, content)
        node.set_property(lexicon.SIZE, len(content))
        node.set_property(lexicon.EXTERNAL_LOCATION, external_location)
        self.logger.info(f"Imported artifact {node.path} ({len(content)} bytes)")
        return node.path

    def import_url(self, url: str, path: str) -> str:
        """Fetch ``url`` and store it at ``path``.

        Raises:
            ArtifactImportError: If the fetch fails.
        """
        content = fetch(url, timeout=self.timeout)
        return self.import_content(content, path, external_location=url)
