"""Hierarchical node store holding artifacts and generated models.

The store is a small JCR-like repository: every node has a kind, a set of
properties and an ordered list of children, and is addressed by an absolute
``/``-separated path. Callers work with :class:`Node` handles, which are just
``(store, path)`` pairs resolved through the store's path index on every
access, so a handle never points at a stale object after a save or reload.

Mutations accumulate in memory. :meth:`NodeStore.save` marks the end of a unit
of work and, when a ``persist_path`` is configured, writes a JSON snapshot that
is reloaded the next time a store is opened on the same file.

Example:
        from schema_modeler.store import NodeStore

        store = NodeStore()
        books = store.create_path("/Model/Books")
        books.add_child("Books.xsd", "xs:schemaDocument")
        store.node("/Model/Books/Books.xsd").depth    # -> 3
        store.root.has_child_at_path("Model/Books")   # -> True

Notes:
* Same-name siblings are allowed; the second ``dependency`` child of a node is
    stored as ``dependency[2]``, the third as ``dependency[3]`` and so on.
* Binary property values (artifact content) are base64 encoded in snapshots.
"""

from __future__ import annotations

import base64
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from . import lexicon
from .exceptions import NodeNotFoundError

logger = logging.getLogger(__name__)

SEPARATOR = "/"


def normalize_store_path(path: str) -> str:
    """Return ``path`` as an absolute store path without a trailing separator.

    Raises:
        ValueError: If the path is empty or contains ``.`` or ``..`` segments.
    """
    if not path or not path.strip():
        raise ValueError("Store path must not be empty")
    segments = [s for s in path.split(SEPARATOR) if s]
    if any(s in (".", "..") for s in segments):
        raise ValueError(f"Store path must not contain relative segments: {path}")
    return SEPARATOR + SEPARATOR.join(segments)


def join_path(base: str, relative: str) -> str:
    """Join a store path and a relative path with exactly one separator."""
    if not relative:
        return base
    if base.endswith(SEPARATOR):
        return base + relative.lstrip(SEPARATOR)
    return base + SEPARATOR + relative.lstrip(SEPARATOR)


@dataclass
class _Record:
    name: str
    kind: str
    properties: Dict[str, Any] = field(default_factory=dict)
    children: List[str] = field(default_factory=list)


class Node:
    """Handle to a node in a :class:`NodeStore`."""

    __slots__ = ("_store", "_path")

    def __init__(self, store: "NodeStore", path: str) -> None:
        self._store = store
        self._path = path

    @property
    def store(self) -> "NodeStore":
        return self._store

    @property
    def path(self) -> str:
        return self._path

    @property
    def name(self) -> str:
        return self._record().name

    @property
    def kind(self) -> str:
        return self._record().kind

    @property
    def depth(self) -> int:
        return len([s for s in self._path.split(SEPARATOR) if s])

    def is_root(self) -> bool:
        return self._path == SEPARATOR

    def parent(self) -> "Node":
        """Return the parent node.

        Raises:
            NodeNotFoundError: If called on the root node.
        """
        if self.is_root():
            raise NodeNotFoundError("/..")
        parent_path = self._path.rsplit(SEPARATOR, 1)[0] or SEPARATOR
        return Node(self._store, parent_path)

    def children(self) -> List["Node"]:
        """Return child handles in insertion order."""
        record = self._record()
        return [Node(self._store, join_path(self._path, name)) for name in record.children]

    def child(self, name: str) -> Optional["Node"]:
        if name in self._record().children:
            return Node(self._store, join_path(self._path, name))
        return None

    def has_child_at_path(self, relative_path: str) -> bool:
        """Return True if a descendant exists at ``relative_path``.

        Relative segments (``.`` and ``..``) are never matched; callers are
        expected to have stripped them already.
        """
        if not relative_path:
            return False
        segments = [s for s in relative_path.split(SEPARATOR) if s]
        if not segments or any(s in (".", "..") for s in segments):
            return False
        return self._store.has_node(join_path(self._path, SEPARATOR.join(segments)))

    def get_property(self, name: str, default: Any = None) -> Any:
        return self._record().properties.get(name, default)

    def has_property(self, name: str) -> bool:
        return name in self._record().properties

    def set_property(self, name: str, value: Any) -> None:
        with self._store._lock:
            record = self._record()
            if value is None:
                record.properties.pop(name, None)
            else:
                record.properties[name] = value

    def properties(self) -> Dict[str, Any]:
        return dict(self._record().properties)

    def add_child(self, name: str, kind: str) -> "Node":
        """Create a child node and return its handle."""
        return self._store._add_child(self._path, name, kind)

    def remove(self) -> None:
        """Remove this node and its whole subtree."""
        self._store._remove(self._path)

    def _record(self) -> _Record:
        return self._store._get_record(self._path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._store is other._store and self._path == other._path

    def __hash__(self) -> int:
        return hash((id(self._store), self._path))

    def __repr__(self) -> str:
        return f"Node({self._path!r})"


class NodeStore:
    """In-memory node repository with optional JSON snapshot persistence.

    Args:
        persist_path: Optional snapshot file. Loaded on construction when it
            exists and rewritten on every :meth:`save`.
    """

    def __init__(self, persist_path: Optional[Union[str, Path]] = None) -> None:
        self._lock = threading.RLock()
        self._records: Dict[str, _Record] = {SEPARATOR: _Record(name="", kind=lexicon.ROOT)}
        self.persist_path = Path(persist_path) if persist_path else None
        self.save_count = 0
        if self.persist_path and self.persist_path.exists():
            self._load()

    @property
    def root(self) -> Node:
        return Node(self, SEPARATOR)

    def node(self, path: str) -> Node:
        """Return the node at ``path``.

        Raises:
            NodeNotFoundError: If nothing exists at ``path``.
        """
        normalized = normalize_store_path(path)
        if normalized not in self._records:
            raise NodeNotFoundError(normalized)
        return Node(self, normalized)

    def has_node(self, path: str) -> bool:
        try:
            return normalize_store_path(path) in self._records
        except ValueError:
            return False

    def create_path(self, path: str, kind: str = lexicon.FOLDER) -> Node:
        """Return the node at ``path``, creating missing folders on the way."""
        normalized = normalize_store_path(path)
        with self._lock:
            current = self.root
            for segment in [s for s in normalized.split(SEPARATOR) if s]:
                existing = current.child(segment)
                current = existing if existing is not None else current.add_child(segment, kind)
            return current

    def save(self) -> None:
        """Commit the current session, writing a snapshot when configured."""
        with self._lock:
            self.save_count += 1
            if self.persist_path:
                self.persist_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.persist_path, "w", encoding="utf-8") as f:
                    json.dump(self._snapshot(), f, indent=2)
                logger.debug(f"Saved node store snapshot to {self.persist_path}")

    def to_dict(self, path: str = SEPARATOR, depth: Optional[int] = None) -> dict:
        """Return a JSON-ready view of the subtree at ``path``.

        Args:
            path: Subtree root.
            depth: Maximum number of child levels to include (``None`` = all).
        """
        node = self.node(path)
        record = node._record()
        properties = {
            key: _describe_value(value) for key, value in record.properties.items()
        }
        children: List[dict] = []
        if depth is None or depth > 0:
            next_depth = None if depth is None else depth - 1
            children = [self.to_dict(child.path, next_depth) for child in node.children()]
        return {
            "path": node.path,
            "name": record.name,
            "kind": record.kind,
            "properties": properties,
            "children": children,
        }

    # ---------------- Internal helpers ---------------- #

    def _get_record(self, path: str) -> _Record:
        record = self._records.get(path)
        if record is None:
            raise NodeNotFoundError(path)
        return record

    def _add_child(self, parent_path: str, name: str, kind: str) -> Node:
        if not name or SEPARATOR in name or name in (".", ".."):
            raise ValueError(f"Invalid node name: {name!r}")
        with self._lock:
            parent = self._get_record(parent_path)
            unique = name
            index = 1
            while unique in parent.children:
                index += 1
                unique = f"{name}[{index}]"
            child_path = join_path(parent_path, unique)
            self._records[child_path] = _Record(name=unique, kind=kind)
            parent.children.append(unique)
            return Node(self, child_path)

    def _remove(self, path: str) -> None:
        if path == SEPARATOR:
            raise ValueError("The root node cannot be removed")
        with self._lock:
            record = self._get_record(path)
            parent_path = path.rsplit(SEPARATOR, 1)[0] or SEPARATOR
            self._get_record(parent_path).children.remove(record.name)
            prefix = path + SEPARATOR
            for key in [k for k in self._records if k == path or k.startswith(prefix)]:
                del self._records[key]

    def _snapshot(self) -> dict:
        return {
            "nodes": {
                path: {
                    "name": record.name,
                    "kind": record.kind,
                    "properties": {
                        key: _encode_value(value)
                        for key, value in record.properties.items()
                    },
                    "children": list(record.children),
                }
                for path, record in self._records.items()
            }
        }

    def _load(self) -> None:
        assert self.persist_path is not None
        with open(self.persist_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        records: Dict[str, _Record] = {}
        for path, raw in data.get("nodes", {}).items():
            records[path] = _Record(
                name=raw["name"],
                kind=raw["kind"],
                properties={k: _decode_value(v) for k, v in raw["properties"].items()},
                children=list(raw["children"]),
            )
        if SEPARATOR in records:
            self._records = records
        logger.debug(f"Loaded {len(records)} nodes from {self.persist_path}")


def _encode_value(value: Any) -> Any:
    if isinstance(value, bytes):
        return {"__bytes__": base64.b64encode(value).decode("ascii")}
    return value


def _decode_value(value: Any) -> Any:
    if isinstance(value, dict) and "__bytes__" in value:
        return base64.b64decode(value["__bytes__"])
    return value


def _describe_value(value: Any) -> Any:
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    return value
