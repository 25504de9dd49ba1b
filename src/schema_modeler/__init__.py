"""Schema Modeler
==================

Import XML Schema artifacts into a hierarchical node store, generate
structural models for them, and discover, record and materialize the
documents they depend on.

Key capabilities
----------------
- Store artifacts and models in a JCR-like :class:`~schema_modeler.store.NodeStore`
  with optional JSON snapshot persistence.
- Generate shallow XSD models (imports, includes, redefines and top-level
  declarations) with :class:`~schema_modeler.xsd_generator.XsdModelGenerator`.
- Record ``import`` / ``include`` / ``redefine`` references as dependency
  records and resolve relative references against the store hierarchy.
- Fetch referenced documents that are not in the store yet, import them, and
  generate their models recursively (best effort: a failing dependency is
  logged and skipped).
- REST (FastAPI) and command line front ends.

Design principles
-----------------
1. **Best effort below the schema node** – only a missing schema node aborts
   dependency processing; per-dependency failures are logged.
2. **Mirrored addressing** – the number of ``../`` hops applied in the store
   is applied to the external location too, so dependencies are fetched from
   where the referencing document came from.
3. **Bounded recursion** – nested generation shares an in-progress set of
   model paths.

Minimal quick start
-------------------
>>> from schema_modeler import Modeler
>>> modeler = Modeler()
>>> artifact = modeler.import_file('Books/Books.xsd', 'Artifact/Books')
>>> model = modeler.generate_model(artifact, 'Model/Books/Books.xsd', 'xsd')
>>> [d.path for d in modeler.dependencies(model)]

FastAPI application instance (for ASGI servers like uvicorn):
>>> from schema_modeler.app import app  # noqa: F401
"""

__version__ = "0.1.0"

from .exceptions import ModelerError
from .modeler import Modeler
from .models import Dependency, MissingDependency
from .processor import XsdDependencyProcessor
from .store import NodeStore

__all__ = [
    "Dependency",
    "MissingDependency",
    "Modeler",
    "ModelerError",
    "NodeStore",
    "XsdDependencyProcessor",
]
