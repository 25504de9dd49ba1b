"""FastAPI application exposing the modeler.

Quick start (run the server)::

    uvicorn schema_modeler.run_server:app --reload

Endpoints:

    GET  /health                      Basic health probe
    GET  /model-types                 Registered model types
    POST /artifacts                   Import an artifact from a URL
    POST /models                      Generate a model (and its dependencies)
    GET  /models/dependencies?path=   Recorded dependencies of a model
    POST /models/dependencies         Re-run dependency processing for a model
    GET  /nodes?path=&depth=          Browse the node store

Example: import a schema and generate its model::

    curl -X POST http://localhost:8000/artifacts \
         -H "Content-Type: application/json" \
         -d '{"url": "http://example.org/schemas/Root.xsd", "path": "/Artifact/schemas/Root.xsd"}'

    curl -X POST http://localhost:8000/models \
         -H "Content-Type: application/json" \
         -d '{"artifact_path": "/Artifact/schemas/Root.xsd", "model_path": "/Model/schemas/Root.xsd"}'

    curl "http://localhost:8000/models/dependencies?path=/Model/schemas/Root.xsd" | jq .

Error handling:
    * Modeler errors are returned as JSON ``{"error": ..., "detail": ...}``
      payloads: unknown store paths map to 404, invalid input to 400, fetch
      failures to 502 and anything else to 500.

State:
    * One :class:`~schema_modeler.modeler.Modeler` is shared by all requests.
      Set ``MODELER_STORE_PATH`` to persist the store between restarts.
"""

from __future__ import annotations

import time
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__, lexicon
from .config import ModelerConfig
from .exceptions import (
    ArtifactImportError,
    MalformedReferenceError,
    ModelGenerationError,
    ModelerError,
    NodeNotFoundError,
)
from .modeler import Modeler

app = FastAPI(
    title="Schema Modeler API",
    version=__version__,
    description="API for importing XML Schema artifacts, generating models and resolving their dependencies",
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.middleware("http")
async def timing_headers(request: Request, call_next):
    """Add response timing headers."""
    start_time = time.time()
    response = await call_next(request)
    response.headers["X-Response-Time"] = f"{time.time() - start_time:.3f}s"
    response.headers["X-API-Version"] = __version__
    return response


class ArtifactImportRequest(BaseModel):
    """Request model for artifact import."""

    url: str = Field(..., description="URL to fetch (http, https or file)")
    path: str = Field(..., description="Store path for the artifact")


class ArtifactImportResponse(BaseModel):
    """Response model for artifact import."""

    path: str = Field(..., description="Store path of the imported artifact")


class GenerateModelRequest(BaseModel):
    """Request model for model generation."""

    model_config = ConfigDict(protected_namespaces=())

    artifact_path: str = Field(..., description="Store path of the artifact")
    model_path: str = Field(..., description="Store path for the generated model")
    model_type: Optional[str] = Field(
        None, description="Model type id (chosen from the artifact extension if omitted)"
    )
    persist_artifacts: Optional[bool] = Field(
        None, description="Keep artifacts after their models are generated"
    )


class DependencyModel(BaseModel):
    """A recorded model dependency."""

    path: Optional[str] = Field(None, description="Store path of the dependency model")
    exists: bool = Field(..., description="Whether the dependency model exists")
    source_references: List[str] = Field(
        default_factory=list, description="Raw schema locations"
    )


class ModelResponse(BaseModel):
    """Response model for model generation and dependency listing."""

    model_config = ConfigDict(protected_namespaces=())

    model_path: str = Field(..., description="Store path of the model")
    dependencies_path: Optional[str] = Field(
        None, description="Store path of the dependencies container"
    )
    dependencies: List[DependencyModel] = Field(default_factory=list)


class ProcessDependenciesRequest(BaseModel):
    """Request model for re-running dependency processing."""

    model_config = ConfigDict(protected_namespaces=())

    model_path: str = Field(..., description="Store path of the model")
    persist_artifacts: Optional[bool] = Field(None)


@lru_cache(maxsize=1)
def get_modeler() -> Modeler:
    return Modeler(config=ModelerConfig.from_env())


def _model_response(modeler: Modeler, model_path: str) -> ModelResponse:
    model = modeler.store.node(model_path)
    container = next(
        (c.path for c in model.children() if c.kind == lexicon.DEPENDENCIES), None
    )
    return ModelResponse(
        model_path=model.path,
        dependencies_path=container,
        dependencies=[DependencyModel(**d.to_dict()) for d in modeler.dependencies(model.path)],
    )


@app.get("/health")
def health(modeler: Modeler = Depends(get_modeler)) -> Dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "persistent": modeler.store.persist_path is not None,
    }


@app.get("/model-types")
def model_types(modeler: Modeler = Depends(get_modeler)) -> Dict[str, Any]:
    """List registered model types."""
    return {"model_types": [t.to_dict() for t in modeler.model_type_manager.model_types()]}


@app.post("/artifacts", response_model=ArtifactImportResponse)
def import_artifact(
    request: ArtifactImportRequest, modeler: Modeler = Depends(get_modeler)
) -> ArtifactImportResponse:
    """Fetch a URL into the store."""
    return ArtifactImportResponse(path=modeler.import_url(request.url, request.path))


@app.post("/models", response_model=ModelResponse)
def generate_model(
    request: GenerateModelRequest, modeler: Modeler = Depends(get_modeler)
) -> ModelResponse:
    """Generate a model and process its dependencies."""
    model_path = modeler.generate_model(
        request.artifact_path,
        request.model_path,
        request.model_type,
        persist_artifacts=request.persist_artifacts,
    )
    return _model_response(modeler, model_path)


@app.get("/models/dependencies", response_model=ModelResponse)
def get_dependencies(
    path: str = Query(..., description="Store path of the model"),
    modeler: Modeler = Depends(get_modeler),
) -> ModelResponse:
    """Return the recorded dependencies of a model."""
    return _model_response(modeler, path)


@app.post("/models/dependencies", response_model=ModelResponse)
def process_dependencies(
    request: ProcessDependenciesRequest, modeler: Modeler = Depends(get_modeler)
) -> ModelResponse:
    """Re-run dependency processing for an existing model."""
    modeler.process_dependencies(
        request.model_path, persist_artifacts=request.persist_artifacts
    )
    return _model_response(modeler, request.model_path)


@app.get("/nodes")
def get_nodes(
    path: str = Query("/", description="Store path"),
    depth: Optional[int] = Query(1, ge=0, description="Child levels to include"),
    modeler: Modeler = Depends(get_modeler),
) -> Dict[str, Any]:
    """Browse the node store."""
    return {"node": modeler.store.to_dict(path, depth=depth)}


@app.exception_handler(NodeNotFoundError)
async def node_not_found_handler(request: Request, exc: NodeNotFoundError):
    return JSONResponse(
        status_code=404,
        content={"error": "Not Found", "detail": str(exc), "path": str(request.url.path)},
    )


@app.exception_handler(ArtifactImportError)
async def artifact_import_handler(request: Request, exc: ArtifactImportError):
    return JSONResponse(
        status_code=502,
        content={"error": "Bad Gateway", "detail": str(exc), "url": exc.url},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"error": "Bad Request", "detail": str(exc)},
    )


@app.exception_handler(ModelerError)
async def modeler_error_handler(request: Request, exc: ModelerError):
    return JSONResponse(
        status_code=500,
        content={"error": "Modeler Error", "detail": str(exc)},
    )


@app.exception_handler(MalformedReferenceError)
@app.exception_handler(ModelGenerationError)
async def bad_input_handler(request: Request, exc: ModelerError):
    return JSONResponse(
        status_code=400,
        content={"error": "Bad Request", "detail": str(exc)},
    )
