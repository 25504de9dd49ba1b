"""Import and generate the bundled schema fixtures end to end."""

import threading
import time
from pathlib import Path

import pytest

from schema_modeler import lexicon
from schema_modeler.config import ModelerConfig
from schema_modeler.exceptions import (
    ArtifactImportError,
    MalformedReferenceError,
    ModelerError,
    ModelGenerationError,
)
from schema_modeler.model_types import ModelType, ModelTypeManager
from schema_modeler.modeler import Modeler
from schema_modeler.models import Dependency
from schema_modeler.xsd_generator import XsdModelGenerator

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"
BOOKS = FIXTURES / "Books" / "Books.xsd"
BOOKS_SOAP = FIXTURES / "Books" / "SOAP" / "BooksWithSOAPEncoding.xsd"
MOVIES = FIXTURES / "Movies" / "Movies.xsd"
MUSIC = FIXTURES / "music.xsd"


@pytest.fixture
def modeler():
    return Modeler()


def test_import_file(modeler):
    path = modeler.import_file(BOOKS, "Artifact/Books")

    assert path == "/Artifact/Books/Books.xsd"
    artifact = modeler.store.node(path)
    assert artifact.kind == lexicon.ARTIFACT
    assert artifact.get_property(lexicon.CONTENT) == BOOKS.read_bytes()
    assert artifact.get_property(lexicon.SIZE) == BOOKS.stat().st_size
    assert artifact.get_property(lexicon.EXTERNAL_LOCATION) == BOOKS.as_uri()


def test_import_file_to_root(modeler):
    assert modeler.import_file(MOVIES) == "/Movies.xsd"


def test_import_missing_file(modeler, tmp_path):
    with pytest.raises(ValueError):
        modeler.import_file(tmp_path / "missing.xsd")


def test_import_url_failure(modeler, tmp_path):
    with pytest.raises(ArtifactImportError) as exc_info:
        modeler.import_url((tmp_path / "missing.xsd").as_uri(), "/Artifact/missing.xsd")
    assert exc_info.value.url.endswith("missing.xsd")
    assert not modeler.store.has_node("/Artifact/missing.xsd")


def test_books_dependency_is_materialized(modeler):
    artifact = modeler.import_file(BOOKS, "Artifact/Books")
    model = modeler.generate_model(artifact, "/Model/Books/Books.xsd")

    assert model == "/Model/Books/Books.xsd"
    assert modeler.dependencies(model) == [
        Dependency(
            "/Model/Books/data/types/BookDatatypes.xsd",
            True,
            ["./data/types/BookDatatypes.xsd"],
        )
    ]

    dependency_artifact = modeler.store.node("/Artifact/Books/data/types/BookDatatypes.xsd")
    expected_location = (FIXTURES / "Books" / "data" / "types" / "BookDatatypes.xsd").as_uri()
    assert dependency_artifact.get_property(lexicon.EXTERNAL_LOCATION) == expected_location

    dependency_model = modeler.store.node("/Model/Books/data/types/BookDatatypes.xsd")
    assert dependency_model.get_property(lexicon.MODEL_TYPE) == "xsd"
    assert dependency_model.child("BookInfo").kind == "xs:complexTypeDefinition"
    assert modeler.dependencies(dependency_model.path) == []


def test_books_soap_dependencies(modeler):
    artifact = modeler.import_file(BOOKS_SOAP, "Artifact/Books/SOAP")
    model = modeler.generate_model(artifact, "/Model/Books/SOAP/BooksWithSOAPEncoding.xsd", "xsd")

    dependencies = modeler.dependencies(model)
    assert [d.path for d in dependencies] == [
        "/Model/Books/SOAP/encoding/soap_encoding.xsd",
        "/Model/Books/data/types/BookDatatypes.xsd",
    ]
    assert [d.source_references for d in dependencies] == [
        ["./encoding/soap_encoding.xsd"],
        ["../data/types/BookDatatypes.xsd"],
    ]
    assert all(d.exists for d in dependencies)
    assert modeler.store.has_node("/Artifact/Books/data/types/BookDatatypes.xsd")
    assert modeler.store.has_node("/Artifact/Books/SOAP/encoding/soap_encoding.xsd")


def test_books_soap_reuses_existing_dependency(modeler):
    books = modeler.import_file(BOOKS, "Artifact/Books")
    modeler.generate_model(books, "/Model/Books/Books.xsd")
    soap = modeler.import_file(BOOKS_SOAP, "Artifact/Books/SOAP")
    model = modeler.generate_model(soap, "/Model/Books/SOAP/BooksWithSOAPEncoding.xsd")

    assert all(d.exists for d in modeler.dependencies(model))
    types = modeler.store.node("/Model/Books/data/types")
    assert [c.name for c in types.children()] == ["BookDatatypes.xsd"]


def test_movies_at_store_root(modeler):
    artifact = modeler.import_file(MOVIES)
    model = modeler.generate_model(artifact, "/Model/Movies.xsd")

    [dependency] = modeler.dependencies(model)
    assert dependency.path == "/Model/MovieDatatypes.xsd"
    assert dependency.exists is True
    assert dependency.source_references == ["MovieDatatypes.xsd"]
    assert modeler.store.has_node("/MovieDatatypes.xsd")


def test_schema_without_dependencies(modeler):
    artifact = modeler.import_file(MUSIC, "Artifact")
    model = modeler.generate_model(artifact, "/Model/music.xsd")

    assert modeler.dependencies(model) == []
    node = modeler.store.node(model)
    assert all(c.kind != lexicon.DEPENDENCIES for c in node.children())


def test_artifacts_removed_when_not_persisted(modeler):
    artifact = modeler.import_file(BOOKS, "Artifact/Books")
    modeler.generate_model(artifact, "/Model/Books/Books.xsd", persist_artifacts=False)

    assert not modeler.store.has_node("/Artifact/Books/Books.xsd")
    assert not modeler.store.has_node("/Artifact/Books/data/types/BookDatatypes.xsd")
    assert modeler.store.has_node("/Model/Books/data/types/BookDatatypes.xsd")
    assert modeler.dependencies("/Model/Books/Books.xsd")[0].exists is True


def test_persist_artifacts_default_from_config():
    modeler = Modeler(config=ModelerConfig(persist_artifacts=False))
    artifact = modeler.import_file(MUSIC)
    modeler.generate_model(artifact, "/Model/music.xsd")
    assert not modeler.store.has_node(artifact)


def test_mutually_dependent_schemas_terminate(modeler, tmp_path):
    template = """<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
    <xs:include schemaLocation="{other}"/>
    <xs:element name="{name}" type="xs:string"/>
</xs:schema>"""
    (tmp_path / "A.xsd").write_text(template.format(other="B.xsd", name="A"))
    (tmp_path / "B.xsd").write_text(template.format(other="A.xsd", name="B"))

    artifact = modeler.import_file(tmp_path / "A.xsd", "Artifact")
    modeler.generate_model(artifact, "/Model/A.xsd")

    [to_b] = modeler.dependencies("/Model/A.xsd")
    [to_a] = modeler.dependencies("/Model/B.xsd")
    assert to_b.path == "/Model/B.xsd" and to_b.exists
    assert to_a.path == "/Model/A.xsd" and to_a.exists


def test_unreachable_dependency_is_recorded(modeler, tmp_path):
    (tmp_path / "Root.xsd").write_text(
        '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
        '<xs:include schemaLocation="missing/Types.xsd"/>'
        "</xs:schema>"
    )
    artifact = modeler.import_file(tmp_path / "Root.xsd", "Artifact")
    model = modeler.generate_model(artifact, "/Model/Root.xsd")

    [dependency] = modeler.dependencies(model)
    assert dependency.path == "/Model/missing/Types.xsd"
    assert dependency.exists is False
    assert not modeler.store.has_node("/Artifact/missing/Types.xsd")


def test_process_dependencies_is_idempotent(modeler):
    artifact = modeler.import_file(BOOKS, "Artifact/Books")
    model = modeler.generate_model(artifact, "/Model/Books/Books.xsd")
    before = modeler.dependencies(model)

    container = modeler.process_dependencies(model)

    assert container == "/Model/Books/Books.xsd/dependencies"
    assert modeler.dependencies(model) == before
    node = modeler.store.node(model)
    assert len([c for c in node.children() if c.kind == lexicon.DEPENDENCIES]) == 1


def test_process_dependencies_requires_model_type(modeler):
    modeler.store.create_path("/Model/folder")
    with pytest.raises(ModelerError):
        modeler.process_dependencies("/Model/folder")


def test_generate_errors(modeler):
    artifact = modeler.import_file(MUSIC, "Artifact")
    modeler.generate_model(artifact, "/Model/music.xsd")

    with pytest.raises(ModelGenerationError):
        modeler.generate_model(artifact, "/Model/music.xsd")
    with pytest.raises(ModelGenerationError):
        modeler.generate_model("/Artifact/none.xsd", "/Model/none.xsd")
    with pytest.raises(ModelGenerationError):
        modeler.generate_model("/Model", "/Model/other.xsd")
    with pytest.raises(ModelGenerationError):
        modeler.generate_model(artifact, "/Model/other.xsd", "wsdl")


def test_no_model_type_for_extension(modeler):
    artifact = modeler.import_artifact(b"plain text", "/Artifact/notes.txt")
    with pytest.raises(ModelGenerationError):
        modeler.generate_model(artifact, "/Model/notes.txt")


def test_failed_generation_leaves_no_model(modeler):
    artifact = modeler.import_artifact(b"<not-a-schema/>", "/Artifact/Broken.xsd")
    with pytest.raises(ModelGenerationError):
        modeler.generate_model(artifact, "/Model/Broken.xsd")
    assert not modeler.store.has_node("/Model/Broken.xsd")


def test_store_persists_between_modelers(tmp_path):
    config = ModelerConfig(store_path=tmp_path / "store.json")
    first = Modeler(config=config)
    artifact = first.import_file(BOOKS, "Artifact/Books")
    first.generate_model(artifact, "/Model/Books/Books.xsd")

    second = Modeler(config=config)
    [dependency] = second.dependencies("/Model/Books/Books.xsd")
    assert dependency.exists is True
    content = second.store.node(artifact).get_property(lexicon.CONTENT)
    assert content == BOOKS.read_bytes()


def test_failed_dependency_processing_leaves_no_model(modeler, tmp_path):
    (tmp_path / "Bad.xsd").write_text(
        '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
        '<xs:include schemaLocation="a b.xsd"/>'
        "</xs:schema>"
    )
    artifact = modeler.import_file(tmp_path / "Bad.xsd", "Artifact")

    with pytest.raises(MalformedReferenceError):
        modeler.generate_model(artifact, "/Model/Bad.xsd", "xsd")
    assert not modeler.store.has_node("/Model/Bad.xsd")

    with pytest.raises(MalformedReferenceError):
        modeler.generate_model(artifact, "/Model/Bad.xsd", "xsd")
    assert not modeler.store.has_node("/Model/Bad.xsd")
    assert modeler.store.has_node(artifact)


def test_failed_generation_releases_in_progress_path(modeler):
    artifact = modeler.import_artifact(b"<not-a-schema/>", "/Artifact/Broken.xsd")
    in_progress = set()
    with pytest.raises(ModelGenerationError):
        modeler.generate_model(artifact, "/Model/Broken.xsd", in_progress=in_progress)
    assert in_progress == set()


def test_concurrent_generation_creates_one_model():
    class SlowGenerator(XsdModelGenerator):
        def generate(self, content, model_node):
            time.sleep(0.05)
            return super().generate(content, model_node)

    manager = ModelTypeManager(register_defaults=False)
    manager.register(
        ModelType(id="xsd", category="xsd", file_extensions=(".xsd",), generator=SlowGenerator())
    )
    modeler = Modeler(model_type_manager=manager)
    artifact = modeler.import_file(MUSIC, "Artifact")

    barrier = threading.Barrier(2)
    results = []
    errors = []

    def generate():
        barrier.wait()
        try:
            results.append(modeler.generate_model(artifact, "/Model/music.xsd"))
        except ModelGenerationError as e:
            errors.append(e)

    threads = [threading.Thread(target=generate) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == ["/Model/music.xsd"]
    assert len(errors) == 1
    assert "already exists" in str(errors[0])
    assert [c.name for c in modeler.store.node("/Model").children()] == ["music.xsd"]
