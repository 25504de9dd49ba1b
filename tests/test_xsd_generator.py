from pathlib import Path

import pytest

from schema_modeler import lexicon
from schema_modeler.exceptions import ModelGenerationError
from schema_modeler.store import NodeStore
from schema_modeler.xsd_generator import XsdModelGenerator

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"


def _model(store, path="/Model/Books.xsd"):
    parent_path, name = path.rsplit("/", 1)
    return store.create_path(parent_path).add_child(name, lexicon.SCHEMA_DOCUMENT)


def test_generates_include_and_declarations():
    store = NodeStore()
    model = _model(store)
    XsdModelGenerator().generate((FIXTURES / "Books" / "Books.xsd").read_bytes(), model)

    assert model.get_property(lexicon.TARGET_NAMESPACE) == "http://example.org/books"
    children = model.children()
    assert [c.name for c in children] == ["include", "Books"]

    include = children[0]
    assert include.kind == lexicon.INCLUDE
    assert include.get_property(lexicon.SCHEMA_LOCATION) == "./data/types/BookDatatypes.xsd"

    books = children[1]
    assert books.kind == "xs:elementDeclaration"
    assert books.get_property(lexicon.NAME) == "Books"


def test_generates_import_with_namespace():
    store = NodeStore()
    model = _model(store, "/Model/Books/SOAP/BooksWithSOAPEncoding.xsd")
    content = (FIXTURES / "Books" / "SOAP" / "BooksWithSOAPEncoding.xsd").read_bytes()
    XsdModelGenerator().generate(content, model)

    kinds = {c.name: c.kind for c in model.children()}
    assert kinds["import"] == lexicon.IMPORT
    assert kinds["include"] == lexicon.INCLUDE
    assert kinds["BookArray"] == "xs:complexTypeDefinition"

    imported = model.child("import")
    assert imported.get_property(lexicon.NAMESPACE) == "http://schemas.xmlsoap.org/soap/encoding/"
    assert imported.get_property(lexicon.SCHEMA_LOCATION) == "./encoding/soap_encoding.xsd"


def test_schema_without_dependencies():
    store = NodeStore()
    model = _model(store, "/Model/music.xsd")
    XsdModelGenerator().generate((FIXTURES / "music.xsd").read_bytes(), model)

    assert all(c.kind not in lexicon.DEPENDENCY_KINDS for c in model.children())
    assert [c.name for c in model.children()] == ["Music", "Album"]


def test_repeated_dependency_elements():
    content = b"""<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
    <!-- two namespaces -->
    <xs:import namespace="urn:a" schemaLocation="a.xsd"/>
    <xs:import namespace="urn:b"/>
    <xs:redefine schemaLocation="../base.xsd"/>
    <xs:simpleType>
        <xs:restriction base="xs:string"/>
    </xs:simpleType>
</xs:schema>"""
    store = NodeStore()
    model = _model(store)
    XsdModelGenerator().generate(content, model)

    assert [c.name for c in model.children()] == ["import", "import[2]", "redefine"]
    assert model.get_property(lexicon.TARGET_NAMESPACE) is None
    assert not model.child("import[2]").has_property(lexicon.SCHEMA_LOCATION)
    assert model.child("redefine").kind == lexicon.REDEFINE


def test_invalid_xml():
    store = NodeStore()
    with pytest.raises(ModelGenerationError):
        XsdModelGenerator().generate(b"<xs:schema", _model(store))


def test_non_schema_root():
    store = NodeStore()
    with pytest.raises(ModelGenerationError) as exc_info:
        XsdModelGenerator().generate(b"<books><book/></books>", _model(store))
    assert "expected xs:schema" in str(exc_info.value)
