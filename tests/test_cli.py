import json
from pathlib import Path

import pytest

from schema_modeler.cli import main

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"


@pytest.fixture
def store_args(tmp_path):
    return ["--store", str(tmp_path / "store.json")]


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "schema-modeler" in capsys.readouterr().out


def test_import_generate_and_list(store_args, capsys):
    books = FIXTURES / "Books" / "Books.xsd"
    assert main(store_args + ["import", str(books), "--folder", "Artifact/Books"]) == 0
    assert "✓ Imported" in capsys.readouterr().out

    assert main(store_args + ["generate", "/Artifact/Books/Books.xsd", "/Model/Books/Books.xsd"]) == 0
    out = capsys.readouterr().out
    assert "✓ Generated model: /Model/Books/Books.xsd" in out
    assert "/Model/Books/data/types/BookDatatypes.xsd" in out

    assert main(store_args + ["dependencies", "/Model/Books/Books.xsd", "--json"]) == 0
    dependencies = json.loads(capsys.readouterr().out)
    assert dependencies == [
        {
            "path": "/Model/Books/data/types/BookDatatypes.xsd",
            "exists": True,
            "source_references": ["./data/types/BookDatatypes.xsd"],
        }
    ]

    assert main(store_args + ["dependencies", "/Model/Books/Books.xsd", "--refresh"]) == 0
    assert "Dependencies of /Model/Books/Books.xsd:" in capsys.readouterr().out


def test_import_url(store_args, capsys):
    url = (FIXTURES / "music.xsd").as_uri()
    assert main(store_args + ["import", url, "--path", "/Artifact/music.xsd"]) == 0
    assert "/Artifact/music.xsd" in capsys.readouterr().out

    assert main(store_args + ["show", "/Artifact", "--depth", "1"]) == 0
    tree = json.loads(capsys.readouterr().out)
    assert [c["name"] for c in tree["children"]] == ["music.xsd"]


def test_import_missing_file(store_args, tmp_path, capsys):
    assert main(store_args + ["import", str(tmp_path / "missing.xsd")]) == 1
    assert "✗ Failed to import" in capsys.readouterr().out


def test_generate_failure(store_args, capsys):
    assert main(store_args + ["generate", "/Artifact/none.xsd", "/Model/none.xsd"]) == 1
    assert "✗ Failed to generate model" in capsys.readouterr().out


def test_show_unknown_path(store_args, capsys):
    assert main(store_args + ["show", "/Nope"]) == 1
    assert "Node not found: /Nope" in capsys.readouterr().out


def test_dependencies_none_recorded(store_args, capsys):
    assert main(store_args + ["import", str(FIXTURES / "music.xsd")]) == 0
    assert main(store_args + ["generate", "/music.xsd", "/Model/music.xsd"]) == 0
    capsys.readouterr()
    assert main(store_args + ["dependencies", "/Model/music.xsd"]) == 0
    assert "No dependencies recorded" in capsys.readouterr().out


def test_types(store_args, capsys):
    assert main(store_args + ["types"]) == 0
    assert "xsd (.xsd)" in capsys.readouterr().out
