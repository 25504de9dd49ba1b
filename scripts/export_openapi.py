#!/usr/bin/env python
"""Write the schema-modeler REST contract to disk.

The document is generated from the FastAPI routes in ``schema_modeler.app``,
so it always matches the installed package. Client generators and API
reviews can consume the file without starting a server.

Usage:
    python scripts/export_openapi.py --out-dir build/api

Writes ``<out-dir>/openapi.json``.
"""
from __future__ import annotations

import argparse
import json
from pathlib import Path

from schema_modeler.app import app

OPENAPI_FILE = "openapi.json"


def write_openapi(out_dir: Path) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / OPENAPI_FILE
    target.write_text(json.dumps(app.openapi(), indent=2, sort_keys=True))
    return target


def main(argv=None):
    parser = argparse.ArgumentParser(description="Export the modeler OpenAPI document")
    parser.add_argument("--out-dir", default="build/api", help="Directory for openapi.json")
    args = parser.parse_args(argv)

    target = write_openapi(Path(args.out_dir))
    print(f"Wrote OpenAPI document: {target}")


if __name__ == "__main__":  # pragma: no cover
    main()
