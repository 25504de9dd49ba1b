"""
CLI commands for importing schemas and inspecting their dependencies.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import ModelerConfig
from .exceptions import ModelerError
from .modeler import Modeler


def setup_logging(verbose: bool = False, level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

def build_modeler(args) -> Modeler:
    """Create a modeler backed by the configured snapshot file."""
    config = ModelerConfig.from_env()
    if args.store:
        config.store_path = Path(args.store).expanduser()
    setup_logging(args.verbose, config.log_level)
    return Modeler(config=config)

def cmd_import(args):
    """Import a local file or URL as an artifact."""
    modeler = build_modeler(args)
    source = args.source
    try:
        if "://" in source:
            target = args.path or "/" + source.rstrip("/").rsplit("/", 1)[-1]
            path = modeler.import_url(source, target)
        else:
            path = modeler.import_file(Path(source), args.folder)
    except (ModelerError, ValueError) as e:
        print(f"✗ Failed to import {source}: {e}")
        return 1
    print(f"✓ Imported {source} to: {path}")
    return 0

def cmd_generate(args):
    """Generate a model (and its dependencies) from an artifact."""
    modeler = build_modeler(args)
    persist = False if args.no_persist_artifacts else None
    try:
        model_path = modeler.generate_model(
            args.artifact_path, args.model_path, args.type, persist_artifacts=persist
        )
    except (ModelerError, ValueError) as e:
        print(f"✗ Failed to generate model {args.model_path}: {e}")
        return 1
    print(f"✓ Generated model: {model_path}")
    for dependency in modeler.dependencies(model_path):
        marker = "✓" if dependency.exists else "○"
        print(f"  {marker} {dependency.path or '(unresolved)'} <- {', '.join(dependency.source_references)}")
    return 0

def cmd_dependencies(args):
    """List (optionally re-processing) the dependencies of a model."""
    modeler = build_modeler(args)
    try:
        if args.refresh:
            modeler.process_dependencies(args.model_path)
        dependencies = modeler.dependencies(args.model_path)
    except (ModelerError, ValueError) as e:
        print(f"✗ Failed to read dependencies of {args.model_path}: {e}")
        return 1
    if args.json:
        print(json.dumps([d.to_dict() for d in dependencies], indent=2))
        return 0
    if not dependencies:
        print(f"No dependencies recorded for {args.model_path}")
        return 0
    print(f"Dependencies of {args.model_path}:")
    for dependency in dependencies:
        marker = "✓" if dependency.exists else "○"
        print(f"  {marker} {dependency.path or '(unresolved)'} <- {', '.join(dependency.source_references)}")
    return 0

def cmd_show(args):
    """Print the subtree at a store path as JSON."""
    modeler = build_modeler(args)
    try:
        tree = modeler.store.to_dict(args.path, depth=args.depth)
    except (ModelerError, ValueError) as e:
        print(f"✗ {e}")
        return 1
    print(json.dumps(tree, indent=2))
    return 0

def cmd_types(args):
    """List registered model types."""
    modeler = build_modeler(args)
    print("Available model types:")
    for model_type in modeler.model_type_manager.model_types():
        print(f"  {model_type.id} ({', '.join(model_type.file_extensions)}) {model_type.description}")
    return 0

def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Schema Modeler CLI",
        prog="schema-modeler"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--store",
        help="Node store snapshot file (default: $MODELER_STORE_PATH)"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    # Import command
    import_parser = subparsers.add_parser(
        "import",
        help="Import a local file or URL as an artifact"
    )
    import_parser.add_argument("source", help="File path or URL")
    import_parser.add_argument(
        "--folder",
        help="Store folder for local files (default: store root)"
    )
    import_parser.add_argument(
        "--path",
        help="Store path for URL imports (default: /<file name>)"
    )
    import_parser.set_defaults(func=cmd_import)

    # Generate command
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a model from an artifact and process its dependencies"
    )
    generate_parser.add_argument("artifact_path", help="Store path of the artifact")
    generate_parser.add_argument("model_path", help="Store path for the model")
    generate_parser.add_argument(
        "--type",
        default=None,
        help="Model type id (default: chosen from the artifact extension)"
    )
    generate_parser.add_argument(
        "--no-persist-artifacts",
        action="store_true",
        help="Remove artifacts once their models are generated"
    )
    generate_parser.set_defaults(func=cmd_generate)

    # Dependencies command
    dependencies_parser = subparsers.add_parser(
        "dependencies",
        help="List the recorded dependencies of a model"
    )
    dependencies_parser.add_argument("model_path", help="Store path of the model")
    dependencies_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Re-run dependency processing before listing"
    )
    dependencies_parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of text"
    )
    dependencies_parser.set_defaults(func=cmd_dependencies)

    # Show command
    show_parser = subparsers.add_parser(
        "show",
        help="Print a store subtree as JSON"
    )
    show_parser.add_argument("path", nargs="?", default="/", help="Store path")
    show_parser.add_argument("--depth", type=int, default=None, help="Maximum child depth")
    show_parser.set_defaults(func=cmd_show)

    # Types command
    types_parser = subparsers.add_parser(
        "types",
        help="List available model types"
    )
    types_parser.set_defaults(func=cmd_types)

    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    return args.func(args)

if __name__ == "__main__":
    sys.exit(main())
