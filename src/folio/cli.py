"""CLI entrypoint for folio: admin access to the projects and experiences collections."""

import argparse
import json
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from folio.config.loader import DEFAULT_CONFIG_PATH, DEFAULT_EXAMPLE_PATH, default_config, load_config
from folio.services.collection_service import CollectionService
from folio.services.factory import Services, build_services
from folio.services.results import ErrorKind, ServiceResult
from folio.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_CODES = {
    ErrorKind.TRANSPORT: 1,
    ErrorKind.VALIDATION: 2,
    ErrorKind.NOT_FOUND: 3,
}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    raise argparse.ArgumentTypeError(f"Expected true or false, got '{value}'")


def _resolve_config(args: argparse.Namespace) -> Dict[str, Any]:
    config_path = getattr(args, "config", None)
    if config_path is not None:
        return load_config(Path(config_path))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _services(args: argparse.Namespace) -> Services:
    config = _resolve_config(args)
    if getattr(args, "db", None):
        config["store"]["sqlite_path"] = args.db
    return build_services(config)


def _service_for(args: argparse.Namespace) -> CollectionService:
    services = _services(args)
    return getattr(services, args.collection)


def _to_jsonable(data: Any) -> Any:
    if isinstance(data, list):
        return [_to_jsonable(item) for item in data]
    if hasattr(data, "to_document"):
        return data.to_document()
    return data


def _emit(result: ServiceResult) -> int:
    """Print a result and return the process exit code."""
    if result.ok:
        print(json.dumps(_to_jsonable(result.data), indent=2, sort_keys=True))
        return 0
    print(f"[folio] {result.op} failed: {result.error.message}", file=sys.stderr)
    return EXIT_CODES[result.error.kind]


def _read_fields(path: Path) -> Dict[str, Any]:
    """Read a YAML or JSON mapping of fields (JSON is valid YAML)."""
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        try:
            fields = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Could not parse input file {path}: {e}") from e
    if not isinstance(fields, dict):
        raise ValueError(f"Input file must contain a mapping of fields: {path}")
    return fields


def cmd_init(args: argparse.Namespace) -> int:
    """Create folio.config.yaml from the example config."""
    example = Path(DEFAULT_EXAMPLE_PATH)
    target = Path(DEFAULT_CONFIG_PATH)

    if not example.exists():
        logger.error(f"Example file not found: {example}")
        print(f"[folio] Example config not found: {example}", file=sys.stderr)
        return 1
    if target.exists() and not args.force:
        print(f"Skipped {target} (already exists, use --force to overwrite)")
        return 0

    shutil.copy(example, target)
    print(f"Created {target}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    service = _service_for(args)
    options: Dict[str, Any] = {}
    for name in ("category", "status", "featured", "current", "limit", "order_by", "order_direction"):
        value = getattr(args, name, None)
        if value is not None:
            options[name] = value
    return _emit(service.list(options))


def cmd_get(args: argparse.Namespace) -> int:
    return _emit(_service_for(args).get_by_id(args.item_id))


def cmd_create(args: argparse.Namespace) -> int:
    service = _service_for(args)
    return _emit(service.create(_read_fields(Path(args.file))))


def cmd_update(args: argparse.Namespace) -> int:
    service = _service_for(args)
    return _emit(service.update(args.item_id, _read_fields(Path(args.file))))


def cmd_delete(args: argparse.Namespace) -> int:
    return _emit(_service_for(args).delete(args.item_id))


def cmd_delete_all(args: argparse.Namespace) -> int:
    if not args.yes:
        print(f"[folio] Refusing to delete every {args.collection} document without --yes", file=sys.stderr)
        return 2
    return _emit(_service_for(args).delete_all())


def cmd_seed(args: argparse.Namespace) -> int:
    """Write the built-in sample document into the collection."""
    services = _services(args)
    if args.collection == "projects":
        sample = services.projects.create_sample_project()
        return _emit(services.projects.create(sample))
    sample = services.experiences.create_sample_experience()
    return _emit(services.experiences.create(sample))


def _add_collection_commands(subparsers: argparse._SubParsersAction, collection: str) -> None:
    parser = subparsers.add_parser(collection, help=f"Manage the {collection} collection")
    parser.set_defaults(collection=collection)
    commands = parser.add_subparsers(dest=f"{collection}_subcommand", required=True)

    list_parser = commands.add_parser("list", help=f"List {collection}")
    list_parser.add_argument("--featured", type=_parse_bool, help="Filter on the featured flag (true/false)")
    if collection == "projects":
        list_parser.add_argument("--category", choices=["mobile", "web", "desktop", "other"])
        list_parser.add_argument("--status", choices=["completed", "in-progress", "planned"])
    else:
        list_parser.add_argument("--current", type=_parse_bool, help="Filter on the current flag (true/false)")
    list_parser.add_argument("--limit", type=int, help="Maximum number of results")
    list_parser.add_argument("--order-by", dest="order_by", help="Field to order by")
    list_parser.add_argument("--direction", dest="order_direction", choices=["asc", "desc"])
    list_parser.set_defaults(func=cmd_list)

    get_parser = commands.add_parser("get", help="Show one document")
    get_parser.add_argument("item_id", help="Document ID")
    get_parser.set_defaults(func=cmd_get)

    create_parser = commands.add_parser("create", help="Create a document from a YAML/JSON file")
    create_parser.add_argument("--file", required=True, help="Path to the field mapping")
    create_parser.set_defaults(func=cmd_create)

    update_parser = commands.add_parser("update", help="Update a document from a YAML/JSON file")
    update_parser.add_argument("item_id", help="Document ID")
    update_parser.add_argument("--file", required=True, help="Path to the changed fields")
    update_parser.set_defaults(func=cmd_update)

    delete_parser = commands.add_parser("delete", help="Delete one document")
    delete_parser.add_argument("item_id", help="Document ID")
    delete_parser.set_defaults(func=cmd_delete)

    delete_all_parser = commands.add_parser("delete-all", help=f"Delete every {collection} document")
    delete_all_parser.add_argument("--yes", action="store_true", help="Confirm the bulk delete")
    delete_all_parser.set_defaults(func=cmd_delete_all)

    seed_parser = commands.add_parser("seed", help="Insert the sample document")
    seed_parser.set_defaults(func=cmd_seed)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="folio", description="Portfolio data access")
    parser.add_argument("--config", help=f"Config file (default: {DEFAULT_CONFIG_PATH} if present)")
    parser.add_argument("--db", help="SQLite file, overrides store.sqlite_path")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init", help="Create folio.config.yaml from the example")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing config file")
    init_parser.set_defaults(func=cmd_init)

    _add_collection_commands(subparsers, "projects")
    _add_collection_commands(subparsers, "experiences")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = _resolve_config(args)
        configure_logging(config["logging"].get("level"))
        return args.func(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error running command '{args.command}': {e}")
        print(f"[folio] {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
