from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("folio.config.yaml")
DEFAULT_EXAMPLE_PATH = Path("config/folio.example.yaml")

COLLECTION_KINDS = ("projects", "experiences")
ORDER_DIRECTIONS = ("asc", "desc")

BASE_COLLECTION_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "projects": {
        "name": "projects",
        "order_by": "sortOrder",
        "order_direction": "asc",
    },
    "experiences": {
        "name": "experiences",
        "order_by": "startDate",
        "order_direction": "desc",
    },
}

BASE_STORE_DEFAULTS: Dict[str, Any] = {
    "sqlite_path": "folio.db",
}


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load folio configuration from YAML and apply built-in defaults.

    Args:
        path: Optional path to the config file. Defaults to folio.config.yaml

    Returns:
        Normalized config dict with ``store``, ``collections`` and ``logging`` sections

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    return normalize_config(config)


def normalize_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a raw config dict and fill every section with defaults."""
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    if "version" not in config:
        raise ValueError("Config must have 'version' field")

    store = config.get("store") or {}
    if not isinstance(store, dict):
        raise ValueError("Config 'store' must be a dictionary if provided")
    store = {**BASE_STORE_DEFAULTS, **store}
    if not isinstance(store["sqlite_path"], str) or not store["sqlite_path"]:
        raise ValueError("Config 'store.sqlite_path' must be a non-empty string")

    collections = config.get("collections") or {}
    if not isinstance(collections, dict):
        raise ValueError("Config 'collections' must be a dictionary if provided")
    unknown = sorted(set(collections) - set(COLLECTION_KINDS))
    if unknown:
        raise ValueError(f"Unknown collections in config: {', '.join(unknown)}")

    merged: Dict[str, Dict[str, Any]] = {}
    for kind in COLLECTION_KINDS:
        entry = collections.get(kind) or {}
        if not isinstance(entry, dict):
            raise ValueError(f"Collection '{kind}' must be a dictionary")
        settings = {**BASE_COLLECTION_DEFAULTS[kind], **entry}
        if not isinstance(settings["name"], str) or not settings["name"]:
            raise ValueError(f"Collection '{kind}' needs a non-empty 'name'")
        if settings["order_direction"] not in ORDER_DIRECTIONS:
            raise ValueError(
                f"Collection '{kind}' order_direction must be one of {', '.join(ORDER_DIRECTIONS)}"
            )
        merged[kind] = settings

    logging_cfg = config.get("logging") or {}
    if not isinstance(logging_cfg, dict):
        raise ValueError("Config 'logging' must be a dictionary if provided")

    normalized = deepcopy(config)
    normalized["store"] = store
    normalized["collections"] = merged
    normalized["logging"] = {"level": "WARNING", **logging_cfg}
    return normalized


def default_config() -> Dict[str, Any]:
    """Config used when no file is present."""
    return normalize_config({"version": 1})


def get_collection_settings(kind: str, config: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """
    Get name and default ordering for one collection kind.

    Args:
        kind: ``projects`` or ``experiences``
        config: Normalized config. If None, built-in defaults are used.

    Returns:
        Dict with ``name``, ``order_by`` and ``order_direction``
    """
    if kind not in COLLECTION_KINDS:
        raise ValueError(f"Unknown collection kind: {kind}")
    if config is None:
        config = default_config()
    return dict(config["collections"][kind])
