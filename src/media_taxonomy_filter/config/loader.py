from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..filters.errors import InvalidSpec
from ..filters.models import FilterConfig

DEFAULT_FILTERS_PATH = Path("config/filters.yaml")

BASE_FILTER_DEFAULTS: Dict[str, Any] = {
    "handler": "filter",
    "depth": 0,
    "allow_multiple_values": False,
    "empty_policy": "match_all",
}


def _normalize_filter_entry(entry: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Apply built-in and file-level defaults to one filter entry."""
    normalized = deepcopy(entry)
    for key, value in {**BASE_FILTER_DEFAULTS, **defaults}.items():
        normalized.setdefault(key, value)
    return normalized


def load_filters_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load filter configuration from YAML file.

    Args:
        path: Optional path to filters.yaml. Defaults to config/filters.yaml

    Returns:
        Dictionary with filters configuration

    Raises:
        FileNotFoundError: If filters config file doesn't exist
        InvalidSpec: If config structure is invalid
    """
    cfg_path = path or DEFAULT_FILTERS_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Filters config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    # Validate structure
    if not isinstance(config, dict):
        raise InvalidSpec("Filters config must be a dictionary")
    if "version" not in config:
        raise InvalidSpec("Filters config must have 'version' field")

    defaults = config.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise InvalidSpec("Filters config 'defaults' must be a dictionary if provided")

    filters = config.get("filters")
    if filters is None:
        config["filters"] = []
    elif not isinstance(filters, list):
        raise InvalidSpec("Filters config 'filters' must be a list")

    seen = set()
    for entry in config["filters"]:
        if not isinstance(entry, dict):
            raise InvalidSpec("Each filter entry must be a dictionary")
        for field in ("id", "reference_field"):
            if not entry.get(field):
                raise InvalidSpec(f"Filter entry missing required field: {field}")
        if entry["id"] in seen:
            raise InvalidSpec(f"Duplicate filter id: {entry['id']}")
        seen.add(entry["id"])

    return config


def get_all_filters(config: Dict[str, Any] | None = None) -> List[FilterConfig]:
    """
    Get every configured filter as a validated FilterConfig.

    Args:
        config: Optional filters config dict. If None, loads from default path.
    """
    if config is None:
        config = load_filters_config()
    defaults = config.get("defaults") or {}
    return [FilterConfig.parse(_normalize_filter_entry(entry, defaults)) for entry in config.get("filters", [])]


def get_filter_config(filter_id: str, config: Dict[str, Any] | None = None) -> FilterConfig:
    for filter_config in get_all_filters(config):
        if filter_config.id == filter_id:
            return filter_config
    raise InvalidSpec(f"Unknown filter id: {filter_id}")


def get_reference_fields(config: Dict[str, Any] | None = None) -> List[str]:
    """Distinct reference fields used by configured filters, in config order."""
    fields: List[str] = []
    for filter_config in get_all_filters(config):
        if filter_config.reference_field not in fields:
            fields.append(filter_config.reference_field)
    return fields
