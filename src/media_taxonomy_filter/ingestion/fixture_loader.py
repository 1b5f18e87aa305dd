"""Load taxonomy terms, media and term references from a YAML fixture."""

from pathlib import Path
from typing import Any, Dict

import yaml
from sqlalchemy.orm import Session

from ..database.media_repo import add_reference, save_media
from ..database.term_repo import add_parent, save_term
from ..utils.logging import get_logger

logger = get_logger(__name__)


def read_fixture(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Fixture file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        fixture = yaml.safe_load(f) or {}
    if not isinstance(fixture, dict):
        raise ValueError("Fixture must be a dictionary")
    if not fixture.get("reference_field"):
        raise ValueError("Fixture must have 'reference_field' field")
    for key in ("terms", "media"):
        if not isinstance(fixture.get(key, []), list):
            raise ValueError(f"Fixture '{key}' must be a list")
    return fixture


def load_fixture(fixture: Dict[str, Any], session: Session) -> Dict[str, int]:
    """
    Store a fixture's terms, hierarchy, media and references.

    Terms are saved before any parent edge is added, so entries may list
    parents in any order.

    Returns:
        Counts of terms, edges, media and references written
    """
    vid = fixture.get("vocabulary", "tags")
    field_name = fixture["reference_field"]
    counts = {"terms": 0, "edges": 0, "media": 0, "references": 0}

    for entry in fixture.get("terms", []):
        save_term(session, int(entry["tid"]), entry["name"], vid=entry.get("vid", vid))
        counts["terms"] += 1
    for entry in fixture.get("terms", []):
        for parent in entry.get("parents") or []:
            add_parent(session, int(entry["tid"]), int(parent))
            counts["edges"] += 1

    for entry in fixture.get("media", []):
        mid = int(entry["mid"])
        save_media(session, mid, bundle=entry.get("bundle", "image"), name=entry.get("name"))
        counts["media"] += 1
        for tid in entry.get("terms") or []:
            add_reference(session, field_name, mid, int(tid))
            counts["references"] += 1

    session.commit()
    logger.info(f"Fixture loaded: {counts}")
    return counts
