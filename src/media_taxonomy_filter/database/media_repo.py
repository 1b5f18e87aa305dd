"""Repository functions for media entities and their term references."""

from typing import List, Optional, Tuple

from sqlalchemy import func, insert, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from ..filters.errors import StorageUnavailable
from ..filters.models import reference_column_name
from ..utils.logging import get_logger
from .schema import Media, reference_table

logger = get_logger(__name__)


def save_media(session: Session, mid: int, bundle: str = "image", name: Optional[str] = None) -> Media:
    """Save a media entity, returning the existing row when already stored."""
    existing = session.get(Media, mid)
    if existing:
        logger.debug(f"Media already exists: {mid}")
        return existing
    media = Media(mid=mid, bundle=bundle, name=name)
    session.add(media)
    session.flush()
    return media


def add_reference(session: Session, field_name: str, entity_id: int, tid: int) -> int:
    """
    Append a term reference to a media entity's reference field.

    Returns:
        The delta assigned to the new reference
    """
    table = reference_table(field_name)
    column = table.c[reference_column_name(field_name)]
    already = session.execute(
        select(table.c.delta).where(table.c.entity_id == entity_id, column == tid)
    ).first()
    if already:
        return already.delta

    next_delta = session.execute(
        select(func.coalesce(func.max(table.c.delta) + 1, 0)).where(table.c.entity_id == entity_id)
    ).scalar_one()
    session.execute(insert(table).values(entity_id=entity_id, delta=next_delta, **{column.name: tid}))
    logger.debug(f"Media {entity_id} references term {tid} via {field_name} (delta {next_delta})")
    return next_delta


def list_references(session: Session, field_name: str) -> List[Tuple[int, int]]:
    """All (entity_id, tid) pairs of a reference field."""
    table = reference_table(field_name)
    column = table.c[reference_column_name(field_name)]
    try:
        rows = session.execute(select(table.c.entity_id, column).order_by(table.c.entity_id, table.c.delta)).all()
    except DBAPIError as e:
        raise StorageUnavailable(f"Cannot load references from {table.name}: {e}") from e
    return [(row[0], row[1]) for row in rows]
