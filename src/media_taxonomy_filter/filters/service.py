"""Run a configured depth filter against the media table."""

from typing import List, Union

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from ..database.schema import Media
from ..utils.logging import get_logger
from .argument import DepthArgument
from .errors import StorageUnavailable
from .filter import DepthFilter
from .models import FilterConfig, HandlerKind

logger = get_logger(__name__)


def get_handler(config: FilterConfig) -> Union[DepthArgument, DepthFilter]:
    if config.handler == HandlerKind.ARGUMENT:
        return DepthArgument(config)
    return DepthFilter(config)


def evaluate(session: Session, config: FilterConfig, raw) -> List[int]:
    """
    Media ids matching a filter.

    Args:
        session: SQLAlchemy session
        config: Validated filter configuration
        raw: Argument string for argument handlers, value list for filter handlers

    Returns:
        Sorted media ids

    Raises:
        StorageUnavailable: If the database fails while running the query
    """
    base = select(Media.mid).order_by(Media.mid)
    handler = get_handler(config)
    query = handler.query(base, Media.mid, raw)
    if query is None:
        query = base

    try:
        rows = session.execute(query).scalars().all()
    except DBAPIError as e:
        logger.error(f"Filter {config.id} query failed: {e}")
        raise StorageUnavailable(f"Filter {config.id} query failed: {e}") from e
    logger.info(f"Filter {config.id} matched {len(rows)} media")
    return list(rows)
