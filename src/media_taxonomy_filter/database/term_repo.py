"""Repository functions for taxonomy terms and their hierarchy."""

from typing import List, Optional, Tuple

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from ..filters.errors import StorageUnavailable, UnresolvedTerm
from ..utils.logging import get_logger
from .schema import TaxonomyTerm, TaxonomyTermHierarchy

logger = get_logger(__name__)


def save_term(
    session: Session,
    tid: int,
    name: str,
    vid: str = "tags",
    parents: Optional[List[int]] = None,
) -> TaxonomyTerm:
    """
    Save a taxonomy term and its hierarchy rows.

    Args:
        session: SQLAlchemy session
        tid: Term id (must be positive)
        name: Term label
        vid: Vocabulary machine name
        parents: Parent term ids; a term without parents is stored under root (0)

    Returns:
        TaxonomyTerm row
    """
    if tid <= 0:
        raise ValueError(f"Term id must be positive: {tid}")

    existing = session.get(TaxonomyTerm, tid)
    if existing:
        logger.debug(f"Term already exists: {tid}")
        return existing

    term = TaxonomyTerm(tid=tid, vid=vid, name=name)
    session.add(term)
    session.flush()
    for parent in parents or [0]:
        add_parent(session, tid, parent)
    logger.debug(f"Created term {tid} ({name}) with parents {parents or [0]}")
    return term


def add_parent(session: Session, tid: int, parent: int) -> TaxonomyTermHierarchy:
    """Add a hierarchy edge; replaces the root edge once a real parent exists."""
    if tid == parent:
        raise ValueError(f"Term cannot be its own parent: {tid}")

    existing = session.get(TaxonomyTermHierarchy, (tid, parent))
    if existing:
        return existing

    if parent != 0:
        root = session.get(TaxonomyTermHierarchy, (tid, 0))
        if root:
            session.delete(root)
            session.flush()

    edge = TaxonomyTermHierarchy(tid=tid, parent=parent)
    session.add(edge)
    session.flush()
    return edge


def get_term(session: Session, tid: int) -> Optional[TaxonomyTerm]:
    """Get term by id."""
    try:
        return session.get(TaxonomyTerm, tid)
    except DBAPIError as e:
        raise StorageUnavailable(f"Cannot load taxonomy term {tid}: {e}") from e


def get_term_name(session: Session, tid: int) -> str:
    """Get a term's label, raising UnresolvedTerm if it does not exist."""
    term = get_term(session, tid)
    if term is None:
        raise UnresolvedTerm(tid)
    return term.name


def load_hierarchy_edges(session: Session) -> List[Tuple[int, int]]:
    """Load every (child, parent) edge, skipping root markers."""
    try:
        rows = (
            session.query(TaxonomyTermHierarchy.tid, TaxonomyTermHierarchy.parent)
            .filter(TaxonomyTermHierarchy.parent != 0)
            .order_by(TaxonomyTermHierarchy.tid, TaxonomyTermHierarchy.parent)
            .all()
        )
    except DBAPIError as e:
        raise StorageUnavailable(f"Cannot load taxonomy hierarchy: {e}") from e
    return [(row.tid, row.parent) for row in rows]
