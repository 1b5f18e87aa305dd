"""
Subquery builder for taxonomy depth filtering on media reference fields.

The media reference field stores one row per (entity, term) in
``media__<field>``. Depth matching walks ``taxonomy_term_hierarchy`` with one
LEFT JOIN per level and ORs a target-membership condition at each level, so a
reference matches when a target is found anywhere within ``|depth|`` levels.

Positive depth follows child -> parent links from the referenced term: filtering
for "fruit" with depth 1 matches media tagged "apple". Negative depth follows
parent -> child links: filtering for "apple" with depth -1 matches media
tagged "fruit".
"""

from typing import Iterable

from sqlalchemy import or_, select
from sqlalchemy.sql import ColumnElement, Select

from ..database.schema import TaxonomyTermHierarchy, reference_table
from ..utils.logging import get_logger
from .models import FilterSpec, reference_column_name

logger = get_logger(__name__)


def _target_condition(column: ColumnElement, spec: FilterSpec) -> ColumnElement:
    if len(spec.target_terms) == 1:
        return column == spec.target_terms[0]
    return column.in_(spec.target_terms)


def build_depth_subquery(reference_field: str, spec: FilterSpec) -> Select:
    """
    Build ``SELECT tn.entity_id FROM media__<field> tn ...`` for a filter spec.

    Args:
        reference_field: Machine name of the media taxonomy reference field
        spec: Target terms, depth and match mode

    Returns:
        Select of matching entity ids, usable with ``column.in_(subquery)``
    """
    table = reference_table(reference_field)
    tn = table.alias("tn")
    ref_column = tn.c[reference_column_name(reference_field)]
    hierarchy = TaxonomyTermHierarchy.__table__

    conditions = [_target_condition(ref_column, spec)]
    from_clause = tn
    levels = abs(spec.depth)

    if spec.depth > 0:
        th = hierarchy.alias("th")
        from_clause = from_clause.outerjoin(th, th.c.tid == ref_column)
        last_parent = th.c.parent
        for count in range(1, levels + 1):
            level = hierarchy.alias(f"th{count}")
            from_clause = from_clause.outerjoin(level, last_parent == level.c.tid)
            conditions.append(_target_condition(level.c.tid, spec))
            last_parent = level.c.parent
    elif spec.depth < 0:
        last_tid = ref_column
        for count in range(1, levels + 1):
            level = hierarchy.alias(f"th{count}")
            from_clause = from_clause.outerjoin(level, last_tid == level.c.parent)
            conditions.append(_target_condition(level.c.tid, spec))
            last_tid = level.c.tid

    subquery = select(tn.c.entity_id).select_from(from_clause).where(or_(*conditions))
    logger.debug(
        f"Built depth subquery on {table.name}: targets={list(spec.target_terms)} "
        f"depth={spec.depth} joins={levels + (1 if spec.depth > 0 else 0)}"
    )
    return subquery


def apply_depth_filter(query: Select, entity_column: ColumnElement, subquery: Select) -> Select:
    """AND ``entity_column IN (subquery)`` into an outer selection."""
    return query.where(entity_column.in_(subquery))


def depth_filtered_select(
    query: Select,
    entity_column: ColumnElement,
    reference_field: str,
    target_terms: Iterable[int],
    depth: int,
) -> Select:
    """Build the FilterSpec and subquery, then apply it to ``query``."""
    spec = FilterSpec.build(target_terms, depth)
    return apply_depth_filter(query, entity_column, build_depth_subquery(reference_field, spec))
