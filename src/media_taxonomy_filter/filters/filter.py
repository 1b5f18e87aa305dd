"""Exposed filter handler for media taxonomy terms with depth."""

import re
from typing import Dict, Iterable, List, Union

from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement, Select

from ..database.term_repo import get_term_name
from ..utils.logging import get_logger
from .argument import apply_empty_policy
from .depth_query import apply_depth_filter, build_depth_subquery
from .errors import InvalidSpec, UnresolvedTerm
from .models import NO_NAME_LABEL, FilterConfig, FilterSpec

logger = get_logger(__name__)

_TERM_ID_PATTERN = re.compile(r"^\d+$")


def _normalize_values(values: Union[int, str, Iterable, None]) -> List[int]:
    if values is None:
        return []
    if isinstance(values, (int, float, str)):
        values = [values]
    normalized = []
    for value in values:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
            if not _TERM_ID_PATTERN.match(value):
                raise InvalidSpec(f"Filter value is not a term id: {value!r}")
            normalized.append(int(value))
        elif isinstance(value, int) and not isinstance(value, bool):
            normalized.append(value)
        else:
            raise InvalidSpec(f"Filter value is not a term id: {value!r}")
    return normalized


class DepthFilter:
    """Filter handler: media tagged with one of the selected terms, with depth."""

    def __init__(self, config: FilterConfig):
        self.config = config

    def operator_options(self) -> Dict[str, str]:
        return {"or": "Is one of"}

    def query(
        self,
        query: Select,
        entity_column: ColumnElement,
        values: Union[int, str, Iterable, None],
    ) -> Select:
        targets = _normalize_values(values)
        if not targets:
            return apply_empty_policy(self.config, query)
        spec = FilterSpec.build(targets, self.config.depth)
        return apply_depth_filter(query, entity_column, build_depth_subquery(self.config.reference_field, spec))

    def admin_summary(self, session: Session, values: Union[int, str, Iterable, None]) -> str:
        labels = []
        for tid in _normalize_values(values):
            try:
                labels.append(get_term_name(session, tid))
            except UnresolvedTerm:
                logger.warning(f"Filter {self.config.id} references missing term {tid}")
                labels.append(NO_NAME_LABEL)
        if not labels:
            return "is one of (none)"
        return f"is one of {', '.join(labels)}"
