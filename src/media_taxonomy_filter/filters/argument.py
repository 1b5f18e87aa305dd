"""Contextual filter (argument) handler: media tagged with a term, with depth."""

import re
from typing import Optional, Union

from sqlalchemy import false
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement, Select

from ..database.term_repo import get_term_name
from ..utils.logging import get_logger
from .depth_query import apply_depth_filter, build_depth_subquery
from .errors import InvalidSpec, NoTargets, UnresolvedTerm
from .models import NO_NAME_LABEL, BrokenArgument, EmptyPolicy, FilterConfig, FilterSpec

logger = get_logger(__name__)

_OR_PATTERN = re.compile(r"^([\w.-]+[+ ]+)+[\w.-]+$")
_AND_PATTERN = re.compile(r"^([\w.-]+[, ]+)*[\w.-]+$")


def break_phrase(raw: str) -> BrokenArgument:
    """
    Split ``1+2+3`` (OR) or ``1,2,3`` (AND) into term ids.

    A space is accepted in place of ``+`` because URLs decode ``+`` to a space.
    Anything unparseable yields the sentinel value ``[-1]``.
    """
    raw = (raw or "").strip()
    if _OR_PATTERN.match(raw):
        operator = "or"
        tokens = re.split(r"[+ ]+", raw)
    elif _AND_PATTERN.match(raw):
        operator = "and"
        tokens = [token.strip() for token in raw.split(",")]
    else:
        return BrokenArgument(value=[-1], operator="or")

    try:
        values = [int(token) for token in tokens if token]
    except ValueError:
        return BrokenArgument(value=[-1], operator="or")
    return BrokenArgument(value=values, operator=operator)


class DepthArgument:
    """
    Argument handler for media entities tagged with taxonomy terms, with depth.

    Reads the term reference straight from the media field table, so no
    taxonomy_index style relation table is needed. With multiple values
    enabled, ``1+2`` and ``1,2`` are both evaluated as OR: an AND across one
    term column can never match.
    """

    def __init__(self, config: FilterConfig):
        self.config = config

    def _targets(self, raw_argument: Union[str, int, None]) -> Optional[list]:
        """Term ids for an argument, or None when filtering is skipped."""
        if raw_argument is None or str(raw_argument).strip() == "":
            return []

        if self.config.allow_multiple_values:
            broken = break_phrase(str(raw_argument))
            if broken.is_invalid:
                logger.warning(f"Unparseable argument for {self.config.id}: {raw_argument!r}; skipping filter")
                return None
            return broken.value

        try:
            return [int(str(raw_argument).strip())]
        except ValueError as e:
            raise InvalidSpec(f"Argument for {self.config.id} is not a term id: {raw_argument!r}") from e

    def query(
        self,
        query: Select,
        entity_column: ColumnElement,
        raw_argument: Union[str, int, None],
    ) -> Optional[Select]:
        """
        Restrict ``query`` to media matching the argument.

        Returns:
            The restricted Select, or None when the argument was unparseable and
            the caller should run the query unfiltered
        """
        targets = self._targets(raw_argument)
        if targets is None:
            return None
        if not targets:
            return apply_empty_policy(self.config, query)

        spec = FilterSpec.build(targets, self.config.depth)
        subquery = build_depth_subquery(self.config.reference_field, spec)
        return apply_depth_filter(query, entity_column, subquery)

    def title(self, session: Session, raw_argument: Union[str, int]) -> str:
        return term_title(session, raw_argument)


def apply_empty_policy(config: FilterConfig, query: Select) -> Select:
    """Handle a filter evaluation that received zero term ids."""
    if config.empty_policy == EmptyPolicy.ERROR:
        raise NoTargets(f"Filter {config.id} received no term ids")
    if config.empty_policy == EmptyPolicy.MATCH_NONE:
        logger.debug(f"Filter {config.id} has no term ids; matching nothing")
        return query.where(false())
    logger.debug(f"Filter {config.id} has no term ids; not filtering")
    return query


def term_title(session: Session, raw_argument: Union[str, int]) -> str:
    """Label of an argument's term, or "No name" when it cannot be resolved."""
    try:
        return get_term_name(session, int(str(raw_argument).strip()))
    except (ValueError, UnresolvedTerm) as e:
        logger.warning(f"No term label for argument {raw_argument!r}: {e}")
        return NO_NAME_LABEL
