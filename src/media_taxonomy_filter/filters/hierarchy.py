"""In-memory depth matching over a loaded term hierarchy."""

from collections import defaultdict
from typing import Dict, Iterable, Set, Tuple

from sqlalchemy.orm import Session

from ..database.term_repo import load_hierarchy_edges
from .models import FilterSpec


class HierarchyIndex:
    """Adjacency maps built from (child, parent) edges."""

    def __init__(self, edges: Iterable[Tuple[int, int]]):
        self.children: Dict[int, Set[int]] = defaultdict(set)
        self.parents: Dict[int, Set[int]] = defaultdict(set)
        for child, parent in edges:
            if parent == 0:
                continue
            self.children[parent].add(child)
            self.parents[child].add(parent)

    @classmethod
    def from_session(cls, session: Session) -> "HierarchyIndex":
        return cls(load_hierarchy_edges(session))

    def reversed(self) -> "HierarchyIndex":
        """Same terms with every edge pointing the other way."""
        return HierarchyIndex(
            (parent, child) for child, parents in self.parents.items() for parent in parents
        )

    def expand(self, target_terms: Iterable[int], depth: int) -> Set[int]:
        """
        Terms whose reference satisfies a depth filter on ``target_terms``.

        Positive depth collects descendants of the targets, negative depth
        collects ancestors. Every level up to ``|depth|`` is included.
        """
        adjacency = self.children if depth > 0 else self.parents
        matched = set(target_terms)
        frontier = set(matched)
        for _ in range(abs(depth)):
            frontier = {n for term in frontier for n in adjacency.get(term, ())} - matched
            if not frontier:
                break
            matched |= frontier
        return matched


def matching_entities(
    references: Iterable[Tuple[int, int]],
    spec: FilterSpec,
    index: HierarchyIndex,
) -> Set[int]:
    """Entity ids whose referenced term is within ``spec.depth`` of a target."""
    terms = index.expand(spec.target_terms, spec.depth)
    return {entity_id for entity_id, tid in references if tid in terms}
