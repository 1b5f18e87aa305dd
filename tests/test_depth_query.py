"""Tests for the taxonomy depth subquery builder."""

import pytest
from sqlalchemy import select

from media_taxonomy_filter.database.schema import Media
from media_taxonomy_filter.filters.depth_query import (
    build_depth_subquery,
    depth_filtered_select,
)
from media_taxonomy_filter.filters.errors import InvalidSpec
from media_taxonomy_filter.filters.models import FilterSpec, MatchMode

from conftest import APPLE, FIELD, FOOD, FRUIT, GRANNY, TOMATO, VEGETABLE


def _matches(session, targets, depth):
    query = depth_filtered_select(select(Media.mid), Media.mid, FIELD, targets, depth)
    return set(session.execute(query).scalars().all())


def test_depth_zero_matches_direct_references_only(food_session):
    assert _matches(food_session, [FRUIT], 0) == {11}
    assert _matches(food_session, [APPLE], 0) == {10}


def test_fruit_depth_one_matches_media_tagged_apple(food_session):
    """Filtering for "fruit" with depth 1 finds media tagged with its children."""
    assert _matches(food_session, [FRUIT], 1) == {10, 11, 12}


def test_depth_is_a_ceiling_not_an_exact_distance(food_session):
    # Granny Smith is two levels below Fruit; direct Fruit references still match
    assert _matches(food_session, [FRUIT], 2) == {10, 11, 12, 14}
    assert _matches(food_session, [FOOD], 3) == {10, 11, 12, 13, 14}


def test_negative_depth_walks_toward_ancestors(food_session):
    """Filtering for "apple" with depth -1 finds media tagged "fruit"."""
    assert _matches(food_session, [APPLE], -1) == {10, 11}
    assert _matches(food_session, [APPLE], -2) == {10, 11, 13}


def test_multi_parent_term_reaches_every_parent(food_session):
    assert _matches(food_session, [VEGETABLE], 1) == {12}
    assert _matches(food_session, [TOMATO], -1) == {11, 12}


def test_large_depth_stops_at_hierarchy_bottom(food_session):
    assert _matches(food_session, [FOOD], 25) == _matches(food_session, [FOOD], 3)
    assert _matches(food_session, [GRANNY], -25) == {10, 11, 13, 14}


def test_depth_widens_monotonically(food_session):
    for targets in ([FOOD], [FRUIT], [APPLE], [TOMATO]):
        for sign in (1, -1):
            previous = _matches(food_session, targets, 0)
            for level in range(1, 5):
                current = _matches(food_session, targets, sign * level)
                assert previous <= current
                previous = current


def test_zero_depth_sign_has_no_effect(food_session):
    assert _matches(food_session, [FRUIT], 0) == _matches(food_session, [FRUIT], -0)


def test_any_of_is_union_of_single_targets(food_session):
    for depth in (-2, -1, 0, 1, 2):
        combined = _matches(food_session, [APPLE, VEGETABLE], depth)
        assert combined == _matches(food_session, [APPLE], depth) | _matches(food_session, [VEGETABLE], depth)


def test_untagged_media_never_matches(food_session):
    for depth in (-3, 0, 3):
        assert 15 not in _matches(food_session, [FOOD], depth)


def test_subquery_joins_one_hierarchy_level_per_depth():
    down = str(build_depth_subquery(FIELD, FilterSpec.build([FRUIT], 2)))
    up = str(build_depth_subquery(FIELD, FilterSpec.build([FRUIT], -2)))
    flat = str(build_depth_subquery(FIELD, FilterSpec.build([FRUIT], 0)))

    assert down.count("LEFT OUTER JOIN taxonomy_term_hierarchy") == 3
    assert up.count("LEFT OUTER JOIN taxonomy_term_hierarchy") == 2
    assert "JOIN" not in flat
    assert "media__field_media_category AS tn" in flat


def test_single_target_uses_equality_and_several_use_in():
    single = str(build_depth_subquery(FIELD, FilterSpec.build([FRUIT], 0)))
    several = str(build_depth_subquery(FIELD, FilterSpec.build([FRUIT, APPLE], 0)))

    assert "tn.field_media_category_target_id = " in single
    assert "tn.field_media_category_target_id IN" in several


def test_empty_targets_are_rejected():
    with pytest.raises(InvalidSpec):
        FilterSpec.build([], 1)


def test_several_targets_are_never_treated_as_single(food_session):
    """A spec built directly with SINGLE mode and two targets still ORs both."""
    spec = FilterSpec(target_terms=(APPLE, VEGETABLE), depth=1, match_mode=MatchMode.SINGLE)
    assert spec.match_mode == MatchMode.ANY_OF
    assert spec.operator == "IN"

    query = select(Media.mid).where(Media.mid.in_(build_depth_subquery(FIELD, spec)))
    assert set(food_session.execute(query).scalars().all()) == {10, 12, 14}


def test_single_target_spec_uses_single_mode():
    spec = FilterSpec(target_terms=(APPLE, APPLE), match_mode=MatchMode.ANY_OF)
    assert spec.target_terms == (APPLE,)
    assert spec.match_mode == MatchMode.SINGLE
